# kitstore/repos/cart_repo.py
import uuid
from typing import Iterable, List, Tuple

from sqlalchemy import delete, exists, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from kitstore.data.models.cart import CartModel
from kitstore.data.models.cart_item import CartItemModel
from kitstore.data.models.product import ProductModel
from kitstore.repos.base import store_guard

#dialects with INSERT ... ON CONFLICT DO UPDATE
_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_cart(self) -> CartModel:
        with store_guard(self.db, "creating cart"):
            cart = CartModel()
            self.db.add(cart)
            self.db.commit()
            self.db.refresh(cart)
            return cart

    def get_cart(self, cart_id: uuid.UUID) -> CartModel | None:
        with store_guard(self.db, f"getting cart with id: {cart_id}"):
            return self.db.get(CartModel, cart_id)

    def contains_product(self, cart_id: uuid.UUID, product_id: uuid.UUID) -> bool:
        with store_guard(self.db, "checking if product is in cart"):
            stmt = select(
                exists().where(
                    CartItemModel.cart_id == cart_id,
                    CartItemModel.product_id == product_id,
                )
            )
            return bool(self.db.execute(stmt).scalar())

    def _upsert_line(self, cart_id: uuid.UUID, product_id: uuid.UUID, quantity: int) -> None:
        insert = _UPSERT_INSERTS[self.db.get_bind().dialect.name]
        stmt = insert(CartItemModel).values(
            cart_id=cart_id,
            product_id=product_id,
            quantity=quantity,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[CartItemModel.cart_id, CartItemModel.product_id],
            set_={"quantity": CartItemModel.quantity + stmt.excluded.quantity},
        )
        self.db.execute(stmt)

    def add_or_increment(
        self,
        cart_id: uuid.UUID,
        product_id: uuid.UUID,
        quantity: int,
    ) -> CartModel:
        """
        PRE-CONDITION: cart and product exist.

        Appends a line for the product, or increments the quantity of the line
        already holding it. Both branches are one upsert statement against the
        (cart_id, product_id) unique constraint, so two requests adding the
        same product for the first time cannot create two lines.
        """
        with store_guard(self.db, "adding product to cart"):
            self._upsert_line(cart_id, product_id, quantity)
            self.db.commit()

        return self.get_cart(cart_id)

    def add_many(self, cart_id: uuid.UUID, lines: Iterable[Tuple[uuid.UUID, int]]) -> CartModel:
        """
        PRE-CONDITION: cart and every product exist.

        add_or_increment for each (product_id, quantity) pair inside a single
        transaction: either every line is applied or, on a store failure,
        none of them is.
        """
        with store_guard(self.db, "adding products to cart"):
            for product_id, quantity in lines:
                self._upsert_line(cart_id, product_id, quantity)
            self.db.commit()

        return self.get_cart(cart_id)

    def remove_product(self, cart_id: uuid.UUID, product_id: uuid.UUID) -> CartModel:
        """PRE-CONDITION: cart and product exist. Drops the whole line."""
        with store_guard(self.db, "removing product from cart"):
            self.db.execute(
                delete(CartItemModel).where(
                    CartItemModel.cart_id == cart_id,
                    CartItemModel.product_id == product_id,
                )
            )
            self.db.commit()

        return self.get_cart(cart_id)

    def empty_cart(self, cart_id: uuid.UUID) -> CartModel:
        with store_guard(self.db, "emptying cart"):
            self.db.execute(delete(CartItemModel).where(CartItemModel.cart_id == cart_id))
            self.db.commit()

        return self.get_cart(cart_id)

    def populate(self, cart_id: uuid.UUID) -> List[Tuple[CartItemModel, ProductModel | None]]:
        """Cart lines joined to their current product, None for deleted products."""
        with store_guard(self.db, "populating cart"):
            stmt = (
                select(CartItemModel, ProductModel)
                .outerjoin(ProductModel, ProductModel.id == CartItemModel.product_id)
                .where(CartItemModel.cart_id == cart_id)
                .order_by(CartItemModel.id)
            )
            return [(item, product) for item, product in self.db.execute(stmt).all()]
