# kitstore/services/cart_service.py
import uuid
from typing import Any

from sqlalchemy.orm import Session

from kitstore.data.models.cart import CartModel
from kitstore.domain.exceptions import NotFoundError, ValidationError
from kitstore.domain.schemas import CartLineOut, CartOut, ProductOut
from kitstore.domain.validation import parse_id, validate_cart_lines, validate_quantity
from kitstore.repos.cart_repo import CartRepo
from kitstore.repos.product_repo import ProductRepo
from kitstore.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Use cases of the cart domain.
    commands (create, add, remove, update, empty) check that the cart and the
    products exist before touching the store, query (get) resolves products
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)

    def _parse(self, *ids: Any) -> list[uuid.UUID]:
        parsed = [parse_id(i) for i in ids]
        if any(p is None for p in parsed):
            raise ValidationError("Invalid object id")
        return parsed

    def _require_cart(self, cart_id: uuid.UUID) -> CartModel:
        cart = self.repo.get_cart(cart_id)
        if not cart:
            raise NotFoundError("Cart not found")
        return cart

    def _require_product(self, product_id: uuid.UUID) -> None:
        if not self.products.get(product_id):
            raise NotFoundError("Product not found")

    #query
    def get_cart(self, cart_id: Any) -> CartOut:
        (cid,) = self._parse(cart_id)
        self._require_cart(cid)

        lines = self.repo.populate(cid)
        return CartOut(
            id=cid,
            products=[
                CartLineOut(
                    product=ProductOut.model_validate(product) if product else None,
                    quantity=item.quantity,
                )
                for item, product in lines
            ],
        )

    #commands
    def create_cart(self) -> uuid.UUID:
        cart = self.repo.create_cart()
        logger.info(f"Cart {cart.id} created")
        return cart.id

    def add_product(self, cart_id: Any, product_id: Any) -> CartModel:
        cid, pid = self._parse(cart_id, product_id)
        self._require_cart(cid)
        self._require_product(pid)

        logger.info(f"Adding product {pid} to cart {cid}")
        return self.repo.add_or_increment(cid, pid, 1)

    def remove_product(self, cart_id: Any, product_id: Any) -> CartModel:
        cid, pid = self._parse(cart_id, product_id)
        self._require_cart(cid)
        self._require_product(pid)

        logger.info(f"Removing product {pid} from cart {cid}")
        return self.repo.remove_product(cid, pid)

    def update_cart(self, cart_id: Any, body: Any) -> CartModel:
        """
        Adds every {product, quantity} entry of the body to the cart.

        All entries are checked (shape, types, product existence) before the
        first increment, and all increments share one transaction. Quantities
        are added to existing lines, not set, so sending the same body twice
        doubles them.
        """
        (cid,) = self._parse(cart_id)
        self._require_cart(cid)

        lines = validate_cart_lines(body)
        for line in lines:
            if not self.products.get(line.product):
                raise NotFoundError("Products not found")

        cart = self.repo.add_many(cid, [(line.product, line.quantity) for line in lines])

        logger.info(f"Cart {cid} updated with {len(lines)} lines")
        return cart

    def update_quantity(self, cart_id: Any, product_id: Any, body: Any) -> int:
        cid, pid = self._parse(cart_id, product_id)
        self._require_cart(cid)
        self._require_product(pid)

        if not self.repo.contains_product(cid, pid):
            raise NotFoundError("Product not in cart")

        quantity = validate_quantity(body)
        self.repo.add_or_increment(cid, pid, quantity)

        logger.info(f"Added {quantity} of product {pid} to cart {cid}")
        return quantity

    def empty_cart(self, cart_id: Any) -> CartModel:
        (cid,) = self._parse(cart_id)
        self._require_cart(cid)

        logger.info(f"Emptying cart {cid}")
        return self.repo.empty_cart(cid)
