# kitstore/repos/product_repo.py
import uuid
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from kitstore.data.models.product import ProductModel
from kitstore.repos.base import store_guard

_SORT_COLUMNS = {
    "asc": ProductModel.price.asc(),
    "desc": ProductModel.price.desc(),
}


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def list_all(self) -> List[ProductModel]:
        with store_guard(self.db, "getting ALL products"):
            stmt = select(ProductModel).order_by(ProductModel.created_at, ProductModel.id)
            return list(self.db.execute(stmt).scalars().all())

    def list_page(
        self,
        category: Optional[str],
        offset: int,
        limit: int,
        sort: Optional[str] = None,
    ) -> Tuple[List[ProductModel], int]:
        """Return one page of products and the total count matching the filter."""
        with store_guard(self.db, "getting products"):
            stmt = select(ProductModel)
            count_stmt = select(func.count()).select_from(ProductModel)
            if category is not None:
                stmt = stmt.where(ProductModel.category == category)
                count_stmt = count_stmt.where(ProductModel.category == category)

            order = [ProductModel.created_at, ProductModel.id]
            if sort in _SORT_COLUMNS:
                order.insert(0, _SORT_COLUMNS[sort])

            total = self.db.execute(count_stmt).scalar_one()
            docs = self.db.execute(
                stmt.order_by(*order).offset(offset).limit(limit)
            ).scalars().all()
            return list(docs), total

    def get(self, product_id: uuid.UUID) -> ProductModel | None:
        with store_guard(self.db, f"getting product with id: {product_id}"):
            return self.db.get(ProductModel, product_id)

    def insert(self, values: Dict[str, Any]) -> uuid.UUID:
        with store_guard(self.db, "adding product"):
            product = ProductModel(**values)
            self.db.add(product)
            self.db.commit()
            self.db.refresh(product)
            return product.id

    def update(self, product: ProductModel, values: Dict[str, Any]) -> ProductModel:
        with store_guard(self.db, f"updating product with id: {product.id}"):
            for field, value in values.items():
                setattr(product, field, value)
            self.db.commit()
            self.db.refresh(product)
            return product

    def delete(self, product: ProductModel) -> None:
        with store_guard(self.db, f"deleting product with id: {product.id}"):
            self.db.delete(product)
            self.db.commit()
