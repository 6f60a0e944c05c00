# kitstore/services/product_service.py
import math
import uuid
from typing import Any, List, Optional
from urllib.parse import urlencode

import redis
from sqlalchemy.orm import Session

from kitstore.data.models.product import ProductModel
from kitstore.domain.exceptions import NotFoundError, ValidationError
from kitstore.domain.schemas import ProductOut, ProductPageOut
from kitstore.domain.validation import (
    leading_int,
    parse_id,
    validate_product_creation,
    validate_product_modification,
)
from kitstore.repos.product_repo import ProductRepo
from kitstore.services.event_publisher import PRODUCTS_CHANGE, EventPublisher
from kitstore.utils.settings import DEFAULT_PAGE_LIMIT, MAX_PAGE, MAX_PAGE_LIMIT
from kitstore.utils.logging import get_logger

logger = get_logger(__name__)

# category query tokens -> stored category
CATEGORIES = {
    "first": "Camisetas locales",
    "second": "Camisetas visitantes",
    "third": "Camisetas alternativas",
    "goalkeeper": "Camisetas de portero",
}


def _positive_int(value: Any, default: int, maximum: int) -> int:
    # leading integer counts, "2.5" is page 2
    number = leading_int(value)
    if number is None or number < 1:
        return default
    return min(number, maximum)


def _page_link(
    base_url: str,
    page: int,
    limit: Optional[int],
    category: Optional[str],
    sort: Optional[str],
) -> str:
    # limit only travels when the caller asked for one
    params = []
    if limit is not None:
        params.append(("limit", limit))
    params.append(("page", page))
    if category:
        params.append(("category", category))
    if sort:
        params.append(("sort", sort))
    return f"{base_url}?{urlencode(params)}"


class ProductService:
    """
    Use cases of the product catalogue.

    Every mutation publishes the full product list as productsChange so that
    connected realtime views can redraw.
    """

    def __init__(self, db: Session, publisher: EventPublisher):
        self.repo = ProductRepo(db)
        self.publisher = publisher

    #query
    def list_all(self) -> List[ProductOut]:
        return [ProductOut.model_validate(p) for p in self.repo.list_all()]

    def list_paged(
        self,
        base_url: str,
        limit: Any = None,
        page: Any = None,
        category: Optional[str] = None,
        sort: Optional[str] = None,
    ) -> ProductPageOut:
        page_number = _positive_int(page, 1, MAX_PAGE)
        page_size = _positive_int(limit, DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT)

        # unknown tokens mean no filter at all
        stored_category = CATEGORIES.get(category) if category else None

        docs, total = self.repo.list_page(
            category=stored_category,
            offset=(page_number - 1) * page_size,
            limit=page_size,
            sort=sort,
        )

        total_pages = max(1, math.ceil(total / page_size))
        has_prev = page_number > 1
        has_next = page_number < total_pages
        link_limit = page_size if limit else None

        return ProductPageOut(
            payload=[ProductOut.model_validate(p) for p in docs],
            total_pages=total_pages,
            page=page_number,
            prev_page=page_number - 1 if has_prev else None,
            next_page=page_number + 1 if has_next else None,
            has_prev_page=has_prev,
            has_next_page=has_next,
            prev_link=(
                _page_link(base_url, page_number - 1, link_limit, category, sort)
                if has_prev
                else None
            ),
            next_link=(
                _page_link(base_url, page_number + 1, link_limit, category, sort)
                if has_next
                else None
            ),
        )

    def get_product(self, product_id: Any) -> ProductModel:
        pid = parse_id(product_id)
        if pid is None:
            raise ValidationError("Invalid object id")

        product = self.repo.get(pid)
        if not product:
            raise NotFoundError("Product not found")
        return product

    #commands
    def create_product(self, body: Any) -> uuid.UUID:
        product = validate_product_creation(body)

        new_id = self.repo.insert(product.model_dump())
        logger.info(f"Product {new_id} created ({product.code})")

        self._broadcast()
        return new_id

    def update_product(self, product_id: Any, body: Any) -> ProductModel:
        fields = validate_product_modification(body)
        product = self.get_product(product_id)

        # fields not given keep the stored value
        updated = self.repo.update(product, fields.model_dump(exclude_none=True))
        logger.info(f"Product {updated.id} updated")

        self._broadcast()
        return updated

    def delete_product(self, product_id: Any) -> None:
        product = self.get_product(product_id)
        pid = product.id

        self.repo.delete(product)
        logger.info(f"Product {pid} deleted")

        self._broadcast()

    def _broadcast(self) -> None:
        payload = [p.model_dump(mode="json") for p in self.list_all()]
        try:
            self.publisher.publish(PRODUCTS_CHANGE, payload)
        except redis.RedisError as e:
            # the change is already committed, clients only miss this refresh
            logger.error(f"Error publishing {PRODUCTS_CHANGE}: {e}")
