# kitstore/domain/schemas.py
import uuid
from typing import List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CartLineIn(BaseModel):
    """One entry of the bulk cart update body."""

    product: uuid.UUID
    quantity: int = Field(..., gt=0)


class ProductOut(BaseModel):
    id: uuid.UUID
    title: str
    description: str
    code: str
    price: float
    status: bool
    stock: int
    category: str

    model_config = ConfigDict(from_attributes=True)


class ProductPageOut(BaseModel):
    """Page of products plus navigation data, serialized with camelCase keys."""

    status: str = "success"
    payload: List[ProductOut]
    total_pages: int
    prev_page: int | None = None
    next_page: int | None = None
    page: int
    has_prev_page: bool
    has_next_page: bool
    prev_link: str | None = None
    next_link: str | None = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CartLineOut(BaseModel):
    # None when the referenced product was deleted after being added
    product: ProductOut | None
    quantity: int


class CartOut(BaseModel):
    id: uuid.UUID
    products: List[CartLineOut]
