# kitstore/domain/validation.py
"""
Checks for inbound product and cart payloads.

Presence follows JSON truthiness: null, false, 0 and "" count as "not given".
For creation that makes them invalid (so a product cannot be created with
status false, price 0 or stock 0). For modification it makes them "keep the
stored value".
"""
import re
import uuid
from typing import Any, List, Optional, Union

from pydantic import BaseModel, StrictBool, StrictFloat, StrictInt, StrictStr, field_validator
from pydantic import ValidationError as PydanticValidationError

from kitstore.domain.exceptions import ValidationError
from kitstore.domain.schemas import CartLineIn

Number = Union[StrictInt, StrictFloat]


def is_blank(value: Any) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        # NaN != NaN
        return value == 0 or value != value
    if isinstance(value, str):
        return value == ""
    return False


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _reject_true(value):
    # bool is an int subclass, a price of true is not a number
    if value is True:
        raise ValueError("price must be a number")
    return value


def parse_id(value: Any) -> Optional[uuid.UUID]:
    """Return the UUID behind an identifier string, None when it is malformed."""
    if isinstance(value, uuid.UUID):
        return value
    if not isinstance(value, str):
        return None
    try:
        return uuid.UUID(value)
    except ValueError:
        return None


_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def leading_int(value: Any) -> Optional[int]:
    """Leading integer of a text value ("12.5" -> 12, "3 pages" -> 3), None when there is none."""
    if _is_int(value):
        return value
    if not isinstance(value, str):
        return None
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


class ProductCreate(BaseModel):
    title: StrictStr
    description: StrictStr
    code: StrictStr
    price: Number
    status: StrictBool
    stock: StrictInt
    category: StrictStr

    @field_validator("*", mode="before")
    @classmethod
    def required(cls, value):
        if is_blank(value):
            raise ValueError("field is required")
        return value

    @field_validator("price", mode="before")
    @classmethod
    def price_is_not_bool(cls, value):
        return _reject_true(value)


class ProductUpdate(BaseModel):
    title: Optional[StrictStr] = None
    description: Optional[StrictStr] = None
    code: Optional[StrictStr] = None
    price: Optional[Number] = None
    status: Optional[StrictBool] = None
    stock: Optional[StrictInt] = None
    category: Optional[StrictStr] = None

    @field_validator("*", mode="before")
    @classmethod
    def blank_is_absent(cls, value):
        return None if is_blank(value) else value

    @field_validator("price", mode="before")
    @classmethod
    def price_is_not_bool(cls, value):
        return _reject_true(value)


def _invalid_product(exc: PydanticValidationError) -> ValidationError:
    # errors come back in field declaration order
    field = exc.errors()[0]["loc"][0]
    return ValidationError(f"Invalid product {field}")


def validate_product_creation(body: Any) -> ProductCreate:
    if not isinstance(body, dict) or not body:
        raise ValidationError("Missing the product information")
    try:
        return ProductCreate.model_validate(body)
    except PydanticValidationError as e:
        raise _invalid_product(e) from e


def validate_product_modification(body: Any) -> ProductUpdate:
    if not isinstance(body, dict) or not body:
        raise ValidationError("Missing the product information")
    try:
        return ProductUpdate.model_validate(body)
    except PydanticValidationError as e:
        raise _invalid_product(e) from e


def validate_cart_lines(body: Any) -> List[CartLineIn]:
    if not isinstance(body, list):
        raise ValidationError("Invalid request body")

    lines = []
    for entry in body:
        if (
            not isinstance(entry, dict)
            or is_blank(entry.get("product"))
            or is_blank(entry.get("quantity"))
        ):
            raise ValidationError("Products are missing information")

        product_id = parse_id(entry["product"])
        quantity = entry["quantity"]
        if product_id is None or not _is_int(quantity):
            raise ValidationError("Products properties have incorrect type")
        if quantity < 0:
            raise ValidationError("Products quantity must be positive")

        lines.append(CartLineIn(product=product_id, quantity=quantity))

    return lines


def validate_quantity(body: Any) -> int:
    quantity = body.get("quantity") if isinstance(body, dict) else None

    if is_blank(quantity):
        raise ValidationError("Quantity is missing")
    if not _is_int(quantity):
        raise ValidationError("Quantity has incorrect type")
    if quantity < 0:
        raise ValidationError("Quantity must be positive")

    return quantity
