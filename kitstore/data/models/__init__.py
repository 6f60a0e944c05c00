#import all models so SQLAlchemy registers them on Base.metadata

from kitstore.data.models.product import ProductModel
from kitstore.data.models.cart import CartModel
from kitstore.data.models.cart_item import CartItemModel

__all__ = ["ProductModel", "CartModel", "CartItemModel"]
