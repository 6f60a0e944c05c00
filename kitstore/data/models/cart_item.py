# kitstore/data/models/cart_item.py
from sqlalchemy import Column, Integer, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from kitstore.data.database import Base


class CartItemModel(Base):
    __tablename__ = "cart_items"

    # autoincrement id keeps lines in the order they were appended
    id = Column(Integer, primary_key=True, autoincrement=True)
    cart_id = Column(Uuid, ForeignKey("carts.id", ondelete="CASCADE"), nullable=False, index=True)
    # weak reference, products can be deleted while still sitting in a cart
    product_id = Column(Uuid, nullable=False)

    quantity = Column(Integer, nullable=False)

    cart = relationship("CartModel", back_populates="items")

    __table_args__ = (UniqueConstraint("cart_id", "product_id", name="u_cart_product"),)
