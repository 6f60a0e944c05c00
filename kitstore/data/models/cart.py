# kitstore/data/models/cart.py
import uuid

from sqlalchemy import Column, Uuid
from sqlalchemy.orm import relationship

from kitstore.data.database import Base


class CartModel(Base):
    __tablename__ = "carts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    items = relationship(
        "CartItemModel",
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartItemModel.id",
    )
