# kitstore/data/models/product.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Float, Integer, Boolean, DateTime, Uuid

from kitstore.data.database import Base


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    title = Column(String, nullable=False)
    description = Column(String, nullable=False)
    code = Column(String, nullable=False)  # not unique
    price = Column(Float, nullable=False)
    status = Column(Boolean, nullable=False, default=True)
    stock = Column(Integer, nullable=False)
    category = Column(String, nullable=False, index=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
