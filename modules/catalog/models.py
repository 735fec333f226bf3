"""
Catalog Module - Models
========================
Product with stock count. stock >= 0 is enforced at the table level so no
write path (admin edit or order decrement) can persist a negative count.
"""

from sqlalchemy import (
    Column, Integer, String, Numeric, Text, DateTime, JSON,
    CheckConstraint,
)

from config.database import Base
from common.helpers import new_id, now_utc, money, isoformat


class Product(Base):
    __tablename__ = "products"

    id = Column(String(32), primary_key=True, default=new_id)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    price = Column(Numeric(12, 2), nullable=False)
    category = Column(String, nullable=False, index=True)
    stock = Column(Integer, default=0, nullable=False)
    images = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)

    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_product_stock"),
        CheckConstraint("price >= 0", name="ck_product_price"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "price": money(self.price),
            "category": self.category,
            "stock": self.stock,
            "images": list(self.images or []),
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }

    def __repr__(self):
        return f"<Product {self.title}>"
