"""
Cart Module - Models
=====================
One cart per user. Line items are embedded as a JSON list of
{"productId": str, "quantity": int}; every write replaces the whole list.
"""

from sqlalchemy import Column, String, DateTime, JSON, ForeignKey

from config.database import Base
from common.helpers import new_id, now_utc


class Cart(Base):
    __tablename__ = "carts"

    id = Column(String(32), primary_key=True, default=new_id)
    user_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    items = Column(JSON, nullable=False, default=list)
    updated_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
