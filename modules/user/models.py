"""
User Module - User Model
==========================
Single users table for customers, admins, and delivery agents.
Accounts are never hard-deleted; admins block/unblock via is_active.
"""

import enum

from sqlalchemy import Column, String, Boolean, DateTime, Text

from config.database import Base
from common.helpers import new_id, now_utc, isoformat


class UserRole(str, enum.Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"
    DELIVERY = "delivery"


class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_id)

    # === Identity ===
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)

    # === Role / State ===
    role = Column(String, default=UserRole.CUSTOMER.value, nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    # === Profile ===
    address = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc, nullable=False)

    def to_dict(self) -> dict:
        """Public representation (never includes the password hash)."""
        return {
            "id": self.id,
            "email": self.email,
            "role": self.role,
            "isActive": self.is_active,
            "address": self.address,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }

    def __repr__(self):
        return f"<User {self.email} ({self.role})>"
