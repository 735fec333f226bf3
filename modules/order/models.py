"""
Order Module - Models
======================
Order with an embedded line-item snapshot. `total` is computed once at
placement and never recomputed.
"""

import enum

from sqlalchemy import Column, String, Numeric, Text, DateTime, JSON, ForeignKey

from config.database import Base
from common.helpers import new_id, now_utc, money, isoformat


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    ASSIGNED = "assigned"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# Allowed status moves. Terminal states map to an empty set.
STATUS_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED, OrderStatus.ASSIGNED},
    OrderStatus.ASSIGNED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED, OrderStatus.ASSIGNED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}


def can_transition(current: str, new: str) -> bool:
    try:
        return OrderStatus(new) in STATUS_TRANSITIONS[OrderStatus(current)]
    except ValueError:
        return False


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(32), primary_key=True, default=new_id)
    user_id = Column(String(32), ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)

    # [{"productId", "quantity", "title", "price"}] snapshot at placement time
    items = Column(JSON, nullable=False)
    total = Column(Numeric(12, 2), nullable=False)

    status = Column(String, default=OrderStatus.PENDING.value, nullable=False, index=True)
    assigned_to = Column(String(32), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    address = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)

    def to_dict(self, products: dict = None) -> dict:
        """
        Serialize the order. `products` maps product id -> current Product;
        when given, each line gets a live `product` snapshot for display.
        """
        products = products or {}
        items = []
        for line in self.items or []:
            row = dict(line)
            current = products.get(line["productId"])
            if current is not None:
                row["product"] = current.to_dict()
            items.append(row)

        return {
            "id": self.id,
            "userId": self.user_id,
            "items": items,
            "total": money(self.total),
            "status": self.status,
            "assignedTo": self.assigned_to,
            "address": self.address,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }
