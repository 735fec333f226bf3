"""
Order Module - Fulfillment Service
=====================================
Order queries, admin status changes, delivery-agent assignment and
delivery confirmation. Status moves follow STATUS_TRANSITIONS.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session
from sqlalchemy import desc, or_

from common.helpers import now_utc
from common.exceptions import InvalidInputError, NotFoundError
from modules.auth.deps import Principal
from modules.catalog.models import Product
from modules.order.models import Order, OrderStatus, can_transition
from modules.user.models import UserRole
from modules.user.service import user_admin_service

logger = logging.getLogger("storefront.fulfillment")


class FulfillmentService:

    # ==========================================
    # Query
    # ==========================================

    def get_customer_orders(self, db: Session, user_id: str) -> List[Order]:
        return db.query(Order).filter(
            Order.user_id == user_id,
        ).order_by(desc(Order.created_at)).all()

    def get_all_orders(self, db: Session, status: Optional[str] = None) -> List[Order]:
        q = db.query(Order).order_by(desc(Order.created_at))
        if status:
            q = q.filter(Order.status == status)
        return q.all()

    def get_assigned_orders(self, db: Session, agent_id: str) -> List[Order]:
        return db.query(Order).filter(
            Order.assigned_to == agent_id,
        ).order_by(desc(Order.created_at)).all()

    def get_order(self, db: Session, order_id: str, principal: Principal) -> Order:
        """
        Fetch one order visible to the caller. Visibility is part of the
        query: admins see everything, delivery agents their own orders and
        the ones assigned to them, everyone else only their own.
        """
        q = db.query(Order).filter(Order.id == order_id)
        if principal.role == UserRole.DELIVERY.value:
            q = q.filter(or_(Order.user_id == principal.user_id, Order.assigned_to == principal.user_id))
        elif not principal.is_admin:
            q = q.filter(Order.user_id == principal.user_id)

        order = q.first()
        if not order:
            raise NotFoundError("Order not found")
        return order

    def serialize(self, db: Session, orders: List[Order]) -> List[dict]:
        """Orders as dicts, each line joined with the product as it is now."""
        product_ids = {line["productId"] for o in orders for line in (o.items or [])}
        products = {
            p.id: p for p in db.query(Product).filter(Product.id.in_(product_ids)).all()
        } if product_ids else {}
        return [o.to_dict(products) for o in orders]

    # ==========================================
    # Admin: status / assignment
    # ==========================================

    def update_status(self, db: Session, order_id: str, new_status: OrderStatus) -> Order:
        if new_status == OrderStatus.ASSIGNED:
            raise InvalidInputError("Use the assignment endpoint to assign an order")

        order = self._lock_order(db, order_id)
        self._transition(order, new_status)
        db.flush()
        logger.info("Order %s status -> %s", order.id, order.status)
        return order

    def assign_to_agent(self, db: Session, order_id: str, agent_id: str) -> Order:
        """Assign an order to an active delivery agent (status becomes assigned)."""
        agent = user_admin_service.get_active_delivery_agent(db, agent_id)
        if not agent:
            raise NotFoundError("Delivery agent not found")

        order = self._lock_order(db, order_id)
        self._transition(order, OrderStatus.ASSIGNED)
        order.assigned_to = agent.id
        db.flush()
        logger.info("Order %s assigned to agent %s", order.id, agent.id)
        return order

    # ==========================================
    # Delivery agent
    # ==========================================

    def mark_delivered(self, db: Session, order_id: str, agent_id: str) -> Order:
        order = db.query(Order).filter(
            Order.id == order_id,
            Order.assigned_to == agent_id,
        ).with_for_update().first()
        if not order:
            raise NotFoundError("Order not found or not assigned to you")

        self._transition(order, OrderStatus.DELIVERED)
        db.flush()
        logger.info("Order %s delivered by agent %s", order.id, agent_id)
        return order

    # ==========================================
    # Private Helpers
    # ==========================================

    def _lock_order(self, db: Session, order_id: str) -> Order:
        order = db.query(Order).filter(Order.id == order_id).with_for_update().first()
        if not order:
            raise NotFoundError("Order not found")
        return order

    def _transition(self, order: Order, new_status: OrderStatus):
        if not can_transition(order.status, new_status.value):
            raise InvalidInputError(f"Cannot change order status from {order.status} to {new_status.value}")
        order.status = new_status.value
        order.updated_at = now_utc()


# Singleton
fulfillment_service = FulfillmentService()
