"""
Order Routes
==============
Checkout, own orders, and admin order management.

  POST /api/orders                                  - place order (customer)
  GET  /api/orders                                  - own orders
  GET  /api/orders/all                              - all orders (admin)
  GET  /api/orders/{order_id}                       - one order
  PUT  /api/orders/{order_id}/status                - change status (admin)
  PUT  /api/orders/{order_id}/assign/{delivery_id}  - assign agent (admin)
"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from config.database import get_db
from common.helpers import parse_id
from modules.auth.deps import Principal, get_current_principal, require_admin
from modules.order.models import OrderStatus
from modules.order.schemas import CreateOrderRequest, UpdateOrderStatusRequest
from modules.order.service import order_service
from modules.order.fulfillment_service import fulfillment_service

router = APIRouter(prefix="/api/orders", tags=["orders"])


# ==========================================
# ✅ Checkout
# ==========================================

@router.post("", status_code=201)
def create_order(
    body: CreateOrderRequest,
    db: Session = Depends(get_db),
    me: Principal = Depends(get_current_principal),
):
    order = order_service.place_order(db, me.user_id, body.items, body.address)
    return fulfillment_service.serialize(db, [order])[0]


# ==========================================
# 📦 Orders
# ==========================================

@router.get("")
def my_orders(
    db: Session = Depends(get_db),
    me: Principal = Depends(get_current_principal),
):
    orders = fulfillment_service.get_customer_orders(db, me.user_id)
    return fulfillment_service.serialize(db, orders)


@router.get("/all")
def all_orders(
    status: Optional[OrderStatus] = None,
    db: Session = Depends(get_db),
    me: Principal = Depends(require_admin),
):
    orders = fulfillment_service.get_all_orders(db, status.value if status else None)
    return fulfillment_service.serialize(db, orders)


@router.get("/{order_id}")
def get_order(
    order_id: str,
    db: Session = Depends(get_db),
    me: Principal = Depends(get_current_principal),
):
    order = fulfillment_service.get_order(db, parse_id(order_id, "order ID"), me)
    return fulfillment_service.serialize(db, [order])[0]


# ==========================================
# 🛠️ Admin
# ==========================================

@router.put("/{order_id}/status")
def update_order_status(
    order_id: str,
    body: UpdateOrderStatusRequest,
    db: Session = Depends(get_db),
    me: Principal = Depends(require_admin),
):
    order = fulfillment_service.update_status(db, parse_id(order_id, "order ID"), body.status)
    db.commit()
    return {"message": "Order status updated", "order": fulfillment_service.serialize(db, [order])[0]}


@router.put("/{order_id}/assign/{delivery_id}")
def assign_order(
    order_id: str,
    delivery_id: str,
    db: Session = Depends(get_db),
    me: Principal = Depends(require_admin),
):
    order = fulfillment_service.assign_to_agent(
        db, parse_id(order_id, "order ID"), parse_id(delivery_id, "delivery ID"),
    )
    db.commit()
    return {"message": "Order assigned to delivery agent", "order": fulfillment_service.serialize(db, [order])[0]}
