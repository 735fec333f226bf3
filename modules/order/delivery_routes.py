"""
Delivery Routes
=================
Delivery-agent workflow. Every query is scoped to the calling agent.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from config.database import get_db
from common.helpers import parse_id
from modules.auth.deps import Principal, require_delivery
from modules.order.fulfillment_service import fulfillment_service

router = APIRouter(prefix="/api/delivery", tags=["delivery"])


@router.get("/orders")
def assigned_orders(
    db: Session = Depends(get_db),
    me: Principal = Depends(require_delivery),
):
    orders = fulfillment_service.get_assigned_orders(db, me.user_id)
    return fulfillment_service.serialize(db, orders)


@router.put("/orders/{order_id}/delivered")
def mark_delivered(
    order_id: str,
    db: Session = Depends(get_db),
    me: Principal = Depends(require_delivery),
):
    order = fulfillment_service.mark_delivered(db, parse_id(order_id, "order ID"), me.user_id)
    db.commit()
    return {"message": "Order marked as delivered", "order": fulfillment_service.serialize(db, [order])[0]}
