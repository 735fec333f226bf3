"""
Cart Routes
=============
GET/POST/DELETE /api/cart, PUT/DELETE /api/cart/{product_id}
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from config.database import get_db
from common.helpers import parse_id
from modules.auth.deps import Principal, get_current_principal
from modules.cart.service import cart_service

router = APIRouter(prefix="/api/cart", tags=["cart"])


# ==========================================
# Schemas
# ==========================================

class AddToCartRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(..., alias="productId")
    quantity: int = Field(1, ge=1)


class UpdateCartItemRequest(BaseModel):
    quantity: int = Field(..., ge=1)


# ==========================================
# 🛒 View / Add / Clear
# ==========================================

@router.get("")
def view_cart(
    db: Session = Depends(get_db),
    me: Principal = Depends(get_current_principal),
):
    view = cart_service.get_cart_view(db, me.user_id)
    db.commit()
    return view


@router.post("")
def add_to_cart(
    body: AddToCartRequest,
    db: Session = Depends(get_db),
    me: Principal = Depends(get_current_principal),
):
    product_id = parse_id(body.product_id, "product ID")
    cart_service.add_item(db, me.user_id, product_id, body.quantity)
    db.commit()
    return {"message": "Item added to cart", "cart": cart_service.get_cart_view(db, me.user_id)}


@router.delete("")
def clear_cart(
    db: Session = Depends(get_db),
    me: Principal = Depends(get_current_principal),
):
    cart_service.clear_cart(db, me.user_id)
    db.commit()
    return {"message": "Cart cleared"}


# ==========================================
# ➕➖ Single line
# ==========================================

@router.put("/{product_id}")
def update_cart_item(
    product_id: str,
    body: UpdateCartItemRequest,
    db: Session = Depends(get_db),
    me: Principal = Depends(get_current_principal),
):
    cart_service.update_item(db, me.user_id, parse_id(product_id, "product ID"), body.quantity)
    db.commit()
    return {"message": "Cart item updated", "cart": cart_service.get_cart_view(db, me.user_id)}


@router.delete("/{product_id}")
def remove_cart_item(
    product_id: str,
    db: Session = Depends(get_db),
    me: Principal = Depends(get_current_principal),
):
    cart_service.remove_item(db, me.user_id, parse_id(product_id, "product ID"))
    db.commit()
    return {"message": "Item removed from cart", "cart": cart_service.get_cart_view(db, me.user_id)}
