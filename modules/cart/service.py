"""
Cart Module - Service Layer
==============================
Cart management: get/create, add/update/remove lines, clear.

Every mutation rebuilds the item list and assigns it back, so the whole
cart row is rewritten (last writer wins under concurrent edits).
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from common.helpers import now_utc, money, isoformat
from common.exceptions import NotFoundError, InsufficientStockError
from modules.cart.models import Cart
from modules.catalog.models import Product

logger = logging.getLogger("storefront.cart")


class CartService:

    def find_cart(self, db: Session, user_id: str):
        return db.query(Cart).filter(Cart.user_id == user_id).first()

    def get_or_create_cart(self, db: Session, user_id: str) -> Cart:
        """Get existing cart or create an empty one for the user."""
        cart = self.find_cart(db, user_id)
        if cart:
            return cart

        cart = Cart(user_id=user_id, items=[], updated_at=now_utc())
        try:
            db.add(cart)
            db.flush()
        except IntegrityError:
            db.rollback()
            # Race condition: a concurrent request created this user's cart
            cart = self.find_cart(db, user_id)
            if not cart:
                raise
        return cart

    # ==========================================
    # Read
    # ==========================================

    def get_cart_view(self, db: Session, user_id: str) -> dict:
        """
        Cart joined with current product snapshots.
        Lines whose product was deleted are left out of the view.
        Returns: {id, userId, items, count, subtotal, updatedAt}
        """
        cart = self.get_or_create_cart(db, user_id)
        lines = list(cart.items or [])

        product_ids = [line["productId"] for line in lines]
        products = {
            p.id: p for p in db.query(Product).filter(Product.id.in_(product_ids)).all()
        } if product_ids else {}

        items = []
        subtotal = 0.0
        for line in lines:
            product = products.get(line["productId"])
            if product is None:
                continue
            items.append({
                "productId": line["productId"],
                "quantity": line["quantity"],
                "product": product.to_dict(),
            })
            subtotal += money(product.price) * line["quantity"]

        return {
            "id": cart.id,
            "userId": cart.user_id,
            "items": items,
            "count": sum(it["quantity"] for it in items),
            "subtotal": round(subtotal, 2),
            "updatedAt": isoformat(cart.updated_at),
        }

    # ==========================================
    # Mutations
    # ==========================================

    def add_item(self, db: Session, user_id: str, product_id: str, quantity: int) -> Cart:
        """Add a product; an existing line for the same product has its quantity increased."""
        product = db.query(Product).filter(Product.id == product_id).first()
        if not product:
            raise NotFoundError("Product not found")
        if product.stock < quantity:
            raise InsufficientStockError()

        cart = self.get_or_create_cart(db, user_id)
        items, index = self._find_line(cart, product_id)
        if index is None:
            items.append({"productId": product_id, "quantity": quantity})
        else:
            items[index] = {"productId": product_id, "quantity": items[index]["quantity"] + quantity}

        return self._save(db, cart, items)

    def update_item(self, db: Session, user_id: str, product_id: str, quantity: int) -> Cart:
        """Set the quantity of an existing line (re-checked against current stock)."""
        cart = self.find_cart(db, user_id)
        if not cart:
            raise NotFoundError("Cart not found")

        items, index = self._find_line(cart, product_id)
        if index is None:
            raise NotFoundError("Item not found in cart")

        product = db.query(Product).filter(Product.id == product_id).first()
        if not product:
            raise NotFoundError("Product not found")
        if product.stock < quantity:
            raise InsufficientStockError()

        items[index] = {"productId": product_id, "quantity": quantity}
        return self._save(db, cart, items)

    def remove_item(self, db: Session, user_id: str, product_id: str) -> Cart:
        cart = self.find_cart(db, user_id)
        if not cart:
            raise NotFoundError("Cart not found")

        items, index = self._find_line(cart, product_id)
        if index is None:
            raise NotFoundError("Item not found in cart")

        del items[index]
        return self._save(db, cart, items)

    def clear_cart(self, db: Session, user_id: str):
        """Delete the user's cart document entirely."""
        db.query(Cart).filter(Cart.user_id == user_id).delete(synchronize_session=False)
        db.flush()

    # ==========================================
    # Private helpers
    # ==========================================

    def _find_line(self, cart: Cart, product_id: str) -> Tuple[List[dict], Optional[int]]:
        items = [dict(line) for line in (cart.items or [])]
        for i, line in enumerate(items):
            if line["productId"] == product_id:
                return items, i
        return items, None

    def _save(self, db: Session, cart: Cart, items: List[dict]) -> Cart:
        cart.items = items
        cart.updated_at = now_utc()
        db.flush()
        return cart


# Singleton
cart_service = CartService()
