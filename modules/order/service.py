"""
Order Module - Service Layer
===============================
Order placement: the one operation that writes orders, products and carts together.
"""

import logging
from collections import OrderedDict
from decimal import Decimal
from typing import Dict, List

from sqlalchemy.orm import Session
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from config.settings import MAX_PRICE
from common.helpers import now_utc, parse_id
from common.exceptions import InvalidInputError, InsufficientStockError, InternalError
from modules.cart.models import Cart
from modules.catalog.models import Product
from modules.order.models import Order, OrderStatus
from modules.order.schemas import OrderLineRequest

logger = logging.getLogger("storefront.order")

_MAX_TOTAL = Decimal(str(MAX_PRICE))


class OrderService:

    # ==========================================
    # Place Order
    # ==========================================

    def place_order(self, db: Session, user_id: str, items: List[OrderLineRequest], address: str) -> Order:
        """
        Create an order from the requested lines:
        1. Load every referenced product (missing -> reject)
        2. Check stock for every line (first shortfall -> reject)
        3. Compute the total from the same reads
        4. In one transaction: insert the Pending order, decrement each
           product's stock, delete the user's cart
        5. Commit, or roll back everything

        The decrement only matches while stock >= quantity, so a concurrent
        checkout that drained the product after step 2 aborts this one
        instead of driving stock negative.

        Raises:
            InvalidInputError / InsufficientStockError: nothing was written
            InternalError: the store failed; nothing was written
        """
        lines = self._merge_lines(items)

        products = self._load_products(db, lines)
        self._check_stock(lines, products)
        total = self._compute_total(lines, products)

        snapshot = [
            {
                "productId": pid,
                "quantity": qty,
                "title": products[pid].title,
                "price": float(products[pid].price),
            }
            for pid, qty in lines.items()
        ]

        try:
            now = now_utc()
            new_order = Order(
                user_id=user_id,
                items=snapshot,
                total=total,
                status=OrderStatus.PENDING.value,
                address=address,
                created_at=now,
                updated_at=now,
            )
            db.add(new_order)
            db.flush()

            for pid, qty in lines.items():
                self._decrement_stock(db, products[pid], qty)

            db.query(Cart).filter(Cart.user_id == user_id).delete(synchronize_session=False)

            db.commit()
        except InsufficientStockError as e:
            db.rollback()
            logger.warning("Order for user %s rolled back: %s", user_id, e.message)
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Order transaction failed for user %s: %s", user_id, e)
            raise InternalError("Failed to create order")

        logger.info("Order %s placed by %s: %d lines, total %s", new_order.id, user_id, len(lines), total)
        return new_order

    # ==========================================
    # Private Helpers
    # ==========================================

    def _merge_lines(self, items: List[OrderLineRequest]) -> Dict[str, int]:
        """Validate ids and fold repeated products into one line (request order kept)."""
        lines = OrderedDict()
        for item in items:
            pid = parse_id(item.product_id, "product ID")
            lines[pid] = lines.get(pid, 0) + item.quantity
        return lines

    def _load_products(self, db: Session, lines: Dict[str, int]) -> Dict[str, Product]:
        products = {}
        for pid in lines:
            product = db.query(Product).filter(Product.id == pid).first()
            if not product:
                raise InvalidInputError(f"product not found: {pid}")
            products[pid] = product
        return products

    def _check_stock(self, lines: Dict[str, int], products: Dict[str, Product]):
        for pid, qty in lines.items():
            if products[pid].stock < qty:
                raise InsufficientStockError(products[pid].title)

    def _compute_total(self, lines: Dict[str, int], products: Dict[str, Product]) -> Decimal:
        total = Decimal("0")
        for pid, qty in lines.items():
            total += Decimal(str(products[pid].price)) * qty
        total = total.quantize(Decimal("0.01"))
        if total > _MAX_TOTAL:
            raise InvalidInputError("Order total too large")
        return total

    def _decrement_stock(self, db: Session, product: Product, quantity: int):
        """Compare-and-decrement; raises if the row no longer has enough stock."""
        result = db.execute(
            update(Product)
            .where(Product.id == product.id, Product.stock >= quantity)
            .values(stock=Product.stock - quantity, updated_at=now_utc())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise InsufficientStockError(product.title)


# Singleton
order_service = OrderService()
