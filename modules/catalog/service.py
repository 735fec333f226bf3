"""
Catalog Module - Service Layer
================================
Product listing (filter, search, sort, paginate) and admin CRUD.
"""

import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session
from sqlalchemy import asc, desc, or_

from common.helpers import now_utc, escape_like
from common.exceptions import InvalidInputError, NotFoundError
from config.settings import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from modules.catalog.models import Product
from modules.catalog.schemas import ProductCreate, ProductUpdate

logger = logging.getLogger("storefront.catalog")

# Wire name -> column. Both camelCase and snake_case are accepted.
SORTABLE_FIELDS = {
    "title": Product.title,
    "description": Product.description,
    "price": Product.price,
    "category": Product.category,
    "stock": Product.stock,
    "createdAt": Product.created_at,
    "created_at": Product.created_at,
    "updatedAt": Product.updated_at,
    "updated_at": Product.updated_at,
}


class CatalogService:

    # ==========================================
    # Read
    # ==========================================

    def list_products(
        self,
        db: Session,
        category: Optional[str] = None,
        search: Optional[str] = None,
        sort_by: str = "createdAt",
        sort_order: str = "desc",
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> dict:
        """
        Filtered, sorted, paginated product list.
        Returns: {products, total, page, limit, categories}
          total      -> matching products ignoring pagination
          categories -> distinct categories across ALL products
        """
        column = SORTABLE_FIELDS.get(sort_by)
        if column is None:
            raise InvalidInputError(f"Invalid sort field: {sort_by}")
        page = max(page, 1)
        limit = min(max(limit, 1), MAX_PAGE_SIZE)

        q = db.query(Product)
        if category:
            q = q.filter(Product.category == category)
        if search:
            pattern = f"%{escape_like(search.strip())}%"
            q = q.filter(or_(
                Product.title.ilike(pattern, escape="\\"),
                Product.description.ilike(pattern, escape="\\"),
            ))

        total = q.count()
        direction = asc if sort_order.lower() == "asc" else desc
        products = (
            q.order_by(direction(column), direction(Product.id))
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )

        return {
            "products": products,
            "total": total,
            "page": page,
            "limit": limit,
            "categories": self.list_categories(db),
        }

    def list_categories(self, db: Session) -> List[str]:
        rows = db.query(Product.category).distinct().order_by(Product.category).all()
        return [r[0] for r in rows]

    def get_product(self, db: Session, product_id: str) -> Product:
        product = db.query(Product).filter(Product.id == product_id).first()
        if not product:
            raise NotFoundError("Product not found")
        return product

    # ==========================================
    # Write (admin)
    # ==========================================

    def create_product(self, db: Session, data: ProductCreate) -> Product:
        product = Product(
            title=data.title,
            description=data.description,
            price=Decimal(str(data.price)),
            stock=data.stock,
            images=list(data.images),
            category=data.category,
        )
        db.add(product)
        db.flush()
        logger.info("Product created: %s (%s)", product.id, product.title)
        return product

    def update_product(self, db: Session, product_id: str, data: ProductUpdate) -> Product:
        product = self.get_product(db, product_id)

        if data.title is not None:
            product.title = data.title
        if data.description is not None:
            product.description = data.description
        if data.price is not None:
            product.price = Decimal(str(data.price))
        if data.stock is not None:
            product.stock = data.stock
        if data.images is not None:
            product.images = list(data.images)
        if data.category is not None:
            product.category = data.category

        product.updated_at = now_utc()
        db.flush()
        return product

    def delete_product(self, db: Session, product_id: str):
        product = self.get_product(db, product_id)
        db.delete(product)
        db.flush()
        logger.info("Product deleted: %s", product_id)


# Singleton
catalog_service = CatalogService()
