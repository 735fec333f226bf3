"""
Catalog Routes
================
Public product browsing and admin product management.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from config.database import get_db
from config.settings import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from common.helpers import parse_id
from modules.auth.deps import Principal, require_admin
from modules.catalog.schemas import ProductCreate, ProductUpdate
from modules.catalog.service import catalog_service

router = APIRouter(prefix="/api/products", tags=["catalog"])


# ==========================================
# Public
# ==========================================

@router.get("")
def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    category: Optional[str] = None,
    search: Optional[str] = None,
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
):
    result = catalog_service.list_products(
        db,
        category=category,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    result["products"] = [p.to_dict() for p in result["products"]]
    return result


@router.get("/{product_id}")
def get_product(product_id: str, db: Session = Depends(get_db)):
    return catalog_service.get_product(db, parse_id(product_id, "product ID")).to_dict()


# ==========================================
# Admin
# ==========================================

@router.post("", status_code=201)
def create_product(
    body: ProductCreate,
    db: Session = Depends(get_db),
    me: Principal = Depends(require_admin),
):
    product = catalog_service.create_product(db, body)
    db.commit()
    return product.to_dict()


@router.put("/{product_id}")
def update_product(
    product_id: str,
    body: ProductUpdate,
    db: Session = Depends(get_db),
    me: Principal = Depends(require_admin),
):
    product = catalog_service.update_product(db, parse_id(product_id, "product ID"), body)
    db.commit()
    return product.to_dict()


@router.delete("/{product_id}")
def delete_product(
    product_id: str,
    db: Session = Depends(get_db),
    me: Principal = Depends(require_admin),
):
    catalog_service.delete_product(db, parse_id(product_id, "product ID"))
    db.commit()
    return {"message": "Product deleted successfully"}
