"""
Storefront - Demo Data Seeder
===============================
Creates tables and inserts demo accounts and products.
Safe to run multiple times: existing emails/product titles are skipped.

Usage:
    python scripts/seed.py
    python scripts/seed.py --reset  # Drop all tables and reseed

Demo accounts:
    admin@demo.com     / Admin@123     (admin)
    delivery@demo.com  / Delivery@123  (delivery)
    customer@demo.com  / Customer@123  (customer)
"""

import sys
import os
from decimal import Decimal

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy.orm import Session

from config import settings
from config.database import Store, Base
from common.security import hash_password
from modules.user.models import User, UserRole
from modules.catalog.models import Product


DEMO_USERS = [
    ("admin@demo.com", "Admin@123", UserRole.ADMIN),
    ("delivery@demo.com", "Delivery@123", UserRole.DELIVERY),
    ("customer@demo.com", "Customer@123", UserRole.CUSTOMER),
]

DEMO_PRODUCTS = [
    {
        "title": "Wireless Headphones",
        "description": "High-quality wireless headphones with noise cancellation",
        "price": "99.99", "category": "Electronics", "stock": 50,
        "images": ["https://via.placeholder.com/300x300?text=Headphones"],
    },
    {
        "title": "Smart Watch",
        "description": "Feature-rich smartwatch with health monitoring",
        "price": "199.99", "category": "Electronics", "stock": 30,
        "images": ["https://via.placeholder.com/300x300?text=Smartwatch"],
    },
    {
        "title": "Running Shoes",
        "description": "Comfortable running shoes for all terrains",
        "price": "79.99", "category": "Sports", "stock": 100,
        "images": ["https://via.placeholder.com/300x300?text=Shoes"],
    },
    {
        "title": "Yoga Mat",
        "description": "Non-slip mat for yoga and floor workouts",
        "price": "24.50", "category": "Sports", "stock": 75,
        "images": [],
    },
    {
        "title": "Coffee Grinder",
        "description": "Burr grinder with 18 grind settings",
        "price": "49.00", "category": "Home", "stock": 20,
        "images": [],
    },
]


def seed_demo_data(db: Session) -> dict:
    """Insert missing demo rows. Returns counts of what was created."""
    created = {"users": 0, "products": 0}

    for email, password, role in DEMO_USERS:
        if db.query(User.id).filter(User.email == email).first():
            continue
        db.add(User(email=email, password_hash=hash_password(password), role=role.value, is_active=True))
        created["users"] += 1

    for data in DEMO_PRODUCTS:
        if db.query(Product.id).filter(Product.title == data["title"]).first():
            continue
        db.add(Product(
            title=data["title"],
            description=data["description"],
            price=Decimal(data["price"]),
            category=data["category"],
            stock=data["stock"],
            images=list(data["images"]),
        ))
        created["products"] += 1

    db.commit()
    return created


if __name__ == "__main__":
    store = Store(settings.DATABASE_URL)
    if "--reset" in sys.argv:
        print("Dropping all tables...")
        store.create_all()  # imports every model onto Base.metadata
        Base.metadata.drop_all(bind=store.engine)
    store.create_all()

    db = store.session()
    try:
        result = seed_demo_data(db)
        print(f"Seeded {result['users']} users and {result['products']} products.")
    finally:
        db.close()
        store.dispose()
