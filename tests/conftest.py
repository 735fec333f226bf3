"""
Shared fixtures: an app bound to a throwaway SQLite file, a direct DB
session for arranging/inspecting rows, and user/product/token factories.
"""

import os

os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from common.helpers import new_id
from common.security import create_token, hash_password
from modules.catalog.models import Product
from modules.user.models import User, UserRole

DEFAULT_PASSWORD = "secret123"


@pytest.fixture
def app(tmp_path):
    from main import create_app
    return create_app(f"sqlite:///{tmp_path / 'storefront.db'}")


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db(app, client):
    session = app.state.store.session()
    yield session
    session.close()


@pytest.fixture
def make_user(db):
    def _make(email=None, role=UserRole.CUSTOMER, password=DEFAULT_PASSWORD, active=True):
        user = User(
            email=email or f"user-{new_id()[:8]}@example.com",
            password_hash=hash_password(password),
            role=role.value,
            is_active=active,
        )
        db.add(user)
        db.commit()
        return user
    return _make


@pytest.fixture
def make_product(db):
    def _make(title="Widget", price="10.00", stock=10, category="General", description="A thing"):
        product = Product(
            title=title,
            description=description,
            price=Decimal(price),
            stock=stock,
            category=category,
            images=[],
        )
        db.add(product)
        db.commit()
        return product
    return _make


@pytest.fixture
def auth_headers():
    def _headers(user):
        token = create_token(user.id, user.email, user.role)
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def customer(make_user):
    return make_user("customer@example.com")


@pytest.fixture
def admin(make_user):
    return make_user("admin@example.com", role=UserRole.ADMIN)


@pytest.fixture
def agent(make_user):
    return make_user("agent@example.com", role=UserRole.DELIVERY)
