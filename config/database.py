"""
Storefront - Database Configuration
=====================================
Store handle (engine + session factory), Base, and get_db dependency.
All models across all modules inherit from this Base.

The Store is built once by the app factory and attached to app.state;
nothing in this module opens a connection at import time.
"""

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, declarative_base, Session

from config.settings import DB_POOL_TIMEOUT

Base = declarative_base()


class Store:
    """Owns the engine and session factory for one database."""

    def __init__(self, database_url: str):
        self.database_url = database_url
        if database_url.startswith("sqlite"):
            # SQLite is only used for local runs and tests; sessions cross threads.
            self.engine = create_engine(
                database_url,
                connect_args={"check_same_thread": False, "timeout": DB_POOL_TIMEOUT},
            )
        else:
            self.engine = create_engine(
                database_url,
                pool_size=20,
                max_overflow=40,
                pool_timeout=DB_POOL_TIMEOUT,
                pool_recycle=1800,  # Refresh connections every 30 minutes
                pool_pre_ping=True,
            )
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def create_all(self):
        """Create any missing tables (safe for existing tables)."""
        # Import ALL models so Base.metadata knows about them
        from modules.user.models import User  # noqa: F401
        from modules.catalog.models import Product  # noqa: F401
        from modules.cart.models import Cart  # noqa: F401
        from modules.order.models import Order  # noqa: F401
        Base.metadata.create_all(bind=self.engine)

    def session(self) -> Session:
        return self.SessionLocal()

    def ping(self) -> bool:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True

    def dispose(self):
        self.engine.dispose()


def get_db(request: Request):
    """FastAPI dependency: yields a database session, auto-closes after request."""
    db = request.app.state.store.session()
    try:
        yield db
    finally:
        db.close()
