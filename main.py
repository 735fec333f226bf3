"""
Storefront - Application Entry Point
======================================
FastAPI app factory, error handlers, middleware, and router registration.

Run with:  uvicorn main:app
"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import SQLAlchemyError

from config import settings
from config.database import Store
from common.exceptions import StorefrontError

from modules.auth.routes import router as auth_router
from modules.user.routes import router as user_router
from modules.catalog.routes import router as catalog_router
from modules.cart.routes import router as cart_router
from modules.order.routes import router as order_router
from modules.order.delivery_routes import router as delivery_router

logger = logging.getLogger("storefront.http")


# ==========================================
# Exception handlers: everything → {"error": "..."}
# ==========================================

async def storefront_error_handler(request: Request, exc: StorefrontError):
    return JSONResponse({"error": exc.message}, status_code=exc.status_code)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies/params are 400s with the first problem spelled out."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path"))
        message = f"{field}: {first.get('msg')}" if field else first.get("msg")
    else:
        message = "Invalid request body"
    return JSONResponse({"error": message}, status_code=400)


async def store_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Store error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse({"error": "Internal server error"}, status_code=500)


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse({"error": "Internal server error"}, status_code=500)


# ==========================================
# Create App
# ==========================================

def create_app(database_url: str = None) -> FastAPI:
    store = Store(database_url or settings.DATABASE_URL)

    @asynccontextmanager
    async def lifespan(app):
        # Auto-create any missing tables (safe for existing tables)
        store.create_all()
        logger.info("Storefront API started")
        yield
        store.dispose()
        logger.info("Storefront API stopped")

    app = FastAPI(
        title="Storefront API",
        version="1.0.0",
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StorefrontError, storefront_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, store_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # ==========================================
    # Middleware: Request Log
    # ==========================================
    @app.middleware("http")
    async def request_logger(request: Request, call_next):
        start = time.time()
        response = await call_next(request)
        elapsed_ms = int((time.time() - start) * 1000)
        logger.info("%s %s -> %s (%d ms)", request.method, request.url.path, response.status_code, elapsed_ms)
        return response

    # ==========================================
    # Register Routers
    # ==========================================
    app.include_router(auth_router)
    app.include_router(user_router)
    app.include_router(catalog_router)
    app.include_router(cart_router)
    app.include_router(order_router)
    app.include_router(delivery_router)

    @app.get("/api/health")
    def health():
        return {"status": "ok", "database": app.state.store.ping(), "version": "1.0.0"}

    return app


app = create_app()
