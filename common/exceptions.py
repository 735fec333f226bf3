"""
Storefront - Custom Exceptions
================================
Business-level exceptions that can be caught and converted to HTTP responses.
Each carries the HTTP status it maps to; main.py registers the handler.
"""


class StorefrontError(Exception):
    """Base exception for all business logic errors."""
    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        self.message = message
        super().__init__(self.message)


class InvalidInputError(StorefrontError):
    """Raised for malformed input, bad identifiers, or rejected business rules."""
    status_code = 400


class AuthenticationError(StorefrontError):
    """Raised when authentication fails."""
    status_code = 401


class AuthorizationError(StorefrontError):
    """Raised when user lacks permission."""
    status_code = 403


class NotFoundError(StorefrontError):
    """Raised when a requested resource doesn't exist (or isn't visible to the caller)."""
    status_code = 404


class DuplicateError(StorefrontError):
    """Raised for unique constraint violations at the business level."""
    status_code = 400


class InsufficientStockError(InvalidInputError):
    """Raised when product stock is not enough for the requested quantity."""
    def __init__(self, product_title: str = ""):
        msg = f"insufficient stock for {product_title}" if product_title else "Insufficient stock"
        super().__init__(msg)


class InternalError(StorefrontError):
    """Raised when the store or a primitive fails underneath a business operation."""
    status_code = 500
