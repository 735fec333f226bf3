"""
Auth Module - Dependencies
===========================
FastAPI dependencies for user authentication and authorization.
These are injected into route handlers via Depends().

The bearer token only proves who the caller was at issuance; the account
is re-read on every request so a blocked user is rejected immediately.
"""

from dataclasses import dataclass

from fastapi import Request, Depends
from sqlalchemy.orm import Session

from config.database import get_db
from common.exceptions import AuthenticationError, AuthorizationError
from common.security import decode_token, ACCESS
from modules.user.models import User, UserRole


@dataclass(frozen=True)
class Principal:
    """The authenticated identity threaded into every protected call."""
    user_id: str
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


def _bearer_token(request: Request) -> str:
    header = request.headers.get("Authorization")
    if not header:
        raise AuthenticationError("Authorization header required")

    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Bearer token required")
    return token.strip()


def get_current_principal(request: Request, db: Session = Depends(get_db)) -> Principal:
    """
    Identify the caller from the Authorization header.
    Raises 401 if the token is missing/invalid/expired or the account is gone or blocked.
    """
    payload = decode_token(_bearer_token(request), ACCESS)
    if not payload:
        raise AuthenticationError("Invalid token")

    user = db.query(User).filter(User.id == payload["userId"], User.is_active == True).first()  # noqa: E712
    if not user:
        raise AuthenticationError("User not found or inactive")

    return Principal(user_id=user.id, email=payload.get("email", user.email), role=payload.get("role", user.role))


def require_role(role: UserRole):
    """
    Factory: returns a dependency that only lets one exact role through.
    There is no hierarchy; an admin token does not pass a delivery check.

    Usage:
      me=Depends(require_role(UserRole.ADMIN))
    """

    def dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role != role.value:
            raise AuthorizationError("Insufficient permissions")
        return principal

    return dependency


require_admin = require_role(UserRole.ADMIN)
require_delivery = require_role(UserRole.DELIVERY)
