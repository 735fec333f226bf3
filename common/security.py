"""
Storefront - Security Utilities
==================================
JWT access/refresh tokens and salted password hashing.

NOTE: Stateless sessions. Tokens are never stored server-side. Account
state is re-checked against the users table on every protected request
(see modules/auth/deps.py).
"""

import logging
from datetime import timedelta
from typing import Optional

import bcrypt
from jose import jwt, JWTError

from config.settings import (
    JWT_SECRET, ALGORITHM, BCRYPT_ROUNDS,
    ACCESS_TOKEN_EXPIRE_MINUTES, REFRESH_TOKEN_EXPIRE_MINUTES,
)
from common.exceptions import InternalError
from common.helpers import now_utc

logger = logging.getLogger("storefront.security")

ACCESS = "access"
REFRESH = "refresh"

_TOKEN_LIFETIMES = {
    ACCESS: ACCESS_TOKEN_EXPIRE_MINUTES,
    REFRESH: REFRESH_TOKEN_EXPIRE_MINUTES,
}

# bcrypt only looks at the first 72 bytes of the password
_BCRYPT_MAX_BYTES = 72


# ==========================================
# Passwords
# ==========================================

def hash_password(password: str) -> str:
    """Create a salted bcrypt hash of the password."""
    try:
        raw = password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
        return bcrypt.hashpw(raw, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")
    except (ValueError, TypeError) as e:
        logger.error("Password hashing failed: %s", e)
        raise InternalError("Failed to hash password")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plaintext password against a stored bcrypt hash."""
    if not password_hash:
        return False
    try:
        raw = password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
        return bcrypt.checkpw(raw, password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


# ==========================================
# JWT Tokens
# ==========================================

def create_token(user_id: str, email: str, role: str, token_type: str = ACCESS) -> str:
    """Create a signed JWT carrying the user's identity and role."""
    issued = now_utc()
    to_encode = {
        "userId": user_id,
        "email": email,
        "role": role,
        "type": token_type,
        "iat": issued,
        "exp": issued + timedelta(minutes=_TOKEN_LIFETIMES[token_type]),
    }
    return jwt.encode(to_encode, JWT_SECRET, algorithm=ALGORITHM)


def create_token_pair(user) -> dict:
    """Issue access + refresh tokens together for a User row."""
    return {
        "token": create_token(user.id, user.email, user.role, ACCESS),
        "refreshToken": create_token(user.id, user.email, user.role, REFRESH),
    }


def decode_token(token: str, token_type: str = ACCESS) -> Optional[dict]:
    """Decode and verify a JWT of the expected type. Returns payload or None."""
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[ALGORITHM])
    except JWTError:
        return None
    if payload.get("type") != token_type or not payload.get("userId"):
        return None
    return payload
