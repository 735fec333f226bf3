"""
Auth Module - Service Layer
=============================
Signup, login, token refresh, and profile/password management.
"""

import logging
from typing import Tuple

from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from common.helpers import now_utc
from common.security import (
    hash_password, verify_password, create_token_pair, decode_token, REFRESH,
)
from common.exceptions import (
    AuthenticationError, DuplicateError, InvalidInputError, NotFoundError,
)
from modules.auth.deps import Principal
from modules.auth.schemas import ProfileUpdate
from modules.user.models import User, UserRole

logger = logging.getLogger("storefront.auth")

# Unknown email, blocked account and wrong password all get this message.
INVALID_CREDENTIALS = "Invalid credentials"


class AuthService:
    """Handles account creation, credential checks, and token issuance."""

    def signup(self, db: Session, email: str, password: str) -> Tuple[User, dict]:
        """
        Create a new customer account.

        Returns:
            (user, {"token", "refreshToken"})

        Raises:
            DuplicateError if the email is already registered
        """
        email = email.strip().lower()
        if db.query(User.id).filter(User.email == email).first():
            raise DuplicateError("User already exists")

        user = User(
            email=email,
            password_hash=hash_password(password),
            role=UserRole.CUSTOMER.value,
            is_active=True,
        )
        try:
            db.add(user)
            db.flush()
        except IntegrityError:
            db.rollback()
            # Race condition: another request registered this email
            raise DuplicateError("User already exists")

        logger.info("New account registered: %s", user.id)
        return user, create_token_pair(user)

    def login(self, db: Session, email: str, password: str) -> Tuple[User, dict]:
        email = email.strip().lower()
        user = db.query(User).filter(User.email == email).first()

        if not user or not user.is_active or not verify_password(password, user.password_hash):
            logger.info("Failed login for %s", email)
            raise AuthenticationError(INVALID_CREDENTIALS)

        return user, create_token_pair(user)

    def refresh(self, db: Session, refresh_token: str) -> Tuple[User, dict]:
        """Exchange a valid refresh token for a new token pair."""
        payload = decode_token(refresh_token, REFRESH)
        if not payload:
            raise AuthenticationError("Invalid refresh token")

        user = db.query(User).filter(User.id == payload["userId"]).first()
        if not user or not user.is_active:
            raise AuthenticationError("Invalid refresh token")

        return user, create_token_pair(user)

    # ==========================================
    # Profile
    # ==========================================

    def get_profile(self, db: Session, principal: Principal) -> User:
        user = db.query(User).filter(User.id == principal.user_id).first()
        if not user:
            raise NotFoundError("User not found")
        return user

    def update_profile(self, db: Session, principal: Principal, update: ProfileUpdate) -> User:
        user = self.get_profile(db, principal)

        if update.email is not None:
            new_email = str(update.email).strip().lower()
            if new_email != user.email:
                taken = db.query(User.id).filter(User.email == new_email, User.id != user.id).first()
                if taken:
                    raise DuplicateError("Email already in use")
                user.email = new_email

        if update.address is not None:
            user.address = update.address.strip()

        user.updated_at = now_utc()
        try:
            db.flush()
        except IntegrityError:
            db.rollback()
            raise DuplicateError("Email already in use")
        return user

    def change_password(self, db: Session, principal: Principal, current_password: str, new_password: str):
        user = self.get_profile(db, principal)
        if not verify_password(current_password, user.password_hash):
            raise InvalidInputError("Current password is incorrect")

        user.password_hash = hash_password(new_password)
        user.updated_at = now_utc()
        db.flush()
        logger.info("Password changed for user %s", user.id)


# Singleton
auth_service = AuthService()
