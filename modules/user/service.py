"""
User Module - Admin Service
=============================
Account listing and block/unblock for administrators.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session
from sqlalchemy import desc

from common.helpers import now_utc
from common.exceptions import NotFoundError
from modules.user.models import User, UserRole

logger = logging.getLogger("storefront.user")


class UserAdminService:

    def list_users(self, db: Session, role: Optional[str] = None) -> List[User]:
        q = db.query(User).order_by(desc(User.created_at))
        if role:
            q = q.filter(User.role == role)
        return q.all()

    def get_user(self, db: Session, user_id: str) -> User:
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User not found")
        return user

    def set_active(self, db: Session, user_id: str, active: bool) -> User:
        """Block or unblock an account. Takes effect on the user's next request."""
        user = self.get_user(db, user_id)
        user.is_active = active
        user.updated_at = now_utc()
        db.flush()
        logger.info("User %s %s", user.id, "unblocked" if active else "blocked")
        return user

    def get_active_delivery_agent(self, db: Session, agent_id: str) -> Optional[User]:
        return db.query(User).filter(
            User.id == agent_id,
            User.role == UserRole.DELIVERY.value,
            User.is_active == True,  # noqa: E712
        ).first()


# Singleton
user_admin_service = UserAdminService()
