"""
User Admin Routes
===================
GET /api/users, GET /api/users/{id}, PUT /api/users/{id}/block|unblock
"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from config.database import get_db
from common.helpers import parse_id
from modules.auth.deps import Principal, require_admin
from modules.user.models import UserRole
from modules.user.service import user_admin_service

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("")
def list_users(
    role: Optional[UserRole] = None,
    db: Session = Depends(get_db),
    me: Principal = Depends(require_admin),
):
    users = user_admin_service.list_users(db, role.value if role else None)
    return [u.to_dict() for u in users]


@router.get("/{user_id}")
def get_user(
    user_id: str,
    db: Session = Depends(get_db),
    me: Principal = Depends(require_admin),
):
    return user_admin_service.get_user(db, parse_id(user_id, "user ID")).to_dict()


@router.put("/{user_id}/block")
def block_user(
    user_id: str,
    db: Session = Depends(get_db),
    me: Principal = Depends(require_admin),
):
    user_admin_service.set_active(db, parse_id(user_id, "user ID"), False)
    db.commit()
    return {"message": "User blocked successfully"}


@router.put("/{user_id}/unblock")
def unblock_user(
    user_id: str,
    db: Session = Depends(get_db),
    me: Principal = Depends(require_admin),
):
    user_admin_service.set_active(db, parse_id(user_id, "user ID"), True)
    db.commit()
    return {"message": "User unblocked successfully"}
