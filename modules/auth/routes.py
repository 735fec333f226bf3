"""
Auth Routes
=============
Signup, login, token refresh, logout, profile and password change.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from config.database import get_db
from modules.auth.deps import Principal, get_current_principal
from modules.auth.schemas import (
    SignupRequest, LoginRequest, RefreshRequest, ProfileUpdate, ChangePasswordRequest,
)
from modules.auth.service import auth_service

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _auth_response(user, tokens: dict) -> dict:
    return {**tokens, "user": user.to_dict()}


# ==========================================
# Signup / Login / Refresh / Logout
# ==========================================

@router.post("/signup")
def signup(body: SignupRequest, db: Session = Depends(get_db)):
    user, tokens = auth_service.signup(db, body.email, body.password)
    db.commit()
    return _auth_response(user, tokens)


@router.post("/login")
def login(body: LoginRequest, db: Session = Depends(get_db)):
    user, tokens = auth_service.login(db, body.email, body.password)
    return _auth_response(user, tokens)


@router.post("/refresh")
def refresh(body: RefreshRequest, db: Session = Depends(get_db)):
    user, tokens = auth_service.refresh(db, body.refresh_token)
    return _auth_response(user, tokens)


@router.post("/logout")
def logout():
    # Tokens are stateless; the client discards them.
    return {"message": "Logged out successfully"}


# ==========================================
# Profile
# ==========================================

@router.get("/profile")
def get_profile(
    db: Session = Depends(get_db),
    me: Principal = Depends(get_current_principal),
):
    return auth_service.get_profile(db, me).to_dict()


@router.put("/profile")
def update_profile(
    body: ProfileUpdate,
    db: Session = Depends(get_db),
    me: Principal = Depends(get_current_principal),
):
    user = auth_service.update_profile(db, me, body)
    db.commit()
    return user.to_dict()


@router.put("/password")
def change_password(
    body: ChangePasswordRequest,
    db: Session = Depends(get_db),
    me: Principal = Depends(get_current_principal),
):
    auth_service.change_password(db, me, body.current_password, body.new_password)
    db.commit()
    return {"message": "Password updated successfully"}
