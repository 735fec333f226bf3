"""
Auth Module - Request Schemas
===============================
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from config.settings import MIN_PASSWORD_LENGTH


class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, max_length=128)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class RefreshRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    refresh_token: str = Field(..., alias="refreshToken", min_length=1)


class ProfileUpdate(BaseModel):
    """Only these fields can be changed through the profile route; anything else is dropped."""
    email: Optional[EmailStr] = None
    address: Optional[str] = Field(None, max_length=500)


class ChangePasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(..., alias="currentPassword", min_length=1)
    new_password: str = Field(..., alias="newPassword", min_length=MIN_PASSWORD_LENGTH, max_length=128)
