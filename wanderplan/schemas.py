import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .models import User
from .shared.validators import validate_email

PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]{8,}$")


def _check_password(v: str) -> str:
    if not PASSWORD_PATTERN.match(v):
        raise ValueError("Password must contain uppercase, lowercase, number, and special character")
    return v


def _require_email(v: str) -> str:
    if not v or not v.strip():
        raise ValueError("Email is required")
    return validate_email(v)


class RegisterRequest(BaseModel):
    email: str = Field(..., max_length=255)
    password: str = Field(..., min_length=8, max_length=100)
    firstName: str = Field(..., min_length=1, max_length=50)
    lastName: str = Field(..., min_length=1, max_length=50)
    timezone: str = Field("America/New_York", max_length=64)

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return _require_email(v)

    @field_validator("password")
    @classmethod
    def check_password(cls, v):
        return _check_password(v)

    @field_validator("firstName", "lastName")
    @classmethod
    def strip_names(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v


class LoginRequest(BaseModel):
    email: str
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return _require_email(v)


class TokenRequest(BaseModel):
    token: str = Field(..., min_length=1)


class PasswordResetRequest(BaseModel):
    email: str

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return _require_email(v)


class PasswordResetConfirm(BaseModel):
    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=8, max_length=100)

    @field_validator("password")
    @classmethod
    def check_password(cls, v):
        return _check_password(v)


class UserUpdate(BaseModel):
    firstName: Optional[str] = Field(None, min_length=1, max_length=50)
    lastName: Optional[str] = Field(None, min_length=1, max_length=50)
    avatarUrl: Optional[str] = Field(None, max_length=500)
    timezone: Optional[str] = Field(None, min_length=1, max_length=64)

    @field_validator("firstName", "lastName")
    @classmethod
    def strip_names(cls, v):
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be empty")
        return v


class UserResponse(BaseModel):
    id: str
    email: str
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    emailVerified: bool
    avatarUrl: Optional[str] = None
    timezone: str
    createdAt: Optional[datetime] = None


class MessageResponse(BaseModel):
    message: str


def user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        firstName=user.first_name,
        lastName=user.last_name,
        emailVerified=user.email_verified,
        avatarUrl=user.avatar_url,
        timezone=user.timezone,
        createdAt=user.created_at,
    )
