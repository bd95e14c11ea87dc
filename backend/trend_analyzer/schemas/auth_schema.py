"""Authentication and user-profile schemas."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from .request_schema import Tier


# ---------------------------------------------------------------------------
# Password policy
# ---------------------------------------------------------------------------
COMMON_PASSWORDS = {
    "password", "123456", "12345678", "123456789", "qwerty",
    "abc123", "letmein", "welcome", "admin", "azerty",
}

_PW_MIN_LENGTH = 6


def validate_password(password: str) -> str:
    """Validate the sign-up password. Returns password or raises ValueError."""
    if len(password) < _PW_MIN_LENGTH:
        raise ValueError(f"Password must contain at least {_PW_MIN_LENGTH} characters.")
    if password.lower() in COMMON_PASSWORDS:
        raise ValueError("Password must not be a common password.")
    return password


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------

class UserProfile(BaseModel):
    """Session-owned profile. Never carries the credential."""

    name: str
    picture: str = Field(default="", description="Avatar URI")
    subscription: Tier = Field(default="free")
    email: Optional[str] = None
    notifications_enabled: Optional[bool] = Field(default=None, alias="notificationsEnabled")

    class Config:
        populate_by_name = True

    @property
    def is_premium(self) -> bool:
        return self.subscription == "premium"


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class SignupRequest(BaseModel):
    name: str = Field(..., min_length=1, description="Display name")
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., description="Password (min 6 characters)")

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name must not be blank.")
        return v

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return validate_password(v)


class LoginRequest(BaseModel):
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., description="Password")


class SettingsUpdate(BaseModel):
    email: Optional[EmailStr] = None
    notifications_enabled: bool = Field(default=False, alias="notificationsEnabled")

    class Config:
        populate_by_name = True
