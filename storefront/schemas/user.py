"""Pydantic schemas for authentication and user profiles."""

from __future__ import annotations

from pydantic import BaseModel, Field

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class LoginRequest(BaseModel):
    email: str = Field(..., description="Account email address.")
    password: str = Field(..., description="Plaintext password.")


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Display name.")
    email: str = Field(..., pattern=EMAIL_PATTERN, description="Account email address.")
    password: str = Field(..., min_length=6, description="Plaintext password (min 6 chars).")


class ProfileUpdateRequest(BaseModel):
    """Partial profile update; omitted or empty fields keep their value."""

    name: str | None = Field(default=None, max_length=100)
    email: str | None = Field(default=None, pattern=EMAIL_PATTERN)
    password: str | None = Field(default=None, min_length=6)


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    is_admin: bool = False


class SessionResponse(UserResponse):
    """User profile plus a freshly issued bearer token."""

    token: str = Field(..., description="Bearer token for the Authorization header.")
