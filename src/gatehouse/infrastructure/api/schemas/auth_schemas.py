"""Pydantic schemas for authentication endpoints.

Token payloads use camelCase on the wire (``accessToken``,
``refreshToken``); either spelling is accepted on input.
"""

from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _normalize_email(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value


NormalizedEmail = Annotated[EmailStr, BeforeValidator(_normalize_email)]


class RegisterRequest(BaseModel):
    """Request body for registration."""

    name: str = Field(..., min_length=2, max_length=255, description="Display name")
    email: NormalizedEmail = Field(..., description="User's email address")
    password: str = Field(..., min_length=8, description="User's password")


class LoginRequest(BaseModel):
    """Request body for login."""

    email: NormalizedEmail = Field(..., description="User's email address")
    password: str = Field(..., min_length=1, description="User's password")


class RefreshRequest(_CamelModel):
    """Request body for token refresh."""

    refresh_token: str = Field(..., min_length=1, description="Opaque refresh token")


class VerifyEmailRequest(BaseModel):
    """Request body for email verification."""

    token: str = Field(..., min_length=1, description="Token from the verification email")


class EmailRequest(BaseModel):
    """Request body for forgot-password."""

    email: NormalizedEmail = Field(..., description="User's email address")


class ResetPasswordRequest(BaseModel):
    """Request body for password reset."""

    token: str = Field(..., min_length=1, description="Token from the reset email")
    password: str = Field(..., min_length=8, description="New password")


class TokenPairResponse(_CamelModel):
    """Access/refresh token pair."""

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="Opaque refresh token")


class UserSummaryResponse(BaseModel):
    """User fields returned after registration."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str


class RegisterResponse(BaseModel):
    """Response for successful registration."""

    model_config = ConfigDict(from_attributes=True)

    message: str
    user: UserSummaryResponse


class UserProfileResponse(BaseModel):
    """Authenticated user's profile. Never includes the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    is_active: bool
    email_verified_at: datetime | None = None
    failed_login_attempts: int
    locked_until: datetime | None = None
    last_login_at: datetime | None = None
    password_changed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None


class MessageResponse(BaseModel):
    """Plain message response."""

    message: str


class ErrorResponse(BaseModel):
    """Body of every authentication error response."""

    error: str = Field(..., description="Error title")
    code: str = Field(..., description="Machine-readable error kind")
    message: str = Field(..., description="Human-readable error message")
