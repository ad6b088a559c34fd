"""Pydantic schemas for request and response bodies."""

from gatehouse.infrastructure.api.schemas.auth_schemas import (
    EmailRequest,
    ErrorResponse,
    LoginRequest,
    MessageResponse,
    RefreshRequest,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    TokenPairResponse,
    UserProfileResponse,
    UserSummaryResponse,
    VerifyEmailRequest,
)

__all__ = [
    "EmailRequest",
    "ErrorResponse",
    "LoginRequest",
    "MessageResponse",
    "RefreshRequest",
    "RegisterRequest",
    "RegisterResponse",
    "ResetPasswordRequest",
    "TokenPairResponse",
    "UserProfileResponse",
    "UserSummaryResponse",
    "VerifyEmailRequest",
]
