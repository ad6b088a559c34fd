"""SQLAlchemy ORM models for Gatehouse."""

from gatehouse.infrastructure.persistence.models.one_time_token import (
    EmailVerificationTokenModel,
    PasswordResetTokenModel,
)
from gatehouse.infrastructure.persistence.models.session import UserSessionModel
from gatehouse.infrastructure.persistence.models.user import UserModel

__all__ = [
    "EmailVerificationTokenModel",
    "PasswordResetTokenModel",
    "UserModel",
    "UserSessionModel",
]
