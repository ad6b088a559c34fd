"""Domain entities for Gatehouse.

Entities are pure Python dataclasses that represent core business concepts.
They have no dependencies on infrastructure or external frameworks.
"""

from gatehouse.domain.entities.auth import (
    DEFAULT_ROLE,
    AccessTokenPayload,
    AuthTokens,
    RegistrationResult,
    UserProfile,
    UserSummary,
)
from gatehouse.domain.entities.one_time_token import (
    EmailVerificationToken,
    OneTimeToken,
    PasswordResetToken,
)
from gatehouse.domain.entities.session import NewSession, UserSession
from gatehouse.domain.entities.user import User, utcnow

__all__ = [
    "DEFAULT_ROLE",
    "AccessTokenPayload",
    "AuthTokens",
    "EmailVerificationToken",
    "NewSession",
    "OneTimeToken",
    "PasswordResetToken",
    "RegistrationResult",
    "User",
    "UserProfile",
    "UserSession",
    "UserSummary",
    "utcnow",
]
