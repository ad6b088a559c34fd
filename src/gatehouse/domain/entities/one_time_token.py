"""One-time token entities.

Email verification and password reset tokens share one shape: the raw
token is emailed to the user and only its SHA-256 hash is stored. A token
authorises exactly one state change and is kept afterwards as an audit
record.
"""

from dataclasses import dataclass, field
from datetime import datetime

from gatehouse.domain.entities.user import User, utcnow


@dataclass
class OneTimeToken:
    """Hashed single-use token.

    Attributes:
        id: Unique numeric identifier.
        user_id: ID of the user this token is for.
        token_hash: SHA-256 hash of the raw token.
        expires_at: When the token expires.
        created_at: When the token was created.
        used_at: When the token was consumed (None if unused).
    """

    id: int
    user_id: int
    token_hash: str
    expires_at: datetime
    created_at: datetime = field(default_factory=utcnow)
    used_at: datetime | None = None

    @property
    def is_used(self) -> bool:
        return self.used_at is not None

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def is_valid(self, now: datetime) -> bool:
        """Check if the token is unused and unexpired."""
        return not self.is_used and not self.is_expired(now)


@dataclass
class EmailVerificationToken(OneTimeToken):
    """Token proving ownership of a registered email address."""


@dataclass
class PasswordResetToken(OneTimeToken):
    """Token authorising a single password reset.

    Repository lookups attach the owning user so the reset flow can notify
    them without a second query.
    """

    user: User | None = None
