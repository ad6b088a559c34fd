"""User entity for authentication.

Users are identified by a numeric ID and a unique, lower-cased email
address. A user without a password hash cannot log in with a password.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass
class User:
    """User entity representing an account holder.

    Attributes:
        id: Unique numeric identifier.
        name: Display name.
        email: Email address (unique, normalised to lower case by the caller).
        password_hash: Argon2id hash, or None when password login is impossible.
        is_active: Whether the user may log in.
        email_verified_at: When the email address was verified (None = unverified).
        failed_login_attempts: Consecutive failed password attempts.
        locked_until: End of the current lockout window, if any.
        last_login_at: Timestamp of last successful login.
        password_changed_at: Timestamp of the last password reset.
        created_at: Timestamp when the user was created.
        updated_at: Timestamp when the user was last updated.
        deleted_at: Soft-delete timestamp.
    """

    id: int
    name: str
    email: str
    password_hash: str | None = None
    is_active: bool = True
    email_verified_at: datetime | None = None
    failed_login_attempts: int = 0
    locked_until: datetime | None = None
    last_login_at: datetime | None = None
    password_changed_at: datetime | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    deleted_at: datetime | None = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def is_email_verified(self) -> bool:
        return self.email_verified_at is not None

    def is_locked(self, now: datetime) -> bool:
        """Check whether a lockout window is still in effect at ``now``."""
        return self.locked_until is not None and self.locked_until > now

    def has_elapsed_lock(self, now: datetime) -> bool:
        """Check whether a lockout was set and has since expired."""
        return self.locked_until is not None and self.locked_until <= now
