"""Persistence contract consumed by the authentication service.

Methods documented as transactional must apply all of their writes or none
of them. Everything else is a single-statement unit.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Final

from gatehouse.domain.entities import (
    EmailVerificationToken,
    NewSession,
    PasswordResetToken,
    User,
    UserSession,
)


class _Unset:
    """Marker for keyword arguments that were not supplied."""

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Final[Any] = _Unset()


class AuthRepository(ABC):
    """Storage for users, sessions and one-time tokens."""

    @abstractmethod
    async def find_user_by_email(self, email: str) -> User | None:
        """Find a user by email, including soft-deleted users."""

    @abstractmethod
    async def find_user_by_id(self, user_id: int) -> User | None:
        """Find a user by ID, excluding soft-deleted users."""

    @abstractmethod
    async def create_user(
        self,
        name: str,
        email: str,
        password_hash: str,
        verification_token_hash: str,
        verification_expires_at: datetime,
    ) -> User:
        """Create a user and its email verification token (transactional).

        Raises:
            DuplicateEmailError: If the email is already registered.
        """

    @abstractmethod
    async def update_user_login_stats(
        self,
        user_id: int,
        *,
        failed_login_attempts: int = UNSET,
        locked_until: datetime | None = UNSET,
        last_login_at: datetime = UNSET,
    ) -> None:
        """Update the supplied login counters and timestamps."""

    @abstractmethod
    async def create_session(
        self,
        user_id: int,
        refresh_token_hash: str,
        expires_at: datetime,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> UserSession:
        """Create a new active session."""

    @abstractmethod
    async def find_active_session_by_hash(self, refresh_token_hash: str) -> UserSession | None:
        """Find a session by refresh token hash that is neither revoked nor deleted."""

    @abstractmethod
    async def revoke_session(self, session_id: int, *, now: datetime | None = None) -> bool:
        """Revoke a session. Returns False if it was already revoked or missing."""

    @abstractmethod
    async def rotate_session(
        self,
        old_session_id: int,
        new_session: NewSession,
        *,
        now: datetime | None = None,
    ) -> UserSession | None:
        """Revoke ``old_session_id`` and create ``new_session`` (transactional).

        The revocation only applies to a still-active session. Returns None,
        creating nothing, when the old session was already revoked.
        """

    @abstractmethod
    async def create_password_reset_token(
        self, user_id: int, token_hash: str, expires_at: datetime
    ) -> PasswordResetToken:
        """Store a password reset token."""

    @abstractmethod
    async def find_password_reset_token_by_hash(
        self, token_hash: str
    ) -> PasswordResetToken | None:
        """Find a password reset token with its owning user attached."""

    @abstractmethod
    async def mark_password_reset_token_used(
        self, token_id: int, *, now: datetime | None = None
    ) -> bool:
        """Stamp an unused password reset token as used.

        Returns False if the token was already used or missing.
        """

    @abstractmethod
    async def reset_password(
        self,
        user_id: int,
        token_id: int,
        password_hash: str,
        *,
        now: datetime | None = None,
    ) -> int | None:
        """Apply a password reset (transactional).

        Consumes the token first; only an unused token lets the rest apply.
        Then updates the password hash and ``password_changed_at``, clears
        the lockout and revokes every active session.

        Returns:
            Number of sessions revoked, or None when the token had already
            been consumed and nothing was written.
        """

    @abstractmethod
    async def find_email_verification_token_by_hash(
        self, token_hash: str
    ) -> EmailVerificationToken | None:
        """Find an email verification token."""

    @abstractmethod
    async def verify_email(
        self, user_id: int, token_id: int, *, now: datetime | None = None
    ) -> bool:
        """Consume the token and stamp ``email_verified_at`` (transactional).

        Returns False, writing nothing, when the token was already used.
        """
