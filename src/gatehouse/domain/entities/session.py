"""User session entity.

A session is a refresh-token grant. Only the SHA-256 hash of the refresh
token is stored. Each refresh revokes the current session and creates a
successor, so a replayed refresh token always hits a revoked row.
"""

from dataclasses import dataclass, field
from datetime import datetime

from gatehouse.domain.entities.user import utcnow


@dataclass
class UserSession:
    """Refresh-token session.

    Attributes:
        id: Unique numeric identifier.
        user_id: Owning user.
        refresh_token_hash: SHA-256 hex digest of the refresh token.
        expires_at: When the refresh token stops being accepted.
        user_agent: Client user agent captured at creation.
        ip_address: Client IP captured at creation.
        revoked_at: When the session was revoked (None = active).
        created_at: Timestamp when the session was created.
        deleted_at: Soft-delete timestamp.
    """

    id: int
    user_id: int
    refresh_token_hash: str
    expires_at: datetime
    user_agent: str | None = None
    ip_address: str | None = None
    revoked_at: datetime | None = None
    created_at: datetime = field(default_factory=utcnow)
    deleted_at: datetime | None = None

    @property
    def is_revoked(self) -> bool:
        """Revoked or soft-deleted sessions can never be refreshed."""
        return self.revoked_at is not None or self.deleted_at is not None

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


@dataclass(frozen=True)
class NewSession:
    """Data for a session about to be created."""

    user_id: int
    refresh_token_hash: str
    expires_at: datetime
    user_agent: str | None = None
    ip_address: str | None = None
