"""Value objects produced by authentication operations."""

from dataclasses import dataclass, fields
from datetime import datetime

from gatehouse.domain.entities.user import User

DEFAULT_ROLE = "user"


@dataclass(frozen=True)
class AuthTokens:
    """Access/refresh token pair returned by login and refresh.

    Attributes:
        access_token: Signed JWT bound to a session.
        refresh_token: Raw opaque refresh token (never the stored hash).
    """

    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class AccessTokenPayload:
    """Decoded claims of an access token.

    Attributes:
        user_id: Authenticated user.
        session_id: Session the token was issued for.
        role: Placeholder role string.
        iss: Issuer claim.
        aud: Audience claim.
        iat: Issued-at (seconds since epoch).
        exp: Expiry (seconds since epoch).
    """

    user_id: int
    session_id: int
    role: str = DEFAULT_ROLE
    iss: str | None = None
    aud: str | None = None
    iat: int | None = None
    exp: int | None = None


@dataclass(frozen=True)
class UserSummary:
    """Non-sensitive user fields returned after registration."""

    id: int
    email: str
    name: str


@dataclass(frozen=True)
class RegistrationResult:
    """Outcome of a successful registration."""

    message: str
    user: UserSummary


@dataclass(frozen=True)
class UserProfile:
    """User record with the password hash stripped."""

    id: int
    name: str
    email: str
    is_active: bool
    email_verified_at: datetime | None
    failed_login_attempts: int
    locked_until: datetime | None
    last_login_at: datetime | None
    password_changed_at: datetime | None
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None

    @classmethod
    def from_user(cls, user: User) -> "UserProfile":
        return cls(**{f.name: getattr(user, f.name) for f in fields(cls)})
