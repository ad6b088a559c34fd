"""JWT access token service.

Access tokens are short-lived HS256 tokens bound to a session ID. They are
validated statelessly from signature, expiry, issuer and audience alone;
revoking a session does not invalidate access tokens already issued for it.
Refresh tokens are opaque random strings, not JWTs.
"""

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from gatehouse.core.config import AuthConfig
from gatehouse.domain.entities import DEFAULT_ROLE, AccessTokenPayload
from gatehouse.infrastructure.auth.password_hasher import generate_opaque_token


class JWTError(Exception):
    """Base exception for JWT-related errors."""

    pass


class TokenExpiredError(JWTError):
    """Raised when a token has expired."""

    pass


class InvalidTokenError(JWTError):
    """Raised when a token is malformed, mis-signed or has wrong claims."""

    pass


class JWTService:
    """Service for issuing and validating access tokens."""

    ALGORITHM = "HS256"
    REQUIRED_CLAIMS = ("userId", "sessionId", "iss", "aud", "iat", "exp")

    def __init__(
        self,
        secret_key: str,
        issuer: str,
        audience: str,
        access_token_expire_minutes: int = 15,
    ) -> None:
        """Initialize the JWT service.

        Args:
            secret_key: Secret key for signing tokens.
            issuer: Value of the ``iss`` claim.
            audience: Value of the ``aud`` claim.
            access_token_expire_minutes: Access token lifetime.

        Raises:
            ValueError: If the secret key is empty.
        """
        if not secret_key:
            raise ValueError("JWT secret key cannot be empty")

        self._secret_key = secret_key
        self.issuer = issuer
        self.audience = audience
        self._access_expire = timedelta(minutes=access_token_expire_minutes)

    @classmethod
    def from_config(cls, config: AuthConfig) -> "JWTService":
        """Create a service from the auth configuration."""
        return cls(
            secret_key=config.secret_key,
            issuer=config.issuer,
            audience=config.audience,
            access_token_expire_minutes=config.access_token_expire_minutes,
        )

    def create_access_token(
        self,
        user_id: int,
        session_id: int,
        role: str = DEFAULT_ROLE,
        expires_delta: timedelta | None = None,
    ) -> str:
        """Create an access token bound to a session.

        Args:
            user_id: The user's identifier.
            session_id: The session the token is issued for.
            role: The user's role name.
            expires_delta: Custom expiration time. Defaults to the configured lifetime.

        Returns:
            Encoded JWT access token.
        """
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta if expires_delta is not None else self._access_expire)

        payload: dict[str, Any] = {
            "userId": user_id,
            "sessionId": session_id,
            "role": role,
            "iss": self.issuer,
            "aud": self.audience,
            "iat": now,
            "exp": expire,
        }

        return jwt.encode(payload, self._secret_key, algorithm=self.ALGORITHM)

    def create_refresh_token(self) -> str:
        """Create an opaque refresh token.

        The caller must hash the token before persisting it.
        """
        return generate_opaque_token()

    def decode_access_token(self, token: str) -> AccessTokenPayload:
        """Decode and validate an access token.

        Args:
            token: The encoded JWT token.

        Returns:
            The decoded token payload.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: If the token is invalid.
        """
        try:
            claims = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self.ALGORITHM],
                issuer=self.issuer,
                audience=self.audience,
                options={"require": list(self.REQUIRED_CLAIMS)},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError("Token has expired") from e
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError("Invalid token") from e

        user_id = claims["userId"]
        session_id = claims["sessionId"]
        if not isinstance(user_id, int) or not isinstance(session_id, int):
            raise InvalidTokenError("Invalid token")

        return AccessTokenPayload(
            user_id=user_id,
            session_id=session_id,
            role=claims.get("role", DEFAULT_ROLE),
            iss=claims["iss"],
            aud=claims["aud"],
            iat=claims["iat"],
            exp=claims["exp"],
        )

    def get_expires_in(self) -> int:
        """Get the access token lifetime in seconds."""
        return int(self._access_expire.total_seconds())
