"""Authentication engine.

Orchestrates registration, login with lockout, refresh-token rotation,
logout, email verification and password reset on top of the repository,
the token issuer and the mail notifier.
"""

import asyncio
from datetime import datetime
from typing import Callable

from gatehouse.core.config import AuthConfig
from gatehouse.core.logging import get_logger
from gatehouse.domain.entities import (
    DEFAULT_ROLE,
    AccessTokenPayload,
    AuthTokens,
    NewSession,
    RegistrationResult,
    User,
    UserProfile,
    UserSummary,
    utcnow,
)
from gatehouse.domain.exceptions import (
    ConflictError,
    DuplicateEmailError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from gatehouse.domain.repositories import AuthRepository
from gatehouse.infrastructure.auth.jwt_service import JWTService
from gatehouse.infrastructure.auth.password_hasher import (
    DUMMY_PASSWORD_HASH,
    generate_opaque_token,
    hash_password,
    hash_token,
    verify_password,
)
from gatehouse.infrastructure.services.email_service import EmailService

logger = get_logger(__name__)

REGISTRATION_MESSAGE = (
    "Registration successful. Please check your email to verify your account."
)
INVALID_CREDENTIALS = "Invalid credentials"
INVALID_RESET_TOKEN = "Invalid or expired reset token"


class AuthService:
    """Service implementing the authentication and session flows."""

    def __init__(
        self,
        repository: AuthRepository,
        token_service: JWTService,
        email_service: EmailService,
        config: AuthConfig,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the authentication service.

        Args:
            repository: Storage for users, sessions and one-time tokens.
            token_service: Issuer of access and refresh tokens.
            email_service: Best-effort mail notifier.
            config: Immutable authentication parameters.
            clock: Returns the current aware UTC time. Defaults to ``utcnow``.
        """
        self.repository = repository
        self.token_service = token_service
        self.email_service = email_service
        self.config = config
        self._clock = clock or utcnow

    def _now(self) -> datetime:
        return self._clock()

    @staticmethod
    async def _hash_password(password: str) -> str:
        return await asyncio.to_thread(hash_password, password)

    @staticmethod
    async def _verify_password(password: str, hashed: str | None) -> bool:
        return await asyncio.to_thread(verify_password, password, hashed)

    def _link(self, path: str, token: str) -> str:
        return f"{self.config.app_url.rstrip('/')}/{path}?token={token}"

    async def register(self, name: str, email: str, password: str) -> RegistrationResult:
        """Create an account and email a verification link.

        Args:
            name: Display name.
            email: Lower-cased email address.
            password: Plaintext password.

        Returns:
            Registration message and a summary of the new user.

        Raises:
            ConflictError: If the email is already registered.
        """
        if await self.repository.find_user_by_email(email) is not None:
            logger.info("Registration rejected: email already registered")
            raise ConflictError("Email already registered")

        password_hash = await self._hash_password(password)
        raw_token = generate_opaque_token()
        expires_at = self._now() + self.config.email_verification_token_lifetime

        try:
            user = await self.repository.create_user(
                name=name,
                email=email,
                password_hash=password_hash,
                verification_token_hash=hash_token(raw_token),
                verification_expires_at=expires_at,
            )
        except DuplicateEmailError as e:
            logger.info("Registration rejected: concurrent duplicate email")
            raise ConflictError("Email already registered") from e

        logger.info("User registered", user_id=user.id)

        await self.email_service.send_email(
            to=user.email,
            subject="Verify your email",
            body=(
                f"Hello {user.name},\n\n"
                "Please verify your email address by opening the link below:\n\n"
                f"{self._link('verify-email', raw_token)}\n"
            ),
        )

        return RegistrationResult(
            message=REGISTRATION_MESSAGE,
            user=UserSummary(id=user.id, email=user.email, name=user.name),
        )

    async def login(
        self,
        email: str,
        password: str,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> AuthTokens:
        """Authenticate with email and password and open a new session.

        Raises:
            UnauthorizedError: Unknown user, deleted user or wrong password.
            ForbiddenError: Account inactive or locked.
        """
        user = await self.repository.find_user_by_email(email)

        if user is None or user.is_deleted:
            # Same Argon2 cost as a real verification
            await self._verify_password(password, DUMMY_PASSWORD_HASH)
            logger.info("Login failed: unknown account")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if not user.is_active:
            logger.info("Login rejected: account inactive", user_id=user.id)
            raise ForbiddenError("Account is inactive")

        now = self._now()
        if user.is_locked(now):
            logger.info("Login rejected: account locked", user_id=user.id)
            raise ForbiddenError(f"Account locked until {user.locked_until.isoformat()}")

        # Accounts without a password still pay for one verification
        verified = await self._verify_password(
            password, user.password_hash or DUMMY_PASSWORD_HASH
        )
        if not verified or user.password_hash is None:
            await self._record_failed_login(user, now)
            raise UnauthorizedError(INVALID_CREDENTIALS)

        await self.repository.update_user_login_stats(
            user.id,
            failed_login_attempts=0,
            locked_until=None,
            last_login_at=now,
        )

        refresh_token = self.token_service.create_refresh_token()
        session = await self.repository.create_session(
            user_id=user.id,
            refresh_token_hash=hash_token(refresh_token),
            expires_at=now + self.config.refresh_token_lifetime,
            user_agent=user_agent,
            ip_address=ip_address,
        )

        logger.info("User logged in", user_id=user.id, session_id=session.id)

        return AuthTokens(
            access_token=self.token_service.create_access_token(
                user_id=user.id, session_id=session.id, role=DEFAULT_ROLE
            ),
            refresh_token=refresh_token,
        )

    async def _record_failed_login(self, user: User, now: datetime) -> None:
        previous = 0 if user.has_elapsed_lock(now) else user.failed_login_attempts
        attempts = previous + 1

        if attempts >= self.config.max_login_attempts:
            locked_until = now + self.config.lock_duration
            await self.repository.update_user_login_stats(
                user.id,
                failed_login_attempts=attempts,
                locked_until=locked_until,
            )
            logger.warning(
                "Account locked after failed logins",
                user_id=user.id,
                failed_login_attempts=attempts,
                locked_until=locked_until.isoformat(),
            )
        else:
            await self.repository.update_user_login_stats(
                user.id,
                failed_login_attempts=attempts,
                locked_until=None,
            )
            logger.info(
                "Login failed: wrong password",
                user_id=user.id,
                failed_login_attempts=attempts,
            )

    async def refresh(
        self,
        refresh_token: str,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> AuthTokens:
        """Exchange a refresh token for a new token pair.

        The presented token is single use: its session is revoked and a
        successor session is created in the same transaction.

        Raises:
            UnauthorizedError: Unknown, expired or revoked session.
        """
        session = await self.repository.find_active_session_by_hash(hash_token(refresh_token))
        if session is None:
            logger.info("Refresh failed: unknown refresh token")
            raise UnauthorizedError("Invalid refresh token")

        now = self._now()
        if session.is_expired(now):
            logger.info("Refresh failed: session expired", session_id=session.id)
            raise UnauthorizedError("Session expired")

        if session.is_revoked:
            logger.info("Refresh failed: session revoked", session_id=session.id)
            raise UnauthorizedError("Session revoked")

        new_refresh_token = self.token_service.create_refresh_token()
        new_session = await self.repository.rotate_session(
            session.id,
            NewSession(
                user_id=session.user_id,
                refresh_token_hash=hash_token(new_refresh_token),
                expires_at=now + self.config.refresh_token_lifetime,
                user_agent=user_agent if user_agent is not None else session.user_agent,
                ip_address=ip_address if ip_address is not None else session.ip_address,
            ),
            now=now,
        )
        if new_session is None:
            logger.warning("Refresh failed: session already rotated", session_id=session.id)
            raise UnauthorizedError("Session revoked")

        logger.info(
            "Session rotated",
            user_id=session.user_id,
            old_session_id=session.id,
            session_id=new_session.id,
        )

        return AuthTokens(
            access_token=self.token_service.create_access_token(
                user_id=new_session.user_id, session_id=new_session.id, role=DEFAULT_ROLE
            ),
            refresh_token=new_refresh_token,
        )

    async def logout(self, payload: AccessTokenPayload) -> None:
        """Revoke the session an access token was issued for.

        Revoking an already revoked session is a no-op.
        """
        revoked = await self.repository.revoke_session(payload.session_id, now=self._now())
        logger.info(
            "User logged out",
            user_id=payload.user_id,
            session_id=payload.session_id,
            revoked=revoked,
        )

    async def verify_email(self, token: str) -> None:
        """Consume an email verification token.

        Raises:
            NotFoundError: Unknown token.
            ValidationError: Token already used or expired.
        """
        record = await self.repository.find_email_verification_token_by_hash(hash_token(token))
        if record is None:
            raise NotFoundError("Invalid verification token")
        if record.is_used:
            raise ValidationError("Token already used")
        now = self._now()
        if record.is_expired(now):
            raise ValidationError("Token expired")

        if not await self.repository.verify_email(record.user_id, record.id, now=now):
            raise ValidationError("Token already used")
        logger.info("Email verified", user_id=record.user_id)

    async def forgot_password(self, email: str) -> None:
        """Email a password reset link if the account can use one.

        Unknown emails return silently so callers cannot probe for accounts.
        """
        user = await self.repository.find_user_by_email(email)
        if user is None or user.is_deleted or not user.is_active:
            await self._verify_password("", DUMMY_PASSWORD_HASH)
            logger.info("Password reset requested for unavailable account")
            return

        raw_token = generate_opaque_token()
        await self.repository.create_password_reset_token(
            user_id=user.id,
            token_hash=hash_token(raw_token),
            expires_at=self._now() + self.config.password_reset_token_lifetime,
        )
        logger.info("Password reset token issued", user_id=user.id)

        await self.email_service.send_email(
            to=user.email,
            subject="Reset your password",
            body=(
                f"Hello {user.name},\n\n"
                "We received a request to reset your password. Open the link "
                "below to choose a new one:\n\n"
                f"{self._link('reset-password', raw_token)}\n\n"
                "If you did not request this, you can ignore this email.\n"
            ),
        )

    async def reset_password(self, token: str, new_password: str) -> None:
        """Set a new password with a reset token and revoke every session.

        Raises:
            NotFoundError: Unknown token.
            ValidationError: Token already used or expired.
        """
        record = await self.repository.find_password_reset_token_by_hash(hash_token(token))
        if record is None:
            raise NotFoundError(INVALID_RESET_TOKEN)
        now = self._now()
        if not record.is_valid(now):
            raise ValidationError(INVALID_RESET_TOKEN)

        password_hash = await self._hash_password(new_password)
        revoked = await self.repository.reset_password(
            record.user_id, record.id, password_hash, now=now
        )
        if revoked is None:
            # Another request consumed the token first
            raise ValidationError(INVALID_RESET_TOKEN)

        logger.info(
            "Password reset",
            user_id=record.user_id,
            sessions_revoked=revoked,
        )

        if record.user is not None:
            await self.email_service.send_email(
                to=record.user.email,
                subject="Password Changed",
                body=(
                    f"Hello {record.user.name},\n\n"
                    "Your password was changed and all of your sessions were "
                    "signed out. If this was not you, reset your password "
                    "immediately.\n"
                ),
            )

    async def get_profile(self, user_id: int) -> UserProfile:
        """Return the profile of a user.

        Raises:
            NotFoundError: Missing or soft-deleted user.
        """
        user = await self.repository.find_user_by_id(user_id)
        if user is None or user.is_deleted:
            raise NotFoundError("User not found")
        return UserProfile.from_user(user)
