"""SQLAlchemy implementation of the authentication repository.

Every public method is one unit of work on the request-scoped session: it
either commits all of its writes or rolls all of them back. Multi-table
operations (user + verification token, session rotation, password reset,
email verification) are therefore atomic.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from gatehouse.core.logging import get_logger
from gatehouse.domain.entities import (
    EmailVerificationToken,
    NewSession,
    PasswordResetToken,
    User,
    UserSession,
    utcnow,
)
from gatehouse.domain.exceptions import DuplicateEmailError
from gatehouse.domain.repositories import UNSET, AuthRepository
from gatehouse.infrastructure.persistence.models import (
    EmailVerificationTokenModel,
    PasswordResetTokenModel,
    UserModel,
    UserSessionModel,
)

logger = get_logger(__name__)


def _as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes read back from SQLite."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SQLAlchemyAuthRepository(AuthRepository):
    """Repository for users, sessions and one-time tokens."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self._session = session

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[AsyncSession]:
        """Commit the enclosed writes together, or roll them all back."""
        try:
            yield self._session
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise

    # Conversion

    @staticmethod
    def _to_user(model: UserModel) -> User:
        return User(
            id=model.id,
            name=model.name,
            email=model.email,
            password_hash=model.password_hash,
            is_active=model.is_active,
            email_verified_at=_as_utc(model.email_verified_at),
            failed_login_attempts=model.failed_login_attempts,
            locked_until=_as_utc(model.locked_until),
            last_login_at=_as_utc(model.last_login_at),
            password_changed_at=_as_utc(model.password_changed_at),
            created_at=_as_utc(model.created_at),
            updated_at=_as_utc(model.updated_at),
            deleted_at=_as_utc(model.deleted_at),
        )

    @staticmethod
    def _to_session(model: UserSessionModel) -> UserSession:
        return UserSession(
            id=model.id,
            user_id=model.user_id,
            refresh_token_hash=model.refresh_token_hash,
            expires_at=_as_utc(model.expires_at),
            user_agent=model.user_agent,
            ip_address=model.ip_address,
            revoked_at=_as_utc(model.revoked_at),
            created_at=_as_utc(model.created_at),
            deleted_at=_as_utc(model.deleted_at),
        )

    @staticmethod
    def _token_fields(model: EmailVerificationTokenModel | PasswordResetTokenModel) -> dict[str, Any]:
        return {
            "id": model.id,
            "user_id": model.user_id,
            "token_hash": model.token_hash,
            "expires_at": _as_utc(model.expires_at),
            "created_at": _as_utc(model.created_at),
            "used_at": _as_utc(model.used_at),
        }

    # Users

    async def find_user_by_email(self, email: str) -> User | None:
        result = await self._session.execute(select(UserModel).where(UserModel.email == email))
        model = result.scalar_one_or_none()
        return self._to_user(model) if model else None

    async def find_user_by_id(self, user_id: int) -> User | None:
        result = await self._session.execute(
            select(UserModel).where(
                UserModel.id == user_id,
                UserModel.deleted_at.is_(None),
            )
        )
        model = result.scalar_one_or_none()
        return self._to_user(model) if model else None

    async def create_user(
        self,
        name: str,
        email: str,
        password_hash: str,
        verification_token_hash: str,
        verification_expires_at: datetime,
    ) -> User:
        try:
            async with self._transaction() as session:
                user = UserModel(
                    name=name,
                    email=email,
                    password_hash=password_hash,
                    is_active=True,
                )
                session.add(user)
                await session.flush()

                session.add(
                    EmailVerificationTokenModel(
                        user_id=user.id,
                        token_hash=verification_token_hash,
                        expires_at=verification_expires_at,
                    )
                )
                await session.flush()
        except IntegrityError as e:
            if await self._email_taken(email):
                raise DuplicateEmailError(email) from e
            raise

        return self._to_user(user)

    async def _email_taken(self, email: str) -> bool:
        result = await self._session.execute(
            select(UserModel.id).where(UserModel.email == email).limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def update_user_login_stats(
        self,
        user_id: int,
        *,
        failed_login_attempts: int = UNSET,
        locked_until: datetime | None = UNSET,
        last_login_at: datetime = UNSET,
    ) -> None:
        values: dict[str, Any] = {}
        if failed_login_attempts is not UNSET:
            values["failed_login_attempts"] = failed_login_attempts
        if locked_until is not UNSET:
            values["locked_until"] = locked_until
        if last_login_at is not UNSET:
            values["last_login_at"] = last_login_at
        if not values:
            return

        async with self._transaction() as session:
            await session.execute(
                update(UserModel).where(UserModel.id == user_id).values(**values)
            )

    # Sessions

    async def create_session(
        self,
        user_id: int,
        refresh_token_hash: str,
        expires_at: datetime,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> UserSession:
        async with self._transaction() as session:
            model = UserSessionModel(
                user_id=user_id,
                refresh_token_hash=refresh_token_hash,
                expires_at=expires_at,
                user_agent=user_agent,
                ip_address=ip_address,
            )
            session.add(model)
            await session.flush()
        return self._to_session(model)

    async def find_active_session_by_hash(self, refresh_token_hash: str) -> UserSession | None:
        result = await self._session.execute(
            select(UserSessionModel).where(
                UserSessionModel.refresh_token_hash == refresh_token_hash,
                UserSessionModel.revoked_at.is_(None),
                UserSessionModel.deleted_at.is_(None),
            )
        )
        model = result.scalar_one_or_none()
        return self._to_session(model) if model else None

    async def revoke_session(self, session_id: int, *, now: datetime | None = None) -> bool:
        async with self._transaction() as session:
            result = await session.execute(
                update(UserSessionModel)
                .where(
                    UserSessionModel.id == session_id,
                    UserSessionModel.revoked_at.is_(None),
                )
                .values(revoked_at=now or utcnow())
            )
        return result.rowcount > 0

    async def rotate_session(
        self,
        old_session_id: int,
        new_session: NewSession,
        *,
        now: datetime | None = None,
    ) -> UserSession | None:
        async with self._transaction() as session:
            # Conditional revoke: only one concurrent rotation can match the row.
            result = await session.execute(
                update(UserSessionModel)
                .where(
                    UserSessionModel.id == old_session_id,
                    UserSessionModel.revoked_at.is_(None),
                    UserSessionModel.deleted_at.is_(None),
                )
                .values(revoked_at=now or utcnow())
            )
            if result.rowcount != 1:
                logger.info("Session rotation lost race", session_id=old_session_id)
                return None

            model = UserSessionModel(
                user_id=new_session.user_id,
                refresh_token_hash=new_session.refresh_token_hash,
                expires_at=new_session.expires_at,
                user_agent=new_session.user_agent,
                ip_address=new_session.ip_address,
            )
            session.add(model)
            await session.flush()
        return self._to_session(model)

    # Password reset tokens

    async def create_password_reset_token(
        self, user_id: int, token_hash: str, expires_at: datetime
    ) -> PasswordResetToken:
        async with self._transaction() as session:
            model = PasswordResetTokenModel(
                user_id=user_id,
                token_hash=token_hash,
                expires_at=expires_at,
            )
            session.add(model)
            await session.flush()
        return PasswordResetToken(**self._token_fields(model))

    async def find_password_reset_token_by_hash(
        self, token_hash: str
    ) -> PasswordResetToken | None:
        result = await self._session.execute(
            select(PasswordResetTokenModel)
            .where(PasswordResetTokenModel.token_hash == token_hash)
            .options(selectinload(PasswordResetTokenModel.user))
        )
        model = result.scalar_one_or_none()
        if model is None:
            return None
        return PasswordResetToken(
            **self._token_fields(model),
            user=self._to_user(model.user) if model.user else None,
        )

    @staticmethod
    async def _consume_token(
        session: AsyncSession,
        model: type[PasswordResetTokenModel] | type[EmailVerificationTokenModel],
        token_id: int,
        now: datetime,
    ) -> bool:
        """Stamp ``used_at`` only if it is still unset."""
        result = await session.execute(
            update(model)
            .where(model.id == token_id, model.used_at.is_(None))
            .values(used_at=now)
        )
        return result.rowcount == 1

    async def mark_password_reset_token_used(
        self, token_id: int, *, now: datetime | None = None
    ) -> bool:
        async with self._transaction() as session:
            return await self._consume_token(
                session, PasswordResetTokenModel, token_id, now or utcnow()
            )

    async def reset_password(
        self,
        user_id: int,
        token_id: int,
        password_hash: str,
        *,
        now: datetime | None = None,
    ) -> int | None:
        now = now or utcnow()
        async with self._transaction() as session:
            if not await self._consume_token(session, PasswordResetTokenModel, token_id, now):
                logger.info("Password reset token already consumed", token_id=token_id)
                return None

            await session.execute(
                update(UserModel)
                .where(UserModel.id == user_id)
                .values(
                    password_hash=password_hash,
                    password_changed_at=now,
                    failed_login_attempts=0,
                    locked_until=None,
                )
            )
            result = await session.execute(
                update(UserSessionModel)
                .where(
                    UserSessionModel.user_id == user_id,
                    UserSessionModel.revoked_at.is_(None),
                )
                .values(revoked_at=now)
            )
        return result.rowcount

    # Email verification tokens

    async def find_email_verification_token_by_hash(
        self, token_hash: str
    ) -> EmailVerificationToken | None:
        result = await self._session.execute(
            select(EmailVerificationTokenModel).where(
                EmailVerificationTokenModel.token_hash == token_hash
            )
        )
        model = result.scalar_one_or_none()
        return EmailVerificationToken(**self._token_fields(model)) if model else None

    async def verify_email(
        self, user_id: int, token_id: int, *, now: datetime | None = None
    ) -> bool:
        now = now or utcnow()
        async with self._transaction() as session:
            if not await self._consume_token(
                session, EmailVerificationTokenModel, token_id, now
            ):
                logger.info("Verification token already consumed", token_id=token_id)
                return False

            await session.execute(
                update(UserModel)
                .where(UserModel.id == user_id)
                .values(email_verified_at=now)
            )
        return True
