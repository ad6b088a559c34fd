"""SQLAlchemy models for one-time tokens.

Stores hashes of email verification and password reset tokens sent to
users. Used tokens stay in place as an audit trail.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, declared_attr, mapped_column, relationship

from gatehouse.domain.entities.user import utcnow
from gatehouse.infrastructure.persistence.database import Base


class OneTimeTokenMixin:
    """Columns shared by the one-time token tables."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    token_hash: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        index=True,
        comment="SHA-256 hash of the emailed token",
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )

    @declared_attr
    def user(cls):
        return relationship("UserModel")


class EmailVerificationTokenModel(OneTimeTokenMixin, Base):
    """SQLAlchemy model for the email_verification_tokens table."""

    __tablename__ = "email_verification_tokens"


class PasswordResetTokenModel(OneTimeTokenMixin, Base):
    """SQLAlchemy model for the password_reset_tokens table."""

    __tablename__ = "password_reset_tokens"
