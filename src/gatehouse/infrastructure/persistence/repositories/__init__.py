"""Repository implementations for data access."""

from gatehouse.infrastructure.persistence.repositories.auth_repository import (
    SQLAlchemyAuthRepository,
)

__all__ = ["SQLAlchemyAuthRepository"]
