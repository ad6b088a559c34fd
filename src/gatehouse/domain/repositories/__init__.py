"""Repository contracts used by domain services."""

from gatehouse.domain.repositories.auth_repository import UNSET, AuthRepository

__all__ = ["UNSET", "AuthRepository"]
