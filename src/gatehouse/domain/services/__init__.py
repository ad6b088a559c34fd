"""Domain services for Gatehouse."""

from gatehouse.domain.services.auth_service import AuthService

__all__ = ["AuthService"]
