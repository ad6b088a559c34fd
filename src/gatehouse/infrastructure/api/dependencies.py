"""FastAPI dependencies for authentication.

Wires the auth service from the request-scoped database session and the
process-wide configuration, and extracts the bearer access token.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from gatehouse.core.config import AuthConfig, get_auth_config, get_settings
from gatehouse.core.logging import get_logger
from gatehouse.domain.entities import AccessTokenPayload
from gatehouse.domain.exceptions import UnauthorizedError
from gatehouse.domain.services import AuthService
from gatehouse.infrastructure.auth import InvalidTokenError, JWTService, TokenExpiredError
from gatehouse.infrastructure.persistence.database import get_db_session
from gatehouse.infrastructure.persistence.repositories import SQLAlchemyAuthRepository
from gatehouse.infrastructure.services.email_service import EmailService

logger = get_logger(__name__)


def get_token_service(
    config: Annotated[AuthConfig, Depends(get_auth_config)],
) -> JWTService:
    """Build the access token issuer for the active configuration."""
    return JWTService.from_config(config)


@lru_cache
def get_email_service() -> EmailService:
    """Get the process-wide email service for the configured backend."""
    return EmailService.from_settings(get_settings())


async def get_auth_service(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    config: Annotated[AuthConfig, Depends(get_auth_config)],
    token_service: Annotated[JWTService, Depends(get_token_service)],
    email_service: Annotated[EmailService, Depends(get_email_service)],
) -> AuthService:
    """Build an auth service bound to the request's database session."""
    return AuthService(
        repository=SQLAlchemyAuthRepository(session),
        token_service=token_service,
        email_service=email_service,
        config=config,
    )


async def get_current_session(
    token_service: Annotated[JWTService, Depends(get_token_service)],
    authorization: Annotated[str | None, Header()] = None,
) -> AccessTokenPayload:
    """Validate the bearer access token from the Authorization header.

    Validation is stateless: signature, expiry, issuer and audience only.

    Returns:
        AccessTokenPayload: The decoded claims.

    Raises:
        UnauthorizedError: If the token is missing, malformed or expired.
    """
    if not authorization:
        logger.info("Authentication failed: missing Authorization header")
        raise UnauthorizedError("Missing authentication token")

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        logger.info("Authentication failed: invalid Authorization header format")
        raise UnauthorizedError("Missing authentication token")

    try:
        return token_service.decode_access_token(parts[1])
    except TokenExpiredError:
        logger.info("Authentication failed: token expired")
        raise UnauthorizedError("Invalid token")
    except InvalidTokenError as e:
        logger.info("Authentication failed: invalid token", error=str(e))
        raise UnauthorizedError("Invalid token")


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
CurrentSession = Annotated[AccessTokenPayload, Depends(get_current_session)]
