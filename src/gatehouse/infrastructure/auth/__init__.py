"""Authentication infrastructure components.

This module provides password and token hashing and the JWT access token
service.
"""

from gatehouse.infrastructure.auth.jwt_service import (
    InvalidTokenError,
    JWTError,
    JWTService,
    TokenExpiredError,
)
from gatehouse.infrastructure.auth.password_hasher import (
    DUMMY_PASSWORD_HASH,
    generate_opaque_token,
    hash_password,
    hash_token,
    verify_password,
)

__all__ = [
    "DUMMY_PASSWORD_HASH",
    "InvalidTokenError",
    "JWTError",
    "JWTService",
    "TokenExpiredError",
    "generate_opaque_token",
    "hash_password",
    "hash_token",
    "verify_password",
]
