"""Typed failures raised by the authentication domain.

Every business-rule violation is an ``AuthError`` subclass carrying an
``ErrorKind``. The API layer maps kinds to HTTP status codes; the messages
on authentication paths are fixed so they never reveal whether an account
exists.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Failure categories surfaced to callers."""

    CONFLICT = "conflict"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    VALIDATION = "validation"


class AuthError(Exception):
    """Base class for authentication business-rule failures."""

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, message={self.message!r})"


class ConflictError(AuthError):
    """Raised when a resource already exists (e.g. duplicate email)."""

    kind = ErrorKind.CONFLICT


class UnauthorizedError(AuthError):
    """Raised for bad credentials and invalid, expired or revoked tokens."""

    kind = ErrorKind.UNAUTHORIZED


class ForbiddenError(AuthError):
    """Raised when an account is inactive or locked."""

    kind = ErrorKind.FORBIDDEN


class NotFoundError(AuthError):
    """Raised for unknown one-time tokens and unknown profiles."""

    kind = ErrorKind.NOT_FOUND


class ValidationError(AuthError):
    """Raised for used or expired one-time tokens."""

    kind = ErrorKind.VALIDATION


class DuplicateEmailError(Exception):
    """Raised by repositories when the email unique constraint is violated."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"Email already registered: {email}")
