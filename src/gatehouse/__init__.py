"""Gatehouse - user registration, authentication and session management.

Argon2id password storage, short-lived JWT access tokens paired with
rotating opaque refresh tokens, account lockout and one-time email
verification / password reset tokens.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
