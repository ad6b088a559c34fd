"""Credential hashing using Argon2id and SHA-256.

Passwords are stored as Argon2id hashes (memory-hard, salted). Opaque
bearer tokens already carry 256 bits of entropy, so they are stored as a
fast SHA-256 digest that still keeps raw tokens out of the database.
"""

import hashlib
import secrets

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

# Argon2id with m=65536 KiB, t=3, p=4 (argon2-cffi defaults)
_hasher = PasswordHasher()

# Verified whenever no real hash is available (unknown user, deleted user,
# unknown email on forgot-password) so those paths cost the same as a real
# verification. Parameters match _hasher.
DUMMY_PASSWORD_HASH = (
    "$argon2id$v=19$m=65536,t=3,p=4$eprA2z2fyrvIF8a5ZMzbSg$"
    "/XUlFrh99IiT3TZRtL/0deGSKGIxKVB7GeEvM0a81GA"
)

OPAQUE_TOKEN_BYTES = 32


def hash_password(password: str) -> str:
    """Hash a password using Argon2id.

    Args:
        password: The plaintext password to hash.

    Returns:
        The encoded Argon2id hash.

    Example:
        >>> hashed = hash_password("SecureP@ss123!")
        >>> hashed.startswith("$argon2id$")
        True
    """
    return _hasher.hash(password)


def verify_password(password: str, hashed: str | None) -> bool:
    """Verify a password against a hash.

    Returns False on mismatch and on a missing, malformed or foreign-format
    hash. Argon2 performs the comparison in constant time.

    Args:
        password: The plaintext password to verify.
        hashed: The stored hash.

    Returns:
        True if the password matches, False otherwise.

    Example:
        >>> hashed = hash_password("SecureP@ss123!")
        >>> verify_password("SecureP@ss123!", hashed)
        True
        >>> verify_password("wrong", hashed)
        False
        >>> verify_password("wrong", "$2b$12$not-an-argon2-hash")
        False
    """
    if not hashed:
        return False
    try:
        return _hasher.verify(hashed, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def hash_token(token: str) -> str:
    """Hash an opaque token using SHA-256.

    Args:
        token: The raw token string.

    Returns:
        SHA-256 hex digest of the token.
    """
    return hashlib.sha256(token.encode()).hexdigest()


def generate_opaque_token() -> str:
    """Generate a URL-safe random token with 256 bits of entropy."""
    return secrets.token_urlsafe(OPAQUE_TOKEN_BYTES)
