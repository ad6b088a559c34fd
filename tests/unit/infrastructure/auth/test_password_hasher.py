"""Unit tests for password and token hashing utilities."""

import re

from gatehouse.infrastructure.auth.password_hasher import (
    DUMMY_PASSWORD_HASH,
    generate_opaque_token,
    hash_password,
    hash_token,
    verify_password,
)


class TestHashPassword:
    """Tests for hash_password function."""

    def test_hash_password_returns_argon2id_hash(self):
        hashed = hash_password("CorrectHorseBattery1!")

        assert hashed.startswith("$argon2id$v=19$m=65536,t=3,p=4$")

    def test_hash_password_different_for_same_input(self):
        """Hashing the same password twice produces different hashes (salt)."""
        assert hash_password("SecureP@ss123!") != hash_password("SecureP@ss123!")


class TestVerifyPassword:
    """Tests for verify_password function."""

    def test_verify_password_correct(self):
        hashed = hash_password("CorrectHorseBattery1!")

        assert verify_password("CorrectHorseBattery1!", hashed) is True

    def test_verify_password_incorrect(self):
        hashed = hash_password("CorrectHorseBattery1!")

        assert verify_password("correcthorsebattery1!", hashed) is False
        assert verify_password("", hashed) is False

    def test_verify_password_malformed_hash(self):
        """Malformed or foreign-format hashes return False without raising."""
        assert verify_password("password", "not-a-hash") is False
        assert verify_password("password", "$2b$12$R9h/cIPz0gi.URNNX3kh2OPST9/PgBkqquzi.Ss7KIUgO2t0jWMUW") is False
        assert verify_password("password", "$argon2id$v=19$m=65536,t=3,p=4$broken") is False

    def test_verify_password_missing_hash(self):
        assert verify_password("password", None) is False
        assert verify_password("password", "") is False


class TestDummyHash:
    def test_dummy_hash_is_well_formed_and_current(self):
        """The dummy hash costs the same as a real one and never matches."""
        assert DUMMY_PASSWORD_HASH.startswith("$argon2id$v=19$m=65536,t=3,p=4$")
        assert verify_password("password", DUMMY_PASSWORD_HASH) is False


class TestOpaqueTokens:
    def test_generate_opaque_token_is_url_safe_and_unique(self):
        tokens = {generate_opaque_token() for _ in range(20)}

        assert len(tokens) == 20
        for token in tokens:
            assert re.fullmatch(r"[A-Za-z0-9_\-]{43}", token)

    def test_hash_token_is_sha256_hex(self):
        digest = hash_token("abc")

        assert digest == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
        assert hash_token("abc") == digest
        assert hash_token("abd") != digest
