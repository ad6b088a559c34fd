"""Unit tests for JWTService."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from gatehouse.core.config import AuthConfig
from gatehouse.infrastructure.auth.jwt_service import (
    InvalidTokenError,
    JWTError,
    JWTService,
    TokenExpiredError,
)

SECRET_KEY = "jwt-test-secret"


@pytest.fixture
def jwt_service() -> JWTService:
    return JWTService(
        secret_key=SECRET_KEY,
        issuer="gatehouse",
        audience="gatehouse-clients",
        access_token_expire_minutes=15,
    )


class TestJWTService:
    def test_create_access_token_claims(self, jwt_service):
        token = jwt_service.create_access_token(user_id=1, session_id=42)

        decoded = jwt.decode(
            token, SECRET_KEY, algorithms=["HS256"], audience="gatehouse-clients"
        )

        assert decoded["userId"] == 1
        assert decoded["sessionId"] == 42
        assert decoded["role"] == "user"
        assert decoded["iss"] == "gatehouse"
        assert decoded["aud"] == "gatehouse-clients"
        assert decoded["exp"] - decoded["iat"] == 15 * 60
        assert len(token.split(".")) == 3

    def test_decode_access_token(self, jwt_service):
        token = jwt_service.create_access_token(user_id=7, session_id=3)

        payload = jwt_service.decode_access_token(token)

        assert payload.user_id == 7
        assert payload.session_id == 3
        assert payload.role == "user"
        assert payload.iss == "gatehouse"
        assert payload.aud == "gatehouse-clients"

    def test_expired_token(self, jwt_service):
        token = jwt_service.create_access_token(
            user_id=1, session_id=1, expires_delta=timedelta(seconds=-10)
        )

        with pytest.raises(TokenExpiredError):
            jwt_service.decode_access_token(token)

    def test_wrong_secret(self, jwt_service):
        other = JWTService("another-secret", "gatehouse", "gatehouse-clients")
        token = other.create_access_token(user_id=1, session_id=1)

        with pytest.raises(InvalidTokenError):
            jwt_service.decode_access_token(token)

    @pytest.mark.parametrize(
        ("issuer", "audience"),
        [("someone-else", "gatehouse-clients"), ("gatehouse", "other-clients")],
    )
    def test_wrong_issuer_or_audience(self, jwt_service, issuer, audience):
        other = JWTService(SECRET_KEY, issuer, audience)
        token = other.create_access_token(user_id=1, session_id=1)

        with pytest.raises(InvalidTokenError):
            jwt_service.decode_access_token(token)

    def test_missing_session_claim(self, jwt_service):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {
                "userId": 1,
                "iss": "gatehouse",
                "aud": "gatehouse-clients",
                "iat": now,
                "exp": now + timedelta(minutes=5),
            },
            SECRET_KEY,
            algorithm="HS256",
        )

        with pytest.raises(InvalidTokenError):
            jwt_service.decode_access_token(token)

    def test_garbage_token(self, jwt_service):
        with pytest.raises(JWTError):
            jwt_service.decode_access_token("not.a.token")

    def test_refresh_tokens_are_opaque_and_unique(self, jwt_service):
        first = jwt_service.create_refresh_token()
        second = jwt_service.create_refresh_token()

        assert first != second
        assert "." not in first

    def test_empty_secret_rejected(self):
        with pytest.raises(ValueError):
            JWTService("", "gatehouse", "gatehouse-clients")

    def test_from_config(self):
        service = JWTService.from_config(
            AuthConfig(secret_key=SECRET_KEY, access_token_expire_minutes=5)
        )

        assert service.get_expires_in() == 300
        assert service.issuer == "gatehouse"
        assert service.audience == "gatehouse-clients"
