"""End-to-end authentication flows through the HTTP API."""

import jwt
import pytest
from httpx import AsyncClient
from sqlalchemy import select

from gatehouse.infrastructure.persistence.models import UserModel

AUTH = "/api/v1/auth"
ALICE = {"name": "Alice", "email": "alice@example.com", "password": "CorrectHorseBattery1!"}

pytestmark = pytest.mark.integration


async def register(client: AsyncClient, **overrides) -> dict:
    res = await client.post(f"{AUTH}/register", json={**ALICE, **overrides})
    assert res.status_code == 201, res.text
    return res.json()


async def login(client: AsyncClient, password: str = ALICE["password"], email: str = ALICE["email"]):
    return await client.post(f"{AUTH}/login", json={"email": email, "password": password})


def bearer(access_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {access_token}"}


@pytest.mark.asyncio
async def test_alice_scenario(client: AsyncClient, db_session, auth_config):
    """Register, log in, fail once, then rotate the refresh token."""
    body = await register(client)
    assert body["message"].startswith("Registration successful")
    assert body["user"]["email"] == "alice@example.com"

    res = await login(client)
    assert res.status_code == 200
    tokens = res.json()
    assert isinstance(tokens["accessToken"], str) and tokens["accessToken"]
    assert isinstance(tokens["refreshToken"], str) and tokens["refreshToken"]

    claims = jwt.decode(
        tokens["accessToken"],
        auth_config.secret_key,
        algorithms=["HS256"],
        audience=auth_config.audience,
    )
    assert claims["role"] == "user"
    assert claims["userId"] == body["user"]["id"]

    res = await login(client, password="WrongPassword1!")
    assert res.status_code == 401
    assert res.json()["message"] == "Invalid credentials"
    user = (
        await db_session.execute(select(UserModel).where(UserModel.email == ALICE["email"]))
    ).scalar_one()
    assert user.failed_login_attempts == 1

    res = await client.post(f"{AUTH}/refresh", json={"refreshToken": tokens["refreshToken"]})
    assert res.status_code == 200
    rotated = res.json()
    assert rotated["refreshToken"] != tokens["refreshToken"]

    res = await client.post(f"{AUTH}/refresh", json={"refreshToken": tokens["refreshToken"]})
    assert res.status_code == 401
    assert res.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_register_normalizes_email_and_rejects_duplicates(client: AsyncClient):
    first = await register(client, email="  Alice@Example.COM ")
    assert first["user"]["email"] == "alice@example.com"

    res = await client.post(f"{AUTH}/register", json={**ALICE, "name": "Impostor"})
    assert res.status_code == 409
    assert res.json() == {
        "error": "Conflict",
        "code": "conflict",
        "message": "Email already registered",
    }

    tokens = (await login(client)).json()
    profile = (await client.get(f"{AUTH}/me", headers=bearer(tokens["accessToken"]))).json()
    assert profile["name"] == "Alice"


@pytest.mark.asyncio
async def test_register_validates_input(client: AsyncClient):
    res = await client.post(
        f"{AUTH}/register", json={"name": "A", "email": "alice@example.com", "password": "short"}
    )
    assert res.status_code == 422

    res = await client.post(f"{AUTH}/register", json={**ALICE, "email": "not-an-email"})
    assert res.status_code == 422


@pytest.mark.asyncio
async def test_lockout_after_max_attempts(client: AsyncClient, auth_config):
    await register(client)

    for _ in range(auth_config.max_login_attempts):
        res = await login(client, password="WrongPassword1!")
        assert res.status_code == 401

    res = await login(client)
    assert res.status_code == 403
    assert res.json()["code"] == "forbidden"
    assert res.json()["message"].startswith("Account locked until ")


@pytest.mark.asyncio
async def test_unknown_user_gets_generic_error(client: AsyncClient):
    res = await login(client, email="nobody@example.com")

    assert res.status_code == 401
    assert res.json()["message"] == "Invalid credentials"


@pytest.mark.asyncio
async def test_me_and_logout(client: AsyncClient):
    await register(client)
    tokens = (await login(client)).json()

    res = await client.get(f"{AUTH}/me", headers=bearer(tokens["accessToken"]))
    assert res.status_code == 200
    profile = res.json()
    assert profile["email"] == "alice@example.com"
    assert profile["email_verified_at"] is None
    assert "password_hash" not in profile

    res = await client.post(f"{AUTH}/logout", headers=bearer(tokens["accessToken"]))
    assert res.status_code == 200
    assert res.json() == {"message": "Logged out"}

    # Logout is idempotent
    res = await client.post(f"{AUTH}/logout", headers=bearer(tokens["accessToken"]))
    assert res.status_code == 200

    res = await client.post(f"{AUTH}/refresh", json={"refreshToken": tokens["refreshToken"]})
    assert res.status_code == 401


@pytest.mark.asyncio
async def test_protected_routes_require_bearer_token(client: AsyncClient):
    res = await client.get(f"{AUTH}/me")
    assert res.status_code == 401
    assert res.json()["message"] == "Missing authentication token"

    res = await client.get(f"{AUTH}/me", headers=bearer("not-a-jwt"))
    assert res.status_code == 401
    assert res.json()["message"] == "Invalid token"


@pytest.mark.asyncio
async def test_verify_email_is_single_use(client: AsyncClient, mail_token):
    await register(client)
    token = mail_token("Verify your email")

    res = await client.post(f"{AUTH}/verify-email", json={"token": token})
    assert res.status_code == 200

    tokens = (await login(client)).json()
    profile = (await client.get(f"{AUTH}/me", headers=bearer(tokens["accessToken"]))).json()
    assert profile["email_verified_at"] is not None

    res = await client.post(f"{AUTH}/verify-email", json={"token": token})
    assert res.status_code == 400
    assert res.json()["message"] == "Token already used"

    res = await client.post(f"{AUTH}/verify-email", json={"token": "unknown-token"})
    assert res.status_code == 404


@pytest.mark.asyncio
async def test_reset_password_revokes_sessions(client: AsyncClient, mail_token, mail_outbox):
    await register(client)
    first = (await login(client)).json()
    second = (await login(client)).json()

    res = await client.post(f"{AUTH}/forgot-password", json={"email": "ALICE@example.com"})
    assert res.status_code == 200
    token = mail_token("Reset your password")

    res = await client.post(
        f"{AUTH}/reset-password", json={"token": token, "password": "NewCorrectHorse2!"}
    )
    assert res.status_code == 200
    assert mail_outbox.sent[-1]["subject"] == "Password Changed"

    for tokens in (first, second):
        res = await client.post(f"{AUTH}/refresh", json={"refreshToken": tokens["refreshToken"]})
        assert res.status_code == 401

    assert (await login(client)).status_code == 401
    assert (await login(client, password="NewCorrectHorse2!")).status_code == 200

    res = await client.post(
        f"{AUTH}/reset-password", json={"token": token, "password": "AnotherPass3!"}
    )
    assert res.status_code == 400
    assert res.json()["message"] == "Invalid or expired reset token"


@pytest.mark.asyncio
async def test_forgot_password_unknown_email_looks_the_same(client: AsyncClient, mail_outbox):
    await register(client)
    known = await client.post(f"{AUTH}/forgot-password", json={"email": ALICE["email"]})
    unknown = await client.post(f"{AUTH}/forgot-password", json={"email": "nobody@example.com"})

    assert known.status_code == unknown.status_code == 200
    assert known.json() == unknown.json()
    assert [m["to"] for m in mail_outbox.sent if m["subject"] == "Reset your password"] == [
        ALICE["email"]
    ]


@pytest.mark.asyncio
async def test_reset_password_unknown_token(client: AsyncClient):
    res = await client.post(
        f"{AUTH}/reset-password", json={"token": "missing", "password": "NewCorrectHorse2!"}
    )

    assert res.status_code == 404


@pytest.mark.asyncio
async def test_health_and_correlation_id(client: AsyncClient):
    res = await client.get("/health", headers={"X-Correlation-ID": "cid_test"})

    assert res.status_code == 200
    assert res.json()["status"] == "healthy"
    assert res.headers["X-Correlation-ID"] == "cid_test"
