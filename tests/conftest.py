"""Pytest configuration for all tests."""

import re
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from gatehouse.core.config import AuthConfig
from gatehouse.infrastructure.persistence import models  # noqa: F401
from gatehouse.infrastructure.persistence.database import Base
from gatehouse.infrastructure.services.email.console_provider import ConsoleProvider
from gatehouse.infrastructure.services.email_service import EmailService

TEST_SECRET_KEY = "test-secret-key-for-gatehouse-tests"
TEST_APP_URL = "http://app.test"
TOKEN_LINK = re.compile(r"\?token=([A-Za-z0-9_\-]+)")


@pytest.fixture
def auth_config() -> AuthConfig:
    """Auth configuration with a small lockout threshold."""
    return AuthConfig(
        secret_key=TEST_SECRET_KEY,
        max_login_attempts=3,
        lock_duration_minutes=15,
        app_url=TEST_APP_URL,
    )


@pytest.fixture
def mail_outbox() -> ConsoleProvider:
    """Console provider whose ``sent`` list collects outgoing mail."""
    return ConsoleProvider()


@pytest.fixture
def email_service(mail_outbox: ConsoleProvider) -> EmailService:
    return EmailService(provider=mail_outbox, from_email="noreply@app.test", from_name="Test")


@pytest.fixture
def mail_token(mail_outbox: ConsoleProvider):
    """Return a helper extracting the raw token from the latest mail with a subject."""

    def _find(subject: str) -> str:
        for message in reversed(mail_outbox.sent):
            if message["subject"] == subject:
                match = TOKEN_LINK.search(message["body"])
                assert match is not None, message["body"]
                return match.group(1)
        raise AssertionError(f"No mail with subject {subject!r}")

    return _find


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session.

    Uses an in-memory SQLite database for testing.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with session_factory() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession,
    auth_config: AuthConfig,
    email_service: EmailService,
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with overridden database, config and mail dependencies."""
    from gatehouse.core.config import get_auth_config
    from gatehouse.infrastructure.api.app import app
    from gatehouse.infrastructure.api.dependencies import get_email_service
    from gatehouse.infrastructure.persistence.database import get_db_session

    app.dependency_overrides[get_db_session] = lambda: db_session
    app.dependency_overrides[get_auth_config] = lambda: auth_config
    app.dependency_overrides[get_email_service] = lambda: email_service

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides = {}
