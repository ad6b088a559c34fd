"""Unit tests for EmailService and its providers."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from gatehouse.core.config import Settings
from gatehouse.infrastructure.services.email import (
    ConsoleProvider,
    EmailProvider,
    SMTPProvider,
    SMTPSettings,
)
from gatehouse.infrastructure.services.email_service import EmailService


@pytest.fixture
def mock_provider():
    """Mock email provider."""
    provider = AsyncMock(spec=EmailProvider)
    provider.send_email.return_value = True
    return provider


class TestEmailService:
    @pytest.mark.asyncio
    async def test_send_email_uses_sender_identity(self, mock_provider):
        service = EmailService(mock_provider, from_email="auth@app.test", from_name="Auth")

        sent = await service.send_email("alice@example.com", "Subject", "Body")

        assert sent is True
        mock_provider.send_email.assert_awaited_once_with(
            to="alice@example.com",
            subject="Subject",
            text_body="Body",
            from_email="auth@app.test",
            from_name="Auth",
        )

    @pytest.mark.asyncio
    async def test_send_email_swallows_provider_errors(self, mock_provider):
        mock_provider.send_email.side_effect = ConnectionError("smtp down")
        service = EmailService(mock_provider)

        assert await service.send_email("alice@example.com", "Subject", "Body") is False

    @pytest.mark.asyncio
    async def test_send_email_reports_rejection(self, mock_provider):
        mock_provider.send_email.return_value = False
        service = EmailService(mock_provider)

        assert await service.send_email("alice@example.com", "Subject", "Body") is False

    def test_from_settings_console_backend(self):
        service = EmailService.from_settings(
            Settings(mail_backend="console", mail_from_email="a@app.test", mail_from_name="A")
        )

        assert isinstance(service.provider, ConsoleProvider)
        assert service.from_email == "a@app.test"
        assert service.from_name == "A"

    def test_from_settings_smtp_backend(self):
        service = EmailService.from_settings(
            Settings(mail_backend="smtp", smtp_host="mail.app.test", smtp_port=2525)
        )

        assert isinstance(service.provider, SMTPProvider)
        assert service.provider.settings.host == "mail.app.test"
        assert service.provider.settings.port == 2525


class TestConsoleProvider:
    @pytest.mark.asyncio
    async def test_records_sent_messages(self):
        provider = ConsoleProvider()

        sent = await provider.send_email("bob@example.com", "Hi", "Body", "a@app.test", "A")

        assert sent is True
        assert provider.sent == [{"to": "bob@example.com", "subject": "Hi", "body": "Body"}]


class TestSMTPProvider:
    @pytest.mark.asyncio
    async def test_send_email_builds_plain_text_message(self):
        provider = SMTPProvider(SMTPSettings(host="mail.app.test", port=25, use_tls=False))
        smtp = AsyncMock()
        client = MagicMock()
        client.__aenter__ = AsyncMock(return_value=smtp)
        client.__aexit__ = AsyncMock(return_value=False)

        with patch("aiosmtplib.SMTP", return_value=client):
            sent = await provider.send_email(
                "bob@example.com", "Hello", "Plain body", "a@app.test", "Auth"
            )

        assert sent is True
        smtp.login.assert_not_awaited()
        message = smtp.send_message.await_args.args[0]
        assert message["To"] == "bob@example.com"
        assert message["From"] == "Auth <a@app.test>"
        assert message["Subject"] == "Hello"
        assert message.get_content().strip() == "Plain body"

    @pytest.mark.asyncio
    async def test_send_email_logs_in_with_credentials(self):
        provider = SMTPProvider(
            SMTPSettings(host="mail.app.test", username="user", password="pass")
        )
        smtp = AsyncMock()
        client = MagicMock()
        client.__aenter__ = AsyncMock(return_value=smtp)
        client.__aexit__ = AsyncMock(return_value=False)

        with patch("aiosmtplib.SMTP", return_value=client):
            await provider.send_email("bob@example.com", "Hello", "Body", "a@app.test", "Auth")

        smtp.login.assert_awaited_once_with("user", "pass")
