"""Email service for sending account notifications.

Wraps an ``EmailProvider`` with the configured sender identity. Delivery is
best effort: failures are logged and reported as ``False`` so that a mail
outage never fails the operation that triggered the email.
"""

from gatehouse.core.config import Settings
from gatehouse.core.logging import get_logger
from gatehouse.infrastructure.services.email.console_provider import ConsoleProvider
from gatehouse.infrastructure.services.email.email_provider import EmailProvider
from gatehouse.infrastructure.services.email.smtp_provider import SMTPProvider, SMTPSettings

logger = get_logger(__name__)


class EmailService:
    """Service for sending emails."""

    def __init__(
        self,
        provider: EmailProvider,
        from_email: str = "noreply@example.com",
        from_name: str = "No Reply",
    ) -> None:
        """Initialize the email service.

        Args:
            provider: Transport used to deliver messages.
            from_email: Sender email address.
            from_name: Sender display name.
        """
        self.provider = provider
        self.from_email = from_email
        self.from_name = from_name

    @classmethod
    def from_settings(cls, settings: Settings) -> "EmailService":
        """Build the service for the configured mail backend."""
        provider: EmailProvider
        if settings.mail_backend == "smtp":
            provider = SMTPProvider(SMTPSettings.from_settings(settings))
        else:
            provider = ConsoleProvider()
        return cls(
            provider=provider,
            from_email=settings.mail_from_email,
            from_name=settings.mail_from_name,
        )

    async def send_email(self, to: str, subject: str, body: str) -> bool:
        """Send a plain text email.

        Args:
            to: Recipient email address.
            subject: Email subject line.
            body: Plain text body.

        Returns:
            True if the provider accepted the message, False otherwise.
        """
        try:
            sent = await self.provider.send_email(
                to=to,
                subject=subject,
                text_body=body,
                from_email=self.from_email,
                from_name=self.from_name,
            )
        except Exception as e:
            logger.error(
                "Email delivery failed",
                subject=subject,
                provider=type(self.provider).__name__,
                error=str(e),
            )
            return False

        if not sent:
            logger.warning(
                "Email provider rejected message",
                subject=subject,
                provider=type(self.provider).__name__,
            )
        return sent
