"""Console email provider for development and testing.

Writes outgoing mail to the structured log instead of delivering it.
"""

from gatehouse.core.logging import get_logger
from gatehouse.infrastructure.services.email.email_provider import EmailProvider

logger = get_logger(__name__)


class ConsoleProvider(EmailProvider):
    """Email provider that logs messages instead of sending them."""

    def __init__(self) -> None:
        self.sent: list[dict[str, str]] = []

    async def send_email(
        self,
        to: str,
        subject: str,
        text_body: str,
        from_email: str,
        from_name: str,
    ) -> bool:
        self.sent.append({"to": to, "subject": subject, "body": text_body})
        logger.info(
            f"[EMAIL] {subject}\n"
            f"From: {from_name} <{from_email}>\n"
            f"To: {to}\n"
            f"Body:\n{text_body}\n"
            f"{'=' * 80}"
        )
        return True
