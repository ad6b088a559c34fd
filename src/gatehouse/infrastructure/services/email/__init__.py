"""Email delivery providers."""

from gatehouse.infrastructure.services.email.console_provider import ConsoleProvider
from gatehouse.infrastructure.services.email.email_provider import EmailProvider
from gatehouse.infrastructure.services.email.smtp_provider import SMTPProvider, SMTPSettings

__all__ = ["ConsoleProvider", "EmailProvider", "SMTPProvider", "SMTPSettings"]
