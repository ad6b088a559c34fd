"""Transport interface behind the mail notifier."""

from abc import ABC, abstractmethod


class EmailProvider(ABC):
    """Delivers one plain text message.

    Implementations raise on delivery failure; ``EmailService`` turns that
    into a logged ``False``.
    """

    @abstractmethod
    async def send_email(
        self,
        to: str,
        subject: str,
        text_body: str,
        from_email: str,
        from_name: str,
    ) -> bool:
        """Send ``text_body`` to ``to`` from ``from_name <from_email>``."""
