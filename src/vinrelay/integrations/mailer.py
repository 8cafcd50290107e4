"""Abstract mail backend and factory.

The relay treats the provider as a black box: one call, success or failure,
no retry and no delivery confirmation beyond the immediate result.
"""

from __future__ import annotations

import abc

from vinrelay.config import Settings
from vinrelay.relay.message import OutboundEmail


class Mailer(abc.ABC):
    """Abstract base for email-sending backends."""

    @abc.abstractmethod
    async def send(self, email: OutboundEmail) -> bool:
        """Send one message.

        Args:
            email: The composed message.

        Returns:
            True if the provider accepted the message, False otherwise.
        """


def create_mailer(settings: Settings) -> Mailer | None:
    """Factory — build the configured mail backend.

    Returns None when the API key or sender address is missing; the relay
    then answers submissions with a configuration error.
    """
    from vinrelay.integrations.sendgrid import SendGridMailer

    if not settings.mail_configured:
        return None

    return SendGridMailer(
        api_key=settings.sendgrid_api_key or "",
        api_url=settings.sendgrid_api_url,
        timeout=settings.mail_timeout_seconds,
    )
