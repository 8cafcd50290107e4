"""SendGrid v3 Mail Send integration over httpx.

SECURITY: The API key is never logged. Only status codes and exception
info are recorded on failure.
"""

from __future__ import annotations

import httpx
import structlog

from vinrelay.integrations.mailer import Mailer
from vinrelay.relay.message import OutboundEmail

logger = structlog.get_logger()

SENDGRID_API_URL = "https://api.sendgrid.com/v3/mail/send"
_MAX_ERROR_BODY = 500


class SendGridMailer(Mailer):
    """Sends plain-text email through the SendGrid Mail Send API.

    Args:
        api_key: SendGrid API key. Treated as a secret.
        api_url: Mail Send endpoint (default: production).
        timeout: HTTP timeout in seconds, or None for no client-side timeout.
    """

    def __init__(
        self,
        api_key: str,
        api_url: str = SENDGRID_API_URL,
        timeout: float | None = None,
    ) -> None:
        self._api_key = api_key
        self._api_url = api_url
        self._timeout = timeout

    async def send(self, email: OutboundEmail) -> bool:
        """Send the message. Failures are logged and reported as False."""
        return await self._post(self._build_payload(email))

    def _build_payload(self, email: OutboundEmail) -> dict:
        """Build a Mail Send v3 request body."""
        return {
            "personalizations": [{"to": [{"email": email.to}]}],
            "from": {"email": email.from_},
            "subject": email.subject,
            "content": [{"type": "text/plain", "value": email.text}],
        }

    async def _post(self, payload: dict) -> bool:
        """POST the payload to the Mail Send endpoint."""
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(
                    self._api_url,
                    json=payload,
                    headers={"Authorization": f"Bearer {self._api_key}"},
                )
                response.raise_for_status()

            await logger.ainfo(
                "sendgrid_mail_sent",
                status_code=response.status_code,
                message_id=response.headers.get("X-Message-Id"),
            )
            return True

        except httpx.HTTPStatusError as exc:
            await logger.aerror(
                "sendgrid_mail_http_error",
                status_code=exc.response.status_code,
                response_body=exc.response.text[:_MAX_ERROR_BODY],
            )
            return False

        except httpx.RequestError:
            await logger.aerror(
                "sendgrid_mail_request_error",
                exc_info=True,
            )
            return False
