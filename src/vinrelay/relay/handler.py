"""Relay handler — turns one request into exactly one outcome.

Steps, terminal at the first failure:
    1. Method (OPTIONS → preflight, anything but POST → 405)
    2. Origin allow-list → 403
    3. Rate limit by client IP → 429
    4. Body parse → 400 (empty / invalid JSON)
    5. Honeypot → 429, same shape as a real rate limit
    6. VIN format → 400
    7. Mail configuration → 500 with presence hint
    8. Compose the plain-text message
    9. Send once, no retry → 200 or 500

The handler is framework-agnostic: it receives the method, raw body and a
RequestContext, and returns a RelayOutcome the web layer renders.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field

import structlog
from pydantic import ValidationError

from vinrelay.config import Settings
from vinrelay.errors import (
    ConfigurationError,
    DownstreamError,
    EmptyBody,
    ForbiddenOrigin,
    InvalidJSON,
    InvalidVIN,
    MethodNotAllowed,
    RateLimited,
    RelayError,
)
from vinrelay.integrations.mailer import Mailer
from vinrelay.observability.metrics import observe_mail_latency, record_outcome, update_rate_limit_keys
from vinrelay.relay.context import RequestContext
from vinrelay.relay.message import build_email
from vinrelay.relay.rate_limit import FixedWindowRateLimiter
from vinrelay.relay.schemas import RelayResponse, SubmissionPayload
from vinrelay.relay.validators import is_honeypot_tripped, is_origin_allowed, is_valid_vin

logger = structlog.get_logger()

ALLOWED_METHODS = "POST, OPTIONS"
PREFLIGHT_MAX_AGE = "86400"


@dataclass
class RelayOutcome:
    """Status, JSON body (None for preflight) and extra response headers."""

    status_code: int
    body: dict[str, object] | None
    headers: dict[str, str] = field(default_factory=dict)
    outcome: str = "sent"


class RelayHandler:
    """Validates, filters and forwards VIN submissions.

    Args:
        settings: Application settings (origins, mail addresses).
        limiter: Process-wide rate-limit table.
        mailer: Mail backend, or None when mail is not configured.
    """

    def __init__(
        self,
        settings: Settings,
        limiter: FixedWindowRateLimiter,
        mailer: Mailer | None,
    ) -> None:
        self._settings = settings
        self._limiter = limiter
        self._mailer = mailer
        self._allowed_origins = settings.allowed_origins_list

    async def handle(self, method: str, body: bytes | str | None, context: RequestContext) -> RelayOutcome:
        """Process one request. Never raises."""
        try:
            outcome = await self._process(method.upper(), body, context)
        except RelayError as exc:
            outcome = self._error_outcome(exc, context)
        except Exception:
            await logger.aerror(
                "relay_unhandled_exception",
                client_ip=context.client_ip,
                exc_info=True,
            )
            outcome = self._error_outcome(RelayError(), context)

        outcome.headers.setdefault("X-Request-ID", context.request_id)
        record_outcome(outcome.outcome)
        await self._log_outcome(outcome, context)
        return outcome

    async def _process(self, method: str, body: bytes | str | None, context: RequestContext) -> RelayOutcome:
        # 1. Method
        if method == "OPTIONS":
            return self._preflight(context)
        if method != "POST":
            raise MethodNotAllowed()

        # 2. Origin
        if not is_origin_allowed(self._allowed_origins, context.origin):
            raise ForbiddenOrigin()

        # 3. Rate limit
        allowed = self._limiter.allow(context.client_ip)
        update_rate_limit_keys(len(self._limiter))
        if not allowed:
            raise RateLimited()

        # 4. Body
        payload = self._parse_body(body)

        # 5. Honeypot
        if is_honeypot_tripped(payload):
            await logger.awarning(
                "relay_honeypot_triggered",
                client_ip=context.client_ip,
                user_agent=context.user_agent,
            )
            raise RateLimited(outcome="honeypot")

        # 6. VIN
        if not is_valid_vin(payload.vin):
            raise InvalidVIN()

        # 7. Configuration
        if not self._settings.mail_configured or self._mailer is None:
            hint = self._settings.mail_config_hint()
            await logger.aerror("relay_configuration_missing", **hint)
            raise ConfigurationError(hint)

        # 8. Compose
        email = build_email(
            payload,
            context.client_ip,
            context.user_agent,
            to=self._settings.to_email,
            from_=self._settings.from_email or "",
            subject=self._settings.mail_subject,
        )

        # 9. Send
        started = time.perf_counter()
        try:
            sent = await self._mailer.send(email)
        except Exception as exc:
            await logger.aerror(
                "relay_mail_exception",
                error_type=type(exc).__name__,
                exc_info=True,
            )
            raise DownstreamError() from exc
        finally:
            observe_mail_latency(time.perf_counter() - started)

        if not sent:
            raise DownstreamError()

        return RelayOutcome(
            status_code=200,
            body=RelayResponse(ok=True, request_id=context.request_id).to_body(),
            headers=self._cors_headers(context),
        )

    @staticmethod
    def _parse_body(body: bytes | str | None) -> SubmissionPayload:
        """Parse the body strictly; anything but a well-typed JSON object fails closed."""
        if body is None or not body.strip():
            raise EmptyBody()
        try:
            return SubmissionPayload.model_validate_json(body)
        except ValidationError as exc:
            raise InvalidJSON() from exc

    def _preflight(self, context: RequestContext) -> RelayOutcome:
        return RelayOutcome(
            status_code=204,
            body=None,
            headers={
                "Access-Control-Allow-Origin": context.origin or "*",
                "Access-Control-Allow-Methods": ALLOWED_METHODS,
                "Access-Control-Allow-Headers": "Content-Type",
                "Access-Control-Max-Age": PREFLIGHT_MAX_AGE,
                "Vary": "Origin",
            },
            outcome="preflight",
        )

    def _cors_headers(self, context: RequestContext) -> dict[str, str]:
        """Echo the origin on responses to callers that passed the origin check."""
        if context.origin and is_origin_allowed(self._allowed_origins, context.origin):
            return {"Access-Control-Allow-Origin": context.origin, "Vary": "Origin"}
        return {}

    def _error_outcome(self, exc: RelayError, context: RequestContext) -> RelayOutcome:
        hint = exc.hint if isinstance(exc, ConfigurationError) else None
        response = RelayResponse(
            ok=False,
            error=exc.message,
            request_id=context.request_id,
            hint=hint,
        )
        headers = {} if isinstance(exc, ForbiddenOrigin) else self._cors_headers(context)
        if isinstance(exc, MethodNotAllowed):
            headers["Allow"] = ALLOWED_METHODS
        return RelayOutcome(
            status_code=exc.status_code,
            body=response.to_body(),
            headers=headers,
            outcome=exc.outcome,
        )

    async def _log_outcome(self, outcome: RelayOutcome, context: RequestContext) -> None:
        fields = {
            "status_code": outcome.status_code,
            "outcome": outcome.outcome,
            "client_ip": context.client_ip,
        }
        if outcome.status_code >= 500:
            await logger.aerror("relay_outcome", **fields)
        elif outcome.status_code >= 400:
            await logger.awarning("relay_outcome", **fields)
        else:
            await logger.ainfo("relay_outcome", **fields)
