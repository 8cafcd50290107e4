"""Relay error taxonomy.

ClientError — caller mistakes or abuse (bad method, origin, body, VIN, rate limit).
ConfigurationError — required mail secrets missing; carries a boolean presence hint.
DownstreamError — the email provider rejected or failed the send.

Messages are the exact strings returned to callers, so they must stay generic.
"""

from __future__ import annotations


class RelayError(Exception):
    """Base for every error the relay handler turns into an outcome."""

    status_code: int = 500
    message: str = "Server error"
    # metrics/audit label; internal only
    outcome: str = "server_error"

    def __init__(
        self,
        message: str | None = None,
        status_code: int | None = None,
        outcome: str | None = None,
    ) -> None:
        if message is not None:
            self.message = message
        if status_code is not None:
            self.status_code = status_code
        if outcome is not None:
            self.outcome = outcome
        super().__init__(self.message)


class ClientError(RelayError):
    status_code = 400
    outcome = "bad_request"


class MethodNotAllowed(ClientError):
    status_code = 405
    message = "Method not allowed"
    outcome = "method_not_allowed"


class ForbiddenOrigin(ClientError):
    status_code = 403
    message = "Forbidden origin"
    outcome = "forbidden_origin"


class RateLimited(ClientError):
    """Also raised for honeypot hits so both are indistinguishable to callers."""

    status_code = 429
    message = "Rate limit exceeded"
    outcome = "rate_limited"


class EmptyBody(ClientError):
    message = "Request body is empty"
    outcome = "empty_body"


class InvalidJSON(ClientError):
    message = "Invalid JSON"
    outcome = "invalid_json"


class InvalidVIN(ClientError):
    message = "Invalid VIN format"
    outcome = "invalid_vin"


class BodyTooLarge(ClientError):
    status_code = 413
    message = "Request body too large"
    outcome = "body_too_large"


class ConfigurationError(RelayError):
    """Required secret missing. `hint` holds presence booleans, never values."""

    outcome = "configuration_error"

    def __init__(self, hint: dict[str, bool]) -> None:
        super().__init__()
        self.hint = hint


class DownstreamError(RelayError):
    """Email provider failure. Detail is logged, never returned."""

    outcome = "mail_failed"
