"""Global exception handlers — logs full details internally, returns sanitized errors to callers.

Never exposes stack traces, internal paths, secrets, or implementation details
in API responses. Bodies follow the relay shape `{ok, error, requestId}`.
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from vinrelay.errors import RelayError
from vinrelay.observability.request_id import REQUEST_ID_HEADER, get_request_id
from vinrelay.relay.schemas import RelayResponse

logger = structlog.get_logger()


def error_response(request: Request, exc: RelayError) -> JSONResponse:
    """Render a RelayError as the relay's JSON error body."""
    request_id = get_request_id(request)
    return JSONResponse(
        status_code=exc.status_code,
        content=RelayResponse(ok=False, error=exc.message, request_id=request_id).to_body(),
        headers={REQUEST_ID_HEADER: request_id},
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI app."""

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
        await logger.aerror(
            "unhandled_exception",
            path=request.url.path,
            error_type=type(exc).__name__,
            exc_info=True,
        )
        return error_response(request, RelayError())
