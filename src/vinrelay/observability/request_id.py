"""Request ID middleware for correlating logs with responses.

The hosting platform usually stamps each request with an id header; when it
is present and well-formed it is reused, otherwise a UUID4 is generated.
Malformed values are never bound to the log context.
"""

from __future__ import annotations

import re
from uuid import uuid4

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

REQUEST_ID_HEADER = "X-Request-ID"

_REQUEST_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_\-]{1,64}$")


def generate_request_id() -> str:
    """Generate a unique request ID."""
    return str(uuid4())


def resolve_request_id(supplied: str | None) -> str:
    """Use the platform-supplied id if it is well-formed, else generate one."""
    if supplied and _REQUEST_ID_PATTERN.match(supplied):
        return supplied
    return generate_request_id()


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Middleware that resolves and propagates request IDs.

    The request ID is:
    1. Taken from the platform header when valid, generated otherwise
    2. Stored in request.state.request_id
    3. Added to response headers
    4. Bound to structlog context for all log entries

    Args:
        app: The wrapped ASGI app.
        header_name: Header the hosting platform uses for its request id.
    """

    def __init__(self, app: ASGIApp, header_name: str = REQUEST_ID_HEADER) -> None:
        super().__init__(app)
        self._header_name = header_name

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = resolve_request_id(request.headers.get(self._header_name))
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = request_id

        return response


def get_request_id(request: Request) -> str:
    """Get the request ID for the current request.

    Falls back to a fresh id if the middleware did not run.
    """
    request_id = getattr(request.state, "request_id", "")
    if not request_id:
        request_id = generate_request_id()
        request.state.request_id = request_id
    return request_id
