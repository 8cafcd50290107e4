"""Relay endpoint — POST a VIN submission, OPTIONS for CORS preflight.

Every method is routed to the handler so that unsupported methods get the
relay's own 405 body instead of the framework default.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from starlette.responses import JSONResponse, Response

from vinrelay.api.dependencies import get_relay_handler, get_request_context, get_settings
from vinrelay.api.error_handlers import error_response
from vinrelay.config import Settings
from vinrelay.errors import BodyTooLarge
from vinrelay.relay.context import RequestContext
from vinrelay.relay.handler import RelayHandler

ROUTED_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


async def read_body(request: Request, limit: int) -> bytes:
    """Read the request body, raising BodyTooLarge once more than `limit` bytes arrive.

    Covers chunked uploads, which carry no Content-Length for the middleware to check.
    """
    chunks: list[bytes] = []
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > limit:
            raise BodyTooLarge()
        chunks.append(chunk)
    return b"".join(chunks)


async def relay_submission(
    request: Request,
    context: RequestContext = Depends(get_request_context),
    handler: RelayHandler = Depends(get_relay_handler),
    settings: Settings = Depends(get_settings),
) -> Response:
    """Validate a VIN submission and forward it by email.

    Returns `{ok, requestId}` plus `error` (and `hint` for configuration
    errors) when the submission is rejected.
    """
    body = b""
    if request.method == "POST":
        try:
            body = await read_body(request, settings.max_request_body_bytes)
        except BodyTooLarge as exc:
            return error_response(request, exc)
    outcome = await handler.handle(request.method, body, context)

    if outcome.body is None:
        return Response(status_code=outcome.status_code, headers=outcome.headers)
    return JSONResponse(
        status_code=outcome.status_code,
        content=outcome.body,
        headers=outcome.headers,
    )


def create_relay_router(paths: list[str]) -> APIRouter:
    """Build a router serving the relay at each of `paths`."""
    router = APIRouter(tags=["relay"])
    for path in paths:
        router.add_api_route(
            path,
            relay_submission,
            methods=ROUTED_METHODS,
            response_model=None,
        )
    return router
