"""FastAPI dependency injection — relay handler, request context, configuration.

All dependencies read from app.state, which is populated during lifespan startup.
"""

from __future__ import annotations

from fastapi import Request

from vinrelay.config import Settings
from vinrelay.observability.request_id import get_request_id
from vinrelay.relay.context import RequestContext, resolve_client_ip
from vinrelay.relay.handler import RelayHandler


def get_relay_handler(request: Request) -> RelayHandler:
    """Get the RelayHandler instance from app state."""
    return request.app.state.relay_handler


def get_settings(request: Request) -> Settings:
    """Get the Settings instance from app state."""
    return request.app.state.settings


def get_request_context(request: Request) -> RequestContext:
    """Derive the per-request context from headers and the socket peer."""
    settings: Settings = request.app.state.settings
    peer = request.client.host if request.client else None
    return RequestContext(
        request_id=get_request_id(request),
        client_ip=resolve_client_ip(request.headers, peer, settings.trust_forwarded_for),
        user_agent=request.headers.get("user-agent") or "unknown",
        origin=request.headers.get("origin"),
    )
