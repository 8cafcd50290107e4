"""FastAPI application factory, lifespan management, and middleware configuration.

Creates the FastAPI app with:
- Async lifespan (logging, rate-limit table, mail backend, relay handler)
- Request ID middleware
- Request body size limit middleware
- Security headers
- Relay, health and metrics routes
- Global error handlers

CORS for the relay is answered by the relay handler itself (preflight and
origin echo), so no CORS middleware is installed.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, Response

from vinrelay.api.error_handlers import error_response, register_error_handlers
from vinrelay.api.routes import health, metrics
from vinrelay.api.routes.relay import create_relay_router
from vinrelay.config import Settings
from vinrelay.errors import BodyTooLarge, ClientError
from vinrelay.integrations.mailer import Mailer, create_mailer
from vinrelay.log_config import configure_logging
from vinrelay.observability.metrics import update_rate_limit_keys
from vinrelay.observability.request_id import RequestIdMiddleware
from vinrelay.relay.handler import RelayHandler
from vinrelay.relay.rate_limit import FixedWindowRateLimiter

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan — startup and shutdown logic.

    Startup:
        1. Configure structured logging
        2. Create the process-wide rate-limit table
        3. Create the mail backend (None if not configured)
        4. Build the relay handler
        5. Store everything on app.state

    Shutdown:
        6. Clear the rate-limit table
    """
    settings: Settings = app.state.settings

    # 1. Logging
    configure_logging(log_level=settings.log_level, log_format=settings.log_format)

    # 2. Rate limiter
    rate_limiter = FixedWindowRateLimiter(
        window_seconds=settings.rate_limit_window_seconds,
        max_requests=settings.rate_limit_max_requests,
        sweep_threshold=settings.rate_limit_sweep_threshold,
    )

    # 3. Mail backend
    mailer: Mailer | None = app.state.mailer_override or create_mailer(settings)
    if mailer is None:
        await logger.awarning("mail_not_configured", **settings.mail_config_hint())

    # 4. Relay handler
    relay_handler = RelayHandler(settings=settings, limiter=rate_limiter, mailer=mailer)

    # 5. Store on app.state
    app.state.rate_limiter = rate_limiter
    app.state.mailer = mailer
    app.state.relay_handler = relay_handler

    await logger.ainfo(
        "startup_complete",
        relay_paths=_relay_paths(settings),
        origins_restricted=bool(settings.allowed_origins_list),
        rate_limit_max_requests=settings.rate_limit_max_requests,
        rate_limit_window_ms=settings.rate_limit_window_ms,
        metrics_served=settings.metrics_served,
    )

    yield

    # Shutdown
    rate_limiter.clear()
    update_rate_limit_keys(0)
    await logger.ainfo("shutdown_complete")


def _relay_paths(settings: Settings) -> list[str]:
    paths = [settings.relay_path]
    if settings.legacy_relay_path and settings.legacy_relay_path != settings.relay_path:
        paths.append(settings.legacy_relay_path)
    return paths


def create_app(settings: Settings | None = None, mailer: Mailer | None = None) -> FastAPI:
    """Application factory — create and configure the FastAPI app.

    Args:
        settings: Optional Settings instance. If None, loads from environment.
        mailer: Optional mail backend replacing the one built from settings.

    Returns:
        A fully configured FastAPI application.
    """
    if settings is None:
        from vinrelay.config import get_settings
        settings = get_settings()

    app = FastAPI(
        title="VIN Relay",
        description="Validates VIN form submissions and relays them by email",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Attach settings before lifespan runs
    app.state.settings = settings
    app.state.mailer_override = mailer

    # --- Request body size limit ---
    max_body = settings.max_request_body_bytes

    @app.middleware("http")
    async def limit_request_body(request: Request, call_next: object) -> Response:
        content_length = request.headers.get("content-length")
        if content_length:
            try:
                length = int(content_length)
            except ValueError:
                return error_response(request, ClientError("Invalid Content-Length"))
            if length > max_body:
                return error_response(request, BodyTooLarge())
        response = await call_next(request)  # type: ignore[operator]
        return response

    # --- Security headers ---
    @app.middleware("http")
    async def add_security_headers(request: Request, call_next: object) -> Response:
        response = await call_next(request)  # type: ignore[operator]
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "no-referrer"
        response.headers["Content-Security-Policy"] = "default-src 'none'"
        return response

    # --- Request IDs (outermost, so every layer below sees request.state.request_id) ---
    app.add_middleware(RequestIdMiddleware, header_name=settings.request_id_header)

    # --- Routes ---
    app.include_router(create_relay_router(_relay_paths(settings)))
    app.include_router(health.router)
    if settings.metrics_served:
        app.include_router(metrics.router)

    # --- Error handlers ---
    register_error_handlers(app)

    return app
