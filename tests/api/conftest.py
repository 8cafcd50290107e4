"""Shared fixtures for API route tests.

Provides:
- A configured FastAPI test app with its lifespan running and a recording mailer
- An httpx AsyncClient pointed at the test app
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from tests.conftest import RecordingMailer
from vinrelay.api.app import create_app, lifespan
from vinrelay.config import Settings

RELAY_PATH = "/api/send-vin"
LEGACY_PATH = "/.netlify/functions/sendVin"
FORM_ORIGIN = "https://dmmethevin.com"


@pytest.fixture
async def test_app(settings: Settings, mailer: RecordingMailer) -> AsyncGenerator[object, None]:
    """Create a test FastAPI app and run its lifespan."""
    app = create_app(settings=settings, mailer=mailer)
    async with lifespan(app):
        yield app


@pytest.fixture
async def client(test_app) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient for the test app."""
    transport = ASGITransport(app=test_app, client=("203.0.113.7", 51234))
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def form_headers() -> dict[str, str]:
    """Headers a browser sends with the form POST."""
    return {"Origin": FORM_ORIGIN, "User-Agent": "Mozilla/5.0 (test)"}
