"""Tests for the app factory, lifespan, middleware and global error handling."""

from __future__ import annotations

from httpx import ASGITransport, AsyncClient

from tests.api.conftest import RELAY_PATH
from tests.conftest import TEST_METRICS_TOKEN, VALID_VIN, RecordingMailer, make_settings
from vinrelay.api.app import create_app, lifespan
from vinrelay.integrations.sendgrid import SendGridMailer
from vinrelay.relay.handler import RelayHandler
from vinrelay.relay.rate_limit import FixedWindowRateLimiter


class TestLifespan:
    async def test_state_populated_on_startup(self) -> None:
        settings = make_settings(rate_limit_max_requests=7, rate_limit_window_ms=30_000)
        app = create_app(settings=settings)
        async with lifespan(app):
            assert isinstance(app.state.relay_handler, RelayHandler)
            limiter = app.state.rate_limiter
            assert isinstance(limiter, FixedWindowRateLimiter)
            assert limiter.max_requests == 7
            assert limiter.window_seconds == 30.0
            assert isinstance(app.state.mailer, SendGridMailer)

    async def test_no_mailer_when_unconfigured(self) -> None:
        app = create_app(settings=make_settings(from_email=None))
        async with lifespan(app):
            assert app.state.mailer is None

    async def test_override_mailer_used(self) -> None:
        mailer = RecordingMailer()
        app = create_app(settings=make_settings(), mailer=mailer)
        async with lifespan(app):
            assert app.state.mailer is mailer

    async def test_rate_limit_table_cleared_on_shutdown(self) -> None:
        app = create_app(settings=make_settings(), mailer=RecordingMailer())
        async with lifespan(app):
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                await client.post(RELAY_PATH, json={"vin": VALID_VIN})
            limiter = app.state.rate_limiter
            assert len(limiter) == 1
        assert len(limiter) == 0

    async def test_legacy_path_can_be_disabled(self) -> None:
        app = create_app(settings=make_settings(legacy_relay_path=""), mailer=RecordingMailer())
        async with lifespan(app):
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                response = await client.post("/.netlify/functions/sendVin", json={"vin": VALID_VIN})
        assert response.status_code == 404


class TestSecurityHeaders:
    async def test_headers_on_relay(self, client: AsyncClient) -> None:
        response = await client.post(RELAY_PATH, json={"vin": VALID_VIN})
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["Referrer-Policy"] == "no-referrer"

    async def test_headers_on_health(self, client: AsyncClient) -> None:
        response = await client.get("/health/live")
        assert response.headers["Content-Security-Policy"] == "default-src 'none'"


class TestContentLengthGuard:
    async def test_malformed_content_length(self, client: AsyncClient) -> None:
        response = await client.post(
            RELAY_PATH,
            content=b'{"vin": "1HGBH41JXMN109186"}',
            headers={"Content-Length": "not-a-number"},
        )
        assert response.status_code == 400
        assert response.json()["ok"] is False


class TestGenericErrorHandler:
    async def test_unhandled_exception_sanitized(self) -> None:
        app = create_app(settings=make_settings(), mailer=RecordingMailer())

        @app.get("/boom")
        async def boom() -> dict:
            raise RuntimeError("internal path /srv/secret")

        async with lifespan(app):
            transport = ASGITransport(app=app, raise_app_exceptions=False)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                response = await client.get("/boom")

        assert response.status_code == 500
        data = response.json()
        assert data["ok"] is False
        assert data["error"] == "Server error"
        assert data["requestId"]
        assert "/srv/secret" not in response.text


class TestMetricsEndpoint:
    async def test_metrics_exposed_with_token(self, client: AsyncClient) -> None:
        await client.post(RELAY_PATH, json={"vin": "BADVIN"})
        response = await client.get(
            "/metrics", headers={"Authorization": f"Bearer {TEST_METRICS_TOKEN}"}
        )
        assert response.status_code == 200
        assert "vinrelay_submission_total" in response.text
        assert "vinrelay_rate_limit_keys" in response.text

    async def test_metrics_require_token(self, client: AsyncClient) -> None:
        response = await client.get("/metrics")
        assert response.status_code == 401
        assert "vinrelay_submission_total" not in response.text

    async def test_metrics_reject_wrong_token(self, client: AsyncClient) -> None:
        response = await client.get("/metrics", headers={"Authorization": "Bearer wrong-token"})
        assert response.status_code == 401
        assert "vinrelay_submission_total" not in response.text

    async def test_honeypot_hit_not_visible_without_token(self, client: AsyncClient) -> None:
        trapped = await client.post(RELAY_PATH, json={"vin": VALID_VIN, "hp": "x"})
        assert trapped.status_code == 429

        response = await client.get("/metrics")
        assert response.status_code == 401
        assert 'outcome="honeypot"' not in response.text

    async def test_metrics_not_served_without_token(self) -> None:
        app = create_app(settings=make_settings(metrics_token=None), mailer=RecordingMailer())
        async with lifespan(app):
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                response = await client.get("/metrics")
        assert response.status_code == 404

    async def test_metrics_can_be_disabled(self) -> None:
        app = create_app(settings=make_settings(metrics_enabled=False), mailer=RecordingMailer())
        async with lifespan(app):
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                response = await client.get(
                    "/metrics", headers={"Authorization": f"Bearer {TEST_METRICS_TOKEN}"}
                )
        assert response.status_code == 404
