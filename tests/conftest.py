"""Shared test fixtures for the VIN relay test suite.

Provides test settings, a recording mail backend, and a controllable clock.
"""

from __future__ import annotations

import pytest

from vinrelay.config import Settings
from vinrelay.integrations.mailer import Mailer
from vinrelay.relay.message import OutboundEmail

VALID_VIN = "1HGBH41JXMN109186"
TEST_API_KEY = "SG.test-sendgrid-key-abcdefghijklmnop"
TEST_FROM_EMAIL = "relay@dmmethevin.example"
TEST_TO_EMAIL = "inbox@dmmethevin.example"
TEST_METRICS_TOKEN = "metrics-test-token-0123456789"


def make_settings(**overrides: object) -> Settings:
    """Settings isolated from the process environment and any .env file."""
    values: dict[str, object] = {
        "allowed_origins": "",
        "sendgrid_api_key": TEST_API_KEY,
        "from_email": TEST_FROM_EMAIL,
        "to_email": TEST_TO_EMAIL,
        "metrics_token": TEST_METRICS_TOKEN,
        "rate_limit_window_ms": 60_000,
        "rate_limit_max_requests": 5,
        "log_level": "WARNING",
        "log_format": "console",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)  # type: ignore[arg-type]


class RecordingMailer(Mailer):
    """Mail backend that records messages instead of sending them."""

    def __init__(self, result: bool = True, error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.sent: list[OutboundEmail] = []

    async def send(self, email: OutboundEmail) -> bool:
        if self.error is not None:
            raise self.error
        self.sent.append(email)
        return self.result


class FakeClock:
    """Monotonic clock the test advances by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def settings() -> Settings:
    """Fully configured settings, origins unrestricted."""
    return make_settings()


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
