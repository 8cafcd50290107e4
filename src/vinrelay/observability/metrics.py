"""Prometheus metrics for the VIN relay.

Served at GET /metrics when METRICS_ENABLED is true.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram, generate_latest

# --- Submission metrics ---

SUBMISSION_TOTAL = Counter(
    "vinrelay_submission_total",
    "Relay outcomes by result",
    ["outcome"],
)

# --- Mail metrics ---

MAIL_SEND_LATENCY = Histogram(
    "vinrelay_mail_send_latency_seconds",
    "Mail provider call latency in seconds",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

# --- Rate limiter metrics ---

RATE_LIMIT_KEYS = Gauge(
    "vinrelay_rate_limit_keys",
    "Client keys currently held in the rate-limit table",
)


def record_outcome(outcome: str) -> None:
    """Record a relay outcome (sent, rate_limited, honeypot, ...)."""
    SUBMISSION_TOTAL.labels(outcome=outcome).inc()


def observe_mail_latency(seconds: float) -> None:
    MAIL_SEND_LATENCY.observe(seconds)


def update_rate_limit_keys(count: int) -> None:
    RATE_LIMIT_KEYS.set(count)


def get_metrics_text() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()
