"""Health check endpoints — liveness and readiness.

- GET /health/live — fast liveness probe
- GET /health/ready — readiness probe (mail provider configured)

Neither exposes secret values, only presence.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from vinrelay.api.dependencies import get_settings
from vinrelay.config import Settings

router = APIRouter()


class LivenessResponse(BaseModel):
    """Liveness probe response — no sensitive data."""

    status: str


class ReadinessResponse(BaseModel):
    """Readiness probe response — no sensitive data."""

    status: str
    mail_configured: bool


@router.get("/health/live", response_model=LivenessResponse)
async def liveness_probe() -> LivenessResponse:
    """Fast liveness probe — is the process running?"""
    return LivenessResponse(status="alive")


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_probe(
    settings: Settings = Depends(get_settings),
) -> ReadinessResponse:
    """Readiness probe — can the relay deliver submissions?

    Reports not_ready while the API key or sender address is missing.
    """
    configured = settings.mail_configured
    return ReadinessResponse(
        status="ready" if configured else "not_ready",
        mail_configured=configured,
    )
