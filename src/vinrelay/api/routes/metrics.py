"""GET /metrics — Prometheus metrics endpoint (bearer token required)."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from starlette.responses import Response

from vinrelay.api.auth import require_metrics_token
from vinrelay.observability.metrics import get_metrics_text

router = APIRouter()


@router.get("/metrics")
async def prometheus_metrics(
    _token: str = Depends(require_metrics_token),
) -> Response:
    """Serve Prometheus metrics. Requires the METRICS_TOKEN bearer token."""
    return Response(
        content=get_metrics_text(),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
