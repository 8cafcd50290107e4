"""Per-request context: client address, user agent, request id, origin."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from vinrelay.relay.rate_limit import UNKNOWN_CLIENT


@dataclass(frozen=True)
class RequestContext:
    """Derived per request. Used for validation and audit logging only."""

    request_id: str
    client_ip: str = UNKNOWN_CLIENT
    user_agent: str = "unknown"
    origin: str | None = None


def resolve_client_ip(
    headers: Mapping[str, str],
    peer: str | None = None,
    trust_forwarded: bool = True,
) -> str:
    """Resolve the client address used as the rate-limit key.

    Order: first X-Forwarded-For hop, Client-IP, socket peer, "unknown".
    Forwarding headers are skipped when the deployment is not behind a proxy.
    """
    if trust_forwarded:
        forwarded = headers.get("x-forwarded-for")
        if forwarded:
            first = forwarded.split(",")[0].strip()
            if first:
                return first
        client_ip = headers.get("client-ip")
        if client_ip and client_ip.strip():
            return client_ip.strip()
    return peer or UNKNOWN_CLIENT
