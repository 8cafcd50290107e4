"""Submission filters — origin allow-list, VIN shape check, honeypot.

All three are pure functions with no side effects.
"""

from __future__ import annotations

import re

from vinrelay.relay.schemas import SubmissionPayload

# 17 characters, I/O/Q excluded (confusable with 1 and 0). Shape only, no check digit.
VIN_PATTERN = re.compile(r"[A-HJ-NPR-Z0-9]{17}")


def is_origin_allowed(allowed_origins: list[str], origin: str | None) -> bool:
    """Check the request Origin against the allow-list.

    An empty allow-list permits every origin (unconfigured/development deploys).
    Otherwise the header must match an entry exactly — no wildcards, no prefixes.
    """
    if not allowed_origins:
        return True
    if origin is None:
        return False
    return origin in allowed_origins


def is_valid_vin(vin: str) -> bool:
    """Return True if `vin` is exactly 17 characters from the VIN alphabet.

    Does not normalize: lowercase input is rejected.
    """
    if not isinstance(vin, str):
        return False
    return VIN_PATTERN.fullmatch(vin) is not None


def is_honeypot_tripped(payload: SubmissionPayload) -> bool:
    """True if the hidden `hp` field carries any value."""
    return bool(payload.hp)
