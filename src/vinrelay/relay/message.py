"""Plain-text notification email built from a submission."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

from vinrelay.relay.schemas import SubmissionPayload


@dataclass(frozen=True)
class OutboundEmail:
    """Message handed to the mail provider."""

    to: str
    from_: str
    subject: str
    text: str


def build_email_body(
    payload: SubmissionPayload,
    client_ip: str | None,
    user_agent: str | None,
    timestamp: datetime | None = None,
) -> str:
    """Compose the notification text.

    Note and reference email lines appear only when the submitter filled them in.
    """
    submitted_at = (timestamp or datetime.now(UTC)).isoformat()

    lines = ["New VIN Submission", "", f"VIN: {payload.vin}"]
    if payload.note:
        lines.append(f"Note: {payload.note}")
    if payload.email:
        lines.append(f"User Email: {payload.email}")
    lines += ["", "---", f"Timestamp: {submitted_at}"]
    if client_ip:
        lines.append(f"IP: {client_ip}")
    if user_agent:
        lines.append(f"User Agent: {user_agent}")

    return "\n".join(lines) + "\n"


def build_email(
    payload: SubmissionPayload,
    client_ip: str | None,
    user_agent: str | None,
    *,
    to: str,
    from_: str,
    subject: str,
    timestamp: datetime | None = None,
) -> OutboundEmail:
    return OutboundEmail(
        to=to,
        from_=from_,
        subject=subject,
        text=build_email_body(payload, client_ip, user_agent, timestamp),
    )
