"""Wire-format schemas for the relay endpoint.

SubmissionPayload is parsed strictly: unknown fields and non-string values
fail the parse instead of being coerced.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class SubmissionPayload(BaseModel):
    """POST body sent by the form client.

    `vin` defaults to empty so a missing VIN is reported by the VIN check,
    not as a parse failure. `hp` is the honeypot and must stay empty.
    """

    model_config = ConfigDict(extra="forbid", strict=True)

    vin: str = ""
    note: str | None = None
    email: str | None = None
    hp: str | None = None


class RelayResponse(BaseModel):
    """JSON body of every relay outcome."""

    model_config = ConfigDict(populate_by_name=True)

    ok: bool
    error: str | None = None
    request_id: str = Field(alias="requestId")
    hint: dict[str, bool] | None = None

    def to_body(self) -> dict[str, object]:
        return self.model_dump(by_alias=True, exclude_none=True)

