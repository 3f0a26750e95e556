"""
CareNotes Backend: Voice Note Schemas
=======================================

What:  Input contract for CreateVoiceNote and the voice note response shape.

recordedAt format:
    Only full UTC date-times are accepted: YYYY-MM-DDTHH:MM:SS[.ffffff]Z, with at most
    microsecond precision.
    Offsets (+02:00), bare dates and epoch numbers are rejected.
"""

import re
import uuid
from datetime import datetime

from pydantic import Field, field_validator

from app.schemas.common import CamelModel

# Largest value the INTEGER column holds on every supported store
MAX_DURATION_SECONDS = 2_147_483_647

RECORDED_AT_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d{1,6})?Z$")


class VoiceNoteCreate(CamelModel):
    patient_id: uuid.UUID
    title: str = Field(min_length=1, max_length=200, examples=["Consultation Note"])
    duration: int = Field(
        gt=0, le=MAX_DURATION_SECONDS, strict=True, description="Length in whole seconds"
    )
    recorded_at: datetime = Field(examples=["2024-01-01T10:00:00Z"])

    @field_validator("recorded_at", mode="before")
    @classmethod
    def require_utc_datetime_string(cls, v):
        if not isinstance(v, str) or not RECORDED_AT_PATTERN.match(v):
            raise ValueError("must be an ISO 8601 UTC date-time, e.g. 2024-01-01T10:00:00Z")
        return v


class VoiceNoteResponse(CamelModel):
    id: uuid.UUID
    patient_id: uuid.UUID
    title: str
    duration: int
    recorded_at: datetime
    created_at: datetime
