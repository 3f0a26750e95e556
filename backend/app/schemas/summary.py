"""
CareNotes Backend: Summary Schemas
====================================

What:  Input contract for CreateSummary and the joined summary response.

The response always carries the owning voice note's title and patient id,
read through a join at query time.
"""

import uuid
from datetime import datetime
from typing import List

from pydantic import Field

from app.schemas.common import CamelModel


class SummaryCreate(CamelModel):
    voice_note_id: uuid.UUID
    content: str = Field(min_length=1)
    key_points: List[str] = Field(min_length=1, examples=[["Point 1", "Point 2"]])


class SummaryResponse(CamelModel):
    id: uuid.UUID
    voice_note_id: uuid.UUID
    content: str
    key_points: List[str]
    created_at: datetime
    voice_note_title: str
    patient_id: uuid.UUID
