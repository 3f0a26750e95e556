"""
Summary persistence.

Reads are joined with voice_notes so every summary carries its voice note's
title and patient id:

    SELECT s.*, v.title AS voice_note_title, v.patient_id
    FROM summaries s JOIN voice_notes v ON s.voice_note_id = v.id
"""

from typing import Any, List, Optional

from sqlalchemy import Select, select
from sqlalchemy.engine import Row

from app.models.summary import Summary
from app.models.voice_note import VoiceNote
from app.repositories.base import BaseRepository, parse_id


class SummaryRepository(BaseRepository[Summary]):
    model = Summary
    resource = "summary"
    foreign_keys = {"voice_note_id": "voice note"}
    conflict_message = "Summary already exists for this voice note"

    @staticmethod
    def _joined() -> Select:
        return select(
            Summary.id,
            Summary.voice_note_id,
            Summary.content,
            Summary.key_points,
            Summary.created_at,
            VoiceNote.title.label("voice_note_title"),
            VoiceNote.patient_id.label("patient_id"),
        ).join(VoiceNote, Summary.voice_note_id == VoiceNote.id)

    async def get_by_id(self, record_id: Any) -> Optional[Row]:
        key = parse_id(record_id)
        if key is None:
            return None
        result = await self.db.execute(self._joined().where(Summary.id == key))
        return result.first()

    async def list_all(self) -> List[Row]:
        result = await self.db.execute(
            self._joined().order_by(Summary.created_at.desc())
        )
        return list(result.all())
