"""Voice note persistence, listed newest recording first."""

from typing import Any, List, Optional

from sqlalchemy import select

from app.models.voice_note import VoiceNote
from app.repositories.base import BaseRepository, parse_id


class VoiceNoteRepository(BaseRepository[VoiceNote]):
    model = VoiceNote
    resource = "voice note"
    foreign_keys = {"patient_id": "patient"}

    async def list_all(self, patient_id: Optional[Any] = None) -> List[VoiceNote]:
        """
        List voice notes ordered by recorded_at DESC.

        A malformed `patient_id` matches nothing and yields an empty list.
        """
        query = select(VoiceNote)
        if patient_id is not None:
            key = parse_id(patient_id)
            if key is None:
                return []
            query = query.where(VoiceNote.patient_id == key)
        query = query.order_by(VoiceNote.recorded_at.desc())

        result = await self.db.execute(query)
        return list(result.scalars().all())
