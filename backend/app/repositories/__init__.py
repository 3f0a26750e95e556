"""
CareNotes Backend: Repositories
=================================

What:  One repository per entity, wrapping all SQL for that table.
How:   Each repository is constructed with the request's AsyncSession and
       returns ORM objects (or joined rows), `None` for missing records and
       row counts for deletes. Constraint violations raised by the store are
       reclassified here into ConflictError / ReferenceNotFoundError.

Repository Inventory:
    - PatientRepository:    patients (unique medical_record_number)
    - VoiceNoteRepository:  voice_notes (FK → patients, optional patient filter)
    - SummaryRepository:    summaries (FK → voice_notes, unique voice_note_id,
                            reads joined with voice_notes)
"""

from app.repositories.base import BaseRepository, parse_id
from app.repositories.patient_repository import PatientRepository
from app.repositories.summary_repository import SummaryRepository
from app.repositories.voice_note_repository import VoiceNoteRepository

__all__ = [
    "BaseRepository",
    "PatientRepository",
    "SummaryRepository",
    "VoiceNoteRepository",
    "parse_id",
]
