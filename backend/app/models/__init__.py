"""
CareNotes Backend: ORM Models
===============================

Importing this package registers every table on `Base.metadata`, which is
what `Database.create_schema()` and Alembic's autogenerate read.

Relationship graph (all cascades are declared in the schema):

    patients ──< voice_notes ──○ summaries
              ON DELETE CASCADE   ON DELETE CASCADE, voice_note_id UNIQUE
"""

from app.models.patient import Patient
from app.models.voice_note import VoiceNote
from app.models.summary import Summary

__all__ = ["Patient", "VoiceNote", "Summary"]
