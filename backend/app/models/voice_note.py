"""
CareNotes Backend: VoiceNote SQLAlchemy Model
===============================================

What:  ORM model representing the `voice_notes` table.
Who:   Used by VoiceNoteRepository and by Alembic.

Table Design:
    - patient_id: FK → patients.id with ON DELETE CASCADE, indexed for the
      `?patientId=` listing
    - duration: whole seconds, always positive (checked at validation)
    - recorded_at: UTC timestamp; default list order is recorded_at DESC
    - Deleting a voice note cascades to its summary (FK declared there)
"""

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.types import UTCDateTime


class VoiceNote(Base):
    """A recorded clinical note belonging to one patient."""

    __tablename__ = "voice_notes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True)

    patient_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("patients.id", ondelete="CASCADE"),
        nullable=False,
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    recorded_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    __table_args__ = (
        Index("idx_voice_notes_patient", "patient_id"),
        Index("idx_voice_notes_recorded_at", "recorded_at"),
    )

    def __repr__(self) -> str:
        return f"<VoiceNote(id={self.id}, patient_id={self.patient_id}, title='{self.title}')>"
