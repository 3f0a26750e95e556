"""
CareNotes Backend: Summary SQLAlchemy Model
=============================================

What:  ORM model representing the `summaries` table.
Who:   Used by SummaryRepository and by Alembic.

Table Design:
    - voice_note_id: FK → voice_notes.id with ON DELETE CASCADE and a UNIQUE
      index; the store is the final guard for "one summary per voice note"
    - key_points: ordered list of strings serialized as a JSON array
    - No updated_at: summaries are never edited in place
"""

import uuid
from datetime import datetime
from typing import List

from sqlalchemy import JSON, ForeignKey, Index, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.types import UTCDateTime


class Summary(Base):
    """Text summary derived from exactly one voice note."""

    __tablename__ = "summaries"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True)

    voice_note_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("voice_notes.id", ondelete="CASCADE"),
        nullable=False,
    )

    content: Mapped[str] = mapped_column(Text, nullable=False)
    key_points: Mapped[List[str]] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    __table_args__ = (
        Index("idx_summaries_voice_note", "voice_note_id", unique=True),
        Index("idx_summaries_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Summary(id={self.id}, voice_note_id={self.voice_note_id})>"
