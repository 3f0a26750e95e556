"""
CareNotes Backend: Patient SQLAlchemy Model
=============================================

What:  ORM model representing the `patients` table.
Who:   Used by PatientRepository for CRUD operations and by Alembic.

Table Design:
    - UUID primary key generated by the request pipeline
    - medical_record_number: UNIQUE; duplicates surface as ConflictError
    - date_of_birth: kept as the submitted YYYY-MM-DD string
    - created_at / updated_at: UTC; equal on insert, updated_at refreshed on update
    - Deleting a patient cascades to voice_notes (FK declared there)
"""

import uuid
from datetime import datetime

from sqlalchemy import Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.types import UTCDateTime


class Patient(Base):
    """
    A patient whose clinical voice notes are recorded.

    Query Patterns:
        - List patients: SELECT ... ORDER BY created_at DESC
        - Get single patient: SELECT ... WHERE id = :uuid
        - Reference check: SELECT 1 ... WHERE id = :uuid LIMIT 1
    """

    __tablename__ = "patients"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    # Stored exactly as submitted (validated against \d{4}-\d{2}-\d{2})
    date_of_birth: Mapped[str] = mapped_column(String(10), nullable=False)

    medical_record_number: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
    )

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    __table_args__ = (
        Index("idx_patients_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Patient(id={self.id}, mrn='{self.medical_record_number}', "
            f"created_at='{self.created_at}')>"
        )
