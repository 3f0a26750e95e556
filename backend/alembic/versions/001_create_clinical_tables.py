"""Create patients, voice_notes and summaries tables

Revision ID: 001
Revises: None
Create Date: 2024-01-15 00:00:00.000000+00:00

What:  Initial schema: three tables, foreign keys with ON DELETE CASCADE,
       unique medical record numbers and one summary per voice note.

Rollback: downgrade() drops all three tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "patients",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("date_of_birth", sa.String(10), nullable=False),
        sa.Column("medical_record_number", sa.String(50), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("medical_record_number"),
    )
    op.create_index("idx_patients_created_at", "patients", ["created_at"])

    op.create_table(
        "voice_notes",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("patient_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("recorded_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        # Deleting a patient removes their voice notes
        sa.ForeignKeyConstraint(["patient_id"], ["patients.id"], ondelete="CASCADE"),
    )
    op.create_index("idx_voice_notes_patient", "voice_notes", ["patient_id"])
    op.create_index("idx_voice_notes_recorded_at", "voice_notes", ["recorded_at"])

    op.create_table(
        "summaries",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("voice_note_id", sa.Uuid(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("key_points", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        # Deleting a voice note removes its summary
        sa.ForeignKeyConstraint(["voice_note_id"], ["voice_notes.id"], ondelete="CASCADE"),
    )
    # One summary per voice note
    op.create_index("idx_summaries_voice_note", "summaries", ["voice_note_id"], unique=True)
    op.create_index("idx_summaries_created_at", "summaries", ["created_at"])


def downgrade() -> None:
    """Drop all tables, dependents first. All data is lost."""
    op.drop_index("idx_summaries_created_at", table_name="summaries")
    op.drop_index("idx_summaries_voice_note", table_name="summaries")
    op.drop_table("summaries")
    op.drop_index("idx_voice_notes_recorded_at", table_name="voice_notes")
    op.drop_index("idx_voice_notes_patient", table_name="voice_notes")
    op.drop_table("voice_notes")
    op.drop_index("idx_patients_created_at", table_name="patients")
    op.drop_table("patients")
