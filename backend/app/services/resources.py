"""
CareNotes Backend: Resource Pipelines
=======================================

What:  One configured ResourcePipeline per entity.
Who:   Imported by the route modules.

    patients      create (MRN unique), partial update, delete (cascades)
    voice_notes   create (patient must exist), delete (cascades to summary)
    summaries     create (voice note must exist, one summary per voice note)
"""

from app.repositories.patient_repository import PatientRepository
from app.repositories.summary_repository import SummaryRepository
from app.repositories.voice_note_repository import VoiceNoteRepository
from app.schemas.patient import PatientResponse
from app.schemas.summary import SummaryResponse
from app.schemas.voice_note import VoiceNoteResponse
from app.services.pipeline import Reference, ResourcePipeline, Singleton
from app.services.validation import Operation

patient_pipeline = ResourcePipeline(
    resource="patient",
    repository=PatientRepository,
    response_model=PatientResponse,
    create_operation=Operation.CREATE_PATIENT,
    update_operation=Operation.UPDATE_PATIENT,
    timestamps=("created_at", "updated_at"),
)

voice_note_pipeline = ResourcePipeline(
    resource="voice note",
    repository=VoiceNoteRepository,
    response_model=VoiceNoteResponse,
    create_operation=Operation.CREATE_VOICE_NOTE,
    references=[Reference("patient_id", PatientRepository, "patient")],
)

summary_pipeline = ResourcePipeline(
    resource="summary",
    repository=SummaryRepository,
    response_model=SummaryResponse,
    create_operation=Operation.CREATE_SUMMARY,
    references=[Reference("voice_note_id", VoiceNoteRepository, "voice note")],
    singleton=Singleton("voice_note_id", parent="voice note"),
)
