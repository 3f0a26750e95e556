"""
CareNotes Backend: Voice Note Route Handlers
==============================================

What:  Create, read, list and delete voice notes.
How:   The voice note pipeline checks that the referenced patient exists
       before inserting. Voice notes cannot be edited.
"""

import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Body, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.common import DataResponse, ErrorResponse
from app.schemas.voice_note import VoiceNoteResponse
from app.services.resources import voice_note_pipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Voice Notes"])


@router.get(
    "/voice-notes",
    response_model=DataResponse[List[VoiceNoteResponse]],
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="List voice notes, most recently recorded first",
)
async def list_voice_notes(
    patient_id: Optional[str] = Query(
        default=None,
        alias="patientId",
        description="Only return voice notes for this patient",
    ),
    db: AsyncSession = Depends(get_db_session),
):
    return {"data": await voice_note_pipeline.list(db, patient_id=patient_id)}


@router.get(
    "/voice-notes/{voice_note_id}",
    response_model=DataResponse[VoiceNoteResponse],
    responses={
        404: {"description": "Voice note not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Get a single voice note",
)
async def get_voice_note(voice_note_id: str, db: AsyncSession = Depends(get_db_session)):
    return {"data": await voice_note_pipeline.get(db, voice_note_id)}


@router.post(
    "/voice-notes",
    status_code=201,
    response_model=DataResponse[VoiceNoteResponse],
    responses={
        400: {"description": "Invalid input", "model": ErrorResponse},
        404: {"description": "Patient not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Record a voice note for a patient",
    description="Body: {patientId, title, duration (seconds), recordedAt (ISO 8601 UTC)}.",
)
async def create_voice_note(
    payload: Any = Body(default=None),
    db: AsyncSession = Depends(get_db_session),
):
    return {"data": await voice_note_pipeline.create(db, payload)}


@router.delete(
    "/voice-notes/{voice_note_id}",
    status_code=204,
    response_class=Response,
    responses={
        404: {"description": "Voice note not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Delete a voice note and its summary",
)
async def delete_voice_note(voice_note_id: str, db: AsyncSession = Depends(get_db_session)):
    await voice_note_pipeline.delete(db, voice_note_id)
    return Response(status_code=204)
