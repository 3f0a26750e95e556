"""
CareNotes Backend: Summary Route Handlers
===========================================

What:  Create, read, list and delete voice note summaries.
How:   Every summary response includes the voice note's title and patient
       id. A voice note has at most one summary; a second POST returns 409.
"""

import logging
from typing import Any, List

from fastapi import APIRouter, Body, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.common import DataResponse, ErrorResponse
from app.schemas.summary import SummaryResponse
from app.services.resources import summary_pipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Summaries"])


@router.get(
    "/summaries",
    response_model=DataResponse[List[SummaryResponse]],
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="List summaries, newest first",
)
async def list_summaries(db: AsyncSession = Depends(get_db_session)):
    return {"data": await summary_pipeline.list(db)}


@router.get(
    "/summaries/{summary_id}",
    response_model=DataResponse[SummaryResponse],
    responses={
        404: {"description": "Summary not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Get a single summary",
)
async def get_summary(summary_id: str, db: AsyncSession = Depends(get_db_session)):
    return {"data": await summary_pipeline.get(db, summary_id)}


@router.post(
    "/summaries",
    status_code=201,
    response_model=DataResponse[SummaryResponse],
    responses={
        400: {"description": "Invalid input", "model": ErrorResponse},
        404: {"description": "Voice note not found", "model": ErrorResponse},
        409: {"description": "Summary already exists for this voice note", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Summarize a voice note",
    description="Body: {voiceNoteId, content, keyPoints: [string, ...]}.",
)
async def create_summary(
    payload: Any = Body(default=None),
    db: AsyncSession = Depends(get_db_session),
):
    return {"data": await summary_pipeline.create(db, payload)}


@router.delete(
    "/summaries/{summary_id}",
    status_code=204,
    response_class=Response,
    responses={
        404: {"description": "Summary not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Delete a summary",
)
async def delete_summary(summary_id: str, db: AsyncSession = Depends(get_db_session)):
    await summary_pipeline.delete(db, summary_id)
    return Response(status_code=204)
