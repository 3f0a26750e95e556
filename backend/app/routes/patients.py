"""
CareNotes Backend: Patient Route Handlers
===========================================

What:  CRUD endpoints for patients.
How:   Bodies are accepted as raw JSON and handed to the patient pipeline,
       which validates them; errors are rendered by the handlers in main.py.

Deleting a patient also removes the patient's voice notes and their
summaries (ON DELETE CASCADE in the schema).
"""

import logging
from typing import Any, List

from fastapi import APIRouter, Body, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.common import DataResponse, ErrorResponse
from app.schemas.patient import PatientResponse
from app.services.resources import patient_pipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Patients"])


@router.get(
    "/patients",
    response_model=DataResponse[List[PatientResponse]],
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="List patients, newest first",
)
async def list_patients(db: AsyncSession = Depends(get_db_session)):
    return {"data": await patient_pipeline.list(db)}


@router.get(
    "/patients/{patient_id}",
    response_model=DataResponse[PatientResponse],
    responses={
        404: {"description": "Patient not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Get a single patient",
)
async def get_patient(patient_id: str, db: AsyncSession = Depends(get_db_session)):
    return {"data": await patient_pipeline.get(db, patient_id)}


@router.post(
    "/patients",
    status_code=201,
    response_model=DataResponse[PatientResponse],
    responses={
        400: {"description": "Invalid input", "model": ErrorResponse},
        409: {"description": "Medical record number already exists", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Create a patient",
    description=(
        "Body: {name, dateOfBirth (YYYY-MM-DD), medicalRecordNumber}. "
        "The medical record number must be unique."
    ),
)
async def create_patient(
    payload: Any = Body(default=None),
    db: AsyncSession = Depends(get_db_session),
):
    return {"data": await patient_pipeline.create(db, payload)}


@router.patch(
    "/patients/{patient_id}",
    response_model=DataResponse[PatientResponse],
    responses={
        400: {"description": "Invalid input or no fields to update", "model": ErrorResponse},
        404: {"description": "Patient not found", "model": ErrorResponse},
        409: {"description": "Medical record number already exists", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Update some fields of a patient",
)
async def update_patient(
    patient_id: str,
    payload: Any = Body(default=None),
    db: AsyncSession = Depends(get_db_session),
):
    return {"data": await patient_pipeline.update(db, patient_id, payload)}


@router.delete(
    "/patients/{patient_id}",
    status_code=204,
    response_class=Response,
    responses={
        404: {"description": "Patient not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Delete a patient and everything recorded for them",
)
async def delete_patient(patient_id: str, db: AsyncSession = Depends(get_db_session)):
    await patient_pipeline.delete(db, patient_id)
    return Response(status_code=204)
