"""
CareNotes Backend: Patient Schemas
====================================

What:  Input contracts for CreatePatient / UpdatePatient and the patient
       response shape.
Who:   Input models are applied by app.services.validation; the response
       model is built by the request pipeline from ORM rows.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from app.schemas.common import CamelModel

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


class PatientCreate(CamelModel):
    """All three fields are required."""
    name: str = Field(min_length=1, max_length=100, examples=["John Doe"])
    date_of_birth: str = Field(pattern=DATE_PATTERN, examples=["1990-01-01"])
    medical_record_number: str = Field(min_length=1, max_length=50, examples=["MRN001"])


class PatientUpdate(CamelModel):
    """
    Partial update: every field is optional.

    An empty body is valid here; rejecting "nothing to update" is the
    pipeline's job. Explicit nulls are rejected because every column is
    NOT NULL.
    """
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    date_of_birth: Optional[str] = Field(default=None, pattern=DATE_PATTERN)
    medical_record_number: Optional[str] = Field(default=None, min_length=1, max_length=50)

    @field_validator("name", "date_of_birth", "medical_record_number", mode="before")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("must not be null")
        return v


class PatientResponse(CamelModel):
    id: uuid.UUID
    name: str
    date_of_birth: str
    medical_record_number: str
    created_at: datetime
    updated_at: datetime
