"""
CareNotes Backend: Shared Pydantic Schemas
============================================

What:  Base model, response envelope, error and health shapes shared by
       every resource.
How:   `CamelModel` maps snake_case attributes to the camelCase keys used on
       the wire, so `date_of_birth` is read from and written as `dateOfBirth`.
"""

from datetime import datetime
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base for every request and response body."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class DataResponse(BaseModel, Generic[T]):
    """
    What:  Envelope for every successful /api response body.

    Example:
        {"data": {"id": "...", "name": "John Doe", ...}}
        {"data": [{...}, {...}]}
    """
    data: T


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Fields:
        error: Machine-readable error code (e.g., "validation_error", "not_found")
        message: Human-readable description
        details: Optional extra context (e.g., list of invalid fields)
        request_id: Correlation ID for tracing this error in server logs

    Example:
        {
            "error": "validation_error",
            "message": "Validation failed",
            "details": [{"field": "dateOfBirth", "message": "String should match pattern ..."}],
            "request_id": "550e8400-e29b-41d4-a716-446655440000"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: Optional[str] = Field(default=None, description="Human-readable error description")
    details: Optional[Any] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and load balancer checks."""
    status: str = Field(description="ok when the database answers, degraded otherwise")
    timestamp: datetime = Field(description="Server time (UTC)")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")

