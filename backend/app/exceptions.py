"""
CareNotes Backend: Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions, one per failure kind.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with the correct HTTP status.
       The auth and rate-limit middlewares render their two kinds directly
       because they run outside FastAPI's exception handling.
Who:   Raised by validation, repositories, the request pipeline and middleware.

Exception Hierarchy:
    CareNotesError (base)
    ├── ValidationError          → 400 Bad Request
    ├── UnauthorizedError        → 401 Unauthorized
    ├── NotFoundError            → 404 Not Found
    ├── ReferenceNotFoundError   → 404 Not Found (a related record is missing)
    ├── AlreadyExistsError       → 409 Conflict (singleton pre-check)
    ├── ConflictError            → 409 Conflict (unique constraint at write time)
    ├── RateLimitExceededError   → 429 Too Many Requests
    └── DatabaseError            → 500 Internal Server Error
"""

from typing import Any, Dict, List, Optional


class CareNotesError(Exception):
    """
    Base exception for all CareNotes application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(CareNotesError):
    """
    Raised when client input fails validation.

    HTTP:    400 Bad Request

    `errors` lists every violated field:
        [{"field": "dateOfBirth", "message": "String should match pattern ..."}]
    """

    def __init__(
        self,
        message: str = "Validation failed",
        errors: Optional[List[Dict[str, str]]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        self.errors = errors or []
        if self.errors:
            ctx["errors"] = self.errors
        super().__init__(message=message, context=ctx)


class NotFoundError(CareNotesError):
    """
    Raised when the target of a read, update or delete does not exist.

    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class ReferenceNotFoundError(NotFoundError):
    """
    Raised when a dependent write names a related record that does not exist.

    When:    POST /api/voice-notes with an unknown patientId,
             POST /api/summaries with an unknown voiceNoteId.
    HTTP:    404 Not Found

    `field` is the camelCase input field holding the dangling reference.
    """

    def __init__(
        self,
        resource: str,
        resource_id: Optional[str] = None,
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(resource=resource, resource_id=resource_id, context=ctx)
        self.field = field


class AlreadyExistsError(CareNotesError):
    """
    Raised when a singleton dependent already exists for its parent.

    When:    A second summary is posted for the same voice note.
    HTTP:    409 Conflict
    """

    def __init__(
        self,
        resource: str,
        parent: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} already exists for this {parent}"
        ctx = context or {}
        ctx.update({"resource": resource, "parent": parent})
        super().__init__(message=message, context=ctx)


class ConflictError(CareNotesError):
    """
    Raised when the store rejects a write because of a uniqueness constraint.

    When:    Duplicate medicalRecordNumber; a summary inserted concurrently
             for the same voice note.
    HTTP:    409 Conflict
    """

    def __init__(
        self,
        message: str = "A record with the same unique value already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UnauthorizedError(CareNotesError):
    """
    Raised when the x-api-key header is missing or does not match.

    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "Invalid API key",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(CareNotesError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    The message returned to the client is always generic. Driver messages,
    SQL and constraint names are logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(CareNotesError):
    """
    Raised when a client exceeds the per-key request rate limit.

    HTTP:    429 Too Many Requests

    Response includes:
        - retry_after: Seconds until the oldest request leaves the window
        - Retry-After header for HTTP-compliant clients
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = "Too many requests, please try again later"
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
