"""
CareNotes Backend: Validation Rules
=====================================

What:  Turns a raw, untyped request body into the typed input model for one
       operation, or raises ValidationError listing every invalid field.
How:   Each Operation maps to a Pydantic model in app.schemas. Pydantic
       collects all field errors in one pass; they are flattened to
       [{"field": "<camelCase path>", "message": "<reason>"}].
Who:   Called as the first step of every write in ResourcePipeline, and by
       the RequestValidationError handler in main.py.

Validation never touches storage.
"""

from enum import Enum
from typing import Any, Dict, List, Sequence, Type

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from app.exceptions import ValidationError
from app.schemas.patient import PatientCreate, PatientUpdate
from app.schemas.summary import SummaryCreate
from app.schemas.voice_note import VoiceNoteCreate


class Operation(str, Enum):
    CREATE_PATIENT = "CreatePatient"
    UPDATE_PATIENT = "UpdatePatient"
    CREATE_VOICE_NOTE = "CreateVoiceNote"
    CREATE_SUMMARY = "CreateSummary"


INPUT_MODELS: Dict[Operation, Type[BaseModel]] = {
    Operation.CREATE_PATIENT: PatientCreate,
    Operation.UPDATE_PATIENT: PatientUpdate,
    Operation.CREATE_VOICE_NOTE: VoiceNoteCreate,
    Operation.CREATE_SUMMARY: SummaryCreate,
}


def format_errors(errors: Sequence[Dict[str, Any]], skip_prefix: Sequence[str] = ()) -> List[Dict[str, str]]:
    """
    Flatten Pydantic error dicts to field/message pairs.

    `skip_prefix` drops leading location parts such as FastAPI's "body"/"query".
    """
    formatted = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        while loc and loc[0] in skip_prefix:
            loc = loc[1:]
        formatted.append({
            "field": ".".join(loc) or "body",
            "message": error.get("msg", "Invalid value"),
        })
    return formatted


def validate(operation: Operation, raw: Any) -> BaseModel:
    """
    Validate `raw` against the input contract of `operation`.

    Returns:
        The operation's input model instance (normalized, typed values).

    Raises:
        ValidationError: body is not a JSON object or any field is invalid.
    """
    if not isinstance(raw, dict):
        raise ValidationError(
            errors=[{"field": "body", "message": "Request body must be a JSON object"}],
        )

    model = INPUT_MODELS[operation]
    try:
        return model.model_validate(raw)
    except PydanticValidationError as exc:
        raise ValidationError(
            errors=format_errors(exc.errors()),
            context={"operation": operation.value},
        ) from exc
