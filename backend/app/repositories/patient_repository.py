"""Patient persistence: the only entity that supports in-place updates."""

from app.models.patient import Patient
from app.repositories.base import BaseRepository


class PatientRepository(BaseRepository[Patient]):
    model = Patient
    resource = "patient"
    conflict_message = "Medical record number already exists"
