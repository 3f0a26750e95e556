"""
CareNotes Backend: Request Pipeline
=====================================

What:  The validate → check references → persist → reload sequence shared by
       every resource, parameterized per resource.
How:   A ResourcePipeline is configured once per entity (see resources.py)
       with its repository, input operations, foreign references and
       singleton rule. Route handlers call create/update/delete/get/list.
Who:   Called by route handlers; calls validation and repositories.
When:  For every /api request.

Write Flow (create):
    ┌──────────┐   ┌────────────┐   ┌───────────┐   ┌───────────┐   ┌────────┐
    │ Validate │──▶│ References │──▶│ Singleton │──▶│  Insert   │──▶│ Reload │
    │  (400)   │   │   (404)    │   │   (409)   │   │ (409/404) │   │        │
    └──────────┘   └────────────┘   └───────────┘   └───────────┘   └────────┘

    Each step either completes or raises; later steps never run after a
    failure, so a rejected write has no side effects.

Concurrency:
    Reference and singleton checks are advisory. A concurrent delete or insert
    between the check and the write is caught by the store's FK / UNIQUE
    constraints, which the repository reclassifies as ReferenceNotFoundError
    or ConflictError.

Error Handling Strategy:
    CareNotesError subclasses propagate unchanged. Any other SQLAlchemyError
    is logged with the request id and re-raised as DatabaseError, whose
    response body never contains driver detail.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Type

from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import (
    AlreadyExistsError,
    CareNotesError,
    DatabaseError,
    NotFoundError,
    ReferenceNotFoundError,
    ValidationError,
)
from app.middleware.request_id import request_id_var
from app.repositories.base import BaseRepository
from app.services.validation import Operation, validate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Reference:
    """A foreign record that must exist before a dependent write."""
    field: str                              # snake_case input attribute, e.g. "patient_id"
    repository: Type[BaseRepository]
    resource: str                           # e.g. "patient"


@dataclass(frozen=True)
class Singleton:
    """At most one record may carry a given value of `field`."""
    field: str
    parent: str


class ResourcePipeline:
    """
    Generic CRUD orchestration for one resource.

    Attributes:
        resource:          Name used in messages and logs ("patient")
        repository:        Repository class, instantiated per call with the session
        response_model:    Pydantic model built from stored rows
        create_operation:  Validation operation for create
        update_operation:  Validation operation for update (None: no updates)
        references:        Foreign records checked before create
        singleton:         Uniqueness rule checked before create
        timestamps:        Columns stamped with the same `now` on create
    """

    def __init__(
        self,
        resource: str,
        repository: Type[BaseRepository],
        response_model: Type[BaseModel],
        create_operation: Operation,
        update_operation: Optional[Operation] = None,
        references: Sequence[Reference] = (),
        singleton: Optional[Singleton] = None,
        timestamps: Sequence[str] = ("created_at",),
    ):
        self.resource = resource
        self.repository = repository
        self.response_model = response_model
        self.create_operation = create_operation
        self.update_operation = update_operation
        self.references = tuple(references)
        self.singleton = singleton
        self.timestamps = tuple(timestamps)

    # ── Writes ────────────────────────────────────────────────────────────

    async def create(self, db: AsyncSession, raw: Any) -> BaseModel:
        """
        Validate, check references and singleton, insert, reload.

        Raises:
            ValidationError:        Input shape invalid (400)
            ReferenceNotFoundError: A referenced record is missing (404)
            AlreadyExistsError:     Singleton already present (409)
            ConflictError:          Unique constraint rejected the insert (409)
            DatabaseError:          Any other storage failure (500)
        """
        payload = validate(self.create_operation, raw)
        fields = payload.model_dump()

        try:
            await self._check_references(db, fields)
            await self._check_singleton(db, fields)

            record_id = uuid.uuid4()
            now = datetime.now(timezone.utc)
            fields.update({column: now for column in self.timestamps})

            repository = self.repository(db)
            await repository.insert(id=record_id, **fields)
            stored = await repository.get_by_id(record_id)
        except CareNotesError:
            raise
        except SQLAlchemyError as exc:
            raise self._database_error("create", exc) from exc

        logger.info("[%s] %s created: %s", request_id_var.get(""), self.resource, record_id)
        return self._present(stored)

    async def update(self, db: AsyncSession, record_id: str, raw: Any) -> BaseModel:
        """
        Apply a partial update and refresh updated_at.

        Raises:
            ValidationError: Input shape invalid, or no fields supplied (400)
            NotFoundError:   No record with this id (404)
            ConflictError:   Unique constraint rejected the change (409)
            CareNotesError:  This resource is configured without an update operation
        """
        if self.update_operation is None:
            raise CareNotesError(
                message=f"{self.resource.capitalize()} records cannot be updated",
                context={"resource": self.resource},
            )

        payload = validate(self.update_operation, raw)
        changes: Dict[str, Any] = payload.model_dump(exclude_unset=True)
        if not changes:
            raise ValidationError(message="No fields to update")

        try:
            stored = await self.repository(db).update(
                record_id, changes, updated_at=datetime.now(timezone.utc)
            )
        except CareNotesError:
            raise
        except SQLAlchemyError as exc:
            raise self._database_error("update", exc) from exc

        if stored is None:
            raise NotFoundError(resource=self.resource, resource_id=record_id)

        logger.info("[%s] %s updated: %s", request_id_var.get(""), self.resource, record_id)
        return self._present(stored)

    async def delete(self, db: AsyncSession, record_id: str) -> None:
        """Delete one record; dependents go with it through the schema cascade."""
        try:
            deleted = await self.repository(db).delete(record_id)
        except SQLAlchemyError as exc:
            raise self._database_error("delete", exc) from exc

        if deleted == 0:
            raise NotFoundError(resource=self.resource, resource_id=record_id)

        logger.info("[%s] %s deleted: %s", request_id_var.get(""), self.resource, record_id)

    # ── Reads ─────────────────────────────────────────────────────────────

    async def get(self, db: AsyncSession, record_id: str) -> BaseModel:
        try:
            stored = await self.repository(db).get_by_id(record_id)
        except SQLAlchemyError as exc:
            raise self._database_error("fetch", exc) from exc

        if stored is None:
            raise NotFoundError(resource=self.resource, resource_id=record_id)
        return self._present(stored)

    async def list(self, db: AsyncSession, **filters: Any) -> List[BaseModel]:
        try:
            rows = await self.repository(db).list_all(**filters)
        except SQLAlchemyError as exc:
            raise self._database_error("list", exc) from exc
        return [self._present(row) for row in rows]

    # ── Steps ─────────────────────────────────────────────────────────────

    async def _check_references(self, db: AsyncSession, fields: Dict[str, Any]) -> None:
        for reference in self.references:
            value = fields[reference.field]
            if not await reference.repository(db).exists_by_id(value):
                raise ReferenceNotFoundError(
                    resource=reference.resource,
                    resource_id=str(value),
                    field=to_camel(reference.field),
                )

    async def _check_singleton(self, db: AsyncSession, fields: Dict[str, Any]) -> None:
        if self.singleton is None:
            return
        value = fields[self.singleton.field]
        if await self.repository(db).exists_by(self.singleton.field, value):
            raise AlreadyExistsError(resource=self.resource, parent=self.singleton.parent)

    def _present(self, stored: Any) -> BaseModel:
        return self.response_model.model_validate(stored)

    def _database_error(self, action: str, exc: SQLAlchemyError) -> DatabaseError:
        logger.error(
            "[%s] Failed to %s %s: %s",
            request_id_var.get(""), action, self.resource, exc,
            exc_info=True,
        )
        return DatabaseError(
            message="Internal server error",
            context={"resource": self.resource, "action": action, "error_type": type(exc).__name__},
        )
