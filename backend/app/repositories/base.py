"""
CareNotes Backend: Base Repository
====================================

What:  Generic insert / get / list / update / delete / exists operations over
       one ORM model.
How:   Subclasses set `model`, `resource`, the columns that reference other
       tables (`foreign_keys`) and the message used when a unique constraint
       rejects a write. Deletes are issued as a single DELETE statement so the
       schema's ON DELETE CASCADE rules remove dependents atomically.

Error classification (IntegrityError from the driver):
    foreign key violation  → ReferenceNotFoundError (referenced row vanished)
    anything else          → ConflictError (unique constraint)
"""

import logging
import uuid
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from pydantic.alias_generators import to_camel
from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import Base
from app.exceptions import ConflictError, ReferenceNotFoundError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)

# SQLSTATE for foreign_key_violation (PostgreSQL)
FOREIGN_KEY_VIOLATION = "23503"


def parse_id(value: Any) -> Optional[uuid.UUID]:
    """Coerce an identifier to UUID; malformed identifiers return None."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return None


def is_foreign_key_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code:
        return code == FOREIGN_KEY_VIOLATION
    return "FOREIGN KEY" in str(orig).upper()


class BaseRepository(Generic[ModelT]):
    """
    Table gateway for a single entity.

    Class attributes:
        model:             ORM class
        resource:          Human-readable name used in error messages
        foreign_keys:      column → referenced resource name
        conflict_message:  Message for unique-constraint violations
    """

    model: Type[ModelT]
    resource: str = "record"
    foreign_keys: Dict[str, str] = {}
    conflict_message: str = "A record with the same unique value already exists"

    def __init__(self, db: AsyncSession):
        self.db = db

    # ── Writes ────────────────────────────────────────────────────────────

    async def insert(self, **fields: Any) -> ModelT:
        """
        Persist a fully-formed row (id and timestamps already attached).

        Raises:
            ConflictError: A unique constraint rejected the row
            ReferenceNotFoundError: A referenced row no longer exists
        """
        record = self.model(**fields)
        self.db.add(record)
        try:
            await self.db.flush()
        except IntegrityError as exc:
            await self.db.rollback()
            raise self._classify_integrity_error(exc, fields) from exc
        return record

    async def update(
        self, record_id: Any, fields: Dict[str, Any], **stamps: Any
    ) -> Optional[ModelT]:
        """
        Apply `fields` (plus timestamp columns in `stamps`) to one row.

        Returns:
            The reloaded row, or None when no row has this id.
        """
        key = parse_id(record_id)
        if key is None:
            return None

        stmt = (
            update(self.model)
            .where(self.model.id == key)
            .values(**fields, **stamps)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.db.execute(stmt)
        except IntegrityError as exc:
            await self.db.rollback()
            raise self._classify_integrity_error(exc, fields) from exc

        if result.rowcount == 0:
            return None
        return await self.get_by_id(key)

    async def delete(self, record_id: Any) -> int:
        """Delete one row by id; returns the number of rows removed (0 or 1)."""
        key = parse_id(record_id)
        if key is None:
            return 0
        stmt = (
            delete(self.model)
            .where(self.model.id == key)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount

    # ── Reads ─────────────────────────────────────────────────────────────

    async def get_by_id(self, record_id: Any) -> Optional[Any]:
        key = parse_id(record_id)
        if key is None:
            return None
        return await self.db.get(self.model, key, populate_existing=True)

    async def list_all(self) -> List[Any]:
        result = await self.db.execute(
            select(self.model).order_by(self.model.created_at.desc())
        )
        return list(result.scalars().all())

    async def exists_by(self, column: str, value: Any) -> bool:
        stmt = (
            select(self.model.id)
            .where(getattr(self.model, column) == value)
            .limit(1)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def exists_by_id(self, record_id: Any) -> bool:
        key = parse_id(record_id)
        if key is None:
            return False
        return await self.exists_by("id", key)

    # ── Helpers ───────────────────────────────────────────────────────────

    def _classify_integrity_error(self, exc: IntegrityError, fields: Dict[str, Any]):
        if is_foreign_key_violation(exc) and self.foreign_keys:
            column, resource = next(iter(self.foreign_keys.items()))
            logger.warning(
                "%s write rejected: referenced %s %s no longer exists",
                self.resource, resource, fields.get(column),
            )
            value = fields.get(column)
            return ReferenceNotFoundError(
                resource=resource,
                resource_id=str(value) if value is not None else None,
                field=to_camel(column),
            )
        logger.warning("%s write rejected by unique constraint: %s", self.resource, exc.orig)
        return ConflictError(message=self.conflict_message)
