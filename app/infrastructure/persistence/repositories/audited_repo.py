"""Audited repository: every mutation goes through the write interceptor.

Subclasses get create/update/upsert/delete and the bulk variants with
automatic audit trail entries; call sites never invoke audit logic.
Override _after_write to react to recorded writes (e.g. status history).
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Any, TypeVar

from sqlalchemy import delete as sa_delete, inspect as sa_inspect, select, update as sa_update
from sqlalchemy.dialects.postgresql import insert as pg_insert

from app.core.config import get_settings
from app.domain.exceptions import ResourceNotFoundException
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.interceptor import RecordedWrite, WriteInterceptor
from app.infrastructure.persistence.repositories.audit_trail_repo import (
    AuditTrailRepository,
)
from app.infrastructure.persistence.repositories.base import BaseRepository, orm_snapshot
from app.shared.enums import AuditAction

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


def build_interceptor(db: AsyncSession) -> WriteInterceptor:
    """Interceptor appending to the audit trail in the same session (composition helper)."""
    return WriteInterceptor(
        AuditTrailRepository(db),
        ignored_fields=get_settings().audit_ignored_field_set,
    )


ModelType = TypeVar("ModelType", bound=Base)


class AuditedRepository(BaseRepository[ModelType]):
    """Repository whose mutations are all recorded in the audit trail.

    Pass interceptor in the constructor to share one across repositories;
    by default one is built on the same session.
    """

    def __init__(
        self,
        db: AsyncSession,
        model: type[ModelType],
        interceptor: WriteInterceptor | None = None,
    ) -> None:
        super().__init__(db, model)
        self._interceptor = interceptor or build_interceptor(db)

    @property
    def entity(self) -> str:
        """Record type name written to audit_trail.entity."""
        return self.model.__name__

    def _column(self, name: str) -> Any:
        if name not in sa_inspect(self.model).columns:
            raise ValueError(f"{self.entity} has no column '{name}'")
        return getattr(self.model, name)

    def _where(self, filters: Mapping[str, Any]) -> list[Any]:
        conditions = []
        for name, value in filters.items():
            column = self._column(name)
            if isinstance(value, (list, tuple, set, frozenset)):
                conditions.append(column.in_(list(value)))
            else:
                conditions.append(column == value)
        return conditions

    async def _require(self, entity_id: Any) -> ModelType:
        obj = await self.get_by_id(entity_id)
        if obj is None:
            raise ResourceNotFoundException(self.entity, str(entity_id))
        return obj

    async def _intercept(
        self,
        action: AuditAction,
        operation: Callable[[], Awaitable[Any]],
        fetch_before: Callable[[], Awaitable[Any]] | None = None,
    ) -> Any:
        return await self._interceptor.intercept(
            self.entity,
            action,
            operation,
            fetch_before=fetch_before,
            snapshot=self._snapshot,
            after_write=self._after_write,
        )

    def _snapshot(self, obj: Any) -> dict[str, Any] | None:
        """Field mapping recorded for obj; override to drop sensitive columns."""
        return orm_snapshot(obj)

    async def _after_write(self, recorded: RecordedWrite) -> None:
        """Override to react to a recorded write (runs after the audit entry)."""

    async def create(self, data: Mapping[str, Any]) -> ModelType:
        """Insert one record from column values."""

        async def _create() -> ModelType:
            obj = self.model(**dict(data))
            self.db.add(obj)
            await self.db.flush()
            await self.db.refresh(obj)
            return obj

        return await self._intercept(AuditAction.CREATE, _create)

    async def update(self, entity_id: Any, data: Mapping[str, Any]) -> ModelType:
        """Apply column values to one record by primary key.

        Raises:
            ResourceNotFoundException: If no record has that key.
        """
        for name in data:
            self._column(name)

        async def _update() -> ModelType:
            obj = await self._require(entity_id)
            for name, value in data.items():
                setattr(obj, name, value)
            await self.db.flush()
            await self.db.refresh(obj)
            return obj

        return await self._intercept(
            AuditAction.UPDATE, _update, fetch_before=lambda: self.get_by_id(entity_id)
        )

    async def upsert(
        self,
        entity_id: Any,
        create: Mapping[str, Any],
        update: Mapping[str, Any],
    ) -> ModelType:
        """Insert create, or apply update when a row with that primary key exists.

        Runs as one INSERT ... ON CONFLICT DO UPDATE. update values may be SQL
        expressions over the existing row (e.g. Model.counter + 1).
        """
        pk = sa_inspect(self.model).primary_key
        if len(pk) != 1:
            raise ValueError(f"{self.entity} upsert needs a single-column primary key")
        pk_name = pk[0].key

        async def _upsert() -> ModelType:
            stmt = (
                pg_insert(self.model)
                .values({pk_name: entity_id, **dict(create)})
                .on_conflict_do_update(index_elements=[pk_name], set_=dict(update))
                .returning(self.model)
            )
            orm_stmt = (
                select(self.model)
                .from_statement(stmt)
                .execution_options(populate_existing=True)
            )
            result = await self.db.execute(orm_stmt)
            return result.scalar_one()

        return await self._intercept(
            AuditAction.UPSERT, _upsert, fetch_before=lambda: self.get_by_id(entity_id)
        )

    async def delete(self, entity_id: Any) -> ModelType:
        """Delete one record by primary key and return it.

        Raises:
            ResourceNotFoundException: If no record has that key.
        """

        async def _delete() -> ModelType:
            obj = await self._require(entity_id)
            await self.db.delete(obj)
            await self.db.flush()
            return obj

        return await self._intercept(
            AuditAction.DELETE, _delete, fetch_before=lambda: self.get_by_id(entity_id)
        )

    async def create_many(self, rows: Sequence[Mapping[str, Any]]) -> int:
        """Insert many records; return how many were inserted."""

        async def _create_many() -> int:
            if not rows:
                return 0
            objs = [self.model(**dict(row)) for row in rows]
            self.db.add_all(objs)
            await self.db.flush()
            return len(objs)

        return await self._intercept(AuditAction.CREATE_MANY, _create_many)

    async def update_many(
        self, filters: Mapping[str, Any], data: Mapping[str, Any]
    ) -> int:
        """Apply column values to every record matching filters; return affected rows."""
        conditions = self._where(filters)
        for name in data:
            self._column(name)

        async def _update_many() -> int:
            stmt = (
                sa_update(self.model)
                .where(*conditions)
                .values(dict(data))
                .execution_options(synchronize_session="fetch")
            )
            result = await self.db.execute(stmt)
            return result.rowcount

        return await self._intercept(AuditAction.UPDATE_MANY, _update_many)

    async def delete_many(self, filters: Mapping[str, Any]) -> int:
        """Delete every record matching filters; return affected rows."""
        conditions = self._where(filters)

        async def _delete_many() -> int:
            stmt = (
                sa_delete(self.model)
                .where(*conditions)
                .execution_options(synchronize_session="fetch")
            )
            result = await self.db.execute(stmt)
            return result.rowcount

        return await self._intercept(AuditAction.DELETE_MANY, _delete_many)
