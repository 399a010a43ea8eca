"""Audit trail repository. Append-only store for AuditTrail rows."""

from __future__ import annotations

from typing import Any, Literal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.audit_trail import (
    AuditEntryCreate,
    AuditEntryResult,
    AuditFilters,
)
from app.infrastructure.persistence.models.audit_trail import AuditTrail
from app.infrastructure.persistence.models.user import User
from app.shared.utils.generators import generate_cuid


def _orm_to_result(
    row: AuditTrail, user_name: str | None = None, user_email: str | None = None
) -> AuditEntryResult:
    """Map ORM (plus the joined acting user, if any) to application DTO."""
    return AuditEntryResult(
        id=row.id,
        action=row.action,
        entity=row.entity,
        entity_id=row.entity_id,
        details=row.details,
        changes=row.changes,
        user_id=row.user_id,
        role=row.role,
        ip_address=row.ip_address,
        created_at=row.created_at,
        user_name=user_name,
        user_email=user_email,
    )


def _with_user(stmt: Any) -> Any:
    """Outer-join the acting user; entries of deleted or unknown users keep None."""
    return stmt.outerjoin(User, AuditTrail.user_id == User.id)


def _conditions(filters: AuditFilters) -> list[Any]:
    conditions: list[Any] = []
    if filters.entity:
        conditions.append(AuditTrail.entity == filters.entity)
    if filters.entity_id:
        conditions.append(AuditTrail.entity_id.ilike(f"%{filters.entity_id}%"))
    if filters.user_id:
        conditions.append(AuditTrail.user_id.ilike(f"%{filters.user_id}%"))
    if filters.action:
        conditions.append(AuditTrail.action == filters.action)
    if filters.from_timestamp is not None:
        conditions.append(AuditTrail.created_at >= filters.from_timestamp)
    if filters.to_timestamp is not None:
        conditions.append(AuditTrail.created_at <= filters.to_timestamp)
    return conditions


class AuditTrailRepository:
    """Append-only audit trail repository. No update/delete."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def append(self, entry: AuditEntryCreate) -> AuditEntryResult:
        """Append one audit entry inside a SAVEPOINT; return the created record.

        A failed insert rolls back only the savepoint, so the surrounding
        transaction (holding the audited write) stays usable.
        """
        row = AuditTrail(
            id=generate_cuid(),
            action=entry.action,
            entity=entry.entity,
            entity_id=entry.entity_id,
            details=entry.details,
            changes=entry.changes,
            user_id=entry.user_id,
            role=entry.role,
            ip_address=entry.ip_address,
        )
        async with self.db.begin_nested():
            self.db.add(row)
            await self.db.flush()
        await self.db.refresh(row)
        return _orm_to_result(row)

    async def _fetch(self, stmt: Any) -> list[AuditEntryResult]:
        result = await self.db.execute(stmt)
        return [_orm_to_result(row, name, email) for row, name, email in result.all()]

    async def list(
        self,
        filters: AuditFilters | None = None,
        *,
        skip: int = 0,
        limit: int | None = 100,
        order: Literal["asc", "desc"] = "desc",
    ) -> list[AuditEntryResult]:
        """List audit entries matching filters (newest first by default).

        The acting user's name and email are joined in when the user still exists.
        """
        conditions = _conditions(filters or AuditFilters())
        ordering = (
            AuditTrail.created_at.asc() if order == "asc" else AuditTrail.created_at.desc()
        )
        stmt = (
            _with_user(select(AuditTrail, User.name, User.email))
            .where(*conditions)
            .order_by(ordering)
            .offset(skip)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return await self._fetch(stmt)

    async def count(self, filters: AuditFilters | None = None) -> int:
        """Count audit entries matching filters."""
        conditions = _conditions(filters or AuditFilters())
        stmt = select(func.count()).select_from(AuditTrail).where(*conditions)
        result = await self.db.execute(stmt)
        return int(result.scalar_one())

    async def list_for_entity(self, entity: str, entity_id: str) -> list[AuditEntryResult]:
        """Full history of one record, oldest first, with the acting user joined in."""
        stmt = (
            _with_user(select(AuditTrail, User.name, User.email))
            .where(AuditTrail.entity == entity, AuditTrail.entity_id == entity_id)
            .order_by(AuditTrail.created_at.asc())
        )
        return await self._fetch(stmt)
