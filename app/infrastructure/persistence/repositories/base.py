"""Base repository: generic reads and ORM snapshot helper."""

import copy
from typing import Any, Generic, TypeVar

from sqlalchemy import inspect as sa_inspect, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.persistence.database import Base


def orm_snapshot(obj: Any) -> dict[str, Any] | None:
    """Return a detached {column: value} copy of an ORM instance (None passes through).

    Values are deep-copied so later in-place edits (e.g. JSON columns) do not
    leak into a snapshot taken before a write. Models without an id column
    may expose an id property; it is included for audit attribution.
    """
    if obj is None:
        return None
    mapper = sa_inspect(obj).mapper
    snap = {attr.key: copy.deepcopy(getattr(obj, attr.key)) for attr in mapper.column_attrs}
    if "id" not in snap and hasattr(obj, "id"):
        snap["id"] = obj.id
    return snap


ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository with get_by_id and get_all."""

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    async def get_by_id(self, entity_id: Any) -> ModelType | None:
        """Return a single record by primary key, or None."""
        return await self.db.get(self.model, entity_id)

    async def get_all(self, skip: int = 0, limit: int = 100) -> list[ModelType]:
        """Return records with pagination."""
        result = await self.db.execute(select(self.model).offset(skip).limit(limit))
        return list(result.scalars().all())
