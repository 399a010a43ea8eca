"""Write interceptor: records an audit trail entry for every mutating repository call.

All repository mutations (create, update, upsert, delete and their bulk
variants) go through WriteInterceptor.intercept. Per call it:

1. passes through unchanged for the audit store itself, for non-mutating
   actions, and when the request context sets skip_audit;
2. fetches the current snapshot for update/delete/upsert (lookup errors
   degrade to before=None);
3. awaits the real operation (its errors propagate, nothing is recorded);
4. diffs before/after and appends one entry attributed from the request
   context. A failed audit append is logged and never reaches the caller.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol, TypeVar

from app.application.dtos.audit_trail import AuditEntryCreate
from app.application.services.change_differ import FieldDiff, compute_diff
from app.infrastructure.persistence.models.audit_trail import AUDIT_TRAIL_ENTITY
from app.shared import context
from app.shared.enums import AuditAction
from app.shared.logging import get_logger

T = TypeVar("T")
Snapshot = dict[str, Any]

_logger = get_logger(__name__)

_BEFORE_ACTIONS = frozenset({AuditAction.UPDATE, AuditAction.DELETE, AuditAction.UPSERT})

_VERBS: dict[AuditAction, str] = {
    AuditAction.CREATE: "Created",
    AuditAction.UPDATE: "Updated",
    AuditAction.UPSERT: "Upserted",
    AuditAction.DELETE: "Deleted",
    AuditAction.CREATE_MANY: "Created many",
    AuditAction.UPDATE_MANY: "Updated many",
    AuditAction.DELETE_MANY: "Deleted many",
}


class AuditSink(Protocol):
    """Where audit entries are appended (AuditTrailRepository in production)."""

    async def append(self, entry: AuditEntryCreate) -> Any: ...


@dataclass(frozen=True)
class RecordedWrite:
    """What the interceptor observed for one audited write; passed to after_write hooks."""

    entity: str
    action: AuditAction
    entity_id: str | None
    before: Snapshot | None
    after: Snapshot | None
    changes: FieldDiff | None


def mapping_snapshot(value: Any) -> Snapshot | None:
    """Default snapshot: copy mappings, anything else has no snapshot."""
    if isinstance(value, Mapping):
        return dict(value)
    return None


def _parse_action(action: AuditAction | str) -> AuditAction | None:
    if isinstance(action, AuditAction):
        return action
    try:
        return AuditAction(str(action).upper())
    except ValueError:
        return None


def _entity_id(after: Snapshot | None, before: Snapshot | None) -> str | None:
    for snap in (after, before):
        if snap and snap.get("id") is not None:
            return str(snap["id"])
    return None


def _details(action: AuditAction, entity: str, entity_id: str | None, result: Any) -> str:
    summary = f"{_VERBS[action]} {entity}"
    if action.is_bulk:
        if isinstance(result, int) and not isinstance(result, bool):
            summary = f"{summary} ({result} rows)"
    elif entity_id:
        summary = f"{summary} {entity_id}"
    ctx = context.current()
    if ctx is not None and ctx.reason:
        summary = f"{summary} | reason: {ctx.reason}"
    return summary


class WriteInterceptor:
    """Chokepoint that wraps mutating data-access calls with audit recording."""

    def __init__(self, sink: AuditSink, *, ignored_fields: Iterable[str] = ()) -> None:
        self._sink = sink
        self._ignored_fields = frozenset(ignored_fields)

    async def intercept(
        self,
        entity: str,
        action: AuditAction | str,
        operation: Callable[[], Awaitable[T]],
        *,
        fetch_before: Callable[[], Awaitable[Any]] | None = None,
        snapshot: Callable[[Any], Snapshot | None] = mapping_snapshot,
        after_write: Callable[[RecordedWrite], Awaitable[None]] | None = None,
    ) -> T:
        """Run operation and append one audit entry describing it.

        Args:
            entity: Record type name (e.g. 'Report').
            action: Mutation kind; non-mutating kinds pass through.
            operation: The real write; its result is returned unchanged.
            fetch_before: Loads the current record for update/delete/upsert.
            snapshot: Converts a record (or operation result) to a field mapping.
            after_write: Optional hook run after the audit entry is appended.

        Returns:
            Whatever operation returned.
        """
        kind = _parse_action(action)
        ctx = context.current()
        if (
            entity == AUDIT_TRAIL_ENTITY
            or kind is None
            or not kind.is_mutation
            or (ctx is not None and ctx.skip_audit)
        ):
            return await operation()

        before: Snapshot | None = None
        if kind in _BEFORE_ACTIONS and fetch_before is not None:
            try:
                before = snapshot(await fetch_before())
            except Exception:
                _logger.debug(
                    "Could not load %s before %s; recording without prior state",
                    entity,
                    kind.value,
                    exc_info=True,
                )
                before = None

        result = await operation()

        after = None if kind is AuditAction.DELETE else snapshot(result)
        entity_id = None if kind.is_bulk else _entity_id(after, before)
        changes: FieldDiff | None = None
        if kind in (AuditAction.UPDATE, AuditAction.UPSERT):
            changes = compute_diff(before, after, ignore=self._ignored_fields)

        ctx = context.current()
        entry = AuditEntryCreate(
            action=kind.value,
            entity=entity,
            entity_id=entity_id,
            details=_details(kind, entity, entity_id, result),
            changes=changes,
            user_id=ctx.user_id if ctx else None,
            role=ctx.role if ctx else None,
            ip_address=ctx.ip if ctx else None,
        )
        recorded = RecordedWrite(
            entity=entity,
            action=kind,
            entity_id=entity_id,
            before=before,
            after=after,
            changes=changes,
        )
        # Runs to completion even if the caller is cancelled meanwhile. The
        # caller waits for it before unwinding so the session is never used
        # concurrently (e.g. by a transaction rollback).
        task = asyncio.ensure_future(self._record(entry, recorded, after_write))
        try:
            await asyncio.shield(task)
        except asyncio.CancelledError:
            await task
            raise
        return result

    async def _record(
        self,
        entry: AuditEntryCreate,
        recorded: RecordedWrite,
        after_write: Callable[[RecordedWrite], Awaitable[None]] | None,
    ) -> None:
        try:
            await self._sink.append(entry)
        except Exception as e:
            _logger.warning(
                "Failed to write audit entry for %s.%s (%s): %s",
                entry.entity,
                entry.action,
                entry.entity_id,
                str(e),
                exc_info=True,
            )
        if after_write is None:
            return
        try:
            await after_write(recorded)
        except Exception as e:
            _logger.warning(
                "after_write hook failed for %s.%s (%s): %s",
                entry.entity,
                entry.action,
                entry.entity_id,
                str(e),
                exc_info=True,
            )
