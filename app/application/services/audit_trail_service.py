"""Audit trail reporting: paged listing, per-record history and CSV export."""

from __future__ import annotations

import json
from datetime import date, datetime
from typing import Any, Literal

from app.application.dtos.audit_trail import AuditEntryResult, AuditFilters, AuditPage
from app.core.config import get_settings
from app.shared.utils.datetime import end_of_day_utc, ensure_utc, start_of_day_utc

CSV_HEADERS = (
    "createdAt",
    "userId",
    "userName",
    "userEmail",
    "role",
    "ipAddress",
    "action",
    "entity",
    "entityId",
    "details",
    "changes",
)

DEFAULT_PAGE_SIZE = 20


def _csv_cell(value: Any) -> str:
    """Quote one cell: embedded quotes doubled, line breaks flattened to spaces."""
    text = "" if value is None else str(value)
    text = text.replace('"', '""').replace("\r\n", " ").replace("\n", " ")
    return f'"{text}"'


def _iso_utc(value: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a Z suffix."""
    dt = ensure_utc(value)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def entries_to_csv(rows: list[AuditEntryResult]) -> str:
    """Render audit entries as CSV text (header line first, no trailing newline)."""
    lines = [",".join(CSV_HEADERS)]
    for r in rows:
        cells = (
            _iso_utc(r.created_at),
            r.user_id or "",
            r.user_name or "",
            r.user_email or "",
            r.role or "",
            r.ip_address or "",
            r.action or "",
            r.entity or "",
            r.entity_id or "",
            json.dumps(r.details if r.details is not None else ""),
            json.dumps(r.changes if r.changes is not None else ""),
        )
        lines.append(",".join(_csv_cell(c) for c in cells))
    return "\n".join(lines)


def build_filters(
    *,
    entity: str | None = None,
    entity_id: str | None = None,
    user_id: str | None = None,
    action: str | None = None,
    from_date: date | datetime | None = None,
    to_date: date | datetime | None = None,
) -> AuditFilters:
    """Build AuditFilters from query values.

    A plain date in to_date covers that whole day; a plain date in
    from_date starts at midnight UTC.
    """

    def _bound(value: date | datetime | None, *, end: bool) -> datetime | None:
        if value is None:
            return None
        if isinstance(value, datetime):
            return ensure_utc(value)
        return end_of_day_utc(value) if end else start_of_day_utc(value)

    return AuditFilters(
        entity=entity or None,
        entity_id=entity_id or None,
        user_id=user_id or None,
        action=action.upper() if action else None,
        from_timestamp=_bound(from_date, end=False),
        to_timestamp=_bound(to_date, end=True),
    )


class AuditTrailService:
    """Read side of the audit trail."""

    def __init__(self, audit_repo: Any) -> None:
        self._audit_repo = audit_repo

    async def list_paged(
        self,
        filters: AuditFilters,
        *,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
        order: Literal["asc", "desc"] = "desc",
    ) -> AuditPage:
        """One page of matching entries plus the total count.

        page is clamped to >= 1 and page_size to 1..audit_page_size_max.
        """
        max_size = get_settings().audit_page_size_max
        safe_page = max(1, page or 1)
        safe_size = min(max(page_size or DEFAULT_PAGE_SIZE, 1), max_size)
        items = await self._audit_repo.list(
            filters,
            skip=(safe_page - 1) * safe_size,
            limit=safe_size,
            order=order,
        )
        total = await self._audit_repo.count(filters)
        return AuditPage(items=items, total=total, page=safe_page, page_size=safe_size)

    async def list_for_entity(self, entity: str, entity_id: str) -> list[AuditEntryResult]:
        return await self._audit_repo.list_for_entity(entity, entity_id)

    async def export_csv(self, entity: str, entity_id: str) -> str:
        """CSV of one record's history, oldest first."""
        return entries_to_csv(await self.list_for_entity(entity, entity_id))

    async def export_all_csv(
        self, filters: AuditFilters, *, order: Literal["asc", "desc"] = "desc"
    ) -> str:
        """CSV of every matching entry (unpaged)."""
        rows = await self._audit_repo.list(filters, skip=0, limit=None, order=order)
        return entries_to_csv(rows)
