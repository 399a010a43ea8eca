"""Report repositories: reports (audited), number sequences (audited), status history."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from app.infrastructure.persistence.interceptor import RecordedWrite, WriteInterceptor
from app.infrastructure.persistence.models.report import (
    LabReportSequence,
    Report,
    ReportStatusHistory,
)
from app.infrastructure.persistence.repositories.audited_repo import AuditedRepository
from app.shared import context
from app.shared.utils.generators import generate_cuid

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


class ReportStatusHistoryRepository:
    """Append-only log of report status transitions."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def append(
        self,
        report_id: str,
        from_status: str,
        to_status: str,
    ) -> ReportStatusHistory:
        """Record one transition, attributed from the request context."""
        ctx = context.current()
        row = ReportStatusHistory(
            id=generate_cuid(),
            report_id=report_id,
            from_status=from_status,
            to_status=to_status,
            reason=ctx.reason if ctx else None,
            user_id=ctx.user_id if ctx else None,
            role=ctx.role if ctx else None,
            ip_address=ctx.ip if ctx else None,
        )
        async with self.db.begin_nested():
            self.db.add(row)
            await self.db.flush()
        return row

    async def list_for_report(self, report_id: str) -> list[ReportStatusHistory]:
        """Transitions of one report, oldest first."""
        result = await self.db.execute(
            select(ReportStatusHistory)
            .where(ReportStatusHistory.report_id == report_id)
            .order_by(ReportStatusHistory.created_at.asc())
        )
        return list(result.scalars().all())


class ReportRepository(AuditedRepository[Report]):
    """Audited report repository; status changes also land in report_status_history."""

    def __init__(
        self, db: AsyncSession, interceptor: WriteInterceptor | None = None
    ) -> None:
        super().__init__(db, Report, interceptor)
        self._history = ReportStatusHistoryRepository(db)

    async def list_reports(
        self,
        *,
        client: str | None = None,
        status: str | None = None,
        form_type: str | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[Report]:
        """Reports newest first, optionally filtered."""
        stmt = select(Report)
        if client is not None:
            stmt = stmt.where(Report.client == client)
        if status is not None:
            stmt = stmt.where(Report.status == status)
        if form_type is not None:
            stmt = stmt.where(Report.form_type == form_type)
        stmt = stmt.order_by(Report.created_at.desc()).offset(skip).limit(limit)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_status_history(self, report_id: str) -> list[ReportStatusHistory]:
        return await self._history.list_for_report(report_id)

    async def _after_write(self, recorded: RecordedWrite) -> None:
        before_status = (recorded.before or {}).get("status")
        after_status = (recorded.after or {}).get("status")
        if not before_status or not after_status or before_status == after_status:
            return
        report_id = recorded.entity_id
        if report_id is None:
            return
        await self._history.append(report_id, before_status, after_status)


class LabReportSequenceRepository(AuditedRepository[LabReportSequence]):
    """Per-department report number counters."""

    def __init__(
        self, db: AsyncSession, interceptor: WriteInterceptor | None = None
    ) -> None:
        super().__init__(db, LabReportSequence, interceptor)

    async def next_number(self, department: str) -> int:
        """Atomically advance and return the department's counter (first call returns 1)."""
        seq = await self.upsert(
            department,
            create={"last_number": 1},
            update={"last_number": LabReportSequence.last_number + 1},
        )
        return seq.last_number
