"""Persistence repositories. Re-exports for dependency injection."""

from app.infrastructure.persistence.repositories.audit_trail_repo import (
    AuditTrailRepository,
)
from app.infrastructure.persistence.repositories.audited_repo import (
    AuditedRepository,
    build_interceptor,
)
from app.infrastructure.persistence.repositories.base import BaseRepository, orm_snapshot
from app.infrastructure.persistence.repositories.report_repo import (
    LabReportSequenceRepository,
    ReportRepository,
    ReportStatusHistoryRepository,
)
from app.infrastructure.persistence.repositories.user_repo import UserRepository

__all__ = [
    "AuditTrailRepository",
    "AuditedRepository",
    "BaseRepository",
    "LabReportSequenceRepository",
    "ReportRepository",
    "ReportStatusHistoryRepository",
    "UserRepository",
    "build_interceptor",
    "orm_snapshot",
]
