"""Persistence models: ORM entities and mixins."""

from app.infrastructure.persistence.models.audit_trail import (
    AUDIT_TRAIL_ENTITY,
    AuditTrail,
)
from app.infrastructure.persistence.models.mixins import (
    CreatedAtMixin,
    CuidMixin,
    LimsModel,
    TimestampMixin,
)
from app.infrastructure.persistence.models.report import (
    LabReportSequence,
    Report,
    ReportStatusHistory,
)
from app.infrastructure.persistence.models.user import User

__all__ = [
    "AUDIT_TRAIL_ENTITY",
    "AuditTrail",
    "CreatedAtMixin",
    "CuidMixin",
    "LabReportSequence",
    "LimsModel",
    "Report",
    "ReportStatusHistory",
    "TimestampMixin",
    "User",
]
