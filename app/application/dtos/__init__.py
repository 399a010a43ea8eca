"""Application DTOs (no ORM dependency)."""

from app.application.dtos.audit_trail import (
    AuditEntryCreate,
    AuditEntryResult,
    AuditFilters,
    AuditPage,
)
from app.application.dtos.auth import Principal

__all__ = [
    "AuditEntryCreate",
    "AuditEntryResult",
    "AuditFilters",
    "AuditPage",
    "Principal",
]
