"""DTOs for the audit trail (record change log and auth events)."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class AuditEntryCreate:
    """Input for appending one audit trail record. Append-only; no update."""

    action: str
    entity: str
    entity_id: str | None
    details: str
    changes: Any | None
    user_id: str | None
    role: str | None
    ip_address: str | None


@dataclass(frozen=True)
class AuditEntryResult:
    """Single audit trail entry (read-model for list/export)."""

    id: str
    action: str
    entity: str
    entity_id: str | None
    details: str
    changes: Any | None
    user_id: str | None
    role: str | None
    ip_address: str | None
    created_at: datetime
    user_name: str | None = None
    user_email: str | None = None


@dataclass(frozen=True)
class AuditFilters:
    """Optional filters for listing audit entries.

    entity_id and user_id match case-insensitively as substrings; entity and
    action match exactly. Timestamps are inclusive.
    """

    entity: str | None = None
    entity_id: str | None = None
    user_id: str | None = None
    action: str | None = None
    from_timestamp: datetime | None = None
    to_timestamp: datetime | None = None


@dataclass(frozen=True)
class AuditPage:
    """One page of audit entries plus the total matching count."""

    items: list[AuditEntryResult]
    total: int
    page: int
    page_size: int
