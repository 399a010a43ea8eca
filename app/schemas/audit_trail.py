"""Request/response schemas for the audit trail API."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class AuditEntryResponse(BaseModel):
    """Single audit trail entry (read)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    action: str
    entity: str
    entity_id: str | None = None
    details: str
    changes: Any | None = None
    user_id: str | None = None
    role: str | None = None
    ip_address: str | None = None
    created_at: datetime
    user_name: str | None = None
    user_email: str | None = None


class AuditPageResponse(BaseModel):
    """Paginated list of audit entries."""

    model_config = ConfigDict(from_attributes=True)

    items: list[AuditEntryResponse]
    total: int
    page: int
    page_size: int
