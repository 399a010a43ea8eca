"""Report API schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.domain.enums import FormType, ReportStatus


class ReportCreate(BaseModel):
    """Request body for POST /reports (creates a DRAFT)."""

    form_type: FormType
    client: str = Field(..., min_length=1, max_length=255)
    form_data: dict[str, Any] = Field(default_factory=dict)


class ReportUpdate(BaseModel):
    """Request body for PATCH /reports/{id}. form_data keys are merged."""

    client: str | None = Field(default=None, min_length=1, max_length=255)
    form_data: dict[str, Any] | None = None
    reason: str | None = Field(default=None, description="Reason for change (overrides X-Change-Reason)")


class ReportStatusChange(BaseModel):
    """Request body for PATCH /reports/{id}/status."""

    model_config = ConfigDict(populate_by_name=True)

    status: ReportStatus
    reason: str | None = Field(default=None, description="Required here or in X-Change-Reason")
    esign_password: str | None = Field(
        default=None,
        alias="eSignPassword",
        description="Electronic signature; or X-ESign-Password header",
    )


class ReportResponse(BaseModel):
    """Single report (read)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    form_type: str
    report_number: str | None = None
    client: str
    status: str
    form_data: dict[str, Any]
    created_by: str | None = None
    updated_by: str | None = None
    locked_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class ReportStatusHistoryResponse(BaseModel):
    """One recorded status change."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    report_id: str
    from_status: str
    to_status: str
    reason: str | None = None
    user_id: str | None = None
    role: str | None = None
    ip_address: str | None = None
    created_at: datetime
