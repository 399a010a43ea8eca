"""Report ORM models: lab report, per-department number sequence, status history."""

from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import ReportStatus
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import (
    CreatedAtMixin,
    CuidMixin,
    LimsModel,
)


class Report(LimsModel, Base):
    """Chemistry or microbiology test report. form_data holds the form fields."""

    __tablename__ = "report"

    form_type: Mapped[str] = mapped_column(String, nullable=False, index=True)
    report_number: Mapped[str | None] = mapped_column(String, nullable=True, unique=True)
    client: Mapped[str] = mapped_column(String, nullable=False, index=True)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=ReportStatus.DRAFT.value, index=True
    )
    form_data: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False, default=dict)
    created_by: Mapped[str | None] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True
    )
    updated_by: Mapped[str | None] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True
    )
    locked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class LabReportSequence(Base):
    """Last issued report number per department letter ('M' or 'C')."""

    __tablename__ = "lab_report_sequence"

    department: Mapped[str] = mapped_column(String(1), primary_key=True)
    last_number: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    @property
    def id(self) -> str:
        """Department letter doubles as the audit entity id."""
        return self.department


class ReportStatusHistory(CuidMixin, CreatedAtMixin, Base):
    """One row per report status change, with reason and attribution. Append-only."""

    __tablename__ = "report_status_history"

    report_id: Mapped[str] = mapped_column(
        String, ForeignKey("report.id", ondelete="CASCADE"), nullable=False, index=True
    )
    from_status: Mapped[str] = mapped_column(String, nullable=False)
    to_status: Mapped[str] = mapped_column(String, nullable=False)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    user_id: Mapped[str | None] = mapped_column(String, nullable=True)
    role: Mapped[str | None] = mapped_column(String, nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String, nullable=True)
