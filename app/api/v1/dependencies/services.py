"""Application service dependencies (composition root)."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from app.api.v1.dependencies.db import (
    get_audit_trail_repo,
    get_audit_trail_repo_for_write,
    get_report_repo,
    get_report_sequence_repo,
    get_user_repo,
)
from app.application.services.audit_trail_service import AuditTrailService
from app.application.services.auth_audit_service import AuthAuditService
from app.application.services.esign_service import ESignService
from app.application.services.report_service import ReportService
from app.infrastructure.persistence.repositories import (
    AuditTrailRepository,
    LabReportSequenceRepository,
    ReportRepository,
    UserRepository,
)


def get_auth_audit_service(
    audit_repo: Annotated[AuditTrailRepository, Depends(get_audit_trail_repo)],
) -> AuthAuditService:
    """Auth events on the read session; the login route commits them itself."""
    return AuthAuditService(audit_repo)


def get_auth_audit_service_for_write(
    audit_repo: Annotated[AuditTrailRepository, Depends(get_audit_trail_repo_for_write)],
) -> AuthAuditService:
    """Auth events committed with the request transaction (logout, password change)."""
    return AuthAuditService(audit_repo)


def get_audit_trail_service(
    audit_repo: Annotated[AuditTrailRepository, Depends(get_audit_trail_repo)],
) -> AuditTrailService:
    return AuditTrailService(audit_repo)


def get_report_service(
    report_repo: Annotated[ReportRepository, Depends(get_report_repo)],
    sequence_repo: Annotated[LabReportSequenceRepository, Depends(get_report_sequence_repo)],
    user_repo: Annotated[UserRepository, Depends(get_user_repo)],
) -> ReportService:
    """Report service on the request transaction; e-sign reads users separately."""
    return ReportService(report_repo, sequence_repo, ESignService(user_repo))
