"""Reports API: drafts, edits, status changes, deletion and status history.

Writes run on the request transaction; the audit trail and status history
are filled in by the audited repository.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response

from app.api.v1.dependencies import get_current_principal, get_report_service
from app.application.dtos.auth import Principal
from app.application.services.report_service import ReportService
from app.domain.enums import FormType, ReportStatus
from app.schemas.report import (
    ReportCreate,
    ReportResponse,
    ReportStatusChange,
    ReportStatusHistoryResponse,
    ReportUpdate,
)

router = APIRouter()


@router.post("", response_model=ReportResponse, status_code=201)
async def create_report(
    body: ReportCreate,
    principal: Annotated[Principal, Depends(get_current_principal)],
    service: Annotated[ReportService, Depends(get_report_service)],
) -> ReportResponse:
    """Create a report in DRAFT."""
    report = await service.create_draft(
        principal, form_type=body.form_type, client=body.client, form_data=body.form_data
    )
    return ReportResponse.model_validate(report)


@router.get("", response_model=list[ReportResponse])
async def list_reports(
    principal: Annotated[Principal, Depends(get_current_principal)],
    service: Annotated[ReportService, Depends(get_report_service)],
    client: str | None = None,
    status: ReportStatus | None = None,
    form_type: FormType | None = None,
    skip: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int, Query(ge=1, le=100)] = 100,
) -> list[ReportResponse]:
    """List reports, newest first."""
    reports = await service.list(
        client=client,
        status=status.value if status else None,
        form_type=form_type.value if form_type else None,
        skip=skip,
        limit=limit,
    )
    return [ReportResponse.model_validate(r) for r in reports]


@router.get("/{report_id}", response_model=ReportResponse)
async def get_report(
    report_id: str,
    principal: Annotated[Principal, Depends(get_current_principal)],
    service: Annotated[ReportService, Depends(get_report_service)],
) -> ReportResponse:
    return ReportResponse.model_validate(await service.get(report_id))


@router.patch("/{report_id}", response_model=ReportResponse)
async def update_report(
    report_id: str,
    body: ReportUpdate,
    principal: Annotated[Principal, Depends(get_current_principal)],
    service: Annotated[ReportService, Depends(get_report_service)],
) -> ReportResponse:
    """Edit client or form fields. A reason may come from the body or X-Change-Reason."""
    report = await service.update(
        principal,
        report_id,
        client=body.client,
        form_data=body.form_data,
        reason=body.reason,
    )
    return ReportResponse.model_validate(report)


@router.patch("/{report_id}/status", response_model=ReportResponse)
async def change_report_status(
    report_id: str,
    body: ReportStatusChange,
    principal: Annotated[Principal, Depends(get_current_principal)],
    service: Annotated[ReportService, Depends(get_report_service)],
) -> ReportResponse:
    """Move a report to another status (reason and e-signature required)."""
    report = await service.change_status(
        principal,
        report_id,
        body.status,
        reason=body.reason,
        esign_password=body.esign_password,
    )
    return ReportResponse.model_validate(report)


@router.delete("/{report_id}", status_code=204)
async def delete_report(
    report_id: str,
    principal: Annotated[Principal, Depends(get_current_principal)],
    service: Annotated[ReportService, Depends(get_report_service)],
) -> Response:
    await service.delete(principal, report_id)
    return Response(status_code=204)


@router.get("/{report_id}/status-history", response_model=list[ReportStatusHistoryResponse])
async def list_status_history(
    report_id: str,
    principal: Annotated[Principal, Depends(get_current_principal)],
    service: Annotated[ReportService, Depends(get_report_service)],
) -> list[ReportStatusHistoryResponse]:
    """Status changes of one report, oldest first."""
    rows = await service.list_status_history(report_id)
    return [ReportStatusHistoryResponse.model_validate(r) for r in rows]
