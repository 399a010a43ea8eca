"""Audit trail API (read-only): paged listing, per-record history, CSV export.

Restricted to ADMIN, SYSTEMADMIN and QA.
"""

import re
from datetime import date
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from app.api.v1.dependencies import get_audit_trail_service, require_roles
from app.application.dtos.auth import Principal
from app.application.services.audit_trail_service import (
    DEFAULT_PAGE_SIZE,
    AuditTrailService,
    build_filters,
)
from app.domain.enums import UserRole
from app.schemas.audit_trail import AuditEntryResponse, AuditPageResponse

router = APIRouter()

_AuditReader = Annotated[
    Principal, Depends(require_roles(UserRole.ADMIN, UserRole.SYSTEMADMIN, UserRole.QA))
]


_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def _filename_part(value: str) -> str:
    """Path value reduced to characters that are safe inside a quoted header parameter."""
    return _UNSAFE_FILENAME_CHARS.sub("_", value).strip("._") or "record"


def _csv_response(csv_text: str, filename: str) -> Response:
    return Response(
        content=csv_text,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("", response_model=AuditPageResponse)
async def list_audit_entries(
    principal: _AuditReader,
    service: Annotated[AuditTrailService, Depends(get_audit_trail_service)],
    entity: str | None = None,
    entity_id: Annotated[str | None, Query(alias="entityId")] = None,
    user_id: Annotated[str | None, Query(alias="userId")] = None,
    action: str | None = None,
    from_date: Annotated[date | None, Query(alias="from")] = None,
    to_date: Annotated[date | None, Query(alias="to")] = None,
    page: int = 1,
    page_size: Annotated[int, Query(alias="pageSize")] = DEFAULT_PAGE_SIZE,
    order: Literal["asc", "desc"] = "desc",
) -> AuditPageResponse:
    """Paged audit entries. page_size is clamped to 1..100; 'to' covers the whole day."""
    filters = build_filters(
        entity=entity,
        entity_id=entity_id,
        user_id=user_id,
        action=action,
        from_date=from_date,
        to_date=to_date,
    )
    result = await service.list_paged(filters, page=page, page_size=page_size, order=order)
    return AuditPageResponse.model_validate(result)


@router.get("/export.csv")
async def export_all_audit_entries(
    principal: _AuditReader,
    service: Annotated[AuditTrailService, Depends(get_audit_trail_service)],
    entity: str | None = None,
    entity_id: Annotated[str | None, Query(alias="entityId")] = None,
    user_id: Annotated[str | None, Query(alias="userId")] = None,
    action: str | None = None,
    from_date: Annotated[date | None, Query(alias="from")] = None,
    to_date: Annotated[date | None, Query(alias="to")] = None,
    order: Literal["asc", "desc"] = "desc",
) -> Response:
    """Every matching entry as CSV (not paged)."""
    filters = build_filters(
        entity=entity,
        entity_id=entity_id,
        user_id=user_id,
        action=action,
        from_date=from_date,
        to_date=to_date,
    )
    return _csv_response(await service.export_all_csv(filters, order=order), "audit_all.csv")


@router.get("/{entity}/{entity_id}", response_model=list[AuditEntryResponse])
async def list_entity_history(
    entity: str,
    entity_id: str,
    principal: _AuditReader,
    service: Annotated[AuditTrailService, Depends(get_audit_trail_service)],
) -> list[AuditEntryResponse]:
    """Full history of one record, oldest first."""
    rows = await service.list_for_entity(entity, entity_id)
    return [AuditEntryResponse.model_validate(r) for r in rows]


@router.get("/{entity}/{entity_id}/export.csv")
async def export_entity_history(
    entity: str,
    entity_id: str,
    principal: _AuditReader,
    service: Annotated[AuditTrailService, Depends(get_audit_trail_service)],
) -> Response:
    csv_text = await service.export_csv(entity, entity_id)
    filename = f"audit_{_filename_part(entity)}_{_filename_part(entity_id)}.csv"
    return _csv_response(csv_text, filename)
