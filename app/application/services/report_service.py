"""Report lifecycle: drafts, field edits, status changes and deletion.

Every write goes through the audited report repository, so the audit
trail and status history are filled in without any calls from here.
"""

from __future__ import annotations

from typing import Any

from app.application.dtos.auth import Principal
from app.application.services.report_workflow import (
    ESIGN_EXEMPT_TARGETS,
    NUMBERING_STATUS,
    can_edit,
    check_transition,
)
from app.domain.enums import FormType, ReportStatus, UserRole
from app.domain.exceptions import (
    AuthorizationException,
    ResourceNotFoundException,
    ValidationException,
)
from app.shared import context
from app.shared.logging import get_logger
from app.shared.utils.datetime import utc_now

logger = get_logger(__name__)

CREATOR_ROLES = frozenset({UserRole.CLIENT, UserRole.ADMIN, UserRole.FRONTDESK, UserRole.SYSTEMADMIN})
DELETER_ROLES = frozenset({UserRole.ADMIN, UserRole.SYSTEMADMIN})


def _role(user: Principal) -> UserRole:
    try:
        return UserRole(user.role)
    except ValueError:
        raise AuthorizationException(message=f"Unknown role: {user.role}") from None


def format_report_number(department: str, sequence: int, year: int) -> str:
    """'<department>-<year><sequence>' with the sequence zero-padded to at least 4 digits."""
    return f"{department}-{year}{sequence:04d}"


class ReportService:
    """Report use cases on top of ReportRepository and LabReportSequenceRepository."""

    def __init__(self, report_repo: Any, sequence_repo: Any, esign: Any) -> None:
        self._reports = report_repo
        self._sequences = sequence_repo
        self._esign = esign

    async def get(self, report_id: str) -> Any:
        report = await self._reports.get_by_id(report_id)
        if report is None:
            raise ResourceNotFoundException("report", report_id)
        return report

    async def list(
        self,
        *,
        client: str | None = None,
        status: str | None = None,
        form_type: str | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[Any]:
        return await self._reports.list_reports(
            client=client, status=status, form_type=form_type, skip=skip, limit=limit
        )

    async def create_draft(
        self,
        user: Principal,
        *,
        form_type: FormType,
        client: str,
        form_data: dict[str, Any] | None = None,
    ) -> Any:
        """Create a report in DRAFT owned by user."""
        if _role(user) not in CREATOR_ROLES:
            raise AuthorizationException("report", "create")
        if not client or not client.strip():
            raise ValidationException("client is required", field="client")
        return await self._reports.create(
            {
                "form_type": FormType(form_type).value,
                "client": client.strip(),
                "status": ReportStatus.DRAFT.value,
                "form_data": dict(form_data or {}),
                "created_by": user.user_id,
                "updated_by": user.user_id,
            }
        )

    async def update(
        self,
        user: Principal,
        report_id: str,
        *,
        client: str | None = None,
        form_data: dict[str, Any] | None = None,
        reason: str | None = None,
    ) -> Any:
        """Edit client and/or form fields; form_data keys are merged into the stored form.

        Raises:
            ValidationException: Nothing to update.
            AuthorizationException: Role may not edit in the current status.
        """
        if client is None and form_data is None:
            raise ValidationException("Nothing to update: pass client or form_data")
        report = await self.get(report_id)
        status = ReportStatus(report.status)
        if not can_edit(status, _role(user)):
            raise AuthorizationException(
                message=f"Role {user.role} cannot edit report in status {status.value}"
            )
        if reason:
            context.patch(reason=reason)

        data: dict[str, Any] = {"updated_by": user.user_id}
        if client is not None:
            data["client"] = client.strip()
        if form_data is not None:
            data["form_data"] = {**(report.form_data or {}), **form_data}
        return await self._reports.update(report_id, data)

    async def change_status(
        self,
        user: Principal,
        report_id: str,
        target: ReportStatus,
        *,
        reason: str | None = None,
        esign_password: str | None = None,
    ) -> Any:
        """Move a report to target.

        A reason is mandatory (21 CFR Part 11); it and the e-sign password
        fall back to the request context. The e-signature is checked for
        every target except the start of final testing.

        Raises:
            ValidationException: No reason given.
            AuthorizationException: Role may not move the report from its status.
            InvalidStatusTransitionException: target does not follow the status.
            ESignatureException: Signature missing or wrong.
        """
        target = ReportStatus(target)
        ctx = context.current()
        reason = reason or (ctx.reason if ctx else None)
        esign_password = esign_password or (ctx.esign_password if ctx else None)
        if not reason or not reason.strip():
            raise ValidationException(
                "Reason for change is required (21 CFR Part 11). "
                "Provide X-Change-Reason header or body.reason",
                field="reason",
            )

        report = await self.get(report_id)
        current = ReportStatus(report.status)
        check_transition(current, target, _role(user))

        if target not in ESIGN_EXEMPT_TARGETS:
            await self._esign.verify_password(user.user_id, esign_password)

        context.patch(reason=reason.strip())

        data: dict[str, Any] = {"status": target.value, "updated_by": user.user_id}
        if target == NUMBERING_STATUS and not report.report_number:
            department = FormType(report.form_type).department_letter
            sequence = await self._sequences.next_number(department)
            data["report_number"] = format_report_number(department, sequence, utc_now().year)
            logger.info("Assigned report number %s to %s", data["report_number"], report_id)
        if target == ReportStatus.LOCKED:
            data["locked_at"] = utc_now()
        return await self._reports.update(report_id, data)

    async def delete(self, user: Principal, report_id: str) -> Any:
        """Delete a report (admins only)."""
        if _role(user) not in DELETER_ROLES:
            raise AuthorizationException("report", "delete")
        return await self._reports.delete(report_id)

    async def list_status_history(self, report_id: str) -> list[Any]:
        await self.get(report_id)
        return await self._reports.list_status_history(report_id)
