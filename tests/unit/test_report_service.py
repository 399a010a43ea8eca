"""Tests for ReportService (mocked repositories and e-sign)."""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from app.application.dtos.auth import Principal
from app.application.services.report_service import ReportService, format_report_number
from app.domain.enums import FormType, ReportStatus
from app.domain.exceptions import (
    AuthorizationException,
    ESignatureException,
    InvalidStatusTransitionException,
    ResourceNotFoundException,
    ValidationException,
)
from app.shared import context
from app.shared.context import RequestContext

CLIENT = Principal(user_id="client-1", role="CLIENT")
MICRO = Principal(user_id="micro-1", role="MICRO")
ADMIN = Principal(user_id="admin-1", role="ADMIN")


def _report(**overrides) -> SimpleNamespace:
    values = dict(
        id="r1",
        form_type=FormType.MICRO_MIX.value,
        report_number=None,
        client="Acme",
        status=ReportStatus.DRAFT.value,
        form_data={"lotNo": "L1"},
    )
    values.update(overrides)
    return SimpleNamespace(**values)


@pytest.fixture
def report_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.get_by_id.return_value = _report()
    repo.update.side_effect = lambda report_id, data: _report(**data)
    repo.create.side_effect = lambda data: _report(**data)
    return repo


@pytest.fixture
def sequence_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.next_number.return_value = 7
    return repo


@pytest.fixture
def esign() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def service(report_repo, sequence_repo, esign) -> ReportService:
    return ReportService(report_repo, sequence_repo, esign)


def test_format_report_number_pads_to_four_digits() -> None:
    assert format_report_number("M", 7, 2025) == "M-20250007"
    assert format_report_number("C", 12345, 2025) == "C-202512345"


async def test_create_draft(service, report_repo) -> None:
    report = await service.create_draft(
        CLIENT, form_type=FormType.CHEMISTRY_MIX, client="  Acme ", form_data={"a": 1}
    )
    assert report.status == "DRAFT"
    data = report_repo.create.await_args.args[0]
    assert data["client"] == "Acme"
    assert data["form_type"] == "CHEMISTRY_MIX"
    assert data["created_by"] == "client-1"


async def test_create_draft_denied_for_testing_roles(service) -> None:
    with pytest.raises(AuthorizationException):
        await service.create_draft(MICRO, form_type=FormType.MICRO_MIX, client="Acme")


async def test_get_missing_report_raises(service, report_repo) -> None:
    report_repo.get_by_id.return_value = None
    with pytest.raises(ResourceNotFoundException):
        await service.get("nope")


async def test_update_merges_form_data(service, report_repo) -> None:
    await service.update(CLIENT, "r1", form_data={"description": "Cream"})
    report_repo.update.assert_awaited_once()
    report_id, data = report_repo.update.await_args.args
    assert report_id == "r1"
    assert data["form_data"] == {"lotNo": "L1", "description": "Cream"}
    assert data["updated_by"] == "client-1"


async def test_update_requires_something_to_change(service) -> None:
    with pytest.raises(ValidationException):
        await service.update(CLIENT, "r1")


async def test_update_denied_when_role_cannot_edit(service, report_repo) -> None:
    report_repo.get_by_id.return_value = _report(status=ReportStatus.SUBMITTED_BY_CLIENT.value)
    with pytest.raises(AuthorizationException):
        await service.update(CLIENT, "r1", client="Other")
    report_repo.update.assert_not_awaited()


async def test_update_reason_is_patched_into_context(service) -> None:
    async def work():
        await service.update(CLIENT, "r1", client="Acme Ltd", reason="Name corrected")
        return context.current().reason

    reason = await context.run_async(RequestContext(user_id="client-1"), work)
    assert reason == "Name corrected"


async def test_change_status_requires_reason(service, report_repo) -> None:
    with pytest.raises(ValidationException) as exc_info:
        await service.change_status(CLIENT, "r1", ReportStatus.SUBMITTED_BY_CLIENT, esign_password="pw")
    assert exc_info.value.details == {"field": "reason"}
    report_repo.update.assert_not_awaited()


async def test_change_status_verifies_esign(service, esign, report_repo) -> None:
    await service.change_status(
        CLIENT, "r1", ReportStatus.SUBMITTED_BY_CLIENT, reason="Ready", esign_password="pw"
    )
    esign.verify_password.assert_awaited_once_with("client-1", "pw")
    _, data = report_repo.update.await_args.args
    assert data == {"status": "SUBMITTED_BY_CLIENT", "updated_by": "client-1"}


async def test_change_status_esign_failure_blocks_write(service, esign, report_repo) -> None:
    esign.verify_password.side_effect = ESignatureException()
    with pytest.raises(ESignatureException):
        await service.change_status(
            CLIENT, "r1", ReportStatus.SUBMITTED_BY_CLIENT, reason="Ready", esign_password="bad"
        )
    report_repo.update.assert_not_awaited()


async def test_change_status_falls_back_to_context(service, esign) -> None:
    async def work():
        return await service.change_status(CLIENT, "r1", ReportStatus.SUBMITTED_BY_CLIENT)

    ctx = RequestContext(user_id="client-1", reason="From header", esign_password="hdr-pw")
    await context.run_async(ctx, work)
    esign.verify_password.assert_awaited_once_with("client-1", "hdr-pw")


async def test_change_status_invalid_transition(service, report_repo) -> None:
    with pytest.raises(InvalidStatusTransitionException):
        await service.change_status(
            CLIENT, "r1", ReportStatus.FINAL_APPROVED, reason="x", esign_password="pw"
        )
    report_repo.update.assert_not_awaited()


async def test_entering_testing_assigns_report_number(service, report_repo, sequence_repo) -> None:
    report_repo.get_by_id.return_value = _report(status=ReportStatus.SUBMITTED_BY_CLIENT.value)
    await service.change_status(
        MICRO,
        "r1",
        ReportStatus.UNDER_PRELIMINARY_TESTING_REVIEW,
        reason="Start testing",
        esign_password="pw",
    )
    sequence_repo.next_number.assert_awaited_once_with("M")
    _, data = report_repo.update.await_args.args
    assert data["report_number"].startswith("M-")
    assert data["report_number"].endswith("0007")


async def test_existing_report_number_is_kept(service, report_repo, sequence_repo) -> None:
    report_repo.get_by_id.return_value = _report(
        status=ReportStatus.PRELIMINARY_TESTING_ON_HOLD.value, report_number="M-20240001"
    )
    await service.change_status(
        MICRO,
        "r1",
        ReportStatus.UNDER_PRELIMINARY_TESTING_REVIEW,
        reason="Resume",
        esign_password="pw",
    )
    sequence_repo.next_number.assert_not_awaited()


async def test_start_final_testing_skips_esign(service, report_repo, esign) -> None:
    report_repo.get_by_id.return_value = _report(status=ReportStatus.PRELIMINARY_APPROVED.value)
    await service.change_status(MICRO, "r1", ReportStatus.UNDER_FINAL_TESTING_REVIEW, reason="Start final")
    esign.verify_password.assert_not_awaited()


async def test_delete_is_admin_only(service, report_repo) -> None:
    with pytest.raises(AuthorizationException):
        await service.delete(CLIENT, "r1")
    await service.delete(ADMIN, "r1")
    report_repo.delete.assert_awaited_once_with("r1")


async def test_unknown_role_is_denied(service) -> None:
    with pytest.raises(AuthorizationException):
        await service.delete(Principal(user_id="x", role="JANITOR"), "r1")
