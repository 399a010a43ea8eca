"""Tests for AuditTrailService (paging, CSV export) and build_filters."""

from datetime import UTC, date, datetime
from unittest.mock import AsyncMock

import pytest

from app.application.dtos.audit_trail import AuditEntryResult, AuditFilters
from app.application.services.audit_trail_service import (
    AuditTrailService,
    build_filters,
    entries_to_csv,
)


def _entry(**overrides) -> AuditEntryResult:
    values = dict(
        id="a1",
        action="UPDATE",
        entity="Report",
        entity_id="r1",
        details="Updated Report r1",
        changes={"status": {"from": "DRAFT", "to": "SUBMITTED_BY_CLIENT"}},
        user_id="u1",
        role="CLIENT",
        ip_address="10.0.0.1",
        created_at=datetime(2024, 3, 5, 8, 9, 10, 123456, tzinfo=UTC),
    )
    values.update(overrides)
    return AuditEntryResult(**values)


@pytest.fixture
def repo() -> AsyncMock:
    mock = AsyncMock()
    mock.list.return_value = [_entry()]
    mock.count.return_value = 41
    mock.list_for_entity.return_value = [_entry()]
    return mock


def test_csv_header_and_quoting() -> None:
    csv_text = entries_to_csv([_entry()])
    header, row = csv_text.split("\n")
    assert header == (
        "createdAt,userId,userName,userEmail,role,ipAddress,action,entity,entityId,details,changes"
    )
    assert row.startswith('"2024-03-05T08:09:10.123Z","u1","","","CLIENT","10.0.0.1","UPDATE","Report","r1",')
    # details and changes are JSON-encoded, then quotes doubled
    assert '"""Updated Report r1"""' in row
    assert '"{""status"": {""from"": ""DRAFT"", ""to"": ""SUBMITTED_BY_CLIENT""}}"' in row


def test_csv_flattens_newlines_and_blanks_missing_values() -> None:
    csv_text = entries_to_csv(
        [_entry(user_id=None, role=None, ip_address=None, details="line1\nline2", changes=None)]
    )
    row = csv_text.split("\n")[1]
    assert '"","",""' in row
    assert "line1\\nline2" in row
    assert row.endswith('""""""')


def test_csv_includes_acting_user_name_and_email() -> None:
    csv_text = entries_to_csv([_entry(user_name="Ann Lee", user_email="ann@lab.example")])
    row = csv_text.split("\n")[1]
    assert row.startswith(
        '"2024-03-05T08:09:10.123Z","u1","Ann Lee","ann@lab.example","CLIENT",'
    )


def test_csv_with_no_rows_is_header_only() -> None:
    assert entries_to_csv([]).count("\n") == 0


def test_build_filters_to_date_covers_whole_day() -> None:
    filters = build_filters(from_date=date(2024, 1, 1), to_date=date(2024, 1, 31), action="update")
    assert filters.from_timestamp == datetime(2024, 1, 1, tzinfo=UTC)
    assert filters.to_timestamp == datetime(2024, 1, 31, 23, 59, 59, 999999, tzinfo=UTC)
    assert filters.action == "UPDATE"


def test_build_filters_blank_strings_are_ignored() -> None:
    assert build_filters(entity="", entity_id="", user_id="") == AuditFilters()


@pytest.mark.parametrize(
    ("page", "page_size", "expected_page", "expected_size", "expected_skip"),
    [
        (1, 20, 1, 20, 0),
        (3, 10, 3, 10, 20),
        (0, 20, 1, 20, 0),
        (-2, 20, 1, 20, 0),
        (1, 500, 1, 100, 0),
        (2, -5, 2, 1, 1),
    ],
)
async def test_list_paged_clamps_page_and_size(
    repo, page, page_size, expected_page, expected_size, expected_skip
) -> None:
    result = await AuditTrailService(repo).list_paged(AuditFilters(), page=page, page_size=page_size)
    assert result.page == expected_page
    assert result.page_size == expected_size
    assert result.total == 41
    repo.list.assert_awaited_once_with(
        AuditFilters(), skip=expected_skip, limit=expected_size, order="desc"
    )


async def test_export_all_is_not_paged(repo) -> None:
    csv_text = await AuditTrailService(repo).export_all_csv(AuditFilters(entity="Report"), order="asc")
    repo.list.assert_awaited_once_with(AuditFilters(entity="Report"), skip=0, limit=None, order="asc")
    assert csv_text.count("\n") == 1


async def test_export_entity_history(repo) -> None:
    csv_text = await AuditTrailService(repo).export_csv("Report", "r1")
    repo.list_for_entity.assert_awaited_once_with("Report", "r1")
    assert '"r1"' in csv_text
