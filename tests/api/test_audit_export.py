"""Audit CSV export responses (service replaced, no DB)."""

from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient

from app.api.v1.dependencies import get_audit_trail_service
from app.infrastructure.security.jwt import create_access_token
from app.main import app


@pytest.fixture
def audit_service() -> AsyncMock:
    service = AsyncMock()
    service.export_csv.return_value = "createdAt,userId"
    app.dependency_overrides[get_audit_trail_service] = lambda: service
    yield service
    app.dependency_overrides.pop(get_audit_trail_service, None)


def _admin() -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token('u1', 'ADMIN')}"}


async def test_entity_export_is_a_csv_attachment(client: AsyncClient, audit_service) -> None:
    response = await client.get("/api/v1/audit/Report/r1/export.csv", headers=_admin())
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert response.headers["content-disposition"] == 'attachment; filename="audit_Report_r1.csv"'
    assert response.text == "createdAt,userId"
    audit_service.export_csv.assert_awaited_once_with("Report", "r1")


async def test_export_filename_drops_header_breaking_characters(
    client: AsyncClient, audit_service
) -> None:
    response = await client.get(
        '/api/v1/audit/Report/r1";%20x=y/export.csv', headers=_admin()
    )
    assert response.status_code == 200
    disposition = response.headers["content-disposition"]
    assert disposition == 'attachment; filename="audit_Report_r1_x_y.csv"'
    audit_service.export_csv.assert_awaited_once_with("Report", 'r1"; x=y')
