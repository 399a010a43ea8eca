"""Pytest configuration and fixtures for the LIMS audit service.

Uses app.main:app for HTTP tests and app.infrastructure.persistence.database
for DB-dependent fixtures. SECRET_KEY is given a test value before the app
is imported so settings validation passes.
"""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from app.infrastructure.persistence import database  # noqa: E402
from app.main import app  # noqa: E402
from app.shared import context  # noqa: E402


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture(autouse=True)
def _no_request_context():
    """Each test starts and ends outside any request context."""
    context.clear()
    yield
    context.clear()


@pytest.fixture
async def db_session() -> AsyncSession:
    """Database session for repository/integration tests. Rolls back after test.

    Requires DATABASE_URL pointing at Postgres. Skips (pytest.skip) when it
    is not configured. Tables are created on first use. Run without DB via:
    pytest -m 'not requires_db'.
    """
    database._ensure_engine()
    if database.AsyncSessionLocal is None:
        pytest.skip("Postgres not configured: set DATABASE_URL (postgresql+asyncpg://...)")
    await database.create_all()
    async with database.AsyncSessionLocal() as session:
        yield session
        await session.rollback()
    # Pooled asyncpg connections belong to this test's event loop.
    await database.engine.dispose()
