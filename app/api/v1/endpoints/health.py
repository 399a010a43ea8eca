"""Health check endpoint. No dependencies; used for liveness probes."""

from fastapi import APIRouter

from app.core.config import get_settings
from app.schemas.health import HealthResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return ok, and whether a SQL database is configured."""
    configured = bool(get_settings().database_url)
    return HealthResponse(database="configured" if configured else "not_configured")
