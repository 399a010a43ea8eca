"""Application lifespan: startup and shutdown.

Wiring only: logging setup on startup, SQL engine dispose on shutdown.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.core.config import get_settings
from app.shared.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Configure logging, yield, then dispose the database engine if one was created."""
    setup_logging()
    settings = get_settings()
    if not settings.database_url:
        logger.warning("DATABASE_URL is not set; endpoints needing SQL will return 503")
    logger.info("%s %s started", settings.app_name, settings.app_version)

    yield

    from app.infrastructure.persistence import database

    if database.engine is not None:
        await database.engine.dispose()
        logger.info("Database engine disposed")
