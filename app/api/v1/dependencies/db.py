"""Repository dependencies (composition root).

Read endpoints get repositories on a plain session (get_db); write
endpoints on the request transaction (get_db_transactional), which also
holds the audit trail rows written by the interceptor. FastAPI caches a
dependency per request, so every repository below shares one session.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.persistence.database import get_db, get_db_transactional
from app.infrastructure.persistence.interceptor import WriteInterceptor
from app.infrastructure.persistence.repositories import (
    AuditTrailRepository,
    LabReportSequenceRepository,
    ReportRepository,
    UserRepository,
    build_interceptor,
)


def get_write_interceptor(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> WriteInterceptor:
    """One interceptor per request transaction, shared by all write repositories."""
    return build_interceptor(db)


def get_audit_trail_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AuditTrailRepository:
    return AuditTrailRepository(db)


def get_audit_trail_repo_for_write(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> AuditTrailRepository:
    """Audit trail appends that commit with the request transaction."""
    return AuditTrailRepository(db)


def get_user_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UserRepository:
    """User repository on the read session (login, /me)."""
    return UserRepository(db)


def get_user_repo_for_write(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    interceptor: Annotated[WriteInterceptor, Depends(get_write_interceptor)],
) -> UserRepository:
    return UserRepository(db, interceptor)


def get_report_repo(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    interceptor: Annotated[WriteInterceptor, Depends(get_write_interceptor)],
) -> ReportRepository:
    return ReportRepository(db, interceptor)


def get_report_sequence_repo(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    interceptor: Annotated[WriteInterceptor, Depends(get_write_interceptor)],
) -> LabReportSequenceRepository:
    return LabReportSequenceRepository(db, interceptor)
