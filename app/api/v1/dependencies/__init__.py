"""Presentation-layer dependency injection (composition root).

Routes depend only on these; repositories and services are never built
inside endpoint functions.
"""

from app.api.v1.dependencies.auth import get_current_principal, require_roles
from app.api.v1.dependencies.db import (
    get_audit_trail_repo,
    get_audit_trail_repo_for_write,
    get_report_repo,
    get_report_sequence_repo,
    get_user_repo,
    get_user_repo_for_write,
    get_write_interceptor,
)
from app.api.v1.dependencies.services import (
    get_audit_trail_service,
    get_auth_audit_service,
    get_auth_audit_service_for_write,
    get_report_service,
)

__all__ = [
    "get_audit_trail_repo",
    "get_audit_trail_repo_for_write",
    "get_audit_trail_service",
    "get_auth_audit_service",
    "get_auth_audit_service_for_write",
    "get_current_principal",
    "get_report_repo",
    "get_report_sequence_repo",
    "get_report_service",
    "get_user_repo",
    "get_user_repo_for_write",
    "get_write_interceptor",
    "require_roles",
]
