"""Shared cross-cutting helpers: request context, audit enums, logging, utils.

No business logic; importable from every layer.
"""

from app.shared.context import RequestContext, current, patch, run, run_async
from app.shared.enums import AuditAction

__all__ = [
    "AuditAction",
    "RequestContext",
    "current",
    "patch",
    "run",
    "run_async",
]
