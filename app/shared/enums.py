"""Shared enumerations for the LIMS application.

Cross-cutting enums used by application and infrastructure (audit trail).
Domain-specific enums (e.g. ReportStatus, UserRole) live in app.domain.enums.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class AuditAction(_ValuesMixin, str, Enum):
    """Audit trail action types. Stored upper-cased in audit_trail.action."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    UPSERT = "UPSERT"
    DELETE = "DELETE"
    CREATE_MANY = "CREATE_MANY"
    UPDATE_MANY = "UPDATE_MANY"
    DELETE_MANY = "DELETE_MANY"
    # Authentication events (not record mutations)
    LOGIN = "LOGIN"
    LOGIN_FAILED = "LOGIN_FAILED"
    LOGOUT = "LOGOUT"
    PASSWORD_CHANGE = "PASSWORD_CHANGE"

    @property
    def is_bulk(self) -> bool:
        """True for *_MANY actions (no per-record diff)."""
        return self in _BULK_ACTIONS

    @property
    def is_mutation(self) -> bool:
        """True for record mutations routed through the write interceptor."""
        return self in _MUTATING_ACTIONS


_BULK_ACTIONS = frozenset(
    {AuditAction.CREATE_MANY, AuditAction.UPDATE_MANY, AuditAction.DELETE_MANY}
)
_MUTATING_ACTIONS = frozenset(
    {
        AuditAction.CREATE,
        AuditAction.UPDATE,
        AuditAction.UPSERT,
        AuditAction.DELETE,
    }
) | _BULK_ACTIONS

AUTH_ACTIONS = frozenset(
    {
        AuditAction.LOGIN,
        AuditAction.LOGIN_FAILED,
        AuditAction.LOGOUT,
        AuditAction.PASSWORD_CHANGE,
    }
)
