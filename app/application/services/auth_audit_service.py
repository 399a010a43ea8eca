"""Authentication audit events (LOGIN, LOGIN_FAILED, LOGOUT, PASSWORD_CHANGE).

These are not record mutations, so they go straight to the audit store
instead of through the write interceptor.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from app.application.dtos.audit_trail import AuditEntryCreate, AuditEntryResult
from app.shared.enums import AUTH_ACTIONS, AuditAction
from app.shared.logging import get_logger

if TYPE_CHECKING:
    from app.infrastructure.persistence.interceptor import AuditSink

logger = get_logger(__name__)

AUTH_ENTITY = "Auth"


class AuthAuditService:
    """Writes auth events to the audit trail with entity 'Auth'."""

    def __init__(self, sink: AuditSink) -> None:
        self._sink = sink

    async def record(
        self,
        action: AuditAction | str,
        user_id: str | None = None,
        role: str | None = None,
        ip: str | None = None,
        entity_id: str | None = None,
        details: str | None = None,
        meta: dict[str, Any] | None = None,
    ) -> AuditEntryResult | None:
        """Append one auth event.

        entity_id defaults to user_id (pass the attempted email on failed
        logins). meta is stored as the entry's changes. A store failure is
        logged and None returned; authentication outcomes never depend on it.

        Raises:
            ValueError: If action is not an auth action.
        """
        action = AuditAction(action)
        if action not in AUTH_ACTIONS:
            raise ValueError(f"{action.value} is not an auth audit action")
        entry = AuditEntryCreate(
            action=action.value,
            entity=AUTH_ENTITY,
            entity_id=entity_id if entity_id is not None else user_id,
            details=details or "",
            changes=meta or {},
            user_id=user_id,
            role=role,
            ip_address=ip,
        )
        try:
            return await self._sink.append(entry)
        except Exception:
            logger.warning(
                "Auth audit append failed: action=%s entity_id=%s",
                action.value,
                entry.entity_id,
                exc_info=True,
            )
            return None
