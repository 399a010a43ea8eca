"""Audit trail ORM model. Append-only change log for compliance (21 CFR Part 11)."""

from typing import Any

from sqlalchemy import Connection, Index, String, Text, event
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, Mapper, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import CreatedAtMixin, CuidMixin

# Record type name of the audit store; writes to it are never audited.
AUDIT_TRAIL_ENTITY = "AuditTrail"


class AuditTrail(CuidMixin, CreatedAtMixin, Base):
    """Audit trail entry. Who changed what, when, from where. No update/delete.

    entity + entity_id is a lookup key, not a foreign key: the referenced
    record may be deleted later without affecting its history.
    """

    __tablename__ = "audit_trail"

    action: Mapped[str] = mapped_column(String, nullable=False, index=True)
    entity: Mapped[str] = mapped_column(String, nullable=False)
    entity_id: Mapped[str | None] = mapped_column(String, nullable=True)
    details: Mapped[str] = mapped_column(Text, nullable=False, default="")
    changes: Mapped[Any | None] = mapped_column(JSONB, nullable=True)
    user_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    role: Mapped[str | None] = mapped_column(String, nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (Index("ix_audit_trail_entity", "entity", "entity_id"),)


@event.listens_for(AuditTrail, "before_update")
def _prevent_audit_trail_updates(
    _mapper: Mapper[Any], _connection: Connection, _target: AuditTrail
) -> None:
    """Audit trail entries are append-only; updates are forbidden."""
    raise ValueError("Audit trail entries are immutable and cannot be updated.")


@event.listens_for(AuditTrail, "before_delete")
def _prevent_audit_trail_deletes(
    _mapper: Mapper[Any], _connection: Connection, _target: AuditTrail
) -> None:
    """Audit trail entries cannot be deleted for compliance."""
    raise ValueError("Audit trail entries cannot be deleted.")
