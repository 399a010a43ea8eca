"""User repository (audited). Password hashes never reach the audit trail."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from sqlalchemy import select

from app.infrastructure.persistence.interceptor import WriteInterceptor
from app.infrastructure.persistence.models.user import User
from app.infrastructure.persistence.repositories.audited_repo import AuditedRepository
from app.infrastructure.persistence.repositories.base import orm_snapshot
from app.infrastructure.security.password import get_password_hash, verify_password

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


class UserRepository(AuditedRepository[User]):
    """Users for login, e-signature and attribution."""

    def __init__(
        self, db: AsyncSession, interceptor: WriteInterceptor | None = None
    ) -> None:
        super().__init__(db, User, interceptor)

    def _snapshot(self, obj: Any) -> dict[str, Any] | None:
        snap = orm_snapshot(obj)
        if snap is not None:
            snap.pop("password_hash", None)
        return snap

    async def get_by_email(self, email: str) -> User | None:
        result = await self.db.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    async def create_user(self, email: str, name: str, role: str, password: str) -> User:
        """Create a user with a bcrypt password hash."""
        password_hash = await asyncio.to_thread(get_password_hash, password)
        return await self.create(
            {
                "email": email.lower(),
                "name": name,
                "role": role,
                "password_hash": password_hash,
            }
        )

    async def authenticate(self, email: str, password: str) -> User | None:
        """Return the active user if password matches; else None."""
        user = await self.get_by_email(email)
        if user is None or not user.is_active:
            return None
        ok = await asyncio.to_thread(verify_password, password, user.password_hash)
        return user if ok else None

    async def set_password(self, user_id: str, new_password: str) -> User:
        """Replace a user's password hash."""
        password_hash = await asyncio.to_thread(get_password_hash, new_password)
        return await self.update(user_id, {"password_hash": password_hash})
