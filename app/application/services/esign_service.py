"""Electronic signature: re-entry of the signer's password before a regulated action."""

from __future__ import annotations

import asyncio
from typing import Any

from app.domain.exceptions import ESignatureException
from app.infrastructure.security.password import verify_password


class ESignService:
    """Checks an e-sign password against the user's stored hash."""

    def __init__(self, user_repo: Any) -> None:
        self._user_repo = user_repo

    async def verify_password(self, user_id: str, plaintext: str | None) -> None:
        """Raise ESignatureException unless plaintext is user_id's current password."""
        if not plaintext:
            raise ESignatureException("Electronic signature (password) is required")
        user = await self._user_repo.get_by_id(user_id)
        if user is None or not user.password_hash:
            raise ESignatureException("No credentials on file")
        ok = await asyncio.to_thread(verify_password, plaintext, user.password_hash)
        if not ok:
            raise ESignatureException("Electronic signature failed")
