"""Authentication dependencies: bearer token to Principal, role guards."""

from __future__ import annotations

from collections.abc import Callable, Coroutine
from typing import Annotated, Any

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.application.dtos.auth import Principal
from app.domain.enums import UserRole
from app.domain.exceptions import AuthenticationException, AuthorizationException
from app.infrastructure.security.jwt import verify_token

_http_bearer = HTTPBearer(auto_error=False)


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
) -> Principal:
    """Principal from the bearer token; 401 when missing or invalid."""
    if credentials is None:
        raise AuthenticationException("Not authenticated")
    try:
        payload = verify_token(credentials.credentials)
    except ValueError as e:
        raise AuthenticationException(str(e)) from e
    role = payload.get("role")
    if not role:
        raise AuthenticationException("Token missing required claim: role")
    return Principal(user_id=str(payload["sub"]), role=str(role))


def require_roles(
    *roles: UserRole,
) -> Callable[..., Coroutine[Any, Any, Principal]]:
    """Dependency factory: require an authenticated principal with one of roles."""
    allowed = frozenset(r.value for r in roles)

    async def _require(
        principal: Annotated[Principal, Depends(get_current_principal)],
    ) -> Principal:
        if principal.role not in allowed:
            raise AuthorizationException(
                message=f"Role {principal.role} may not access this resource"
            )
        return principal

    return _require
