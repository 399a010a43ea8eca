"""Auth API: login, logout, password change and current user.

Every outcome (including failed logins) is written to the audit trail
as an auth event.
"""

import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.dependencies import (
    get_auth_audit_service,
    get_auth_audit_service_for_write,
    get_current_principal,
    get_user_repo,
    get_user_repo_for_write,
)
from app.application.dtos.auth import Principal
from app.application.services.auth_audit_service import AuthAuditService
from app.domain.exceptions import AuthenticationException, ResourceNotFoundException
from app.infrastructure.persistence.database import get_db
from app.infrastructure.persistence.repositories import UserRepository
from app.infrastructure.security.jwt import create_access_token
from app.infrastructure.security.password import verify_password
from app.schemas.auth import (
    ChangePasswordRequest,
    LoginRequest,
    TokenResponse,
    UserResponse,
)
from app.shared import context
from app.shared.enums import AuditAction

router = APIRouter()


def _client_ip() -> str | None:
    ctx = context.current()
    return ctx.ip if ctx else None


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    user_repo: Annotated[UserRepository, Depends(get_user_repo)],
    auth_audit: Annotated[AuthAuditService, Depends(get_auth_audit_service)],
) -> TokenResponse:
    """Authenticate with email and password; return a JWT carrying sub and role."""
    email = body.email.lower()
    user = await user_repo.authenticate(email, body.password)
    if user is None:
        await auth_audit.record(
            AuditAction.LOGIN_FAILED,
            ip=_client_ip(),
            entity_id=email,
            details="Login failed",
            meta={"email": email},
        )
        await db.commit()
        raise AuthenticationException("Invalid credentials")

    token = create_access_token(user.id, user.role)
    await auth_audit.record(
        AuditAction.LOGIN,
        user_id=user.id,
        role=user.role,
        ip=_client_ip(),
        details="Login successful",
    )
    await db.commit()
    return TokenResponse(access_token=token, user=UserResponse.model_validate(user))


@router.post("/logout", status_code=204)
async def logout(
    principal: Annotated[Principal, Depends(get_current_principal)],
    auth_audit: Annotated[AuthAuditService, Depends(get_auth_audit_service_for_write)],
) -> Response:
    """Record the logout. Tokens are stateless; the client discards its copy."""
    await auth_audit.record(
        AuditAction.LOGOUT,
        user_id=principal.user_id,
        role=principal.role,
        ip=_client_ip(),
        details="Logout",
    )
    return Response(status_code=204)


@router.post("/change-password", status_code=204)
async def change_password(
    body: ChangePasswordRequest,
    principal: Annotated[Principal, Depends(get_current_principal)],
    user_repo: Annotated[UserRepository, Depends(get_user_repo_for_write)],
    auth_audit: Annotated[AuthAuditService, Depends(get_auth_audit_service_for_write)],
) -> Response:
    """Replace the caller's password after checking the current one."""
    user = await user_repo.get_by_id(principal.user_id)
    if user is None:
        raise ResourceNotFoundException("user", principal.user_id)
    ok = await asyncio.to_thread(verify_password, body.current_password, user.password_hash)
    if not ok:
        raise AuthenticationException("Current password is incorrect")
    await user_repo.set_password(user.id, body.new_password)
    await auth_audit.record(
        AuditAction.PASSWORD_CHANGE,
        user_id=principal.user_id,
        role=principal.role,
        ip=_client_ip(),
        details="Password changed",
    )
    return Response(status_code=204)


@router.get("/me", response_model=UserResponse)
async def me(
    principal: Annotated[Principal, Depends(get_current_principal)],
    user_repo: Annotated[UserRepository, Depends(get_user_repo)],
) -> UserResponse:
    """Return the authenticated user."""
    user = await user_repo.get_by_id(principal.user_id)
    if user is None or not user.is_active:
        raise AuthenticationException("User not found or inactive")
    return UserResponse.model_validate(user)
