"""Request context middleware.

Builds the RequestContext for each HTTP request (acting user and role from
the bearer token, client IP, change reason, e-sign password) and runs the
rest of the stack inside it, so the write interceptor can attribute audit
entries without anything being passed down explicitly. Also forwards or
generates X-Request-ID.

Raw ASGI (no BaseHTTPMiddleware) so the context is set in the same task
that runs the endpoint.
"""

import re
import uuid
from typing import Callable

from starlette.datastructures import Headers, QueryParams

from app.core.config import get_settings
from app.infrastructure.security.jwt import decode_token_or_none
from app.shared.context import RequestContext, run_async

REQUEST_ID_MAX_LENGTH = 64
REQUEST_ID_ALLOWED_PATTERN = re.compile(
    r"^[a-zA-Z0-9_-]{1," + str(REQUEST_ID_MAX_LENGTH) + r"}$"
)


def _sanitize_request_id(raw: str | None) -> str:
    """Return raw if safe for logs; otherwise a new UUID."""
    if not raw or not REQUEST_ID_ALLOWED_PATTERN.match(raw.strip()):
        return str(uuid.uuid4())
    return raw.strip()


def client_ip(headers: Headers, client: tuple[str, int] | None) -> str:
    """First X-Forwarded-For hop, else the socket peer address, else ''."""
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if client:
        return client[0] or ""
    return ""


def bearer_token(headers: Headers) -> str | None:
    auth = headers.get("authorization")
    if auth and auth.lower().startswith("bearer "):
        return auth[7:].strip() or None
    return None


def context_from_scope(scope: dict) -> RequestContext:
    """RequestContext for an HTTP scope. Invalid or missing tokens give an anonymous context."""
    settings = get_settings()
    headers = Headers(scope=scope)
    query = QueryParams(scope.get("query_string", b""))
    claims = decode_token_or_none(bearer_token(headers)) or {}
    reason = headers.get(settings.change_reason_header) or query.get("reason")
    return RequestContext(
        user_id=claims.get("sub"),
        role=claims.get("role"),
        ip=client_ip(headers, scope.get("client")),
        reason=reason.strip() if reason and reason.strip() else None,
        esign_password=headers.get(settings.esign_password_header) or None,
    )


def RequestContextMiddleware(app: Callable) -> Callable:
    """Run each HTTP request inside its own RequestContext. Raw ASGI."""
    header_name = get_settings().request_id_header

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        headers = Headers(scope=scope)
        request_id = _sanitize_request_id(headers.get(header_name))
        scope.setdefault("state", {})["request_id"] = request_id

        async def send_wrapper(message: dict) -> None:
            if message["type"] == "http.response.start":
                response_headers = list(message.get("headers", []))
                response_headers.append((header_name.encode(), request_id.encode()))
                message["headers"] = response_headers
            await send(message)

        await run_async(context_from_scope(scope), app, scope, receive, send_wrapper)

    return asgi_app
