"""Request context management using contextvars.

Carries request-scoped metadata (acting user, role, client IP, change
reason, e-sign password, skip-audit flag) to any code running for that
request without threading it through call signatures. Tasks created with
asyncio.create_task copy the context at creation, so continuations of a
request see the same values while concurrent requests stay isolated.

Usage:
    await run_async(RequestContext(user_id="u1", role="QA"), handler)
    ctx = current()
    patch(reason="Typo in client name")
"""

from __future__ import annotations

import contextvars
from dataclasses import dataclass, field, fields, replace
from typing import Any, Awaitable, Callable, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class RequestContext:
    """Immutable snapshot of the metadata for one logical request."""

    user_id: str | None = None
    role: str | None = None
    ip: str | None = None
    reason: str | None = None
    esign_password: str | None = field(default=None, repr=False)
    skip_audit: bool = False


_FIELD_NAMES = frozenset(f.name for f in fields(RequestContext))

_request_context: contextvars.ContextVar[RequestContext | None] = (
    contextvars.ContextVar("request_context", default=None)
)


def run(context: RequestContext, work: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run synchronous work with context active and return its result.

    Runs inside a copy of the caller's contextvars Context, so nothing set
    by work leaks back to the caller.
    """

    def _runner() -> T:
        _request_context.set(context)
        return work(*args, **kwargs)

    return contextvars.copy_context().run(_runner)


async def run_async(
    context: RequestContext,
    work: Callable[..., Awaitable[T]],
    *args: Any,
    **kwargs: Any,
) -> T:
    """Await work(*args, **kwargs) with context active; restore the previous value after."""
    token = _request_context.set(context)
    try:
        return await work(*args, **kwargs)
    finally:
        _request_context.reset(token)


def current() -> RequestContext | None:
    """Return the active request context, or None outside a request (e.g. background jobs)."""
    return _request_context.get()


def patch(**changes: Any) -> RequestContext:
    """Merge fields into the active context, or start one for the rest of this flow.

    A new frozen value is set for the current flow only; tasks already
    started keep the context they were created with.

    Raises:
        TypeError: If a field name is not a RequestContext field.
    """
    unknown = set(changes) - _FIELD_NAMES
    if unknown:
        raise TypeError(f"Unknown request context field(s): {', '.join(sorted(unknown))}")
    active = _request_context.get()
    updated = replace(active, **changes) if active is not None else RequestContext(**changes)
    _request_context.set(updated)
    return updated


def clear() -> None:
    """Drop the active context for the current flow."""
    _request_context.set(None)
