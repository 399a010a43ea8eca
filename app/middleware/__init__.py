"""HTTP middleware. Applied in app.main; first added = innermost."""

from app.middleware.request_context import RequestContextMiddleware

__all__ = ["RequestContextMiddleware"]
