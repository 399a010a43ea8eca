"""Domain exceptions for the LIMS application.

Business-rule violations raised by services and repositories. They carry
no HTTP knowledge; app.core.exception_handlers maps error_code to a status.
"""

from typing import Any


class LimsException(Exception):
    """Base exception for LIMS errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable code used for the HTTP mapping.
        details: Extra context for the client (field, resource id, statuses).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Body of the JSON error response."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(LimsException):
    """Input rejected (e.g. missing change reason, nothing to update)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthenticationException(LimsException):
    """Raised when authentication fails (e.g. invalid credentials or token)."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class AuthorizationException(LimsException):
    """Raised when the user's role may not perform the operation."""

    def __init__(
        self,
        resource: str | None = None,
        action: str | None = None,
        message: str = "Permission denied",
    ) -> None:
        """Initialize with optional resource, action, and message.

        Args:
            resource: Optional resource type (e.g. 'report').
            action: Optional action that was attempted (e.g. 'delete').
            message: Human-readable message; default used when resource/action omitted.
        """
        if resource and action:
            message = f"Permission denied: {action} on {resource}"
        details: dict[str, Any] = {}
        if resource:
            details["resource"] = resource
        if action:
            details["action"] = action
        super().__init__(message, "PERMISSION_DENIED", details)


class ResourceNotFoundException(LimsException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'report', 'user').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class InvalidStatusTransitionException(LimsException):
    """Raised when a report status change is not allowed from the current status."""

    def __init__(self, from_status: str, to_status: str, reason: str) -> None:
        super().__init__(
            f"Cannot move report from {from_status} to {to_status}: {reason}",
            "INVALID_STATUS_TRANSITION",
            {"from_status": from_status, "to_status": to_status, "reason": reason},
        )


class ESignatureException(LimsException):
    """Raised when an electronic signature (password re-entry) is missing or wrong."""

    def __init__(self, message: str = "Electronic signature failed") -> None:
        super().__init__(message, "ESIGNATURE_ERROR")


class SqlNotConfiguredException(LimsException):
    """Raised when an operation requires Postgres but DATABASE_URL is not set."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires a SQL database that is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )
