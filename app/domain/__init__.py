"""Domain layer: enums and exceptions.

No dependencies on infrastructure or presentation.
"""

from app.domain.enums import FormType, ReportStatus, UserRole
from app.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    ESignatureException,
    InvalidStatusTransitionException,
    LimsException,
    ResourceNotFoundException,
    SqlNotConfiguredException,
    ValidationException,
)

__all__ = [
    # Enums
    "FormType",
    "ReportStatus",
    "UserRole",
    # Exceptions
    "AuthenticationException",
    "AuthorizationException",
    "ESignatureException",
    "InvalidStatusTransitionException",
    "LimsException",
    "ResourceNotFoundException",
    "SqlNotConfiguredException",
    "ValidationException",
]
