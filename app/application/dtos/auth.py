"""DTOs for authenticated principals."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Principal:
    """The authenticated user a request acts for (from the access token)."""

    user_id: str
    role: str
