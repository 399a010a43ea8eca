"""Security: JWT access tokens and password hashing (login and e-signature)."""

from app.infrastructure.security.jwt import (
    create_access_token,
    decode_token_or_none,
    verify_token,
)
from app.infrastructure.security.password import get_password_hash, verify_password

__all__ = [
    "create_access_token",
    "decode_token_or_none",
    "get_password_hash",
    "verify_password",
    "verify_token",
]
