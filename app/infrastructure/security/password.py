"""Password hashing for login and e-signature checks.

bcrypt only reads the first 72 bytes of its input, so passwords are
SHA-256 pre-hashed (base64) to a fixed length first.
"""

import base64
import hashlib

import bcrypt


def _prehash(password: str) -> bytes:
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """True if plain_password matches hashed_password; malformed hashes never match."""
    if not plain_password or not hashed_password:
        return False
    try:
        return bool(bcrypt.checkpw(_prehash(plain_password), hashed_password.encode("utf-8")))
    except (ValueError, TypeError):
        return False


def get_password_hash(password: str) -> str:
    """bcrypt hash of the pre-hashed password."""
    return bcrypt.hashpw(_prehash(password), bcrypt.gensalt()).decode("utf-8")
