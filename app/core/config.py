"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Required fields (e.g. SECRET_KEY) are validated at
load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    All settings are optional with defaults except secret_key, which is
    validated in validate_required.
    """

    # App
    app_name: str = "lims"
    app_version: str = "1.0.0"
    debug: bool = False

    # Database (SQLAlchemy asyncio + asyncpg). Empty URL = SQL not configured.
    database_url: str = ""
    database_echo: bool = False
    # Optional pool/driver overrides (None = use defaults in database.py)
    db_pool_size: int | None = None
    db_max_overflow: int | None = None
    db_command_timeout: int | None = None

    # Security
    secret_key: SecretStr = SecretStr("")
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 480  # 8 hours

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:5173"

    # Request context headers
    request_id_header: str = "X-Request-ID"
    change_reason_header: str = "X-Change-Reason"
    esign_password_header: str = "X-ESign-Password"

    # Audit trail
    # Comma-separated column names left out of field diffs (noise).
    audit_ignored_fields: str = "updated_at"
    audit_page_size_max: int = 100

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_required(self) -> "Settings":
        """Validate required env (SECRET_KEY)."""
        if not self.secret_key.get_secret_value():
            raise ValueError(
                "SECRET_KEY is required. Generate with: openssl rand -hex 32."
            )
        return self

    @property
    def audit_ignored_field_set(self) -> frozenset[str]:
        """audit_ignored_fields parsed into a set of column names."""
        return frozenset(
            f.strip() for f in self.audit_ignored_fields.split(",") if f.strip()
        )


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
