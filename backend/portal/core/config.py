"""
Application configuration using pydantic-settings.

Loads settings from environment variables (and optional .env file) with sensible defaults.

Fields loaded (env var names in parentheses):
- app_env (APP_ENV)
- log_level (LOG_LEVEL)
- db_url (DB_URL or DATABASE_URL)
- principal_header (PRINCIPAL_HEADER)
- storage_base_url (STORAGE_BASE_URL)
- storage_signing_secret (STORAGE_SIGNING_SECRET, SECRET_KEY)
- signed_url_ttl_seconds (SIGNED_URL_TTL_SECONDS)
- tenant_leads_may_grant (TENANT_LEADS_MAY_GRANT)

Usage:
    from portal.core.config import get_settings
    settings = get_settings()
    print(settings.db_url)
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Environment / logging
    app_env: str = Field(default="development", alias="APP_ENV")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database URL (accept DB_URL or DATABASE_URL)
    db_url: str = Field(
        default="sqlite:///./portal.db",
        validation_alias=AliasChoices("DB_URL", "DATABASE_URL"),
    )

    # Header carrying the identity provider's principal id
    principal_header: str = Field(default="x-principal-id", alias="PRINCIPAL_HEADER")

    # Object store used for signed download URLs
    storage_base_url: str = Field(
        default="http://localhost:9000/client-files", alias="STORAGE_BASE_URL"
    )
    storage_signing_secret: str = Field(
        default="dev-secret",
        validation_alias=AliasChoices("STORAGE_SIGNING_SECRET", "SECRET_KEY"),
    )
    signed_url_ttl_seconds: int = Field(
        default=3600, alias="SIGNED_URL_TTL_SECONDS", ge=1, le=7 * 24 * 3600
    )

    # Whether tenant-leads may grant visibility inside their own tenant
    tenant_leads_may_grant: bool = Field(default=True, alias="TENANT_LEADS_MAY_GRANT")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Return a cached Settings instance.
    """
    return Settings()  # type: ignore[call-arg]


__all__ = ["Settings", "get_settings"]
