"""Application configuration using pydantic-settings."""
from functools import lru_cache
from urllib.parse import urlparse
from uuid import UUID

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Database
    database_url: str
    db_pool_size: int = Field(default=10, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=20, validation_alias="DB_MAX_OVERFLOW")

    # Supabase - shared with frontend (VITE_ prefix for Vite exposure)
    supabase_url: str = Field(default="", validation_alias="VITE_SUPABASE_URL")
    supabase_jwt_audience: str = Field(
        default="authenticated", validation_alias="SUPABASE_JWT_AUDIENCE",
    )

    # Development mode - bypasses auth for local development (shared with frontend)
    dev_mode: bool = Field(default=False, validation_alias="VITE_DEV_MODE")
    dev_user_id: UUID = Field(
        default=UUID("00000000-0000-7000-8000-000000000001"),
        validation_alias="DEV_USER_ID",
    )

    # CORS - comma-separated list of allowed origins (stored as string, parsed via property)
    cors_origins_str: str = Field(
        default="http://localhost:5173",
        validation_alias="CORS_ORIGINS",
    )

    # Straico AI gateway
    straico_api_url: str = Field(
        default="https://api.straico.com", validation_alias="STRAICO_API_URL",
    )
    straico_timeout: float = Field(default=60.0, validation_alias="STRAICO_TIMEOUT")

    # In-memory bookmark stores: seconds unused before eviction, and how often to check
    store_idle_timeout: float = Field(
        default=1800.0, gt=0, validation_alias="STORE_IDLE_TIMEOUT",
    )
    store_eviction_interval: float = Field(
        default=60.0, gt=0, validation_alias="STORE_EVICTION_INTERVAL",
    )

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    # Field length limits - shared with frontend (VITE_ prefix for Vite exposure)
    max_title_length: int = Field(default=500, validation_alias="VITE_MAX_TITLE_LENGTH")
    max_description_length: int = Field(
        default=2000, validation_alias="VITE_MAX_DESCRIPTION_LENGTH",
    )
    max_notes_length: int = Field(default=10_000, validation_alias="VITE_MAX_NOTES_LENGTH")

    @model_validator(mode="after")
    def validate_dev_mode_security(self) -> "Settings":
        """
        Prevent DEV_MODE from being enabled with a production database.

        DEV_MODE completely bypasses authentication, so we must ensure it's only
        used with local development databases (or a SQLite file) to prevent
        accidental production exposure.
        """
        if not self.dev_mode:
            return self

        try:
            parsed = urlparse(self.database_url)
            scheme = parsed.scheme or ""
            hostname = parsed.hostname or ""
        except ValueError:
            scheme = ""
            hostname = ""

        if scheme.startswith("sqlite"):
            return self

        local_hosts = {"localhost", "127.0.0.1", "0.0.0.0", "::1"}
        if hostname.lower() not in local_hosts:
            raise ValueError(
                f"DEV_MODE cannot be enabled with a non-local database. "
                f"Database host '{hostname}' appears to be a production database. "
                f"DEV_MODE bypasses all authentication and must only be used locally.",
            )

        return self

    @property
    def cors_origins(self) -> list[str]:
        """Parse comma-separated CORS origins string into a list."""
        if not self.cors_origins_str:
            return []
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]

    @property
    def supabase_issuer(self) -> str:
        """Get the Supabase Auth issuer URL."""
        return f"{self.supabase_url.rstrip('/')}/auth/v1"

    @property
    def supabase_jwks_url(self) -> str:
        """Get the Supabase JWKS URL for fetching public keys."""
        return f"{self.supabase_issuer}/.well-known/jwks.json"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
