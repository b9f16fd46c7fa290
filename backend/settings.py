"""
Centralized settings configuration using Pydantic BaseSettings.

All environment variables are defined here with types, defaults, and validation.
Use get_settings() for dependency injection compatibility in FastAPI.

Usage:
    from backend.settings import get_settings, Settings

    # In FastAPI endpoints (dependency injection)
    @app.get("/")
    def read_root(settings: Settings = Depends(get_settings)):
        return {"environment": settings.environment}

    # Direct access (module-level)
    settings = get_settings()
    print(settings.max_plans_per_user)
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.constants import (
    DRAFT_AUTOSAVE_INTERVAL_SECONDS,
    DRAFT_TTL_DAYS,
    MAX_PLANS_PER_USER,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Core Environment
    # -------------------------------------------------------------------------
    environment: str = Field(
        default="development",
        description="Runtime environment: development, staging, production",
    )

    # -------------------------------------------------------------------------
    # Supabase Database
    # -------------------------------------------------------------------------
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL",
    )
    supabase_service_role_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key (full access)",
    )

    @property
    def supabase_key(self) -> Optional[str]:
        """Get the Supabase key."""
        return self.supabase_service_role_key

    # -------------------------------------------------------------------------
    # Observability - Sentry
    # -------------------------------------------------------------------------
    sentry_dsn: Optional[str] = Field(
        default=None,
        description="Sentry DSN for error tracking",
    )

    # -------------------------------------------------------------------------
    # Plan Composition
    # -------------------------------------------------------------------------
    max_plans_per_user: int = Field(
        default=MAX_PLANS_PER_USER,
        ge=1,
        description="Maximum number of active training plans per user",
    )

    # -------------------------------------------------------------------------
    # Wizard Client
    # -------------------------------------------------------------------------
    plans_api_url: str = Field(
        default="http://localhost:8000",
        description="Base URL of the plans API used by the wizard",
    )
    plans_api_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Request timeout for the plans API client",
    )
    draft_storage_dir: str = Field(
        default=".drafts",
        description="Directory for the file-backed wizard draft store",
    )
    draft_ttl_days: int = Field(
        default=DRAFT_TTL_DAYS,
        ge=1,
        description="Drafts older than this are discarded on load",
    )
    draft_autosave_interval_seconds: float = Field(
        default=DRAFT_AUTOSAVE_INTERVAL_SECONDS,
        gt=0,
        description="Interval between periodic draft saves",
    )

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------
    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is a valid value."""
        valid_environments = {"development", "staging", "production", "test"}
        if v.lower() not in valid_environments:
            raise ValueError(
                f"Invalid environment '{v}'. Must be one of: {valid_environments}"
            )
        return v.lower()

    # -------------------------------------------------------------------------
    # Helper Properties
    # -------------------------------------------------------------------------
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_test(self) -> bool:
        """Check if running in test environment."""
        return self.environment == "test"

    @property
    def draft_ttl_seconds(self) -> float:
        return self.draft_ttl_days * 24 * 60 * 60


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    For testing, you can clear the cache with get_settings.cache_clear().

    Returns:
        Settings: Application settings instance
    """
    return Settings()
