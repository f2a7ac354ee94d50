"""
Configuration management using Pydantic Settings.

Loads configuration from environment variables and .env files.
"""

from functools import lru_cache
from typing import Annotated, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DATA_SOURCE_NAMES = ("transactions", "debts", "inventory", "salaries", "branches")
EXPORT_FORMAT_NAMES = ("excel", "pdf", "csv")


class Settings(BaseSettings):
    """Settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Application Settings
    # ==========================================================================
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Logging level")
    json_logs: bool = Field(default=False, description="Emit JSON formatted logs")

    app_name: str = Field(default="SmartReports", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")

    # ==========================================================================
    # Backend Collaborator
    # ==========================================================================
    api_base_url: str = Field(
        default="http://localhost:3000/api",
        description="Base URL of the back-office API",
    )
    api_prefix: str = Field(
        default="/reports/smart",
        description="Path prefix of the smart report endpoints",
    )
    api_token: str | None = Field(
        default=None,
        description="Bearer token sent with every request",
    )
    request_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Transport timeout in seconds",
    )

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URL so paths can be appended."""
        return v.rstrip("/")

    @field_validator("api_prefix")
    @classmethod
    def validate_api_prefix(cls, v: str) -> str:
        """Ensure the prefix starts with a slash and has none trailing."""
        v = "/" + v.strip("/")
        return v

    # ==========================================================================
    # Field Catalog
    # ==========================================================================
    field_cache_ttl: int = Field(
        default=1800,
        ge=0,
        description="Seconds a live field catalog stays cached (0 disables)",
    )
    data_sources_cache_ttl: int = Field(
        default=3600,
        ge=0,
        description="Seconds the data source list stays cached (0 disables)",
    )
    fallback_catalog_enabled: bool = Field(
        default=True,
        description="Serve the static catalog when the metadata service fails",
    )

    # ==========================================================================
    # Builder Defaults
    # ==========================================================================
    default_data_source: str = Field(
        default="transactions",
        description="Data source selected when a builder session starts",
    )
    default_export_formats: Annotated[list[str], NoDecode] = Field(
        default=list(EXPORT_FORMAT_NAMES),
        description="Export formats offered by a new configuration",
    )

    @field_validator("default_data_source")
    @classmethod
    def validate_default_data_source(cls, v: str) -> str:
        """Ensure default data source is a known one."""
        if v not in DATA_SOURCE_NAMES:
            raise ValueError(f"default_data_source must be one of {list(DATA_SOURCE_NAMES)}")
        return v

    @field_validator("default_export_formats", mode="before")
    @classmethod
    def parse_export_formats(cls, v: Any) -> list[str]:
        """Parse export formats from comma-separated string."""
        if isinstance(v, str):
            v = [fmt.strip() for fmt in v.split(",") if fmt.strip()]
        unknown = [fmt for fmt in v if fmt not in EXPORT_FORMAT_NAMES]
        if unknown:
            raise ValueError(f"Unknown export formats: {unknown}")
        return v

    @property
    def api_url(self) -> str:
        """Full URL of the smart report endpoints."""
        return f"{self.api_base_url}{self.api_prefix}"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


# Global settings instance
settings = get_settings()
