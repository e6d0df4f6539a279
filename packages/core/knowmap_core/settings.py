"""Process settings using pydantic-settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from ``KNOWMAP_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="KNOWMAP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = Field(
        default="INFO",
        description="Root log level used by the CLI when neither --verbose nor --quiet is set",
    )

    # Scanning
    scan_max_depth: int = Field(
        default=10,
        description="Maximum directory depth walked by the scanner",
    )

    # Detection
    relationship_sample_size: int = Field(
        default=20,
        description="Files read per module when inferring import relationships",
    )

    # Documents
    key_files_limit: int = Field(
        default=20,
        description="Files listed in the key-files table of a module document",
    )
    templates_dir: str | None = Field(
        default=None,
        description="Directory overriding the built-in document templates",
    )

    # OpenTelemetry
    otel_enabled: bool = Field(
        default=False,
        description="Enable OpenTelemetry tracing",
    )
    otel_service_name: str = Field(
        default="knowmap",
        description="Service name reported to the OTLP collector",
    )
    otel_exporter_otlp_endpoint: str = Field(
        default="http://localhost:4317",
        description="OTLP gRPC endpoint",
    )


# Singleton instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
