"""DikeLab application settings loaded from environment variables."""

from enum import StrEnum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(StrEnum):
    """Deployment environment."""

    DEV = "dev"
    STAGING = "staging"
    PROD = "prod"


class LogLevel(StrEnum):
    """Supported log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Settings(BaseSettings):
    """Application-wide settings loaded from environment variables / .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Workspace storage ---
    STORAGE_PATH: str = Field(
        default="./workspace",
        description="Directory holding the persisted workspace blobs.",
    )

    # --- Checklist ---
    DEFAULT_PAGE_SIZE: int = Field(
        default=20,
        ge=1,
        description="Checklist rows per page.",
    )
    LARGE_CHECKLIST_THRESHOLD: int = Field(
        default=5000,
        ge=1,
        description="Row count above which the checklist is flagged as large.",
    )

    # --- Importer ---
    PREVIEW_ROW_LIMIT: int = Field(
        default=10,
        ge=1,
        description="Data rows shown in an import preview.",
    )
    RAW_PREVIEW_ROW_LIMIT: int = Field(
        default=20,
        ge=1,
        description="Raw source rows shown for header-row selection.",
    )
    MAX_ANALYSIS_COLUMNS: int = Field(
        default=3,
        ge=1,
        description="Maximum analysis columns selectable during an import.",
    )

    # --- Analytics ---
    CORRELATION_SAMPLE_SIZE: int = Field(
        default=1000,
        ge=2,
        description="Rows sampled for correlation when the dataset is larger.",
    )
    CORRELATION_SEED: int | None = Field(
        default=None,
        description="Seed for correlation sampling; unset means nondeterministic.",
    )

    # --- Logging ---
    LOG_LEVEL: LogLevel = Field(
        default=LogLevel.INFO,
        description="Application log level.",
    )

    # --- Environment ---
    ENVIRONMENT: Environment = Field(
        default=Environment.DEV,
        description="Deployment environment (dev/staging/prod).",
    )


def get_settings() -> Settings:
    """Factory function for dependency injection via FastAPI Depends."""
    return Settings()
