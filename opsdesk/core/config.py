"""Configuration management for opsdesk."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # SQLite Configuration
    sqlite_db_path: str = Field(default="data/opsdesk.db", description="Path to the SQLite database file")

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")
    service_name: str = Field(default="opsdesk", description="Service name reported to Logfire")
    environment: str = Field(default="production", description="Deployment environment reported to Logfire")


# Application Constants
class Constants:
    """Application-wide constants."""

    # Validation
    MIN_TITLE_LENGTH: int = 3

    # Pagination Defaults
    DEFAULT_PER_PAGE_LIMIT: int = 100  # Default pagination limit for list queries
    MAX_PER_PAGE_LIMIT: int = 500  # Page size used when scanning a whole collection

    # Notes log
    NOTES_SECTION_SEPARATOR: str = "\n\n"
    CANCELLATION_NOTE_PREFIX: str = "Cancellation: "
    OUT_OF_ORDER_NOTE_PREFIX: str = "Out of order: "


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
