"""Application configuration with validation."""

from enum import Enum
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import List


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class ConfigurationError(Exception):
    """Raised when application configuration is invalid for the environment."""
    pass


class Settings(BaseSettings):
    """
    Application settings with validation.

    Process-level configuration only. Feed identity (site URL, titles,
    author/owner) lives in the database-backed syndication settings row
    so it can be edited at runtime.
    """

    # Environment
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development/production)"
    )

    # CORS Configuration (management API only; feed routes are open to any origin)
    cors_allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Allowed CORS origins for the management API (comma-separated)"
    )

    # Database Configuration
    database_url: str = Field(
        default="sqlite:///./assetfeed.db",
        description="Database connection URL"
    )
    # Connection pool tuning (PostgreSQL only; ignored for SQLite).
    db_pool_size: int = Field(
        default=5,
        description="Number of persistent database connections"
    )
    db_max_overflow: int = Field(
        default=10,
        description="Extra connections allowed during traffic bursts"
    )

    # Storage
    storage_dir: str = Field(
        default="./uploads",
        description="Directory holding uploaded payloads"
    )
    feed_output_dir: str = Field(
        default=".",
        description="Directory where the global rss.xml / feed.xml snapshots are written"
    )
    max_upload_files: int = Field(
        default=1000,
        description="Maximum number of files accepted in a single upload request"
    )

    # Metadata probing
    ffprobe_path: str = Field(
        default="ffprobe",
        description="ffprobe executable used to read audio/video duration and dimensions"
    )
    probe_timeout_seconds: int = Field(
        default=30,
        description="Seconds before a metadata probe is abandoned"
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: str = Field(
        default="json",
        description="Log output format: 'json' for structured, 'text' for human-readable"
    )

    def get_cors_origins(self) -> List[str]:
        """
        Get CORS origins as a list.

        Parses comma-separated string and validates no wildcards.
        """
        origins = [origin.strip() for origin in self.cors_allowed_origins.split(',') if origin.strip()]

        if "*" in origins:
            raise ValueError(
                "Wildcard CORS (*) not allowed for the management API. "
                "Specify explicit origins in CORS_ALLOWED_ORIGINS"
            )

        return origins

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard Python logging levels."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v_upper

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v_lower = v.lower()
        if v_lower not in ("json", "text"):
            raise ValueError("Invalid log format. Must be 'json' or 'text'")
        return v_lower

    def validate_production_config(self) -> None:
        """Validate configuration for production environment.

        Raises:
            ConfigurationError: If production config is unsafe.
        """
        errors: list[str] = []

        origins = self.get_cors_origins()
        localhost_origins = [o for o in origins if "localhost" in o or "127.0.0.1" in o]
        if localhost_origins:
            errors.append(
                f"CORS allows localhost origins: {localhost_origins}. "
                "Remove localhost origins for production."
            )

        if self.database_url.startswith("sqlite") and ":memory:" in self.database_url:
            errors.append("In-memory SQLite loses all data on restart.")

        if errors and self.environment == Environment.PRODUCTION:
            raise ConfigurationError(
                "Production configuration is unsafe:\n  - " + "\n  - ".join(errors)
            )

    class Config:
        """Pydantic configuration."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global settings instance
settings = Settings()
