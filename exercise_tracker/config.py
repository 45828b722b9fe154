"""Configuration management for the Exercise Tracker service."""

from dataclasses import dataclass
from enum import Enum

from decouple import Choices
from decouple import config


class Environment(Enum):
    """Supported deployment environments."""

    DEVELOPMENT = "development"
    CI = "CI"
    PRODUCTION = "production"


LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@dataclass
class Config:
    """Configuration for the Exercise Tracker service."""

    # Required fields
    database_url: str
    database_name: str = "exercise_tracker_db"

    # Environment configuration
    environment: Environment = Environment.DEVELOPMENT

    # Create the schema on startup instead of relying on alembic
    database_auto_create: bool = False

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"

    # OpenTelemetry configuration
    otel_enabled: bool = False
    otel_service_name: str = "exercise-tracker"
    otel_exporter_type: str = "none"
    otel_otlp_endpoint: str = "http://localhost:4317"
    otel_export_interval_millis: int = 60000
    otel_export_timeout_millis: int = 30000

    @classmethod
    def from_env(cls) -> "Config":
        """Create configuration from environment variables."""
        # Helper function to simplify config calls
        def get_config(key: str, default=None, cast=None):
            if default is not None:
                if cast is not None:
                    return config(key, default=default, cast=cast)
                else:
                    return config(key, default=default)
            else:
                return config(key)

        env = Environment(
            get_config("ENVIRONMENT", "development", Choices(["development", "CI", "production"]))
        )

        return cls(
            # Required
            database_url=get_config("DATABASE_URL"),
            database_name=get_config("DATABASE_NAME", "exercise_tracker_db"),
            # Environment
            environment=env,
            database_auto_create=get_config(
                "DATABASE_AUTO_CREATE", env != Environment.PRODUCTION, bool
            ),
            # Logging
            log_level=get_config("LOG_LEVEL", "INFO", Choices(LOG_LEVELS)),
            log_format=get_config("LOG_FORMAT", "json", Choices(["json", "text"])),
            # OpenTelemetry
            otel_enabled=get_config("OTEL_ENABLED", False, bool),
            otel_service_name=get_config("OTEL_SERVICE_NAME", "exercise-tracker"),
            otel_exporter_type=get_config(
                "OTEL_EXPORTER_TYPE", "none", Choices(["console", "otlp", "none"])
            ),
            otel_otlp_endpoint=get_config("OTEL_OTLP_ENDPOINT", "http://localhost:4317"),
            otel_export_interval_millis=get_config("OTEL_EXPORT_INTERVAL_MILLIS", 60000, int),
            otel_export_timeout_millis=get_config("OTEL_EXPORT_TIMEOUT_MILLIS", 30000, int),
        )

    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == Environment.DEVELOPMENT

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == Environment.PRODUCTION

    def get_database_url(self) -> str:
        """Construct the async SQLAlchemy URL for the configured database.

        PostgreSQL URLs get the asyncpg driver and have their database name
        replaced with ``database_name``. SQLite URLs get the aiosqlite driver
        and keep their file path. Anything else is returned unchanged.
        """
        from urllib.parse import urlparse, urlunparse

        parsed = urlparse(self.database_url)
        scheme = parsed.scheme

        if scheme in ("sqlite", "sqlite+aiosqlite"):
            # urlunparse collapses "sqlite:///path", so rebuild by hand
            return "sqlite+aiosqlite:" + self.database_url.split(":", 1)[1]

        if scheme in ("postgres", "postgresql", "postgresql+asyncpg"):
            scheme = "postgresql+asyncpg"
            # The path includes the leading '/', so we prepend it to database_name
            path = f"/{self.database_name}"
            return urlunparse(
                (scheme, parsed.netloc, path, parsed.params, parsed.query, parsed.fragment)
            )

        return self.database_url

