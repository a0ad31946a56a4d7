"""Main application settings and configuration management.

This module composes all the application settings from the different modules
(app, database, redis, throttling) into a single, accessible `Settings` class.

It loads settings from environment variables and .env files, validates them,
and provides a single `settings` object for use throughout the application.

Environment Support:
- Development: Uses .env, debug mode and verbose console logging
- Test: Uses .env.test
- Staging: Uses .env.staging
- Production: Uses .env.production, JSON logs, explicit DATABASE_URL required
"""

import logging
import os
from pathlib import Path

from pydantic_settings import SettingsConfigDict

from .app import AppSettings
from .database import DatabaseSettings
from .redis import RedisSettings
from .throttling import ThrottlingSettings

logger = logging.getLogger(__name__)


class Settings(AppSettings, DatabaseSettings, RedisSettings, ThrottlingSettings):
    """The main settings class that aggregates all application configurations.

    Environment Support:
        - Automatically loads the correct .env file based on APP_ENV
        - Development: debug mode and DEBUG log level unless overridden
        - Production: JSON logs unless overridden
    Usage:
        - Access settings via the singleton instance `settings` throughout the application.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    def __init__(self, **kwargs):
        """Initialize settings with environment-specific configuration."""
        super().__init__(**kwargs)
        self._set_environment_defaults(self.APP_ENV)

    def _set_environment_defaults(self, env: str) -> None:
        """Set environment-specific default values.

        Values set explicitly through the environment or constructor win.

        Args:
            env: Environment name
        """
        explicit = self.model_fields_set

        if env == "development":
            if "DEBUG" not in explicit:
                self.DEBUG = True
            if "LOG_LEVEL" not in explicit:
                self.LOG_LEVEL = "DEBUG"

        if env == "production" and "LOG_JSON" not in explicit:
            self.LOG_JSON = True

        logger.debug(f"Application running in {env} environment (debug={self.DEBUG})")

    def validate_required_fields(self) -> None:
        """Validates that deployment-critical settings were provided explicitly.

        Development and test environments fall back to defaults; staging and
        production must configure the database and, when the Redis throttler
        is selected, the Redis connection.

        Raises:
            ValueError: If required fields are missing outside development/test.
        """
        if self.APP_ENV in ("development", "test"):
            return

        required_fields = ["DATABASE_URL", "COOKIE_PREFIX"]
        if self.THROTTLE_BACKEND == "redis":
            required_fields.append("REDIS_URL")

        missing_fields = [
            field
            for field in required_fields
            if field not in self.model_fields_set or not getattr(self, field, None)
        ]
        if missing_fields:
            error_msg = f"Missing required environment variables: {', '.join(missing_fields)}"
            logger.error(error_msg)
            raise ValueError(error_msg)
        logger.info("All required environment variables are set.")


def create_settings() -> Settings:
    """Create settings instance with environment-specific configuration.

    Returns:
        Settings: Configured settings instance
    """
    env = os.getenv("APP_ENV", "development")

    env_files = {
        "development": ".env",
        "test": ".env.test",
        "staging": ".env.staging",
        "production": ".env.production",
    }
    env_file = env_files.get(env, ".env")

    if env != "development" and Path(env_file).exists():
        logger.info(f"Loading environment configuration from {env_file}")
        return Settings(_env_file=env_file)
    if Path(".env").exists():
        logger.info(f"Loading environment configuration from .env (environment: {env})")
    return Settings()


# Create a singleton instance of the settings to be used across the application.
settings = create_settings()
