"""
Configuration settings for the actors API.

Centralized configuration using Pydantic Settings for type-safe environment
variable handling. All settings can be overridden via environment variables
with the ACTORS_API_ prefix.

Example:
    export ACTORS_API_LOG_LEVEL=DEBUG
    export ACTORS_API_API_KEYS='["52cd3e6988814c6ea7b1d52a45be37c3-1"]'
    python -m actors_api.main
"""

import logging
from typing import Any
from typing import Dict
from typing import List

from pydantic import Field
from pydantic import field_validator
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    All settings can be overridden via environment variables with the
    ACTORS_API_ prefix (e.g., ACTORS_API_ENVIRONMENT=production).
    """

    model_config = SettingsConfigDict(
        env_prefix="ACTORS_API_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Core application settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    debug_mode: bool = Field(
        default=False,
        description="Plain-text console logs instead of JSON"
    )

    environment: str = Field(
        default="development",
        description="Deployment environment (development or production)"
    )

    db_path: str = Field(
        default=":memory:",
        description="SQLite database location; the default keeps the store in memory"
    )

    # Web server configuration
    host: str = Field(
        default="0.0.0.0",
        description="Host address to bind web server"
    )

    port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port number for web server"
    )

    # Authentication
    api_keys: List[str] = Field(
        default_factory=list,
        description="Bearer tokens accepted by the API (exact, case-sensitive match)"
    )

    # Seeding source
    source_url: str = Field(
        default="https://www.imdb.com/list/ls054840033/",
        description="Ranked listing page scraped once at startup"
    )

    provider_name: str = Field(
        default="IMDb",
        description="Provider name recorded in the source field of scraped actors"
    )

    request_timeout: float = Field(
        default=30.0,
        ge=5.0,
        le=120.0,
        description="HTTP request timeout in seconds"
    )

    user_agent: str = Field(
        default="Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
        description="User-Agent string for HTTP requests"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate that log_level is a valid logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}, got {v}")
        return upper_v

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        valid_environments = {"development", "production"}
        lower_v = v.lower()
        if lower_v not in valid_environments:
            raise ValueError(f"environment must be one of {valid_environments}, got {v}")
        return lower_v

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def logging_config(self) -> Dict[str, Any]:
        """Get logging configuration dict."""
        return {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "standard": {
                    "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
                "structured": {
                    "()": "pythonjsonlogger.json.JsonFormatter",
                    "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "level": self.log_level,
                    "formatter": "standard" if self.debug_mode else "structured",
                    "stream": "ext://sys.stdout",
                },
            },
            "loggers": {
                "actors_api": {
                    "level": self.log_level,
                    "handlers": ["console"],
                    "propagate": False,
                },
                "aiohttp.client": {
                    "level": "WARNING",
                    "handlers": ["console"],
                    "propagate": False,
                },
                "uvicorn.access": {
                    "level": "WARNING",
                    "handlers": ["console"],
                    "propagate": False,
                },
            },
            "root": {
                "level": "WARNING",
                "handlers": ["console"],
            },
        }

    def setup_logging(self) -> None:
        """Configure application logging based on current settings."""
        import logging.config

        import structlog

        logging.config.dictConfig(self.logging_config)

        renderer = (
            structlog.dev.ConsoleRenderer()
            if self.debug_mode
            else structlog.processors.JSONRenderer()
        )
        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.stdlib.PositionalArgumentsFormatter(),
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.UnicodeDecoder(),
                renderer,
            ],
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        logging.getLogger(__name__).debug(f"Logging configured at level {self.log_level}")


# Global settings instance
settings = Settings()

# Convenience function for external usage
def get_settings() -> Settings:
    """Get the global settings instance."""
    return settings
