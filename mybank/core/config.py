"""
mybank/core/config.py

Purpose: Application configuration

- Loads environment variables (and an optional .env file)
- Centralizes config values (DB URI, pool sizing, timeouts)
- Validates configuration on startup
- MONGO_URL has no default: a missing value is fatal
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, ValidationError, validator
from pydantic_settings import BaseSettings

from mybank.core.exceptions import ConfigurationError


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Validates all required configs on startup.
    """

    # Environment
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"

    # MongoDB
    MONGO_URL: str = Field(
        ...,
        description="MongoDB connection URI (required, credentials included)"
    )
    MONGODB_DB_NAME: str = Field(
        default="mybank",
        description="MongoDB database name"
    )
    USERS_COLLECTION: str = Field(
        default="users",
        description="Collection holding user documents"
    )

    # Connection pool
    MONGO_MAX_POOL_SIZE: int = Field(
        default=10,
        ge=1,
        description="Maximum number of concurrently leased database sessions"
    )
    MONGO_MIN_POOL_SIZE: int = Field(
        default=0,
        ge=0,
        description="Minimum number of idle driver connections"
    )
    MONGO_SERVER_SELECTION_TIMEOUT_MS: int = Field(
        default=5000,
        description="Driver server selection timeout in milliseconds"
    )
    MONGO_CONNECT_TIMEOUT_MS: int = Field(
        default=10000,
        description="Driver connect timeout in milliseconds"
    )
    SESSION_CHECKOUT_TIMEOUT_SECONDS: float = Field(
        default=5.0,
        gt=0,
        description="How long a request waits for a free pooled session"
    )
    DB_OPERATION_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        gt=0,
        description="Upper bound on a single repository operation"
    )

    # Application
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    HOST: str = Field(
        default="0.0.0.0",
        description="Listen address"
    )
    PORT: int = Field(
        default=5050,
        description="Listen port"
    )
    STATIC_DIR: str = Field(
        default="public",
        description="Directory served at the site root (skipped if missing)"
    )
    COLLECT_DEFAULT_METRICS: bool = Field(
        default=True,
        description="Export process, platform and GC metrics"
    )

    @validator("MONGO_URL")
    def validate_mongo_url(cls, v):
        """Reject a blank connection string."""
        if not v or not v.strip():
            raise ValueError("MONGO_URL must not be empty")
        return v.strip()

    @validator("MONGO_MIN_POOL_SIZE")
    def validate_min_pool_size(cls, v, values):
        """Ensure the minimum pool size does not exceed the maximum."""
        max_size = values.get("MONGO_MAX_POOL_SIZE")
        if max_size is not None and v > max_size:
            raise ValueError("MONGO_MIN_POOL_SIZE cannot exceed MONGO_MAX_POOL_SIZE")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"

    class Config:
        env_file = ".env"
        case_sensitive = True
        env_file_encoding = "utf-8"


def load_settings(**overrides) -> Settings:
    """
    Builds a Settings instance, converting validation failures into a
    ConfigurationError so startup fails with a readable message.

    Args:
        **overrides: Explicit values that take precedence over the environment

    Returns:
        Validated Settings instance

    Raises:
        ConfigurationError: If a required setting is missing or invalid
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        fields = ", ".join(
            ".".join(str(part) for part in error["loc"]) or "settings"
            for error in e.errors()
        )
        raise ConfigurationError(
            f"Configuration validation failed: {fields}",
            details=[error["msg"] for error in e.errors()]
        ) from e


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Returns the process-wide settings, loaded on first use."""
    return load_settings()
