# ==============================================================================
# SETTINGS CONFIGURATION - Environment Management
# ==============================================================================
# Pydantic Settings for type-safe environment variable management
# Consumed once, at construction time of the pool and the transfer service
# ==============================================================================

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from typing import Optional

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PoolClass(str, Enum):
    """
    Supported connection pool strategies.

    Attributes:
        QUEUE: Bounded pool reusing physical connections
        NULL: No pooling, every acquire opens a new physical connection
    """
    QUEUE = "queue"
    NULL = "null"


class Environment(str, Enum):
    """Application environment types."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """
    Application Settings Configuration.

    Manages all environment variables with type validation and defaults.
    Uses Pydantic BaseSettings for automatic .env file loading and
    environment variable parsing.

    Example:
        >>> from bank_transfer.core.settings import settings
        >>> settings.DB_POOL_SIZE
        10
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # --------------------------------------------------------------------------
    # APPLICATION SETTINGS
    # --------------------------------------------------------------------------
    APP_NAME: str = Field(
        default="Bank Transfer Service",
        description="Application display name"
    )
    APP_VERSION: str = Field(
        default="1.0.0",
        description="Application semantic version"
    )
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (SQL echo, verbose logs)"
    )
    ENVIRONMENT: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Current deployment environment"
    )

    # --------------------------------------------------------------------------
    # DATABASE CONNECTION
    # --------------------------------------------------------------------------
    DATABASE_URL: str = Field(
        default="sqlite:///./bank_transfer.db",
        description="SQLAlchemy database URL (driver, credentials, database)"
    )
    DB_ECHO: bool = Field(
        default=False,
        description="Log every SQL statement emitted by the engine"
    )

    # --------------------------------------------------------------------------
    # CONNECTION POOL SETTINGS
    # --------------------------------------------------------------------------
    DB_POOL_NAME: str = Field(
        default="transfer-pool",
        min_length=1,
        description="Pool identifier used in logs and factory lookups"
    )
    DB_POOL_CLASS: PoolClass = Field(
        default=PoolClass.QUEUE,
        description="Pooling strategy (queue, null)"
    )
    DB_POOL_SIZE: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Database connection pool size"
    )
    DB_MAX_OVERFLOW: int = Field(
        default=0,
        ge=0,
        le=100,
        description="Maximum overflow connections beyond pool size"
    )
    DB_POOL_TIMEOUT: float = Field(
        default=30.0,
        gt=0,
        le=300,
        description="Seconds to wait for a free connection before failing"
    )
    DB_POOL_RECYCLE: int = Field(
        default=3600,
        ge=-1,
        description="Connection recycle time in seconds (-1 disables)"
    )
    DB_POOL_PRE_PING: bool = Field(
        default=True,
        description="Test connections for liveness on checkout"
    )

    # --------------------------------------------------------------------------
    # TRANSFER POLICY
    # --------------------------------------------------------------------------
    TRANSFER_REJECTED_MEMBER_ID: str = Field(
        default="ex",
        min_length=1,
        description="Destination id that always fails validation mid-transfer"
    )
    TRANSFER_LOCK_ORDERING: bool = Field(
        default=True,
        description="Lock both members FOR UPDATE in ascending id order"
    )

    # --------------------------------------------------------------------------
    # LOGGING CONFIGURATION
    # --------------------------------------------------------------------------
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    LOG_FILE: Optional[str] = Field(
        default=None,
        description="Optional file receiving a copy of the log output"
    )

    # --------------------------------------------------------------------------
    # COMPUTED PROPERTIES
    # --------------------------------------------------------------------------
    @computed_field
    @property
    def is_sqlite(self) -> bool:
        """Check if the configured database is SQLite."""
        return self.DATABASE_URL.startswith("sqlite")

    @computed_field
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT == Environment.PRODUCTION

    # --------------------------------------------------------------------------
    # VALIDATORS
    # --------------------------------------------------------------------------
    @field_validator("DATABASE_URL")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """Accept the legacy postgres:// scheme some providers still hand out."""
        if v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql://", 1)
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure LOG_LEVEL names a standard logging level."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unsupported log level: {v}")
        return level


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Uses lru_cache to ensure settings are only loaded once,
    providing a singleton-like behavior for the settings object.

    Returns:
        Settings: Cached settings instance
    """
    return Settings()


# Module-level settings instance for convenient imports
settings = get_settings()
