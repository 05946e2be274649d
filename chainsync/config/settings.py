"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

from functools import lru_cache

from loguru import logger
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from chainsync.config.constants import (
    BLOCKCHAIN_MAX_RETRIES,
    BLOCKCHAIN_RPC_TIMEOUT,
    DEFAULT_POLLING_INTERVAL_SECONDS,
    DEFAULT_STARTING_BLOCK_NUMBER,
    DEFAULT_VALIDATION_WINDOW,
)

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str
    database_echo: bool = False

    # Ethereum node
    rpc_url: str
    rpc_timeout: int = Field(
        default=BLOCKCHAIN_RPC_TIMEOUT, ge=1, description="RPC provider HTTP timeout in seconds"
    )
    rpc_max_retries: int = Field(
        default=BLOCKCHAIN_MAX_RETRIES, ge=1, description="Attempts per block fetch"
    )

    # Sync
    starting_block_number: int = Field(
        default=DEFAULT_STARTING_BLOCK_NUMBER,
        ge=0,
        description="Block number to start syncing from",
    )
    polling_interval: float = Field(
        default=DEFAULT_POLLING_INTERVAL_SECONDS,
        gt=0,
        description="Validation tick interval in seconds",
    )
    validation_window: int = Field(
        default=DEFAULT_VALIDATION_WINDOW,
        ge=1,
        description="Number of recent blocks re-validated on every tick",
    )

    # Application
    environment: str = "production"
    log_level: str = "INFO"
    log_file: str | None = "logs/sync.log"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator('database_url')
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate database URL."""
        if not v.startswith(('postgresql://', 'postgresql+asyncpg://', 'sqlite+aiosqlite://')):
            raise ValueError(
                'DATABASE_URL must start with postgresql://, '
                'postgresql+asyncpg:// or sqlite+aiosqlite://'
            )
        # Plain postgresql:// would pick the sync psycopg driver
        if v.startswith('postgresql://'):
            v = v.replace('postgresql://', 'postgresql+asyncpg://', 1)
        return v

    @field_validator('rpc_url')
    @classmethod
    def validate_rpc_url(cls, v: str) -> str:
        """Validate RPC endpoint: an http(s) URL or an IPC socket path."""
        if v.startswith(('http://', 'https://')):
            return v
        if '://' in v or not v.strip():
            raise ValueError(
                'RPC_URL must be an http:// or https:// endpoint or an IPC socket path'
            )
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize log level name."""
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f'Invalid LOG_LEVEL: {v}. Expected one of {", ".join(LOG_LEVELS)}')
        return level

    @model_validator(mode='after')
    def validate_production(self) -> 'Settings':
        """Warn about settings that are unusual in production."""
        if self.environment == 'production':
            if self.database_url.startswith('sqlite'):
                logger.warning(
                    'DATABASE_URL points at SQLite in production. '
                    'Concurrent create-or-update is only row-locked on PostgreSQL.'
                )
            if self.polling_interval < 1:
                logger.warning(
                    f'POLLING_INTERVAL={self.polling_interval}s will re-fetch '
                    f'{self.validation_window} blocks several times per second.'
                )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the process settings, loading them on first use."""
    return Settings()
