"""
Configuration for episode link resolution.

Client identity, endpoints and request cadence for the AniDB and relations
services, populated from environment variables or a .env file.
"""

import logging
from enum import Enum
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Environment(str, Enum):
    """Application environment types."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class EpisodeLinksConfig(BaseSettings):
    """Episode link resolution settings with validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_env: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development/staging/production)",
    )

    # AniDB client identity
    anidb_client: str = Field(
        default="application", description="Client name registered with AniDB"
    )
    anidb_clientver: str = Field(
        default="2", description="Client version registered with AniDB"
    )
    anidb_protover: int = Field(default=1, description="AniDB HTTP API protocol version")

    # Endpoints
    anidb_base_url: str = Field(
        default="http://api.anidb.net:9001/httpapi",
        description="AniDB HTTP API endpoint",
    )
    relations_base_url: str = Field(
        default="https://relations.yuna.moe/api/ids",
        description="ID relations service endpoint",
    )

    # Request cadence
    anidb_min_interval_seconds: float = Field(
        default=2.25,
        description="Minimum spacing between the starts of AniDB requests",
    )
    anidb_warmup_seconds: float = Field(
        default=2.0,
        description=(
            "Delay before the first AniDB request outside production. "
            "Restarts during development lose the limiter state, which "
            "otherwise leads to temporary bans."
        ),
    )
    request_timeout_seconds: float = Field(
        default=30.0, description="Total HTTP timeout for a single request"
    )

    @field_validator("request_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Request timeout must be positive")
        return v

    @field_validator("anidb_min_interval_seconds", "anidb_warmup_seconds")
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("AniDB delays must be non-negative")
        return v

    @property
    def is_production(self) -> bool:
        return self.app_env == Environment.PRODUCTION

    @property
    def effective_warmup_seconds(self) -> float:
        """Warm-up delay to apply before the first AniDB request.

        Returns:
            0.0 in production, otherwise the configured warm-up delay.
        """
        return 0.0 if self.is_production else self.anidb_warmup_seconds

    def log_configuration(self) -> None:
        """Log current configuration for debugging."""
        logger.info("Episode Links Configuration:")
        logger.info(f"  Environment: {self.app_env.value}")
        logger.info(f"  AniDB client: {self.anidb_client}/{self.anidb_clientver}")
        logger.info(f"  AniDB interval: {self.anidb_min_interval_seconds}s")
        logger.info(f"  Warm-up: {self.effective_warmup_seconds}s")


@lru_cache
def get_config() -> EpisodeLinksConfig:
    """Get cached EpisodeLinksConfig instance populated from environment variables.

    Environment variables are read by Pydantic BaseSettings:
        APP_ENV (default: development)
        ANIDB_CLIENT (default: "application")
        ANIDB_CLIENTVER (default: "2")
        ANIDB_MIN_INTERVAL_SECONDS (default: 2.25)
        ANIDB_WARMUP_SECONDS (default: 2.0)
        REQUEST_TIMEOUT_SECONDS (default: 30)

    Returns:
        Cached EpisodeLinksConfig instance.

    Note:
        Uses @lru_cache for singleton pattern. For testing, call
        get_config.cache_clear() to reset the cache.
    """
    return EpisodeLinksConfig()
