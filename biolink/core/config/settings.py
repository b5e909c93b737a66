#!/usr/bin/env python3
"""
Centralized Configuration Module using Pydantic Settings

This module provides type-safe, environment-based configuration for the
link-in-bio service. All configuration is centralized here to ensure
consistency across modules.

Architectural Decision: Pydantic Settings for type safety and validation
- Environment variable loading with .env support
- Type validation at startup (fail fast on misconfiguration)
- IDE autocomplete for all settings
- Easy testing with override mechanisms

Author: System Architect
Date: 2025-12-05
"""

from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from biolink.core.config.constants import (
    MEMORY_CACHE_AI_PAGE_MAX_KEYS,
    MEMORY_CACHE_CHECK_PERIOD,
    MEMORY_CACHE_PROFILE_MAX_KEYS,
    MEMORY_CACHE_STD_TTL,
    REVALIDATE_MAX_ENTRY_AGE,
    REVALIDATE_SECONDS,
)


class RedisSettings(BaseSettings):
    """
    Redis configuration for the revalidation store and the Redis record store.

    STAGE-0.1: Redis connection configuration
    """

    REDIS_HOST: str = Field(default="localhost", description="Redis server host")
    REDIS_PORT: int = Field(default=6379, description="Redis server port")
    REDIS_DB: int = Field(default=0, description="Redis database number")
    REDIS_PASSWORD: str | None = Field(default=None, description="Redis password (if required)")
    REDIS_MAX_CONNECTIONS: int = Field(default=50, description="Maximum total connections")
    REDIS_SOCKET_TIMEOUT: int = Field(default=5, description="Socket timeout in seconds")
    REDIS_SOCKET_CONNECT_TIMEOUT: int = Field(default=5, description="Connection timeout in seconds")
    REDIS_HEALTH_CHECK_INTERVAL: int = Field(default=30, description="Health check interval in seconds")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class CacheSettings(BaseSettings):
    """
    Read-path cache configuration.

    STAGE-2: Memory cache TTL / capacity
    STAGE-3: Revalidating cache window

    The memory cache TTL is deliberately longer than the revalidate window:
    a write invalidates the revalidating cache by tag, while memory entries
    simply age out.
    """

    ENABLE_CACHING: bool = Field(default=True, description="Master switch for the read-path caches")
    MEMORY_CACHE_STD_TTL: int = Field(default=MEMORY_CACHE_STD_TTL, description="Memory cache TTL (seconds)")
    MEMORY_CACHE_CHECK_PERIOD: int = Field(
        default=MEMORY_CACHE_CHECK_PERIOD, description="Expired-key sweep interval (seconds)"
    )
    MEMORY_CACHE_PROFILE_MAX_KEYS: int = Field(default=MEMORY_CACHE_PROFILE_MAX_KEYS)
    MEMORY_CACHE_AI_PAGE_MAX_KEYS: int = Field(default=MEMORY_CACHE_AI_PAGE_MAX_KEYS)
    REVALIDATE_SECONDS: int = Field(default=REVALIDATE_SECONDS, description="Revalidate window (seconds)")
    REVALIDATE_STALE_WHILE_REVALIDATE: bool = Field(
        default=True, description="Serve a stale entry while refreshing it in the background"
    )
    REVALIDATE_MAX_ENTRY_AGE: int = Field(
        default=REVALIDATE_MAX_ENTRY_AGE, description="Hard upper bound on stored entry age (seconds)"
    )

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class StorageSettings(BaseSettings):
    """
    Persistence backend selection.

    memory: process-local dictionaries (development and tests)
    redis: JSON documents in Redis hashes
    """

    STORAGE_BACKEND: Literal["memory", "redis"] = Field(default="memory", description="Record store backend")
    REVALIDATION_BACKEND: Literal["memory", "redis"] = Field(
        default="memory", description="Revalidating cache store backend"
    )

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class LoggingSettings(BaseSettings):
    """
    Logging configuration for structured logging.

    STAGE-L: Logging configuration

    Architectural Decision: structlog for production-grade logging
    """

    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class ApplicationSettings(BaseSettings):
    """
    General application settings.

    STAGE-0: Application initialization
    """

    ENVIRONMENT: Literal["development", "test", "staging", "production"] = Field(
        default="development",
        description="Application environment"
    )
    DEBUG: bool = Field(default=False, description="Debug mode")
    APP_NAME: str = Field(default="BioLink Pages", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")
    API_HOST: str = Field(default="0.0.0.0", description="API host")
    API_PORT: int = Field(default=8000, description="API port")
    API_BASE_PATH: str = Field(default="/api/v1", description="Prefix for all API routes")
    CORS_ORIGINS: list[str] = Field(default=["*"], description="Allowed CORS origins")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class Settings(BaseSettings):
    """
    Main settings class that aggregates all configuration sections.

    STAGE-0: Centralized configuration initialization

    Usage:
        from biolink.core.config.settings import get_settings

        settings = get_settings()
        ttl = settings.cache.MEMORY_CACHE_STD_TTL
        host = settings.redis.REDIS_HOST

    Values are read flat from the environment; the nested properties give
    grouped, read-only views.
    """

    # Redis settings
    REDIS_HOST: str = Field(default="localhost", description="Redis server host")
    REDIS_PORT: int = Field(default=6379, description="Redis server port")
    REDIS_DB: int = Field(default=0, description="Redis database number")
    REDIS_PASSWORD: str | None = Field(default=None, description="Redis password (if required)")
    REDIS_MAX_CONNECTIONS: int = Field(default=50, description="Maximum total connections")
    REDIS_SOCKET_TIMEOUT: int = Field(default=5, description="Socket timeout in seconds")
    REDIS_SOCKET_CONNECT_TIMEOUT: int = Field(default=5, description="Connection timeout in seconds")
    REDIS_HEALTH_CHECK_INTERVAL: int = Field(default=30, description="Health check interval in seconds")

    # Cache settings
    ENABLE_CACHING: bool = Field(default=True, description="Master switch for the read-path caches")
    MEMORY_CACHE_STD_TTL: int = Field(default=MEMORY_CACHE_STD_TTL, description="Memory cache TTL (5 minutes)")
    MEMORY_CACHE_CHECK_PERIOD: int = Field(default=MEMORY_CACHE_CHECK_PERIOD, description="Sweep interval")
    MEMORY_CACHE_PROFILE_MAX_KEYS: int = Field(default=MEMORY_CACHE_PROFILE_MAX_KEYS)
    MEMORY_CACHE_AI_PAGE_MAX_KEYS: int = Field(default=MEMORY_CACHE_AI_PAGE_MAX_KEYS)
    REVALIDATE_SECONDS: int = Field(default=REVALIDATE_SECONDS, description="Revalidate window (1 minute)")
    REVALIDATE_STALE_WHILE_REVALIDATE: bool = Field(default=True)
    REVALIDATE_MAX_ENTRY_AGE: int = Field(default=REVALIDATE_MAX_ENTRY_AGE)

    # Storage settings
    STORAGE_BACKEND: Literal["memory", "redis"] = Field(default="memory")
    REVALIDATION_BACKEND: Literal["memory", "redis"] = Field(default="memory")

    # Logging settings
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    # Application settings
    ENVIRONMENT: Literal["development", "test", "staging", "production"] = Field(
        default="development",
        description="Application environment"
    )
    DEBUG: bool = Field(default=False, description="Debug mode")
    APP_NAME: str = Field(default="BioLink Pages", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")
    API_HOST: str = Field(default="0.0.0.0", description="API host")
    API_PORT: int = Field(default=8000, description="API port")
    API_BASE_PATH: str = Field(default="/api/v1", description="Prefix for all API routes")
    CORS_ORIGINS: list[str] = Field(default=["*"], description="Allowed CORS origins")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    @model_validator(mode="after")
    def validate_cache_windows(self):
        """Reject non-positive TTLs and capacities."""
        for name in (
            "MEMORY_CACHE_STD_TTL",
            "MEMORY_CACHE_CHECK_PERIOD",
            "REVALIDATE_SECONDS",
            "REVALIDATE_MAX_ENTRY_AGE",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")
        if self.REVALIDATE_MAX_ENTRY_AGE < self.REVALIDATE_SECONDS:
            raise ValueError("REVALIDATE_MAX_ENTRY_AGE must not be shorter than REVALIDATE_SECONDS")
        return self

    # Nested configuration views
    @property
    def redis(self) -> RedisSettings:
        """Get Redis settings."""
        return RedisSettings(
            REDIS_HOST=self.REDIS_HOST,
            REDIS_PORT=self.REDIS_PORT,
            REDIS_DB=self.REDIS_DB,
            REDIS_PASSWORD=self.REDIS_PASSWORD,
            REDIS_MAX_CONNECTIONS=self.REDIS_MAX_CONNECTIONS,
            REDIS_SOCKET_TIMEOUT=self.REDIS_SOCKET_TIMEOUT,
            REDIS_SOCKET_CONNECT_TIMEOUT=self.REDIS_SOCKET_CONNECT_TIMEOUT,
            REDIS_HEALTH_CHECK_INTERVAL=self.REDIS_HEALTH_CHECK_INTERVAL,
        )

    @property
    def cache(self) -> CacheSettings:
        """Get read-path cache settings."""
        return CacheSettings(
            ENABLE_CACHING=self.ENABLE_CACHING,
            MEMORY_CACHE_STD_TTL=self.MEMORY_CACHE_STD_TTL,
            MEMORY_CACHE_CHECK_PERIOD=self.MEMORY_CACHE_CHECK_PERIOD,
            MEMORY_CACHE_PROFILE_MAX_KEYS=self.MEMORY_CACHE_PROFILE_MAX_KEYS,
            MEMORY_CACHE_AI_PAGE_MAX_KEYS=self.MEMORY_CACHE_AI_PAGE_MAX_KEYS,
            REVALIDATE_SECONDS=self.REVALIDATE_SECONDS,
            REVALIDATE_STALE_WHILE_REVALIDATE=self.REVALIDATE_STALE_WHILE_REVALIDATE,
            REVALIDATE_MAX_ENTRY_AGE=self.REVALIDATE_MAX_ENTRY_AGE,
        )

    @property
    def storage(self) -> StorageSettings:
        """Get persistence backend settings."""
        return StorageSettings(
            STORAGE_BACKEND=self.STORAGE_BACKEND,
            REVALIDATION_BACKEND=self.REVALIDATION_BACKEND,
        )

    @property
    def logging(self) -> LoggingSettings:
        """Get logging settings."""
        return LoggingSettings(LOG_LEVEL=self.LOG_LEVEL, LOG_FORMAT=self.LOG_FORMAT)

    @property
    def app(self) -> ApplicationSettings:
        """Get application settings."""
        return ApplicationSettings(
            ENVIRONMENT=self.ENVIRONMENT,
            DEBUG=self.DEBUG,
            APP_NAME=self.APP_NAME,
            APP_VERSION=self.APP_VERSION,
            API_HOST=self.API_HOST,
            API_PORT=self.API_PORT,
            API_BASE_PATH=self.API_BASE_PATH,
            CORS_ORIGINS=self.CORS_ORIGINS,
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"  # Ignore extra environment variables
    )


# Global settings instance (singleton pattern)
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance (singleton).

    STAGE-0.3: Settings initialization

    Returns:
        Settings: Global settings instance
    """
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


def reload_settings() -> Settings:
    """
    Reload settings (useful for testing).

    Returns:
        Settings: New settings instance
    """
    global _settings
    _settings = Settings()
    return _settings
