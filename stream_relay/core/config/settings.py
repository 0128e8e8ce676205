#!/usr/bin/env python3
"""
Centralized Configuration Module using Pydantic Settings

This module provides type-safe, environment-based configuration for the
ingestion and writer services.

Three configuration objects exist:

- ``Settings``: process-level options (logging, HTTP client, API binding).
  Every field has a default; accessed through the ``get_settings()`` singleton.
- ``StreamConfig``: the upstream stream and reconnection backoff. Every field
  is required; a missing variable aborts startup.
- ``QueueConfig``: the queue endpoint. Required; one instance per role
  (publisher in the ingestion service, consumer in the writer service).

Architectural Decision: Pydantic Settings for type safety and validation
- Environment variable loading with .env support
- Type validation at startup (fail fast on misconfiguration)
- Frozen models: configuration is never mutated after load
"""

import socket
from typing import Literal

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from stream_relay.core.config.constants import (
    DEFAULT_USER_AGENT,
    QUEUE_DEFAULT_GROUP,
    WIKIMEDIA_STREAM_BASE_URL,
)
from stream_relay.core.exceptions import ConfigurationError


def _format_errors(exc: ValidationError) -> list[dict[str, str]]:
    """Flatten pydantic errors into ``{"field", "error"}`` pairs for logs."""
    return [
        {"field": ".".join(str(part) for part in err["loc"]) or "<root>", "error": err["msg"]}
        for err in exc.errors()
    ]


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

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment"
    )
    APP_NAME: str = Field(default="Stream Relay", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")

    # API settings (health + metrics only)
    API_HOST: str = Field(default="0.0.0.0", description="API host")
    API_PORT: int = Field(default=8080, description="API port")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class Settings(BaseSettings):
    """
    Main settings class that aggregates process-level configuration.

    Usage:
        from stream_relay.core.config.settings import get_settings

        settings = get_settings()
        level = settings.logging.LOG_LEVEL
        agent = settings.HTTP_USER_AGENT
    """

    # Logging settings
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    # Application settings
    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment"
    )
    APP_NAME: str = Field(default="Stream Relay", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")
    API_HOST: str = Field(default="0.0.0.0", description="API host")
    API_PORT: int = Field(default=8080, description="API port")

    # HTTP client settings (upstream stream + capability document)
    HTTP_USER_AGENT: str = Field(default=DEFAULT_USER_AGENT, description="User-Agent sent upstream")
    HTTP_CONNECT_TIMEOUT: float = Field(default=10.0, gt=0, description="Connect timeout in seconds")
    STREAM_READ_TIMEOUT_SECONDS: float = Field(
        default=60.0, gt=0, description="Longest silence on the event stream before reconnecting"
    )

    # Queue consumer settings
    QUEUE_RECEIVE_WAIT_SECONDS: int = Field(
        default=20, ge=0, le=20, description="Long-poll wait per receive call"
    )
    QUEUE_CONSUMER_GROUP: str = Field(
        default=QUEUE_DEFAULT_GROUP, description="Consumer group (Redis Streams backend)"
    )
    QUEUE_CONSUMER_NAME: str = Field(
        default_factory=socket.gethostname, description="Consumer name within the group"
    )
    AWS_REGION: str | None = Field(
        default=None, description="AWS region for SQS (derived from the queue URL when unset)"
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    # Nested configuration objects
    @property
    def logging(self) -> 'LoggingSettings':
        """Get logging settings."""
        return LoggingSettings(
            LOG_LEVEL=self.LOG_LEVEL,
            LOG_FORMAT=self.LOG_FORMAT,
        )

    @property
    def app(self) -> 'ApplicationSettings':
        """Get application settings."""
        return ApplicationSettings(
            ENVIRONMENT=self.ENVIRONMENT,
            APP_NAME=self.APP_NAME,
            APP_VERSION=self.APP_VERSION,
            API_HOST=self.API_HOST,
            API_PORT=self.API_PORT,
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"  # Ignore extra environment variables
    )


class StreamConfig(BaseSettings):
    """
    Upstream stream configuration, loaded once at startup.

    STAGE-0.1: Stream configuration

    Environment variables (all required):
        WIKI_LANG                  Wiki language code, e.g. "en"
        WIKI_STREAM                EventStreams stream name, e.g. "recentchange"
        WIKI_BACKOFF_START_MS      First reconnect delay
        WIKI_BACKOFF_INCREMENT_MS  Added to the delay on every further reconnect
        WIKI_BACKOFF_MAX_MS        Upper bound of the reconnect delay

    Shared read-only by the stream reader and the reconnection scheduler.
    """

    WIKI_LANG: str = Field(..., min_length=1, description="Wiki language code")
    WIKI_STREAM: str = Field(..., min_length=1, description="EventStreams stream name")
    WIKI_BACKOFF_START_MS: int = Field(..., ge=0, description="Initial reconnect delay (ms)")
    WIKI_BACKOFF_INCREMENT_MS: int = Field(..., ge=0, description="Reconnect delay increment (ms)")
    WIKI_BACKOFF_MAX_MS: int = Field(..., ge=0, description="Maximum reconnect delay (ms)")

    @model_validator(mode="after")
    def check_backoff_bounds(self):
        """Reject a start delay larger than the cap."""
        if self.WIKI_BACKOFF_START_MS > self.WIKI_BACKOFF_MAX_MS:
            raise ValueError(
                "WIKI_BACKOFF_START_MS must not exceed WIKI_BACKOFF_MAX_MS "
                f"({self.WIKI_BACKOFF_START_MS} > {self.WIKI_BACKOFF_MAX_MS})"
            )
        return self

    @property
    def expected_server_name(self) -> str:
        """Origin server every accepted event must carry, e.g. ``en.wikipedia.org``."""
        return f"{self.WIKI_LANG}.wikipedia.org"

    @property
    def stream_url(self) -> str:
        """Fully-qualified URL of the configured stream."""
        return f"{WIKIMEDIA_STREAM_BASE_URL}/{self.WIKI_STREAM}"

    @property
    def backoff_start_seconds(self) -> float:
        return self.WIKI_BACKOFF_START_MS / 1000

    @property
    def backoff_increment_seconds(self) -> float:
        return self.WIKI_BACKOFF_INCREMENT_MS / 1000

    @property
    def backoff_max_seconds(self) -> float:
        return self.WIKI_BACKOFF_MAX_MS / 1000

    @classmethod
    def from_env(cls) -> "StreamConfig":
        """
        Load from the process environment.

        Raises:
            ConfigurationError: If a variable is missing or invalid
        """
        try:
            return cls()
        except ValidationError as e:
            raise ConfigurationError(
                "Invalid stream configuration",
                hint=(
                    "Set WIKI_LANG, WIKI_STREAM, WIKI_BACKOFF_START_MS, "
                    "WIKI_BACKOFF_INCREMENT_MS and WIKI_BACKOFF_MAX_MS"
                ),
                errors=_format_errors(e),
            ) from e

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        frozen=True,
    )


class QueueConfig(BaseSettings):
    """
    Queue endpoint configuration.

    STAGE-0.2: Queue configuration

    SQS_QUEUE_URL accepts an SQS queue URL, an SQS ARN, or a
    ``redis://host:port/db/stream-name`` URL for the Redis Streams backend.
    """

    SQS_QUEUE_URL: str = Field(..., min_length=1, description="Queue URL or ARN")

    @classmethod
    def from_env(cls) -> "QueueConfig":
        """
        Load from the process environment.

        Raises:
            ConfigurationError: If SQS_QUEUE_URL is missing
        """
        try:
            return cls()
        except ValidationError as e:
            raise ConfigurationError(
                "Invalid queue configuration",
                hint="Set SQS_QUEUE_URL",
                errors=_format_errors(e),
            ) from e

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        frozen=True,
    )


# Global settings instance (singleton pattern)
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance (singleton).

    Returns:
        Settings: Global settings instance

    Architectural Decision: Singleton pattern for settings
    - Single instance shared across the process
    - Lazy initialization
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
