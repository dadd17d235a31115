#!/usr/bin/env python3
# src/openapi_mcp_server/config/settings.py
"""
Server settings loaded from the environment.
"""

import logging
import os
from collections.abc import Mapping
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from .constants import (
    DEFAULT_ALLOWED_ORIGINS,
    DEFAULT_API_BASE_URL,
    DEFAULT_CACHE_DIR,
    DEFAULT_CACHE_TTL_SECONDS,
    DEFAULT_HEALTH_TIMEOUT_SECONDS,
    DEFAULT_HOST,
    DEFAULT_LOG_LEVEL,
    DEFAULT_PORT,
    DEFAULT_SSE_KEEPALIVE_SECONDS,
    DEFAULT_TOOL_TIMEOUT_SECONDS,
    ENV_API_BASE_URL,
    ENV_API_DOMAIN_ID,
    ENV_API_HEALTH_TIMEOUT,
    ENV_API_PASSWORD,
    ENV_API_USERNAME,
    ENV_HOST,
    ENV_MCP_ALLOWED_ORIGINS,
    ENV_MCP_CACHE_DIR,
    ENV_MCP_CACHE_TTL,
    ENV_MCP_LOG_LEVEL,
    ENV_MCP_RESULT_FORMAT,
    ENV_MCP_SSE_KEEPALIVE,
    ENV_MCP_TOOL_TIMEOUT,
    ENV_PORT,
    LOG_LEVELS,
)

logger = logging.getLogger(__name__)


class ResultFormat(str, Enum):
    """How tool results are rendered. Chosen once per deployment."""

    RAW = "raw"
    FORMATTED = "formatted"


class ServerSettings(BaseModel):
    """All runtime settings for the server and its API client."""

    api_base_url: str = DEFAULT_API_BASE_URL
    username: str | None = None
    password: str | None = None
    domain_id: str | None = None
    health_timeout: float = DEFAULT_HEALTH_TIMEOUT_SECONDS

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    allowed_origins: list[str] = Field(default_factory=lambda: list(DEFAULT_ALLOWED_ORIGINS))
    log_level: str = DEFAULT_LOG_LEVEL

    cache_dir: str = DEFAULT_CACHE_DIR
    cache_ttl: float = DEFAULT_CACHE_TTL_SECONDS
    result_format: ResultFormat = ResultFormat.RAW
    tool_timeout: float | None = DEFAULT_TOOL_TIMEOUT_SECONDS
    sse_keepalive_interval: float = DEFAULT_SSE_KEEPALIVE_SECONDS

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.lower()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @field_validator("tool_timeout")
    @classmethod
    def _zero_disables_timeout(cls, value: float | None) -> float | None:
        if value is not None and value <= 0:
            return None
        return value

    @field_validator("api_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def has_credentials(self) -> bool:
        return bool(self.username and self.password)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ServerSettings":
        """Build settings from environment variables, ignoring unset ones."""
        env = os.environ if environ is None else environ

        def first(*names: str) -> str | None:
            for name in names:
                value = env.get(name)
                if value:
                    return value
            return None

        values: dict[str, object] = {
            "api_base_url": first(*ENV_API_BASE_URL),
            "username": first(*ENV_API_USERNAME),
            "password": first(*ENV_API_PASSWORD),
            "domain_id": first(*ENV_API_DOMAIN_ID),
            "host": first(ENV_HOST),
            "port": first(ENV_PORT),
            "log_level": first(ENV_MCP_LOG_LEVEL),
            "cache_dir": first(ENV_MCP_CACHE_DIR),
            "cache_ttl": first(ENV_MCP_CACHE_TTL),
            "result_format": first(ENV_MCP_RESULT_FORMAT),
            "tool_timeout": first(ENV_MCP_TOOL_TIMEOUT),
            "sse_keepalive_interval": first(ENV_MCP_SSE_KEEPALIVE),
        }

        # Legacy health timeout is expressed in milliseconds
        health_timeout = first(ENV_API_HEALTH_TIMEOUT[0])
        legacy_health_timeout = first(ENV_API_HEALTH_TIMEOUT[1])
        if health_timeout:
            values["health_timeout"] = health_timeout
        elif legacy_health_timeout:
            values["health_timeout"] = float(legacy_health_timeout) / 1000

        origins = first(ENV_MCP_ALLOWED_ORIGINS)
        if origins:
            values["allowed_origins"] = [origin.strip() for origin in origins.split(",") if origin.strip()]

        settings = cls(**{key: value for key, value in values.items() if value is not None})
        logger.debug(f"Loaded settings for {settings.api_base_url} ({settings.host}:{settings.port})")
        return settings
