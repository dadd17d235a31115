#!/usr/bin/env python3
"""
Configuration constants: environment variable names and defaults.
"""

# ---------------------------------------------------------------------------
# Remote API environment variables (generic name first, legacy alias second)
# ---------------------------------------------------------------------------
ENV_API_BASE_URL = ("API_BASE_URL", "TAKARO_HOST")
ENV_API_USERNAME = ("API_USERNAME", "TAKARO_USERNAME")
ENV_API_PASSWORD = ("API_PASSWORD", "TAKARO_PASSWORD")
ENV_API_DOMAIN_ID = ("API_DOMAIN_ID", "TAKARO_DOMAIN_ID")
ENV_API_HEALTH_TIMEOUT = ("API_HEALTH_TIMEOUT", "TAKARO_HEALTH_TIMEOUT")


# ---------------------------------------------------------------------------
# Server environment variables
# ---------------------------------------------------------------------------
ENV_HOST = "HOST"
ENV_PORT = "PORT"
ENV_MCP_ALLOWED_ORIGINS = "MCP_ALLOWED_ORIGINS"
ENV_MCP_LOG_LEVEL = "MCP_LOG_LEVEL"
ENV_MCP_CACHE_DIR = "MCP_CACHE_DIR"
ENV_MCP_CACHE_TTL = "MCP_CACHE_TTL"
ENV_MCP_RESULT_FORMAT = "MCP_RESULT_FORMAT"
ENV_MCP_TOOL_TIMEOUT = "MCP_TOOL_TIMEOUT"
ENV_MCP_SSE_KEEPALIVE = "MCP_SSE_KEEPALIVE"


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------
DEFAULT_API_BASE_URL = "https://api.takaro.io"
DEFAULT_HEALTH_TIMEOUT_SECONDS = 60.0
DEFAULT_HEALTH_POLL_INTERVAL_SECONDS = 1.0
DEFAULT_REQUEST_TIMEOUT_SECONDS = 30.0

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3000
DEFAULT_ALLOWED_ORIGINS = (
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "https://localhost:3000",
    "https://127.0.0.1:3000",
)
DEFAULT_LOG_LEVEL = "info"

DEFAULT_CACHE_DIR = ".cache"
DEFAULT_CACHE_FILENAME = "openapi.json"
DEFAULT_CACHE_TTL_SECONDS = 24 * 60 * 60
DEFAULT_FETCH_RETRIES = 3
DEFAULT_RETRY_DELAY_SECONDS = 1.0

DEFAULT_TOOL_TIMEOUT_SECONDS = 60.0
DEFAULT_SSE_KEEPALIVE_SECONDS = 30.0

LOG_LEVELS = ("critical", "error", "warning", "info", "debug")
