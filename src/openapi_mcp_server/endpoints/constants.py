#!/usr/bin/env python3
"""
Endpoint constants - re-exports shared constants from the top-level module
and defines endpoint-specific values (HTTP status codes, headers, SSE framing,
error messages, URL paths).
"""

from enum import IntEnum

# ---------------------------------------------------------------------------
# Re-export from top-level constants (single source of truth)
# ---------------------------------------------------------------------------
from openapi_mcp_server.constants import (  # noqa: F401
    CONTENT_TYPE_JSON,
    CONTENT_TYPE_SSE,
    HEADER_CONTENT_TYPE,
    HEADER_MCP_SESSION_ID,
    HEADER_ORIGIN,
    JSONRPC_VERSION,
    JsonRpcError,
)


# ---------------------------------------------------------------------------
# HTTP status codes (endpoint-specific)
# ---------------------------------------------------------------------------
class HttpStatus(IntEnum):
    OK = 200
    ACCEPTED = 202
    BAD_REQUEST = 400
    FORBIDDEN = 403
    NOT_FOUND = 404


# ---------------------------------------------------------------------------
# Header names and values
# ---------------------------------------------------------------------------
HEADER_CACHE_CONTROL = "Cache-Control"
HEADER_CONNECTION = "Connection"
CACHE_NO_CACHE = "no-cache"
CONNECTION_KEEP_ALIVE = "keep-alive"

HEADERS_SSE: dict[str, str] = {
    HEADER_CACHE_CONTROL: CACHE_NO_CACHE,
    HEADER_CONNECTION: CONNECTION_KEEP_ALIVE,
}


# ---------------------------------------------------------------------------
# SSE comment framing
# ---------------------------------------------------------------------------
SSE_OK = ":ok\n\n"
SSE_KEEPALIVE = ":keepalive\n\n"


# ---------------------------------------------------------------------------
# Error messages
# ---------------------------------------------------------------------------
ERROR_FORBIDDEN_ORIGIN = "Forbidden: Invalid origin"
ERROR_PARSE = "Parse error"
ERROR_INVALID_REQUEST = "Invalid Request"
ERROR_SSE_SESSION_REQUIRED = "Session ID required for SSE connection"
ERROR_SESSION_NOT_FOUND = "Session not found"


# ---------------------------------------------------------------------------
# URL paths
# ---------------------------------------------------------------------------
PATH_MCP = "/mcp"
PATH_HEALTH = "/health"
