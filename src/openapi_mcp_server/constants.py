#!/usr/bin/env python3
"""
Top-level constants shared across the openapi_mcp_server package.
"""

import re
from enum import IntEnum

# ---------------------------------------------------------------------------
# JSON-RPC
# ---------------------------------------------------------------------------
JSONRPC_VERSION = "2.0"
JSONRPC_KEY = "jsonrpc"

# JSON-RPC message keys
KEY_METHOD = "method"
KEY_PARAMS = "params"
KEY_ID = "id"
KEY_RESULT = "result"
KEY_ERROR = "error"


class JsonRpcError(IntEnum):
    """JSON-RPC 2.0 error codes used by the server."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
    FORBIDDEN = -32000


# ---------------------------------------------------------------------------
# MCP protocol
# ---------------------------------------------------------------------------
MCP_PROTOCOL_VERSION_2024_11 = "2024-11-05"
MCP_DEFAULT_PROTOCOL_VERSION = MCP_PROTOCOL_VERSION_2024_11


# MCP method names
class McpMethod:
    INITIALIZE = "initialize"
    INITIALIZED = "notifications/initialized"
    PING = "ping"
    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"
    LOGGING_SET_LEVEL = "logging/setLevel"


# MCP initialize parameter keys
KEY_CLIENT_INFO = "clientInfo"
KEY_PROTOCOL_VERSION = "protocolVersion"
KEY_SERVER_INFO = "serverInfo"
KEY_CAPABILITIES = "capabilities"

# tools/call parameter keys
KEY_TOOL_NAME = "name"
KEY_ARGUMENTS = "arguments"


# ---------------------------------------------------------------------------
# Content types
# ---------------------------------------------------------------------------
CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_SSE = "text/event-stream"


# ---------------------------------------------------------------------------
# Common HTTP headers
# ---------------------------------------------------------------------------
HEADER_MCP_SESSION_ID = "Mcp-Session-Id"
HEADER_ORIGIN = "origin"
HEADER_CONTENT_TYPE = "Content-Type"


# ---------------------------------------------------------------------------
# Logging level strings
# ---------------------------------------------------------------------------
LOG_DEBUG = "debug"
LOG_INFO = "info"
LOG_NOTICE = "notice"
LOG_WARNING = "warning"
LOG_ERROR = "error"
LOG_CRITICAL = "critical"
LOG_ALERT = "alert"
LOG_EMERGENCY = "emergency"


# ---------------------------------------------------------------------------
# Server identity
# ---------------------------------------------------------------------------
SERVER_NAME = "takaro-mcp"
SERVER_VERSION = "1.0.0"
PACKAGE_LOGGER = "openapi_mcp_server"


# ---------------------------------------------------------------------------
# OpenAPI / JSON Schema
# ---------------------------------------------------------------------------
OPENAPI_PATH = "/openapi.json"
SEARCH_SUFFIX = "/search"
SEARCH_TOOL_PREFIX = "search"
CONTROLLER_SUFFIX = "Controller"
JSON_SCHEMA_DRAFT_07 = "http://json-schema.org/draft-07/schema#"

# Keys that only make sense inside an OpenAPI document
OPENAPI_ONLY_FIELDS = (
    "discriminator",
    "xml",
    "externalDocs",
    "example",
    "examples",
    "deprecated",
    "readOnly",
    "writeOnly",
    "nullable",
)

COMPOSITION_KEYS = ("allOf", "anyOf", "oneOf")

# Path template placeholders, e.g. /gameserver/{id}/players
PATH_PLACEHOLDER_PATTERN = re.compile(r"\{([^{}]+)\}")


# ---------------------------------------------------------------------------
# HTTP methods and parameter placement
# ---------------------------------------------------------------------------
QUERY_STYLE_METHODS = frozenset({"get", "delete", "head"})

PLACEMENT_PATH = "path"
PLACEMENT_QUERY = "query"
PLACEMENT_BODY = "body"
