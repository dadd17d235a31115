#!/usr/bin/env python3
# src/openapi_mcp_server/__init__.py
"""
openapi_mcp_server - expose a REST API's search endpoints as MCP tools

The API description is fetched once at startup; every ``POST .../search``
operation becomes a tool whose input schema is the fully resolved request
body. Tools are served over MCP Streamable HTTP:

    from openapi_mcp_server import ServerSettings, create_app, create_server

    handler, client_provider = await create_server(ServerSettings.from_env())
    app = create_app(handler)
"""

from .app import create_app
from .client import APIClient, ClientProvider
from .config import ResultFormat, ServerSettings
from .errors import (
    APIRequestError,
    AuthenticationError,
    MCPError,
    MissingParameterError,
    OpenAPIFetchError,
    SchemaReferenceError,
    ToolInputValidationError,
)
from .openapi import InvocationBinding, OpenAPILoader, OpenAPIToolGenerator, SchemaResolver, ToolDefinition
from .protocol import MCPProtocolHandler, SessionManager
from .server import create_server, load_tools
from .tools import DynamicTool, ResponseFormatter, Tool, ToolContext, ToolMetadata, ToolRegistry, create_dynamic_tool

__version__ = "1.0.0"
__all__ = [
    "APIClient",
    "APIRequestError",
    "AuthenticationError",
    "ClientProvider",
    "DynamicTool",
    "InvocationBinding",
    "MCPError",
    "MCPProtocolHandler",
    "MissingParameterError",
    "OpenAPIFetchError",
    "OpenAPILoader",
    "OpenAPIToolGenerator",
    "ResponseFormatter",
    "ResultFormat",
    "SchemaReferenceError",
    "SchemaResolver",
    "ServerSettings",
    "SessionManager",
    "Tool",
    "ToolContext",
    "ToolDefinition",
    "ToolInputValidationError",
    "ToolMetadata",
    "ToolRegistry",
    "create_app",
    "create_dynamic_tool",
    "create_server",
    "load_tools",
]
