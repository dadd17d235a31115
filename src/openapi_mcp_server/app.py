#!/usr/bin/env python3
# src/openapi_mcp_server/app.py
"""
app.py - Starlette application factory

Wires the MCP endpoint and the health check onto a Starlette app.
"""

from starlette.applications import Starlette
from starlette.routing import Route

from .config.settings import ServerSettings
from .endpoints import HealthEndpoint, MCPEndpoint
from .endpoints.constants import PATH_HEALTH, PATH_MCP
from .protocol.handler import MCPProtocolHandler


# ============================================================================
# Application Factory
# ============================================================================


def create_app(protocol_handler: MCPProtocolHandler, settings: ServerSettings | None = None) -> Starlette:
    """
    Create the Starlette application.

    Args:
        protocol_handler: Dispatcher that owns the registry and sessions
        settings: Origin allow-list and SSE keepalive come from here

    Returns:
        Configured Starlette application
    """
    settings = settings or ServerSettings()

    mcp_endpoint = MCPEndpoint(
        protocol_handler,
        allowed_origins=settings.allowed_origins,
        keepalive_interval=settings.sse_keepalive_interval,
    )
    health_endpoint = HealthEndpoint(protocol_handler)

    routes = [
        Route(PATH_MCP, mcp_endpoint.handle_request, methods=["POST", "GET", "DELETE"]),
        Route(PATH_HEALTH, health_endpoint.handle_request, methods=["GET"]),
    ]

    return Starlette(routes=routes)
