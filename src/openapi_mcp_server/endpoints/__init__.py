#!/usr/bin/env python3
# src/openapi_mcp_server/endpoints/__init__.py
"""
HTTP endpoints.
"""

from .health import HealthEndpoint
from .mcp import MCPEndpoint

__all__ = [
    "HealthEndpoint",
    "MCPEndpoint",
]
