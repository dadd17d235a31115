#!/usr/bin/env python3
# src/openapi_mcp_server/protocol/__init__.py
"""
MCP protocol package.

Re-exports MCPProtocolHandler and SessionManager.
"""

from .handler import MCPProtocolHandler
from .session_manager import SessionManager

__all__ = [
    "MCPProtocolHandler",
    "SessionManager",
]
