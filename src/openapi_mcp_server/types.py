#!/usr/bin/env python3
# src/openapi_mcp_server/types.py
"""
Types - Direct use of chuk_mcp protocol types

Server identity, capabilities and text content come straight from chuk_mcp;
this module only adds the small helpers the dispatcher and tools need.
"""

from typing import Any

from chuk_mcp.protocol.types import (
    ServerCapabilities,
    ServerInfo,
    TextContent,
    ToolsCapability,
    content_to_dict,
    create_text_content,
)


def create_server_capabilities(tools: bool = True, list_changed: bool = False) -> ServerCapabilities:
    """Create server capabilities using chuk_mcp types directly."""
    capabilities: dict[str, Any] = {}
    if tools:
        capabilities["tools"] = ToolsCapability(listChanged=list_changed)
    return ServerCapabilities(**capabilities)


def text_content(text: str) -> dict[str, Any]:
    """Build a single MCP text content item."""
    return content_to_dict(create_text_content(text))


def text_result(text: str, is_error: bool = False) -> dict[str, Any]:
    """Build a ``tools/call`` result holding one text item."""
    result: dict[str, Any] = {"content": [text_content(text)]}
    if is_error:
        result["isError"] = True
    return result


__all__ = [
    "ServerCapabilities",
    "ServerInfo",
    "TextContent",
    "ToolsCapability",
    "create_server_capabilities",
    "text_content",
    "text_result",
]
