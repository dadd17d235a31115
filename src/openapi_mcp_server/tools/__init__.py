#!/usr/bin/env python3
# src/openapi_mcp_server/tools/__init__.py
"""
Tool contract, registry and the generated tool variant.
"""

from .base import Tool, ToolContext, ToolMetadata, to_mcp_format
from .dynamic import DynamicTool, create_dynamic_tool
from .formatters import ResponseFormatter
from .registry import ToolRegistry

__all__ = [
    "DynamicTool",
    "ResponseFormatter",
    "Tool",
    "ToolContext",
    "ToolMetadata",
    "ToolRegistry",
    "create_dynamic_tool",
    "to_mcp_format",
]
