#!/usr/bin/env python3
# src/openapi_mcp_server/tools/registry.py
"""
In-process registry of tools, keyed by name.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

from .base import Tool, to_mcp_format

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Name -> tool mapping. Re-registering a name replaces the old tool."""

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}

    def register(self, tool: Tool) -> None:
        """Register a tool; an existing tool with the same name is overwritten."""
        name = tool.metadata.name
        if name in self._tools:
            logger.warning(f'Tool "{name}" is already registered. Overwriting existing tool.')
        self._tools[name] = tool
        logger.debug(f"Registered tool: {name}")

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def list(self) -> list[Tool]:
        return list(self._tools.values())

    def names(self) -> list[str]:
        return list(self._tools.keys())

    def to_mcp_format(self) -> list[dict[str, Any]]:
        """Tools as ``tools/list`` entries: name, description and inputSchema only."""
        return [to_mcp_format(tool) for tool in self._tools.values()]

    def size(self) -> int:
        return len(self._tools)

    def has(self, name: str) -> bool:
        return name in self._tools

    def clear(self) -> None:
        self._tools.clear()
        logger.debug("Tool registry cleared")

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[Tool]:
        return iter(self.list())
