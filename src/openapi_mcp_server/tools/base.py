#!/usr/bin/env python3
# src/openapi_mcp_server/tools/base.py
"""
The uniform tool contract.

Every tool, generated or hand-written, exposes ``metadata``, an
``input_schema`` and an async ``execute(input, context)``. The registry and
the dispatcher only rely on this contract.
"""

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True)
class ToolMetadata:
    """Protocol-visible identity of a tool."""

    name: str
    description: str


@dataclass(frozen=True)
class ToolContext:
    """Per-call execution context. Built fresh for every tools/call."""

    client: Any
    session_id: str


@runtime_checkable
class Tool(Protocol):
    """Anything the registry can hold and the dispatcher can execute."""

    metadata: ToolMetadata
    input_schema: dict[str, Any]

    async def execute(self, tool_input: dict[str, Any], context: ToolContext) -> dict[str, Any]: ...


def to_mcp_format(tool: Tool) -> dict[str, Any]:
    """Project a tool onto the three fields ``tools/list`` exposes."""
    return {
        "name": tool.metadata.name,
        "description": tool.metadata.description,
        "inputSchema": tool.input_schema,
    }
