#!/usr/bin/env python3
# src/openapi_mcp_server/tools/dynamic.py
"""
Generated tools.

A ``DynamicTool`` pairs a generated input schema with an ``InvocationBinding``.
Executing it sends the bound HTTP request through the context's API client and
turns the response (or the failure) into a ``tools/call`` result.
"""

import asyncio
import logging
from typing import Any

import httpx
import orjson

from ..config.settings import ResultFormat
from ..errors import APIRequestError, ToolInputValidationError, format_missing_argument_error
from ..openapi.generator import InvocationBinding, ToolDefinition
from ..types import text_result
from .base import ToolContext, ToolMetadata
from .formatters import ResponseFormatter

logger = logging.getLogger(__name__)


def _response_body(response: Any) -> Any:
    """Decode the JSON body of an ``httpx.Response``; other values pass through."""
    if isinstance(response, httpx.Response):
        if not response.content:
            return None
        try:
            return orjson.loads(response.content)
        except orjson.JSONDecodeError:
            return response.text
    return response


def _dump(value: Any) -> str:
    return orjson.dumps(value, option=orjson.OPT_INDENT_2).decode()


class DynamicTool:
    """A tool whose behaviour is a captured HTTP invocation."""

    def __init__(
        self,
        metadata: ToolMetadata,
        input_schema: dict[str, Any],
        binding: InvocationBinding,
        formatter: ResponseFormatter | None = None,
        entity_type: str | None = None,
    ):
        self.metadata = metadata
        self.input_schema = input_schema
        self.binding = binding
        self.formatter = formatter
        self.entity_type = entity_type or metadata.name

    def __repr__(self) -> str:
        return f"DynamicTool(name={self.metadata.name!r}, {self.binding.method.upper()} {self.binding.path_template})"

    def validate_input(self, tool_input: dict[str, Any]) -> None:
        """Check required fields before anything goes over the wire."""
        for name in self.input_schema.get("required") or []:
            if name not in tool_input:
                raise ToolInputValidationError(
                    format_missing_argument_error(self.metadata.name, name, self.input_schema),
                    data={"field": name},
                )

    async def execute(self, tool_input: dict[str, Any] | None, context: ToolContext) -> dict[str, Any]:
        """Run the bound request. Failures come back as ``isError`` results."""
        tool_input = tool_input or {}
        try:
            self.validate_input(tool_input)
            response = await self.binding(tool_input, context.client)
            body = _response_body(response)
            return self._format_result(body, tool_input)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.debug(f"Tool {self.metadata.name} failed: {e}")
            return self._format_error(e)

    def _format_result(self, body: Any, tool_input: dict[str, Any]) -> dict[str, Any]:
        if self.formatter is None:
            return text_result(body if isinstance(body, str) else _dump(body))

        if isinstance(body, dict) and isinstance(body.get("data"), list):
            return self.formatter.format_paginated_list(body, self.entity_type, tool_input)
        entity = body.get("data", body) if isinstance(body, dict) else body
        return self.formatter.format_single_entity(entity, self.entity_type)

    def _format_error(self, error: Exception) -> dict[str, Any]:
        if isinstance(error, APIRequestError) and error.has_details:
            if self.formatter is not None:
                return self.formatter.format_error(error)
            payload: dict[str, Any] = {
                "error": True,
                "message": str(error),
                "status": error.status,
                "statusText": error.status_text,
                "details": error.details,
            }
        else:
            payload = {"error": True, "message": str(error) or type(error).__name__}
        return text_result(_dump(payload), is_error=True)


def create_dynamic_tool(
    definition: ToolDefinition,
    formatter: ResponseFormatter | None = None,
    result_format: ResultFormat = ResultFormat.RAW,
) -> DynamicTool:
    """Wrap a generated definition. ``FORMATTED`` implies a formatter."""
    if result_format == ResultFormat.FORMATTED and formatter is None:
        formatter = ResponseFormatter()
    elif result_format == ResultFormat.RAW:
        formatter = None

    return DynamicTool(
        metadata=ToolMetadata(name=definition.name, description=definition.description),
        input_schema=definition.input_schema,
        binding=definition.binding,
        formatter=formatter,
        entity_type=definition.entity_type or None,
    )
