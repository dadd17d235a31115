#!/usr/bin/env python3
"""Tests for generated (dynamic) tools."""

import asyncio
from unittest.mock import AsyncMock

import httpx
import orjson
import pytest

from openapi_mcp_server.config import ResultFormat
from openapi_mcp_server.errors import APIRequestError
from openapi_mcp_server.openapi import InvocationBinding, ToolDefinition
from openapi_mcp_server.tools import DynamicTool, ResponseFormatter, ToolContext, create_dynamic_tool


def make_definition(path="/module/search", required=None):
    schema = {"type": "object", "properties": {"limit": {"type": "number"}}}
    if required:
        schema["required"] = required
    return ToolDefinition(
        name="searchModule",
        description="Search modules",
        input_schema=schema,
        binding=InvocationBinding(method="post", path_template=path),
        operation_id="ModuleController.search",
        entity_type="module",
    )


def make_context(response=None, side_effect=None):
    client = AsyncMock()
    client.request.return_value = response
    client.request.side_effect = side_effect
    return ToolContext(client=client, session_id="session-1"), client


def result_text(result):
    return result["content"][0]["text"]


# ============================================================================
# Construction
# ============================================================================


class TestCreateDynamicTool:
    """Test wrapping generated definitions."""

    def test_metadata_and_schema(self):
        """Name, description and schema come from the definition."""
        tool = create_dynamic_tool(make_definition())

        assert isinstance(tool, DynamicTool)
        assert tool.metadata.name == "searchModule"
        assert tool.metadata.description == "Search modules"
        assert tool.input_schema["properties"]["limit"] == {"type": "number"}
        assert tool.formatter is None

    def test_formatted_mode_gets_formatter(self):
        """FORMATTED implies a ResponseFormatter."""
        tool = create_dynamic_tool(make_definition(), result_format=ResultFormat.FORMATTED)

        assert isinstance(tool.formatter, ResponseFormatter)
        assert tool.entity_type == "module"


# ============================================================================
# Raw results
# ============================================================================


class TestRawResults:
    """Test the raw JSON result strategy."""

    @pytest.mark.asyncio
    async def test_success_returns_indented_json(self):
        """The whole envelope is returned as indented JSON text."""
        body = {"data": [{"id": "1", "name": "alpha"}], "meta": {"total": 1}}
        response = httpx.Response(200, json=body)
        context, client = make_context(response)

        result = await create_dynamic_tool(make_definition()).execute({"limit": 1}, context)

        client.request.assert_awaited_once_with({"method": "POST", "url": "/module/search", "json": {"limit": 1}})
        assert "isError" not in result
        assert result["content"][0]["type"] == "text"
        assert orjson.loads(result_text(result)) == body
        assert result_text(result) == orjson.dumps(body, option=orjson.OPT_INDENT_2).decode()

    @pytest.mark.asyncio
    async def test_plain_dict_response(self):
        """Clients that already decode JSON are supported."""
        context, _ = make_context({"data": {"id": "1"}})

        result = await create_dynamic_tool(make_definition()).execute({}, context)

        assert orjson.loads(result_text(result)) == {"data": {"id": "1"}}

    @pytest.mark.asyncio
    async def test_api_error_with_details(self):
        """Structured API errors keep status, statusText and details."""
        error = APIRequestError(
            "Request failed with status code 400",
            status=400,
            status_text="Bad Request",
            details={"meta": {"error": {"code": "ValidationError"}}},
        )
        context, _ = make_context(side_effect=error)

        result = await create_dynamic_tool(make_definition()).execute({}, context)

        assert result["isError"] is True
        payload = orjson.loads(result_text(result))
        assert payload == {
            "error": True,
            "message": "Request failed with status code 400",
            "status": 400,
            "statusText": "Bad Request",
            "details": {"meta": {"error": {"code": "ValidationError"}}},
        }

    @pytest.mark.asyncio
    async def test_generic_error(self):
        """Other failures become {error, message}."""
        context, _ = make_context(side_effect=httpx.ConnectError("connection refused"))

        result = await create_dynamic_tool(make_definition()).execute({}, context)

        assert result["isError"] is True
        assert orjson.loads(result_text(result)) == {"error": True, "message": "connection refused"}

    @pytest.mark.asyncio
    async def test_missing_required_field_makes_no_request(self):
        """Required-field validation happens before the network call."""
        context, client = make_context({"data": []})

        result = await create_dynamic_tool(make_definition(required=["limit"])).execute({}, context)

        client.request.assert_not_awaited()
        assert result["isError"] is True
        assert "limit" in orjson.loads(result_text(result))["message"]

    @pytest.mark.asyncio
    async def test_missing_path_parameter(self):
        """Unfilled placeholders fail without a request."""
        context, client = make_context({"data": []})
        tool = create_dynamic_tool(make_definition(path="/gameserver/{id}/player/search"))

        result = await tool.execute({}, context)

        client.request.assert_not_awaited()
        assert result["isError"] is True
        assert "id" in orjson.loads(result_text(result))["message"]

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self):
        """CancelledError is never turned into a result."""
        context, _ = make_context(side_effect=asyncio.CancelledError())

        with pytest.raises(asyncio.CancelledError):
            await create_dynamic_tool(make_definition()).execute({}, context)


# ============================================================================
# Formatted results
# ============================================================================


class TestFormattedResults:
    """Test the human-readable result strategy."""

    @pytest.mark.asyncio
    async def test_list_body_is_paginated(self):
        """A list under data renders as a numbered list."""
        body = {"data": [{"id": "1", "name": "alpha"}, {"id": "2", "name": "beta"}], "meta": {"total": 2}}
        context, _ = make_context(httpx.Response(200, json=body))
        tool = create_dynamic_tool(make_definition(), result_format=ResultFormat.FORMATTED)

        text = result_text(await tool.execute({}, context))

        assert text.startswith("Found 2 module")
        assert "1. alpha" in text
        assert "2. beta" in text

    @pytest.mark.asyncio
    async def test_single_entity(self):
        """A non-list body renders as one entity."""
        context, _ = make_context(httpx.Response(200, json={"data": {"id": "1", "name": "alpha"}}))
        tool = create_dynamic_tool(make_definition(), result_format=ResultFormat.FORMATTED)

        text = result_text(await tool.execute({}, context))

        assert text.startswith("alpha")
        assert "ID: 1" in text

    @pytest.mark.asyncio
    async def test_api_error_is_formatted(self):
        """Structured errors are itemised."""
        error = APIRequestError("bad", status=400, details={"errors": [{"message": "limit too large"}]})
        context, _ = make_context(side_effect=error)
        tool = create_dynamic_tool(make_definition(), result_format=ResultFormat.FORMATTED)

        result = await tool.execute({}, context)

        assert result["isError"] is True
        assert "- limit too large" in result_text(result)
