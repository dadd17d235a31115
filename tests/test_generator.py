#!/usr/bin/env python3
"""Tests for tool generation and invocation bindings."""

from types import MappingProxyType
from unittest.mock import AsyncMock, patch

import pytest

from openapi_mcp_server.constants import JSON_SCHEMA_DRAFT_07
from openapi_mcp_server.errors import MissingParameterError, ToolInputValidationError
from openapi_mcp_server.openapi import (
    InvocationBinding,
    OpenAPIToolGenerator,
    extract_controller_name,
    extract_entity_type,
    generate_tool_name,
    operation_id_to_method,
)

# ============================================================================
# Naming helpers
# ============================================================================


class TestNaming:
    """Test deterministic naming."""

    def test_extract_entity_type(self):
        """The segment before /search is the entity type."""
        assert extract_entity_type("/module/search") == "module"
        assert extract_entity_type("/gameserver/{id}/player/search") == "player"

    def test_extract_entity_type_rejects_non_search(self):
        """Non-search paths, bare /search and placeholder segments yield None."""
        assert extract_entity_type("/module/{id}") is None
        assert extract_entity_type("/search") is None
        assert extract_entity_type("/module/{id}/search") is None

    def test_generate_tool_name(self):
        """Names are search + capitalised entity type."""
        assert generate_tool_name("module") == "searchModule"
        assert generate_tool_name("gameserver") == "searchGameserver"

    def test_operation_id_to_method(self):
        """Controller suffix is dropped and the rest camel-cased."""
        assert operation_id_to_method("ModuleController.search") == "moduleSearch"
        assert operation_id_to_method("PlayerOnGameServerController.getOne") == "playerOnGameServerGetOne"
        assert operation_id_to_method("") == ""

    def test_extract_controller_name(self):
        """Controller names are lower-cased without the suffix."""
        assert extract_controller_name("ModuleController.search") == "module"
        assert extract_controller_name("") == ""


# ============================================================================
# Generator
# ============================================================================


class TestGenerateSearchTools:
    """Test generation from a full API description."""

    def test_one_tool_per_search_endpoint(self, sample_spec):
        """Only POST .../search operations become tools."""
        tools = OpenAPIToolGenerator.for_spec(sample_spec).generate_search_tools()

        assert sorted(tool.name for tool in tools) == ["searchModule", "searchPlayer"]

    def test_schema_is_resolved_and_wrapped(self, sample_spec):
        """The request body schema is fully resolved and tagged as draft-07."""
        tools = OpenAPIToolGenerator.for_spec(sample_spec).generate_search_tools()
        module_tool = next(tool for tool in tools if tool.name == "searchModule")

        schema = module_tool.input_schema
        assert schema["type"] == "object"
        assert schema["$schema"] == JSON_SCHEMA_DRAFT_07
        filters = schema["properties"]["filters"]
        assert filters["properties"]["name"] == {"type": "array", "items": {"type": "string"}}
        assert filters["properties"]["builtin"]["type"] == ["string", "null"]
        assert "$ref" not in str(schema)

    def test_openapi_annotations_are_stripped(self, sample_spec):
        """example annotations do not reach the tool schema."""
        tools = OpenAPIToolGenerator.for_spec(sample_spec).generate_search_tools()
        player_tool = next(tool for tool in tools if tool.name == "searchPlayer")

        assert player_tool.input_schema["properties"]["limit"] == {"type": "number"}

    def test_description_fallback(self, sample_spec):
        """summary, then description, then a generated text."""
        sample_spec["paths"]["/item/search"] = {
            "post": {"requestBody": {"content": {"application/json": {"schema": {"type": "object"}}}}}
        }
        tools = {t.name: t for t in OpenAPIToolGenerator.for_spec(sample_spec).generate_search_tools()}

        assert tools["searchModule"].description == "Search modules"
        assert tools["searchPlayer"].description == "Search players on a game server"
        assert tools["searchItem"].description == "Search item"

    def test_binding_and_metadata(self, sample_spec):
        """Each tool records its operation id, entity type and POST binding."""
        tools = {t.name: t for t in OpenAPIToolGenerator.for_spec(sample_spec).generate_search_tools()}
        player_tool = tools["searchPlayer"]

        assert player_tool.operation_id == "PlayerOnGameServerController.search"
        assert player_tool.entity_type == "player"
        assert player_tool.binding.method == "post"
        assert player_tool.binding.path_template == "/gameserver/{id}/player/search"
        assert player_tool.binding.parameter_placement["id"] == "path"

    def test_operation_without_body_is_skipped(self, sample_spec):
        """Search endpoints with no JSON body schema are skipped."""
        sample_spec["paths"]["/role/search"] = {"post": {"summary": "Search roles"}}

        names = [t.name for t in OpenAPIToolGenerator.for_spec(sample_spec).generate_search_tools()]

        assert "searchRole" not in names

    def test_broken_reference_skips_only_that_operation(self, sample_spec):
        """A dangling pointer skips the operation; the rest still generate."""
        sample_spec["paths"]["/hook/search"] = {
            "post": {
                "requestBody": {
                    "content": {"application/json": {"schema": {"$ref": "#/components/schemas/Missing"}}}
                }
            }
        }

        names = [t.name for t in OpenAPIToolGenerator.for_spec(sample_spec).generate_search_tools()]

        assert "searchHook" not in names
        assert "searchModule" in names

    def test_empty_spec(self):
        """No paths, no tools."""
        assert OpenAPIToolGenerator.for_spec({}).generate_all_tools() == []

    def test_referenced_request_body(self, sample_spec):
        """A $ref'd requestBody is resolved before reading its content."""
        sample_spec["components"]["requestBodies"] = {
            "VariableSearch": {"content": {"application/json": {"schema": {"type": "object"}}}}
        }
        sample_spec["paths"]["/variable/search"] = {
            "post": {"requestBody": {"$ref": "#/components/requestBodies/VariableSearch"}}
        }

        names = [t.name for t in OpenAPIToolGenerator.for_spec(sample_spec).generate_search_tools()]

        assert "searchVariable" in names

    def test_malformed_parameters_do_not_stop_generation(self):
        """A non-list parameters value sits next to a good operation; both still generate."""
        body = {"content": {"application/json": {"schema": {"type": "object"}}}}
        spec = {
            "paths": {
                "/good/search": {"post": {"requestBody": body}},
                "/bad/search": {"parameters": 5, "post": {"parameters": "x", "requestBody": body}},
            }
        }

        names = [t.name for t in OpenAPIToolGenerator.for_spec(spec).generate_search_tools()]

        assert names == ["searchGood", "searchBad"]

    def test_request_body_pointing_at_non_object_is_skipped(self, sample_spec):
        """A requestBody $ref whose target is not an object skips only that operation."""
        sample_spec["components"]["requestBodies"] = {"Broken": "not-a-body"}
        sample_spec["paths"]["/cronjob/search"] = {
            "post": {"requestBody": {"$ref": "#/components/requestBodies/Broken"}}
        }

        names = [t.name for t in OpenAPIToolGenerator.for_spec(sample_spec).generate_search_tools()]

        assert names == ["searchModule", "searchPlayer"]

    def test_unexpected_fault_skips_only_that_operation(self, sample_spec):
        """Any error while building one tool is logged and the others still generate."""
        generator = OpenAPIToolGenerator.for_spec(sample_spec)
        original = generator.extract_input_schema

        def flaky(operation):
            if operation.get("operationId") == "PlayerOnGameServerController.search":
                raise RuntimeError("boom")
            return original(operation)

        with patch.object(generator, "extract_input_schema", side_effect=flaky):
            names = [t.name for t in generator.generate_search_tools()]

        assert names == ["searchModule"]


# ============================================================================
# Invocation binding
# ============================================================================


class TestInvocationBinding:
    """Test request construction."""

    def test_post_sends_fields_as_body(self):
        """POST bindings put non-path fields into the JSON body."""
        binding = InvocationBinding(method="post", path_template="/module/search")

        config = binding.build_request({"filters": {"name": ["x"]}, "limit": 5})

        assert config == {"method": "POST", "url": "/module/search", "json": {"filters": {"name": ["x"]}, "limit": 5}}

    def test_path_placeholders_are_substituted_and_encoded(self):
        """Placeholders are filled, percent-encoded and removed from the body."""
        binding = InvocationBinding(method="post", path_template="/gameserver/{id}/player/search")

        config = binding.build_request({"id": "a/b c", "limit": 1})

        assert config["url"] == "/gameserver/a%2Fb%20c/player/search"
        assert config["json"] == {"limit": 1}

    def test_missing_placeholder_raises(self):
        """A missing path value is a validation error."""
        binding = InvocationBinding(method="post", path_template="/gameserver/{id}/player/search")

        with pytest.raises(MissingParameterError) as exc_info:
            binding.build_request({"limit": 1})

        assert isinstance(exc_info.value, ToolInputValidationError)
        assert exc_info.value.parameter == "id"

    def test_get_sends_fields_as_query(self):
        """GET bindings put leftover fields into the query string and send no body."""
        binding = InvocationBinding(method="get", path_template="/module/{id}")

        config = binding.build_request({"id": "42", "expand": "true"})

        assert config == {"method": "GET", "url": "/module/42", "params": {"expand": "true"}}

    def test_explicit_query_placement_on_post(self):
        """Declared query parameters go to the query string even for POST."""
        binding = InvocationBinding(
            method="post",
            path_template="/module/search",
            parameter_placement=MappingProxyType({"dryRun": "query"}),
        )

        config = binding.build_request({"dryRun": True, "limit": 1})

        assert config["params"] == {"dryRun": True}
        assert config["json"] == {"limit": 1}

    def test_post_with_empty_input_sends_empty_body(self):
        """POST always carries a JSON body."""
        binding = InvocationBinding(method="post", path_template="/module/search")

        assert binding.build_request(None) == {"method": "POST", "url": "/module/search", "json": {}}

    def test_binding_is_immutable(self):
        """Bindings are frozen values."""
        binding = InvocationBinding(method="post", path_template="/module/search")

        with pytest.raises(AttributeError):
            binding.method = "get"

    @pytest.mark.asyncio
    async def test_call_sends_through_client(self):
        """Calling the binding hands the built config to client.request."""
        binding = InvocationBinding(method="post", path_template="/module/search")
        client = AsyncMock()
        client.request.return_value = {"data": []}

        result = await binding({"limit": 1}, client)

        client.request.assert_awaited_once_with({"method": "POST", "url": "/module/search", "json": {"limit": 1}})
        assert result == {"data": []}

    def test_export_path_routes_by_method(self):
        """The placeholder is consumed; the rest goes to query for GET, body for POST."""
        get_binding = InvocationBinding(method="get", path_template="/widgets/{id}/export")
        post_binding = InvocationBinding(method="post", path_template="/widgets/{id}/export")

        get_config = get_binding.build_request({"id": "abc", "format": "csv"})
        post_config = post_binding.build_request({"id": "abc", "format": "csv"})

        assert get_config == {"method": "GET", "url": "/widgets/abc/export", "params": {"format": "csv"}}
        assert post_config == {"method": "POST", "url": "/widgets/abc/export", "json": {"format": "csv"}}


class TestDeterminism:
    """Test repeatable generation."""

    def test_same_names_same_order(self, sample_spec):
        """Generating twice yields the same names in the same order."""
        first = [t.name for t in OpenAPIToolGenerator.for_spec(sample_spec).generate_search_tools()]
        second = [t.name for t in OpenAPIToolGenerator.for_spec(sample_spec).generate_search_tools()]

        assert first == second == ["searchModule", "searchPlayer"]

    def test_widgets_search(self):
        """/widgets/search gives searchWidgets; /widgets/{id} gives nothing."""
        spec = {
            "paths": {
                "/widgets/search": {
                    "post": {"requestBody": {"content": {"application/json": {"schema": {"type": "object"}}}}}
                },
                "/widgets/{id}": {"get": {}},
            }
        }

        assert [t.name for t in OpenAPIToolGenerator.for_spec(spec).generate_search_tools()] == ["searchWidgets"]
