#!/usr/bin/env python3
# src/openapi_mcp_server/openapi/generator.py
"""
Tool generation from an OpenAPI description.

Walks the path table, picks the search endpoints and turns each one into a
``ToolDefinition``: a deterministic name, a resolved input schema and an
``InvocationBinding`` that knows how to build and send the HTTP request.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any
from urllib.parse import quote

from ..constants import (
    CONTENT_TYPE_JSON,
    CONTROLLER_SUFFIX,
    JSON_SCHEMA_DRAFT_07,
    PATH_PLACEHOLDER_PATTERN,
    PLACEMENT_BODY,
    PLACEMENT_PATH,
    PLACEMENT_QUERY,
    QUERY_STYLE_METHODS,
    SEARCH_SUFFIX,
    SEARCH_TOOL_PREFIX,
)
from ..errors import MissingParameterError, SchemaReferenceError
from .resolver import SchemaResolver

logger = logging.getLogger(__name__)


# ============================================================================
# Invocation Binding
# ============================================================================


def extract_path_placeholders(path_template: str) -> list[str]:
    """Return the ``{name}`` placeholders of a path template, in order."""
    return PATH_PLACEHOLDER_PATTERN.findall(path_template)


@dataclass(frozen=True)
class InvocationBinding:
    """Recipe for turning tool input into a concrete HTTP request."""

    method: str
    path_template: str
    parameter_placement: MappingProxyType = field(default_factory=lambda: MappingProxyType({}))

    @property
    def uses_query(self) -> bool:
        """True when leftover fields travel in the query string."""
        return self.method.lower() in QUERY_STYLE_METHODS

    def placement_for(self, name: str) -> str:
        """Classify one input field as path, query or body."""
        if name in self.parameter_placement:
            return self.parameter_placement[name]
        if name in extract_path_placeholders(self.path_template):
            return PLACEMENT_PATH
        return PLACEMENT_QUERY if self.uses_query else PLACEMENT_BODY

    def build_request(self, tool_input: dict[str, Any] | None) -> dict[str, Any]:
        """Build a request config from raw tool input.

        Path placeholders are substituted (percent-encoded) and removed from
        the remaining fields, which go to the query string for read-style
        methods and to the JSON body otherwise.

        Raises:
            MissingParameterError: a placeholder has no value in the input.
        """
        remaining = dict(tool_input or {})
        path = self.path_template

        for name in extract_path_placeholders(self.path_template):
            if name not in remaining:
                raise MissingParameterError(name, self.path_template)
            value = remaining.pop(name)
            path = path.replace("{" + name + "}", quote(str(value), safe=""))

        query: dict[str, Any] = {}
        body: dict[str, Any] = {}
        for key, value in remaining.items():
            if self.placement_for(key) == PLACEMENT_QUERY:
                query[key] = value
            else:
                body[key] = value

        config: dict[str, Any] = {"method": self.method.upper(), "url": path}
        if query:
            config["params"] = query
        if body or not self.uses_query:
            config["json"] = body
        return config

    async def __call__(self, tool_input: dict[str, Any] | None, client: Any) -> Any:
        """Send the request through the API client and return its raw response."""
        config = self.build_request(tool_input)
        logger.debug(f"Calling {config['method']} {config['url']}")
        return await client.request(config)


@dataclass(frozen=True)
class ToolDefinition:
    """A generated tool, ready to be wrapped into a ``DynamicTool``."""

    name: str
    description: str
    input_schema: dict[str, Any]
    binding: InvocationBinding
    operation_id: str = ""
    entity_type: str = ""


# ============================================================================
# Naming helpers
# ============================================================================


def extract_entity_type(path: str) -> str | None:
    """Entity type of a search path: the segment just before ``/search``.

    ``/widgets/search`` -> ``widgets``. Returns None for non-search paths.
    """
    if not path.endswith(SEARCH_SUFFIX):
        return None
    segments = [segment for segment in path[: -len(SEARCH_SUFFIX)].split("/") if segment]
    if not segments:
        return None
    entity = segments[-1]
    if PATH_PLACEHOLDER_PATTERN.fullmatch(entity):
        return None
    return entity


def generate_tool_name(entity_type: str) -> str:
    """``widgets`` -> ``searchWidgets``."""
    return f"{SEARCH_TOOL_PREFIX}{entity_type[:1].upper()}{entity_type[1:]}"


def operation_id_to_method(operation_id: str) -> str:
    """Map an operation id to the API client's camel-case accessor name.

    ``ModuleController.search`` -> ``moduleSearch``.
    """
    if not operation_id:
        return ""

    first, *rest = operation_id.split(".")
    if first.endswith(CONTROLLER_SUFFIX) and first != CONTROLLER_SUFFIX:
        first = first[: -len(CONTROLLER_SUFFIX)]
    method_name = first[:1].lower() + first[1:]

    for part in rest:
        method_name += part[:1].upper() + part[1:]
    return method_name


def extract_controller_name(operation_id: str) -> str:
    """``ModuleController.search`` -> ``module``."""
    if not operation_id:
        return ""
    controller = operation_id.split(".")[0]
    if controller.lower().endswith(CONTROLLER_SUFFIX.lower()):
        controller = controller[: -len(CONTROLLER_SUFFIX)]
    return controller.lower()


# ============================================================================
# Generator
# ============================================================================


class OpenAPIToolGenerator:
    """Generate tool definitions from an API description."""

    def __init__(self, resolver: SchemaResolver):
        self.resolver = resolver

    @classmethod
    def for_spec(cls, spec: dict[str, Any]) -> "OpenAPIToolGenerator":
        return cls(SchemaResolver(spec))

    @property
    def spec(self) -> dict[str, Any]:
        return self.resolver.spec

    def generate_search_tools(self, spec: dict[str, Any] | None = None) -> list[ToolDefinition]:
        """Generate one tool per ``POST .../search`` endpoint.

        Operations that cannot become a tool are skipped with a warning;
        generation as a whole never fails because of one of them.
        """
        spec = spec if spec is not None else self.spec
        tools: list[ToolDefinition] = []

        paths = spec.get("paths") or {}
        for path, path_item in paths.items():
            if not path.endswith(SEARCH_SUFFIX):
                continue
            try:
                tool = self._generate_search_tool(path, path_item)
            except SchemaReferenceError as e:
                logger.warning(f"Skipping {path}: {e}")
                continue
            except Exception as e:
                logger.warning(f"Skipping malformed operation {path}: {e}", exc_info=True)
                continue
            if tool is not None:
                tools.append(tool)

        logger.info(f"Generated {len(tools)} search tools from OpenAPI spec")
        return tools

    def generate_all_tools(self, spec: dict[str, Any] | None = None) -> list[ToolDefinition]:
        """Generate every supported tool. Only search endpoints are supported."""
        return self.generate_search_tools(spec)

    def _generate_search_tool(self, path: str, path_item: Any) -> ToolDefinition | None:
        """Generate a single tool from one search path, or None to skip it."""
        operation = path_item.get("post") if isinstance(path_item, dict) else None
        if not isinstance(operation, dict):
            logger.warning(f"No POST operation found for search endpoint: {path}")
            return None

        entity_type = extract_entity_type(path)
        if not entity_type:
            logger.warning(f"Could not extract entity type from path: {path}")
            return None

        input_schema = self.extract_input_schema(operation)
        if input_schema is None:
            logger.warning(f"No input schema found for {path}")
            return None

        name = generate_tool_name(entity_type)
        description = operation.get("summary") or operation.get("description") or f"Search {entity_type}"
        binding = InvocationBinding(
            method="post",
            path_template=path,
            parameter_placement=self.build_parameter_placement(path, path_item, operation),
        )

        logger.debug(f"Generated tool {name} for POST {path}")
        return ToolDefinition(
            name=name,
            description=description,
            input_schema=input_schema,
            binding=binding,
            operation_id=operation.get("operationId", ""),
            entity_type=entity_type,
        )

    def extract_input_schema(self, operation: dict[str, Any]) -> dict[str, Any] | None:
        """Resolve the JSON request-body schema of an operation into a tool input schema."""
        request_body = operation.get("requestBody")
        if not isinstance(request_body, dict):
            return None

        if "$ref" in request_body:
            request_body = self.resolver.resolve_schema(request_body)
            if not isinstance(request_body, dict):
                return None

        content = request_body.get("content")
        if not isinstance(content, dict) or CONTENT_TYPE_JSON not in content:
            return None

        media_type = content[CONTENT_TYPE_JSON]
        if not isinstance(media_type, dict) or not media_type.get("schema"):
            return None

        resolved = self.resolver.resolve_schema(media_type["schema"])
        tool_schema = self.resolver.to_tool_schema(resolved)
        if not isinstance(tool_schema, dict):
            return None

        return {"type": "object", **tool_schema, "$schema": JSON_SCHEMA_DRAFT_07}

    def build_parameter_placement(
        self,
        path: str,
        path_item: dict[str, Any],
        operation: dict[str, Any],
    ) -> MappingProxyType:
        """Collect explicit path/query parameters of an operation.

        Fields not listed here fall back to the binding's method default.
        """
        placement: dict[str, str] = {}

        parameters = [
            parameter
            for source in (path_item.get("parameters"), operation.get("parameters"))
            if isinstance(source, list)
            for parameter in source
        ]
        for parameter in parameters:
            if isinstance(parameter, dict) and "$ref" in parameter:
                parameter = self.resolver.resolve_schema(parameter)
            if not isinstance(parameter, dict) or "name" not in parameter:
                continue
            location = parameter.get("in")
            if location == PLACEMENT_PATH:
                placement[parameter["name"]] = PLACEMENT_PATH
            elif location == PLACEMENT_QUERY:
                placement[parameter["name"]] = PLACEMENT_QUERY

        for name in extract_path_placeholders(path):
            placement[name] = PLACEMENT_PATH

        return MappingProxyType(placement)
