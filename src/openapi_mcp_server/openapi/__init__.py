#!/usr/bin/env python3
# src/openapi_mcp_server/openapi/__init__.py
"""
OpenAPI ingestion: fetching, ``$ref`` resolution and tool generation.
"""

from .generator import (
    InvocationBinding,
    OpenAPIToolGenerator,
    ToolDefinition,
    extract_controller_name,
    extract_entity_type,
    generate_tool_name,
    operation_id_to_method,
)
from .loader import OpenAPILoader
from .resolver import SchemaResolver

__all__ = [
    "InvocationBinding",
    "OpenAPILoader",
    "OpenAPIToolGenerator",
    "SchemaResolver",
    "ToolDefinition",
    "extract_controller_name",
    "extract_entity_type",
    "generate_tool_name",
    "operation_id_to_method",
]
