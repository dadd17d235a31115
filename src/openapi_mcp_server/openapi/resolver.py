#!/usr/bin/env python3
# src/openapi_mcp_server/openapi/resolver.py
"""
Schema resolution for OpenAPI documents.

Expands local ``$ref`` pointers into self-contained schema trees and
converts OpenAPI schema dialect into plain JSON Schema for tool inputs.
"""

import copy
import logging
from typing import Any

from ..constants import COMPOSITION_KEYS, OPENAPI_ONLY_FIELDS
from ..errors import SchemaReferenceError

logger = logging.getLogger(__name__)

REF_KEY = "$ref"
LOCAL_REF_PREFIX = "#/"


class SchemaResolver:
    """Resolve ``$ref`` pointers against a single API description."""

    def __init__(self, spec: dict[str, Any]):
        self.spec = spec

    # ================================================================
    # Reference resolution
    # ================================================================

    def resolve_schema(self, schema: Any, visited: frozenset[str] | None = None) -> Any:
        """Resolve every ``$ref`` inside ``schema``.

        ``visited`` holds the pointers on the current resolution path. A
        pointer seen again on the same path is a cycle: it is kept as a
        ``{"$ref": ...}`` node instead of being expanded.
        """
        if not isinstance(schema, dict):
            if isinstance(schema, list):
                return [self.resolve_schema(item, visited) for item in schema]
            return schema

        visited = visited if visited is not None else frozenset()

        if REF_KEY in schema:
            ref = schema[REF_KEY]
            resolved = self._resolve_ref(ref, visited)
            siblings = {key: value for key, value in schema.items() if key != REF_KEY}
            if not siblings:
                return resolved
            siblings = self.resolve_schema(siblings, visited | {ref})
            if isinstance(resolved, dict):
                return {**resolved, **siblings}
            return siblings

        result = copy.deepcopy(schema)

        properties = result.get("properties")
        if isinstance(properties, dict):
            for prop_name, prop_schema in properties.items():
                properties[prop_name] = self.resolve_schema(prop_schema, visited)

        if isinstance(result.get("items"), dict | list):
            result["items"] = self.resolve_schema(result["items"], visited)

        if isinstance(result.get("additionalProperties"), dict):
            result["additionalProperties"] = self.resolve_schema(result["additionalProperties"], visited)

        for key in COMPOSITION_KEYS:
            branches = result.get(key)
            if isinstance(branches, list):
                result[key] = [self.resolve_schema(branch, visited) for branch in branches]

        return result

    def _resolve_ref(self, ref: str, visited: frozenset[str]) -> Any:
        """Resolve a single pointer, expanding nested references."""
        if ref in visited:
            logger.warning(f"Circular reference detected: {ref}, preserving as $ref")
            return {REF_KEY: ref}

        target = self.lookup(ref)
        return self.resolve_schema(target, visited | {ref})

    def lookup(self, ref: str) -> Any:
        """Walk the API description along a local JSON pointer.

        Raises:
            SchemaReferenceError: the pointer is external or a segment is missing.
        """
        if not isinstance(ref, str) or not ref.startswith(LOCAL_REF_PREFIX):
            raise SchemaReferenceError(str(ref), "External references not supported")

        current: Any = self.spec
        for part in ref[len(LOCAL_REF_PREFIX) :].split("/"):
            segment = part.replace("~1", "/").replace("~0", "~")
            if isinstance(current, dict) and segment in current:
                current = current[segment]
            elif isinstance(current, list) and segment.isdigit() and int(segment) < len(current):
                current = current[int(segment)]
            else:
                raise SchemaReferenceError(ref)
        return current

    # ================================================================
    # Dialect conversion
    # ================================================================

    def to_tool_schema(self, schema: Any) -> Any:
        """Convert an OpenAPI schema into tool-input JSON Schema.

        Drops OpenAPI-only annotations and rewrites ``nullable: true`` as a
        type union containing ``"null"``.
        """
        if not isinstance(schema, dict):
            if isinstance(schema, list):
                return [self.to_tool_schema(item) for item in schema]
            return schema

        result = {key: copy.deepcopy(value) for key, value in schema.items() if key not in OPENAPI_ONLY_FIELDS}

        if schema.get("nullable") is True and "type" in result:
            types = list(result["type"]) if isinstance(result["type"], list) else [result["type"]]
            if "null" not in types:
                types.append("null")
            result["type"] = types

        properties = result.get("properties")
        if isinstance(properties, dict):
            result["properties"] = {name: self.to_tool_schema(prop) for name, prop in properties.items()}

        if "items" in result:
            result["items"] = self.to_tool_schema(result["items"])

        if isinstance(result.get("additionalProperties"), dict):
            result["additionalProperties"] = self.to_tool_schema(result["additionalProperties"])

        for key in COMPOSITION_KEYS:
            if isinstance(result.get(key), list):
                result[key] = [self.to_tool_schema(branch) for branch in result[key]]

        return result
