"""
Structured error types for openapi_mcp_server.

Every error carries a JSON-RPC code and optional structured data so the
dispatcher can turn it into a protocol error without guessing.
"""

from difflib import get_close_matches
from typing import Any

from .constants import JsonRpcError


class MCPError(Exception):
    """Structured MCP error carrying a JSON-RPC code and optional data."""

    def __init__(
        self,
        message: str,
        code: int = JsonRpcError.INTERNAL_ERROR,
        data: Any = None,
    ):
        self.code = code
        self.data = data
        super().__init__(message)


class SchemaReferenceError(MCPError):
    """A ``$ref`` pointer could not be resolved inside the API description."""

    def __init__(self, ref: str, reason: str = "Invalid reference"):
        self.ref = ref
        super().__init__(f"{reason}: {ref}", data={"ref": ref})


class ToolInputValidationError(MCPError):
    """Tool input failed validation before any request was made."""

    def __init__(self, message: str, data: Any = None):
        super().__init__(f"Invalid parameters: {message}", code=JsonRpcError.INVALID_PARAMS, data=data)


class MissingParameterError(ToolInputValidationError):
    """A path placeholder has no matching field in the tool input."""

    def __init__(self, parameter: str, path: str):
        self.parameter = parameter
        self.path = path
        super().__init__(
            f"missing path parameter '{parameter}' for {path}",
            data={"parameter": parameter, "path": path},
        )


class APIRequestError(MCPError):
    """The remote API answered with an error status."""

    def __init__(
        self,
        message: str,
        status: int | None = None,
        status_text: str | None = None,
        details: Any = None,
    ):
        self.status = status
        self.status_text = status_text
        self.details = details
        super().__init__(message, data={"status": status, "details": details})

    @property
    def has_details(self) -> bool:
        """True when the remote API returned a structured error body."""
        return self.details is not None


class AuthenticationError(MCPError):
    """Login or domain selection against the remote API failed."""


class OpenAPIFetchError(MCPError):
    """The API description could not be fetched."""


def suggest_tool_name(tool_name: str, available_tools: list[str]) -> str | None:
    """Find the closest matching tool name using fuzzy matching.

    Args:
        tool_name: The unknown tool name.
        available_tools: List of registered tool names.

    Returns:
        The closest match, or None if no good match found.
    """
    matches = get_close_matches(tool_name, available_tools, n=1, cutoff=0.6)
    return matches[0] if matches else None


def format_unknown_tool_error(tool_name: str, available_tools: list[str]) -> str:
    """Create an error message for an unknown tool with suggestions.

    The requested name always appears in the message.
    """
    base = f"Unknown tool: {tool_name}"
    suggestion = suggest_tool_name(tool_name, available_tools)
    if suggestion:
        return f"{base}. Did you mean '{suggestion}'?"
    if available_tools:
        names = ", ".join(sorted(available_tools)[:10])
        suffix = "..." if len(available_tools) > 10 else ""
        return f"{base}. Available tools: {names}{suffix}"
    return f"{base}. No tools are registered."


def format_missing_argument_error(tool_name: str, param_name: str, schema: dict[str, Any] | None = None) -> str:
    """Create an error message for a missing required argument.

    Args:
        tool_name: The tool name.
        param_name: The missing parameter name.
        schema: Optional JSON schema for the tool input.

    Returns:
        Error message string.
    """
    msg = f"Missing required field: {param_name} (tool '{tool_name}')"
    if schema and param_name in schema.get("properties", {}):
        prop = schema["properties"][param_name]
        prop_type = prop.get("type", "any")
        desc = prop.get("description", "")
        if desc:
            msg += f" ({prop_type}: {desc})"
        else:
            msg += f" (type: {prop_type})"
    return msg
