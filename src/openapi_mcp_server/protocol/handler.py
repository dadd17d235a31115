#!/usr/bin/env python3
# src/openapi_mcp_server/protocol/handler.py
"""
Protocol Handler - JSON-RPC dispatch for the MCP methods this server speaks.

Routes initialize, ping, tools/list, tools/call and logging/setLevel to the
tool registry and session manager. Every call returns
``(response | None, new_session_id | None)``; the transport decides how to put
that on the wire.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from ..constants import (
    JSONRPC_KEY,
    JSONRPC_VERSION,
    KEY_ARGUMENTS,
    KEY_CAPABILITIES,
    KEY_CLIENT_INFO,
    KEY_ERROR,
    KEY_ID,
    KEY_METHOD,
    KEY_PARAMS,
    KEY_PROTOCOL_VERSION,
    KEY_RESULT,
    KEY_SERVER_INFO,
    KEY_TOOL_NAME,
    LOG_ALERT,
    LOG_CRITICAL,
    LOG_DEBUG,
    LOG_EMERGENCY,
    LOG_ERROR,
    LOG_INFO,
    LOG_NOTICE,
    LOG_WARNING,
    MCP_DEFAULT_PROTOCOL_VERSION,
    PACKAGE_LOGGER,
    JsonRpcError,
    McpMethod,
)
from ..errors import ToolInputValidationError, format_unknown_tool_error
from ..tools.base import ToolContext
from ..tools.registry import ToolRegistry
from ..types import ServerCapabilities, ServerInfo
from .session_manager import SessionManager

logger = logging.getLogger(__name__)

NOTIFICATION_PREFIX = "notifications/"

# Map MCP logging levels to Python logging levels
LEVEL_MAPPING = {
    LOG_DEBUG: logging.DEBUG,
    LOG_INFO: logging.INFO,
    LOG_NOTICE: logging.INFO,
    LOG_WARNING: logging.WARNING,
    LOG_ERROR: logging.ERROR,
    LOG_CRITICAL: logging.CRITICAL,
    LOG_ALERT: logging.CRITICAL,
    LOG_EMERGENCY: logging.CRITICAL,
}

ClientProviderFn = Callable[[], Awaitable[Any]]


# ============================================================================
# Protocol Handler
# ============================================================================


class MCPProtocolHandler:
    """Core MCP protocol handler for generated API tools."""

    def __init__(
        self,
        registry: ToolRegistry,
        session_manager: SessionManager,
        client_provider: ClientProviderFn | None,
        server_info: ServerInfo,
        capabilities: ServerCapabilities,
        tool_timeout: float | None = None,
    ):
        self.registry = registry
        self.session_manager = session_manager
        self.client_provider = client_provider
        self.server_info = server_info
        self.capabilities = capabilities
        self.tool_timeout = tool_timeout

        logger.debug("MCP protocol handler initialized")

    async def handle_request(
        self, message: dict[str, Any], session_id: str | None = None
    ) -> tuple[dict[str, Any] | None, str | None]:
        """Handle one JSON-RPC message."""
        method = message.get(KEY_METHOD)
        msg_id = message.get(KEY_ID)
        params = message.get(KEY_PARAMS) or {}

        try:
            logger.debug(f"Handling {method} (ID: {msg_id})")

            if session_id:
                self.session_manager.update_activity(session_id)

            if not isinstance(params, dict):
                return self._create_error_response(
                    msg_id, JsonRpcError.INVALID_PARAMS, "Invalid parameters: params must be an object"
                ), None

            # Route to appropriate handler
            if method == McpMethod.INITIALIZE:
                return await self._handle_initialize(params, msg_id, session_id)
            elif isinstance(method, str) and method.startswith(NOTIFICATION_PREFIX):
                logger.debug(f"Notification received: {method}")
                return None, None  # Notifications don't return responses
            elif method == McpMethod.PING:
                return self._create_result_response(msg_id, {}), None
            elif method == McpMethod.TOOLS_LIST:
                return await self._handle_tools_list(msg_id)
            elif method == McpMethod.TOOLS_CALL:
                return await self._handle_tools_call(params, msg_id, session_id)
            elif method == McpMethod.LOGGING_SET_LEVEL:
                return await self._handle_logging_set_level(params, msg_id)
            else:
                return self._create_error_response(
                    msg_id, JsonRpcError.METHOD_NOT_FOUND, f"Method not found: {method}"
                ), None

        except asyncio.CancelledError:
            raise  # Never swallow cancellation
        except Exception as e:
            logger.error(f"Error handling request: {e}", exc_info=True)
            return self._create_error_response(msg_id, JsonRpcError.INTERNAL_ERROR, "Internal server error"), None

    async def _handle_initialize(
        self, params: dict[str, Any], msg_id: Any, session_id: str | None
    ) -> tuple[dict[str, Any], str | None]:
        """Handle initialize: reuse or open a session and describe the server."""
        client_info = params.get(KEY_CLIENT_INFO) or {}
        protocol_version = params.get(KEY_PROTOCOL_VERSION, MCP_DEFAULT_PROTOCOL_VERSION)

        session_id, is_new = self.session_manager.get_or_create(session_id, client_info, protocol_version)

        result = {
            KEY_PROTOCOL_VERSION: MCP_DEFAULT_PROTOCOL_VERSION,
            KEY_CAPABILITIES: self.capabilities.model_dump(exclude_none=True),
            KEY_SERVER_INFO: self.server_info.model_dump(exclude_none=True),
        }

        logger.debug(
            f"Initialized session {session_id[:8]}... for {client_info.get('name', 'unknown')} "
            f"(client v{protocol_version}, new={is_new})"
        )
        return self._create_result_response(msg_id, result), session_id if is_new else None

    async def _handle_tools_list(self, msg_id: Any) -> tuple[dict[str, Any], None]:
        """Handle tools/list. Available without a session."""
        tools = self.registry.to_mcp_format()
        logger.debug(f"Returning {len(tools)} tools")
        return self._create_result_response(msg_id, {"tools": tools}), None

    async def _handle_tools_call(
        self, params: dict[str, Any], msg_id: Any, session_id: str | None
    ) -> tuple[dict[str, Any], None]:
        """Handle tools/call: session gate, lookup, execution."""
        if not session_id:
            return self._create_error_response(
                msg_id, JsonRpcError.INVALID_PARAMS, "Session ID required for tool execution"
            ), None

        if not self.session_manager.has_session(session_id):
            return self._create_error_response(msg_id, JsonRpcError.INVALID_PARAMS, "Invalid or expired session"), None

        tool_name = params.get(KEY_TOOL_NAME, "")
        tool = self.registry.get(tool_name) if isinstance(tool_name, str) else None
        if tool is None:
            error_msg = format_unknown_tool_error(str(tool_name), self.registry.names())
            return self._create_error_response(msg_id, JsonRpcError.METHOD_NOT_FOUND, error_msg), None

        arguments = params.get(KEY_ARGUMENTS)
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            return self._create_error_response(
                msg_id,
                JsonRpcError.INVALID_PARAMS,
                "Invalid parameters",
                data=f"arguments must be an object, got {type(arguments).__name__}",
            ), None

        try:
            client = await self.client_provider() if self.client_provider is not None else None
            context = ToolContext(client=client, session_id=session_id)

            if self.tool_timeout:
                result = await asyncio.wait_for(tool.execute(arguments, context), timeout=self.tool_timeout)
            else:
                result = await tool.execute(arguments, context)

        except asyncio.CancelledError:
            raise  # Never swallow cancellation
        except asyncio.TimeoutError:
            logger.error(f"Tool {tool_name} timed out after {self.tool_timeout}s")
            return self._create_error_response(
                msg_id, JsonRpcError.INTERNAL_ERROR, "Tool execution timed out"
            ), None
        except ToolInputValidationError as e:
            logger.warning(f"Invalid parameters for {tool_name}: {e}")
            return self._create_error_response(
                msg_id, JsonRpcError.INVALID_PARAMS, "Invalid parameters", data=str(e)
            ), None
        except Exception as e:
            logger.error(f"Tool execution error for {tool_name}: {e}", exc_info=True)
            return self._create_error_response(
                msg_id,
                JsonRpcError.INTERNAL_ERROR,
                "Failed to execute tool",
                data="An error occurred during tool execution",
            ), None

        logger.debug(f"Executed tool {tool_name}")
        return self._create_result_response(msg_id, result), None

    async def _handle_logging_set_level(self, params: dict[str, Any], msg_id: Any) -> tuple[dict[str, Any], None]:
        """Handle logging/setLevel request."""
        level = str(params.get("level", LOG_INFO))
        level_lower = level.lower()
        if level_lower not in LEVEL_MAPPING:
            return self._create_error_response(
                msg_id,
                JsonRpcError.INVALID_PARAMS,
                f"Invalid logging level: {level}. Must be one of: {', '.join(LEVEL_MAPPING)}",
            ), None

        logging.getLogger(PACKAGE_LOGGER).setLevel(LEVEL_MAPPING[level_lower])
        logger.debug(f"Logging level set to {level.upper()}")
        return self._create_result_response(msg_id, {}), None

    # ================================================================
    # Sessions
    # ================================================================

    def terminate_session(self, session_id: str | None) -> bool:
        """Terminate a session. Returns False when it was not known."""
        return self.session_manager.terminate_session(session_id)

    # ================================================================
    # Response helpers
    # ================================================================

    def _create_result_response(self, msg_id: Any, result: Any) -> dict[str, Any]:
        return {JSONRPC_KEY: JSONRPC_VERSION, KEY_ID: msg_id, KEY_RESULT: result}

    def _create_error_response(self, msg_id: Any, code: int, message: str, data: Any = None) -> dict[str, Any]:
        """Create error response."""
        error: dict[str, Any] = {"code": int(code), "message": message}
        if data is not None:
            error["data"] = data
        return {JSONRPC_KEY: JSONRPC_VERSION, KEY_ID: msg_id, KEY_ERROR: error}
