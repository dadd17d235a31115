#!/usr/bin/env python3
# src/openapi_mcp_server/endpoints/mcp.py
"""
endpoints/mcp.py - MCP Streamable HTTP endpoint

One route, three verbs:

* ``POST /mcp``   JSON-RPC request in, JSON-RPC response out
* ``GET /mcp``    server-sent events stream for a known session
* ``DELETE /mcp`` session termination

Every verb goes through the same Origin allow-list first.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Iterable
from typing import Any

import orjson
from starlette.requests import Request
from starlette.responses import Response, StreamingResponse

from ..config.constants import DEFAULT_SSE_KEEPALIVE_SECONDS
from ..protocol.handler import MCPProtocolHandler
from .constants import (
    CONTENT_TYPE_JSON,
    CONTENT_TYPE_SSE,
    ERROR_FORBIDDEN_ORIGIN,
    ERROR_INVALID_REQUEST,
    ERROR_PARSE,
    ERROR_SESSION_NOT_FOUND,
    ERROR_SSE_SESSION_REQUIRED,
    HEADER_MCP_SESSION_ID,
    HEADER_ORIGIN,
    HEADERS_SSE,
    JSONRPC_VERSION,
    SSE_KEEPALIVE,
    SSE_OK,
    HttpStatus,
    JsonRpcError,
)

logger = logging.getLogger(__name__)


# ============================================================================
# Response helpers
# ============================================================================


def _json_response(data: Any, status_code: int = HttpStatus.OK, headers: dict[str, str] | None = None) -> Response:
    return Response(orjson.dumps(data), status_code=status_code, media_type=CONTENT_TYPE_JSON, headers=headers)


def _error_response(msg_id: Any, code: int, message: str, status_code: int = HttpStatus.BAD_REQUEST) -> Response:
    """JSON-RPC error produced by the transport itself."""
    return _json_response(
        {"jsonrpc": JSONRPC_VERSION, "error": {"code": int(code), "message": message}, "id": msg_id},
        status_code=status_code,
    )


def _peek_request_id(body: bytes) -> Any:
    """Best-effort id of a raw request body, for early rejections."""
    try:
        message = orjson.loads(body)
    except orjson.JSONDecodeError:
        return None
    return message.get("id") if isinstance(message, dict) else None


# ============================================================================
# MCP Endpoint
# ============================================================================


class MCPEndpoint:
    """Streamable HTTP transport in front of an ``MCPProtocolHandler``."""

    def __init__(
        self,
        protocol_handler: MCPProtocolHandler,
        allowed_origins: Iterable[str],
        keepalive_interval: float = DEFAULT_SSE_KEEPALIVE_SECONDS,
    ):
        self.protocol = protocol_handler
        self.allowed_origins = frozenset(allowed_origins)
        self.keepalive_interval = keepalive_interval

    async def handle_request(self, request: Request) -> Response:
        """Main entry point; dispatches on the HTTP verb."""
        if request.method == "GET":
            return await self._handle_sse(request)
        if request.method == "DELETE":
            return await self._handle_delete(request)
        return await self._handle_post(request)

    def origin_allowed(self, request: Request) -> bool:
        """Requests without an Origin header are not browser requests and pass."""
        origin = request.headers.get(HEADER_ORIGIN)
        return origin is None or origin in self.allowed_origins

    def _forbidden(self, request: Request, msg_id: Any = None) -> Response:
        logger.warning(f"Rejected request from origin {request.headers.get(HEADER_ORIGIN)}")
        return _error_response(msg_id, JsonRpcError.FORBIDDEN, ERROR_FORBIDDEN_ORIGIN, HttpStatus.FORBIDDEN)

    # ------------------------------------------------------------------
    # POST
    # ------------------------------------------------------------------

    async def _handle_post(self, request: Request) -> Response:
        body = await request.body()

        if not self.origin_allowed(request):
            return self._forbidden(request, _peek_request_id(body))

        try:
            message = orjson.loads(body)
        except orjson.JSONDecodeError as e:
            logger.debug(f"Unparsable request body: {e}")
            return _error_response(None, JsonRpcError.PARSE_ERROR, ERROR_PARSE)

        if not isinstance(message, dict):
            return _error_response(None, JsonRpcError.INVALID_REQUEST, ERROR_INVALID_REQUEST)

        session_id = request.headers.get(HEADER_MCP_SESSION_ID)
        response, new_session_id = await self.protocol.handle_request(message, session_id)

        if response is None:
            return Response(status_code=HttpStatus.ACCEPTED)

        headers = {HEADER_MCP_SESSION_ID: new_session_id} if new_session_id else None
        return _json_response(response, headers=headers)

    # ------------------------------------------------------------------
    # GET (SSE)
    # ------------------------------------------------------------------

    async def _handle_sse(self, request: Request) -> Response:
        if not self.origin_allowed(request):
            return self._forbidden(request)

        session_id = request.headers.get(HEADER_MCP_SESSION_ID)
        if not self.protocol.session_manager.has_session(session_id):
            return _json_response({"error": ERROR_SSE_SESSION_REQUIRED}, status_code=HttpStatus.BAD_REQUEST)

        logger.debug(f"SSE stream opened for session {session_id[:8]}...")
        return StreamingResponse(
            self._sse_stream(request, session_id),
            media_type=CONTENT_TYPE_SSE,
            headers=HEADERS_SSE,
        )

    async def _sse_stream(self, request: Request, session_id: str) -> AsyncIterator[str]:
        yield SSE_OK
        try:
            while not await request.is_disconnected():
                await asyncio.sleep(self.keepalive_interval)
                self.protocol.session_manager.update_activity(session_id)
                yield SSE_KEEPALIVE
        finally:
            logger.debug(f"SSE stream closed for session {session_id[:8]}...")

    # ------------------------------------------------------------------
    # DELETE
    # ------------------------------------------------------------------

    async def _handle_delete(self, request: Request) -> Response:
        if not self.origin_allowed(request):
            return self._forbidden(request)

        session_id = request.headers.get(HEADER_MCP_SESSION_ID)
        if not self.protocol.terminate_session(session_id):
            return _json_response({"error": ERROR_SESSION_NOT_FOUND}, status_code=HttpStatus.NOT_FOUND)
        return Response(status_code=HttpStatus.OK)
