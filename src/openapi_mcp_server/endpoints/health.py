#!/usr/bin/env python3
"""
endpoints/health.py - Health check endpoint

Minimal liveness information for load balancers and container probes.
"""

import orjson
from starlette.requests import Request
from starlette.responses import Response

from ..protocol.handler import MCPProtocolHandler
from .constants import CACHE_NO_CACHE, CONTENT_TYPE_JSON, HEADER_CACHE_CONTROL


class HealthEndpoint:
    """``GET /health``: status plus tool and session counts."""

    def __init__(self, protocol_handler: MCPProtocolHandler):
        self.protocol = protocol_handler

    async def handle_request(self, request: Request) -> Response:
        health_data = {
            "status": "healthy",
            "tools": self.protocol.registry.size(),
            "sessions": len(self.protocol.session_manager),
        }
        return Response(
            orjson.dumps(health_data),
            media_type=CONTENT_TYPE_JSON,
            headers={HEADER_CACHE_CONTROL: CACHE_NO_CACHE},
        )
