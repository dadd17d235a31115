#!/usr/bin/env python3
"""Shared fixtures: a small API description and protocol wiring."""

from unittest.mock import AsyncMock

import pytest

from openapi_mcp_server.protocol import MCPProtocolHandler, SessionManager
from openapi_mcp_server.tools import ToolMetadata, ToolRegistry
from openapi_mcp_server.types import ServerInfo, create_server_capabilities


@pytest.fixture
def sample_spec():
    """API description with two search endpoints and one non-search endpoint."""
    return {
        "openapi": "3.0.0",
        "info": {"title": "Test API", "version": "1.0.0"},
        "paths": {
            "/module/search": {
                "post": {
                    "operationId": "ModuleController.search",
                    "summary": "Search modules",
                    "requestBody": {
                        "content": {
                            "application/json": {"schema": {"$ref": "#/components/schemas/ModuleSearchInputDTO"}}
                        }
                    },
                }
            },
            "/gameserver/{id}/player/search": {
                "post": {
                    "operationId": "PlayerOnGameServerController.search",
                    "description": "Search players on a game server",
                    "requestBody": {
                        "content": {
                            "application/json": {
                                "schema": {
                                    "type": "object",
                                    "properties": {"limit": {"type": "number", "example": 10}},
                                }
                            }
                        }
                    },
                }
            },
            "/module/{id}": {
                "get": {"operationId": "ModuleController.getOne"},
            },
        },
        "components": {
            "schemas": {
                "ModuleSearchInputDTO": {
                    "type": "object",
                    "properties": {
                        "filters": {"$ref": "#/components/schemas/ModuleFilter"},
                        "page": {"type": "number"},
                        "limit": {"type": "number"},
                    },
                },
                "ModuleFilter": {
                    "type": "object",
                    "properties": {
                        "name": {"type": "array", "items": {"type": "string"}},
                        "builtin": {"type": "string", "nullable": True},
                    },
                },
            }
        },
    }


class FakeTool:
    """Minimal object satisfying the tool contract."""

    def __init__(self, name, result=None, side_effect=None, schema=None):
        self.metadata = ToolMetadata(name=name, description=f"{name} tool")
        self.input_schema = schema or {"type": "object", "properties": {}}
        self.execute = AsyncMock(return_value=result, side_effect=side_effect)


@pytest.fixture
def fake_tool_factory():
    return FakeTool


@pytest.fixture
def registry():
    return ToolRegistry()


@pytest.fixture
def session_manager():
    return SessionManager()


@pytest.fixture
def client_provider():
    return AsyncMock(return_value=object())


@pytest.fixture
def handler(registry, session_manager, client_provider):
    return MCPProtocolHandler(
        registry=registry,
        session_manager=session_manager,
        client_provider=client_provider,
        server_info=ServerInfo(name="test-server", version="0.0.1"),
        capabilities=create_server_capabilities(tools=True),
    )
