#!/usr/bin/env python3
# src/openapi_mcp_server/server.py
"""
Server bootstrap.

Startup order matters: the API client is authenticated first (fatal on
failure), then tools are generated from the API description (non-fatal, the
server comes up with an empty tool set), then HTTP is served.
"""

import logging

import httpx
import uvicorn

from .app import create_app
from .client import ClientProvider
from .config.settings import ServerSettings
from .constants import SERVER_NAME, SERVER_VERSION
from .openapi import OpenAPILoader, OpenAPIToolGenerator
from .protocol import MCPProtocolHandler, SessionManager
from .tools import ToolRegistry, create_dynamic_tool
from .types import ServerInfo, create_server_capabilities

logger = logging.getLogger(__name__)


async def load_tools(
    registry: ToolRegistry,
    settings: ServerSettings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> int:
    """Fetch the API description and register one tool per search endpoint.

    Failures are logged and leave the registry untouched.
    """
    loader = OpenAPILoader(
        settings.api_base_url,
        cache_dir=settings.cache_dir,
        cache_ttl=settings.cache_ttl,
        transport=transport,
    )
    try:
        spec = await loader.get_spec()
        definitions = OpenAPIToolGenerator.for_spec(spec).generate_all_tools()
    except Exception as e:
        logger.error(f"Failed to generate tools from OpenAPI spec: {e}", exc_info=True)
        logger.warning("Server will continue without dynamically generated tools")
        return 0

    for definition in definitions:
        registry.register(create_dynamic_tool(definition, result_format=settings.result_format))

    logger.info(f"Registered {len(definitions)} dynamic tools")
    return len(definitions)


async def create_server(
    settings: ServerSettings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> tuple[MCPProtocolHandler, ClientProvider]:
    """Authenticate, populate the registry and build the protocol handler.

    Raises:
        AuthenticationError: the API client could not log in.
    """
    client_provider = ClientProvider(settings, transport=transport)
    await client_provider()

    registry = ToolRegistry()
    await load_tools(registry, settings, transport=transport)

    handler = MCPProtocolHandler(
        registry=registry,
        session_manager=SessionManager(),
        client_provider=client_provider,
        server_info=ServerInfo(name=SERVER_NAME, version=SERVER_VERSION),
        capabilities=create_server_capabilities(tools=True),
        tool_timeout=settings.tool_timeout,
    )
    return handler, client_provider


async def serve(settings: ServerSettings) -> None:
    """Bootstrap and serve until uvicorn exits."""
    handler, client_provider = await create_server(settings)
    app = create_app(handler, settings)

    config = uvicorn.Config(app, host=settings.host, port=settings.port, log_level=settings.log_level)
    logger.info(f"MCP server listening on http://{settings.host}:{settings.port}")
    logger.info(f"Registered tools: {handler.registry.size()}")
    try:
        await uvicorn.Server(config).serve()
    finally:
        await client_provider.close()
