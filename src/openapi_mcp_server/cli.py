#!/usr/bin/env python3
# src/openapi_mcp_server/cli.py
"""
cli.py - Command-line entry point

Reads settings from the environment, applies command-line overrides and runs
the server. Exits with status 1 when the API client cannot authenticate.
"""

import argparse
import asyncio
import logging
import sys

from .config.constants import LOG_LEVELS
from .config.settings import ResultFormat, ServerSettings
from .constants import SERVER_NAME, SERVER_VERSION
from .errors import AuthenticationError
from .server import serve

logger = logging.getLogger(__name__)


def setup_logging(level: str = "info") -> None:
    """Configure logging to stderr."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def create_argument_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser"""
    parser = argparse.ArgumentParser(
        prog="openapi-mcp-server",
        description="MCP server exposing a REST API's search endpoints as tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  openapi-mcp-server                              # Settings from environment
  openapi-mcp-server --port 8080                  # Custom port
  openapi-mcp-server --result-format formatted    # Human-readable tool output
        """,
    )

    parser.add_argument("--host", help="Host to bind to (env: HOST)")
    parser.add_argument("--port", type=int, help="Port to bind to (env: PORT)")
    parser.add_argument("--api-base-url", help="Base URL of the remote API (env: API_BASE_URL)")
    parser.add_argument("--log-level", choices=list(LOG_LEVELS), help="Log level (env: MCP_LOG_LEVEL)")
    parser.add_argument(
        "--result-format",
        choices=[fmt.value for fmt in ResultFormat],
        help="Tool result rendering (env: MCP_RESULT_FORMAT)",
    )
    parser.add_argument("--cache-dir", help="Directory for the cached API description (env: MCP_CACHE_DIR)")
    parser.add_argument(
        "--tool-timeout", type=float, help="Per-call tool timeout in seconds, 0 disables (env: MCP_TOOL_TIMEOUT)"
    )
    parser.add_argument("--version", action="version", version=f"{SERVER_NAME} {SERVER_VERSION}")

    return parser


def build_settings(args: argparse.Namespace) -> ServerSettings:
    """Environment settings with non-empty command-line values applied on top."""
    settings = ServerSettings.from_env()
    overrides = {
        "host": args.host,
        "port": args.port,
        "api_base_url": args.api_base_url,
        "log_level": args.log_level,
        "result_format": args.result_format,
        "cache_dir": args.cache_dir,
        "tool_timeout": args.tool_timeout,
    }
    overrides = {key: value for key, value in overrides.items() if value is not None}
    if not overrides:
        return settings
    return ServerSettings(**{**settings.model_dump(), **overrides})


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = create_argument_parser().parse_args(argv)
    settings = build_settings(args)
    setup_logging(settings.log_level)

    try:
        asyncio.run(serve(settings))
    except AuthenticationError as e:
        logger.error(f"Failed to initialize API client: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Server stopped by user")


if __name__ == "__main__":
    main()
