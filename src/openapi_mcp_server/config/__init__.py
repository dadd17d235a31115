#!/usr/bin/env python3
# src/openapi_mcp_server/config/__init__.py
"""
Configuration package: environment-driven server settings.
"""

from .settings import ResultFormat, ServerSettings

__all__ = ["ResultFormat", "ServerSettings"]
