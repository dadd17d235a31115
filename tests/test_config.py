#!/usr/bin/env python3
"""Tests for environment-driven settings and the CLI overrides."""

import pytest
from pydantic import ValidationError

from openapi_mcp_server.cli import build_settings, create_argument_parser
from openapi_mcp_server.config import ResultFormat, ServerSettings
from openapi_mcp_server.config.constants import DEFAULT_ALLOWED_ORIGINS


class TestDefaults:
    """Test default values."""

    def test_defaults(self):
        """Unset environment gives documented defaults."""
        settings = ServerSettings.from_env({})

        assert settings.api_base_url == "https://api.takaro.io"
        assert settings.host == "127.0.0.1"
        assert settings.port == 3000
        assert settings.allowed_origins == list(DEFAULT_ALLOWED_ORIGINS)
        assert settings.result_format is ResultFormat.RAW
        assert settings.cache_ttl == 86400
        assert settings.tool_timeout == 60
        assert settings.sse_keepalive_interval == 30
        assert not settings.has_credentials

    def test_default_origins_cover_localhost_variants(self):
        """http and https on localhost and 127.0.0.1, port 3000."""
        assert set(DEFAULT_ALLOWED_ORIGINS) == {
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "https://localhost:3000",
            "https://127.0.0.1:3000",
        }


class TestFromEnv:
    """Test environment parsing."""

    def test_generic_names(self):
        """Generic variable names are read."""
        settings = ServerSettings.from_env(
            {
                "API_BASE_URL": "https://api.example.com/",
                "API_USERNAME": "bot",
                "API_PASSWORD": "secret",
                "API_DOMAIN_ID": "d1",
                "PORT": "8080",
            }
        )

        assert settings.api_base_url == "https://api.example.com"
        assert settings.username == "bot"
        assert settings.domain_id == "d1"
        assert settings.port == 8080
        assert settings.has_credentials

    def test_legacy_names(self):
        """Legacy names work; the legacy health timeout is in milliseconds."""
        settings = ServerSettings.from_env(
            {
                "TAKARO_HOST": "https://legacy.example.com",
                "TAKARO_USERNAME": "bot",
                "TAKARO_PASSWORD": "secret",
                "TAKARO_HEALTH_TIMEOUT": "5000",
            }
        )

        assert settings.api_base_url == "https://legacy.example.com"
        assert settings.username == "bot"
        assert settings.health_timeout == 5

    def test_generic_name_wins(self):
        """When both are set the generic name takes precedence."""
        settings = ServerSettings.from_env({"API_BASE_URL": "https://new", "TAKARO_HOST": "https://old"})

        assert settings.api_base_url == "https://new"

    def test_origins_list(self):
        """Allowed origins are comma separated."""
        settings = ServerSettings.from_env({"MCP_ALLOWED_ORIGINS": "https://a.example, https://b.example,"})

        assert settings.allowed_origins == ["https://a.example", "https://b.example"]

    def test_result_format_and_timeout(self):
        """Result format parses; a zero timeout disables it."""
        settings = ServerSettings.from_env({"MCP_RESULT_FORMAT": "formatted", "MCP_TOOL_TIMEOUT": "0"})

        assert settings.result_format is ResultFormat.FORMATTED
        assert settings.tool_timeout is None

    def test_invalid_log_level(self):
        """Unknown log levels are rejected."""
        with pytest.raises(ValidationError):
            ServerSettings.from_env({"MCP_LOG_LEVEL": "chatty"})

    def test_log_level_is_normalised(self):
        """Log levels are case-insensitive."""
        assert ServerSettings.from_env({"MCP_LOG_LEVEL": "DEBUG"}).log_level == "debug"


class TestCliOverrides:
    """Test command-line overrides on top of the environment."""

    def test_flags_override_environment(self, monkeypatch):
        """Explicit flags win over environment values."""
        monkeypatch.setenv("PORT", "4000")
        monkeypatch.setenv("API_USERNAME", "bot")
        args = create_argument_parser().parse_args(["--port", "5000", "--result-format", "formatted"])

        settings = build_settings(args)

        assert settings.port == 5000
        assert settings.result_format is ResultFormat.FORMATTED
        assert settings.username == "bot"

    def test_no_flags_keeps_environment(self, monkeypatch):
        """Without flags the environment is used as-is."""
        monkeypatch.setenv("PORT", "4000")

        settings = build_settings(create_argument_parser().parse_args([]))

        assert settings.port == 4000
