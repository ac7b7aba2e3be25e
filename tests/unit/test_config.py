"""Test configuration module."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from projects_mcp.config import Settings, get_settings


def setup_module():
    """Clear settings cache before tests."""
    get_settings.cache_clear()


def teardown_module():
    """Clear settings cache after tests."""
    get_settings.cache_clear()


class TestSettings:
    """Test Settings class."""

    def setup_method(self):
        get_settings.cache_clear()

    def teardown_method(self):
        get_settings.cache_clear()

    def test_default_settings(self):
        """Test default settings values."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.app_name == "Projects MCP"
        assert settings.environment == "development"
        assert settings.github_token is None
        assert settings.github_api_url == "https://api.github.com"
        assert settings.github_graphql_url == "https://api.github.com/graphql"
        assert settings.github_api_version == "2022-11-28"
        assert settings.http_timeout == 30.0
        assert settings.field_resolution_page_size == 100
        assert settings.item_scan_max_pages == 5
        assert settings.item_scan_page_size == 50

    def test_settings_from_environment(self):
        """Test settings loaded from environment variables."""
        env_vars = {
            "GITHUB_TOKEN": "ghp_example",
            "GITHUB_API_URL": "https://ghe.example.com/api/v3/",
            "ITEM_SCAN_MAX_PAGES": "8",
            "LOG_LEVEL": "DEBUG",
        }
        with patch.dict(os.environ, env_vars, clear=True):
            settings = Settings(_env_file=None)

        assert settings.github_token == "ghp_example"
        assert settings.github_api_url == "https://ghe.example.com/api/v3"
        assert settings.item_scan_max_pages == 8
        assert settings.log_level == "DEBUG"

    @pytest.mark.parametrize(
        "name", ["field_resolution_page_size", "item_scan_max_pages", "item_scan_page_size"]
    )
    def test_non_positive_bounds_rejected(self, name):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{name: 0})

    def test_get_settings_cached(self):
        """Test that get_settings returns cached instance."""
        assert get_settings() is get_settings()
