"""Tests for configuration module."""

import json
import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from build_tracker.config import Settings, get_settings, print_settings_json


class TestSettings:
    """Test Settings class."""

    def test_default_settings(self) -> None:
        """Settings should have sensible defaults."""
        settings = Settings()

        assert "sqlite" in settings.db_url
        assert "build-tracker" in settings.db_url
        assert settings.log_level == "INFO"
        assert settings.artifact_filters == []
        assert settings.toggle_groups == {}
        assert settings.recent_limit == 20
        assert settings.request_timeout > 0

    def test_settings_from_env(self) -> None:
        """Settings should be loadable from environment variables."""
        with patch.dict(
            os.environ,
            {
                "BT_DB_URL": "sqlite:////tmp/bt-test.db",
                "BT_LOG_LEVEL": "DEBUG",
                "BT_RECENT_LIMIT": "5",
                "BT_API_URL": "http://tracker:9000",
            },
        ):
            settings = Settings()
            assert settings.db_url == "sqlite:////tmp/bt-test.db"
            assert settings.log_level == "DEBUG"
            assert settings.recent_limit == 5
            assert settings.api_url == "http://tracker:9000"

    def test_dashboard_settings_from_json_env(self) -> None:
        """List and mapping settings should be parsed from JSON."""
        with patch.dict(
            os.environ,
            {
                "BT_ARTIFACT_FILTERS": r'["\\.map$", "^loader"]',
                "BT_TOGGLE_GROUPS": '{"app": ["main", "runtime"]}',
            },
        ):
            settings = Settings()
            assert settings.artifact_filters == [r"\.map$", "^loader"]
            assert settings.toggle_groups == {"app": ["main", "runtime"]}

    def test_invalid_recent_limit(self) -> None:
        """Recent limit must be positive."""
        with pytest.raises(ValidationError):
            Settings(recent_limit=0)

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ValidationError):
            Settings(log_level="VERBOSE")


class TestGetSettings:
    """Test get_settings function."""

    def test_returns_settings(self) -> None:
        assert isinstance(get_settings(), Settings)


class TestPrintSettingsJson:
    """Test print_settings_json function."""

    def test_is_valid_json(self) -> None:
        settings = Settings(artifact_filters=["x"], recent_limit=7)
        data = json.loads(print_settings_json(settings))
        assert data["artifact_filters"] == ["x"]
        assert data["recent_limit"] == 7
        assert "db_url" in data
