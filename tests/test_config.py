"""Tests for the config module."""

import json
import stat

import pytest

from meal_pricer.config import (
    DEFAULT_API_BASE_URL,
    DEFAULT_MAX_WORKERS,
    DEFAULT_TIMEOUT,
    get_access_token,
    load_settings,
    save_access_token,
)


@pytest.fixture
def temp_config_dir(tmp_path, monkeypatch):
    """Create a temporary config directory for testing."""
    config_dir = tmp_path / ".meal-pricer"
    token_file = config_dir / "token.json"

    monkeypatch.setattr("meal_pricer.config.CONFIG_DIR", config_dir)
    monkeypatch.setattr("meal_pricer.config.TOKEN_FILE", token_file)

    return token_file


@pytest.fixture
def clear_env(monkeypatch):
    """Clear any environment configuration."""
    for name in (
        "KROGER_ACCESS_TOKEN",
        "KROGER_API_BASE_URL",
        "KROGER_LOCATION_ID",
        "MEAL_PRICER_TIMEOUT",
        "MEAL_PRICER_MAX_WORKERS",
    ):
        monkeypatch.delenv(name, raising=False)


# ============================================================================
# Access Token Tests
# ============================================================================


class TestGetAccessToken:
    """Tests for get_access_token function."""

    def test_get_from_environment(self, temp_config_dir, monkeypatch):
        monkeypatch.setenv("KROGER_ACCESS_TOKEN", "env-token")
        assert get_access_token() == "env-token"

    def test_get_from_file(self, temp_config_dir, clear_env):
        temp_config_dir.parent.mkdir(parents=True)
        temp_config_dir.write_text(json.dumps({"access_token": "file-token"}))

        assert get_access_token() == "file-token"

    def test_env_takes_precedence_over_file(self, temp_config_dir, monkeypatch):
        monkeypatch.setenv("KROGER_ACCESS_TOKEN", "env-token")
        temp_config_dir.parent.mkdir(parents=True)
        temp_config_dir.write_text(json.dumps({"access_token": "file-token"}))

        assert get_access_token() == "env-token"

    def test_returns_none_when_missing(self, temp_config_dir, clear_env):
        assert get_access_token() is None

    def test_returns_none_for_invalid_file(self, temp_config_dir, clear_env):
        temp_config_dir.parent.mkdir(parents=True)
        temp_config_dir.write_text("not json")

        assert get_access_token() is None


class TestSaveAccessToken:
    """Tests for save_access_token function."""

    def test_creates_file(self, temp_config_dir, clear_env):
        save_access_token("saved-token")

        assert json.loads(temp_config_dir.read_text()) == {"access_token": "saved-token"}
        assert get_access_token() == "saved-token"

    def test_restrictive_permissions(self, temp_config_dir):
        save_access_token("saved-token")

        mode = temp_config_dir.stat().st_mode
        assert stat.S_IMODE(mode) == 0o600


# ============================================================================
# Settings Tests
# ============================================================================


class TestLoadSettings:
    """Tests for load_settings function."""

    def test_defaults(self, temp_config_dir, clear_env):
        settings = load_settings()

        assert settings.api_base_url == DEFAULT_API_BASE_URL
        assert settings.access_token is None
        assert settings.location_id is None
        assert settings.timeout == DEFAULT_TIMEOUT
        assert settings.max_workers == DEFAULT_MAX_WORKERS

    def test_from_environment(self, temp_config_dir, clear_env, monkeypatch):
        monkeypatch.setenv("KROGER_API_BASE_URL", "https://example.test/v1")
        monkeypatch.setenv("KROGER_ACCESS_TOKEN", "env-token")
        monkeypatch.setenv("KROGER_LOCATION_ID", "01400943")
        monkeypatch.setenv("MEAL_PRICER_TIMEOUT", "2.5")
        monkeypatch.setenv("MEAL_PRICER_MAX_WORKERS", "6")

        settings = load_settings()

        assert settings.api_base_url == "https://example.test/v1"
        assert settings.access_token == "env-token"
        assert settings.location_id == "01400943"
        assert settings.timeout == 2.5
        assert settings.max_workers == 6

    def test_invalid_numbers_fall_back(self, temp_config_dir, clear_env, monkeypatch):
        monkeypatch.setenv("MEAL_PRICER_TIMEOUT", "soon")
        monkeypatch.setenv("MEAL_PRICER_MAX_WORKERS", "0")

        settings = load_settings()

        assert settings.timeout == DEFAULT_TIMEOUT
        assert settings.max_workers == DEFAULT_MAX_WORKERS
