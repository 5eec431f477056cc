"""Tests for relkeep.core.settings."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from relkeep.core.settings import RelkeepSettings, get_settings


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for key in ["DATABASE_URL", "ECHO_SQL", "LOG_LEVEL", "LOG_JSON", "SERVICE_NAME"]:
        monkeypatch.delenv(f"RELKEEP_{key}", raising=False)


class TestRelkeepSettings:
    def test_defaults(self):
        settings = RelkeepSettings()
        assert settings.database_url == "sqlite:///relkeep.db"
        assert settings.echo_sql is False
        assert settings.log_level == "INFO"
        assert settings.log_json is None

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("RELKEEP_DATABASE_URL", "sqlite:///other.db")
        monkeypatch.setenv("RELKEEP_LOG_JSON", "true")
        settings = RelkeepSettings()
        assert settings.database_url == "sqlite:///other.db"
        assert settings.log_json is True

    def test_log_level_normalized(self, monkeypatch):
        monkeypatch.setenv("RELKEEP_LOG_LEVEL", "debug")
        assert RelkeepSettings().log_level == "DEBUG"

    def test_invalid_log_level(self, monkeypatch):
        monkeypatch.setenv("RELKEEP_LOG_LEVEL", "LOUD")
        with pytest.raises(PydanticValidationError):
            RelkeepSettings()

    def test_env_file(self, tmp_path):
        (tmp_path / ".env").write_text("RELKEEP_SERVICE_NAME=from-file\n")
        assert RelkeepSettings().service_name == "from-file"


class TestGetSettings:
    def test_cached(self):
        assert get_settings() is get_settings()

    def test_force_reload(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("RELKEEP_DATABASE_URL", "sqlite:///reloaded.db")
        reloaded = get_settings(_force_reload=True)
        assert reloaded is not first
        assert reloaded.database_url == "sqlite:///reloaded.db"
