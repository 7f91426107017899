"""
Unit tests for application configuration loading.
"""

import json

import pytest

from noisesurvey.bootstrap.config import (
    NoiseSurveyConfig,
    ValidationConfig,
    get_config,
    load_config,
    reset_config,
)


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    for name in (
        "NOISESURVEY_ENVIRONMENT",
        "NOISESURVEY_DEBUG",
        "NOISESURVEY_NEAR_EXPIRY_DAYS",
        "NOISESURVEY_DRIFT_LIMIT_DB",
        "NOISESURVEY_API_PORT",
        "NOISESURVEY_API_CORS_ORIGINS",
        "NOISESURVEY_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


class TestDefaults:
    """Tests for default configuration values."""

    def test_validation_defaults(self):
        config = ValidationConfig()
        assert config.near_expiry_days == 30
        assert config.certificate_validity_years == 1
        assert config.drift_limit_db == 1.0
        assert config.drift_warning_db == 0.5
        assert config.retest_interval_years == 1

    def test_root_defaults(self):
        config = NoiseSurveyConfig()
        assert config.environment == "development"
        assert config.api.port == 8000
        assert config.logging.level == "INFO"
        assert set(config.to_dict()) == {"environment", "debug", "version", "validation", "api", "logging"}


class TestEnvironment:
    """Tests for environment variable overrides."""

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("NOISESURVEY_ENVIRONMENT", "production")
        monkeypatch.setenv("NOISESURVEY_DEBUG", "true")
        monkeypatch.setenv("NOISESURVEY_NEAR_EXPIRY_DAYS", "60")
        monkeypatch.setenv("NOISESURVEY_API_PORT", "9000")
        monkeypatch.setenv("NOISESURVEY_API_CORS_ORIGINS", "https://a.example,https://b.example")

        config = NoiseSurveyConfig.from_env()
        assert config.environment == "production"
        assert config.debug is True
        assert config.validation.near_expiry_days == 60
        assert config.api.port == 9000
        assert config.api.cors_origins == ["https://a.example", "https://b.example"]


class TestConfigFile:
    """Tests for JSON config files."""

    def test_file_overrides_sections(self, tmp_path):
        path = tmp_path / "noisesurvey.json"
        path.write_text(json.dumps({
            "environment": "staging",
            "validation": {"near_expiry_days": 14, "drift_limit_db": 0.8},
            "logging": {"level": "DEBUG"},
        }))

        config = NoiseSurveyConfig.from_file(str(path))
        assert config.environment == "staging"
        assert config.validation.near_expiry_days == 14
        assert config.validation.drift_limit_db == 0.8
        assert config.logging.level == "DEBUG"
        assert config.api.port == 8000

    def test_unknown_keys_ignored(self, tmp_path, caplog):
        path = tmp_path / "noisesurvey.json"
        path.write_text(json.dumps({"api": {"bogus": 1}}))
        config = NoiseSurveyConfig.from_file(str(path))
        assert not hasattr(config.api, "bogus")
        assert "api.bogus" in caplog.text

    def test_missing_file_falls_back(self, tmp_path):
        config = NoiseSurveyConfig.from_file(str(tmp_path / "absent.json"))
        assert config.environment == "development"


class TestGlobalConfig:
    """Tests for the process-wide configuration."""

    def test_load_and_get(self, tmp_path):
        path = tmp_path / "noisesurvey.json"
        path.write_text(json.dumps({"environment": "test"}))
        loaded = load_config(str(path))
        assert get_config() is loaded
        assert get_config().environment == "test"

    def test_get_loads_once(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        first = get_config()
        assert get_config() is first
        reset_config()
        assert get_config() is not first
