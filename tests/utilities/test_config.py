"""
Tests for application configuration.
"""

import pytest
from pydantic import ValidationError

from utilities.config import AppConfig


class TestAppConfig:
    """Test cases for AppConfig."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("PORT", raising=False)
        monkeypatch.delenv("CONFIG_SOURCE", raising=False)

        config = AppConfig(_env_file=None)

        assert config.port == 8080
        assert config.config_source == "env"
        assert config.log_level == "INFO"
        assert config.cors_origins == ["*"]

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("PORT", "9090")
        monkeypatch.setenv("STORE_DATABASE", "library")
        monkeypatch.setenv("CONFIG_SOURCE", "VAULT")

        config = AppConfig(_env_file=None)

        assert config.port == 9090
        assert config.store_database == "library"
        assert config.config_source == "vault"

    def test_log_level_normalized(self):
        assert AppConfig(_env_file=None, log_level="debug").log_level == "DEBUG"

    @pytest.mark.parametrize("field, value", [
        ("port", 0),
        ("port", 70000),
        ("log_level", "VERBOSE"),
        ("log_format", "xml"),
        ("config_source", "consul"),
    ])
    def test_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            AppConfig(_env_file=None, **{field: value})

    def test_secret_names(self):
        config = AppConfig(_env_file=None, secret_endpoint_name="prod/endpoint")

        names = config.secret_names()

        assert names["endpoint"] == "prod/endpoint"
        assert set(names) == {"endpoint", "access_key", "database", "collection"}
