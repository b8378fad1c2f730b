"""
Tests for configuration management

Tests cover:
- Configuration loading and defaults
- Dot-path updates and validation
- Email list editing
- Credential checks
"""
import json

import pytest

from inkpost.utils.config import AppConfig, ConfigManager, parse_email_list
from inkpost.utils.errors import (
    InvalidConfigError,
    MissingConfigError,
    MissingCredentialsError,
)


@pytest.fixture
def config_path(tmp_path):
    return tmp_path / "config.json"


class TestConfigManagerInitialization:
    """Tests for ConfigManager initialization"""

    def test_missing_file_uses_defaults(self, config_path):
        """Test defaults are used when no file exists"""
        manager = ConfigManager(config_path)
        assert manager.config == AppConfig()
        assert not config_path.exists()

    def test_default_values(self, config_path):
        """Test the default identity and logging settings"""
        config = ConfigManager(config_path).config
        assert config.identity.footer_color == "#179299"
        assert config.identity.emails == []
        assert config.logging.log_level == "WARNING"

    def test_loads_saved_values(self, config_path):
        """Test values are read from the JSON file"""
        config_path.write_text(
            json.dumps({"smtp_username": "ada@example.com", "identity": {"name": "Ada"}}),
            encoding="utf-8",
        )

        config = ConfigManager(config_path).config
        assert config.smtp_username == "ada@example.com"
        assert config.identity.name == "Ada"

    def test_invalid_json_raises(self, config_path):
        """Test a corrupt file is reported"""
        config_path.write_text("{oops", encoding="utf-8")

        with pytest.raises(InvalidConfigError):
            ConfigManager(config_path)

    def test_schema_mismatch_raises(self, config_path):
        """Test invalid field types are reported"""
        config_path.write_text(json.dumps({"identity": {"emails": "nope"}}), encoding="utf-8")

        with pytest.raises(InvalidConfigError):
            ConfigManager(config_path)


class TestSetConfig:
    """Tests for updating settings"""

    def test_set_and_persist(self, config_path):
        """Test a nested key is updated and saved"""
        manager = ConfigManager(config_path)
        manager.set_config("identity.name", "Ada Lovelace")

        assert manager.get_config("identity.name") == "Ada Lovelace"
        reloaded = ConfigManager(config_path)
        assert reloaded.config.identity.name == "Ada Lovelace"

    def test_set_without_persist(self, config_path):
        """Test updates can stay in memory"""
        manager = ConfigManager(config_path)
        manager.set_config("worker_url", "https://worker.example.com", persist=False)

        assert manager.config.worker_url == "https://worker.example.com"
        assert not config_path.exists()

    def test_unknown_key(self, config_path):
        """Test unknown keys are rejected"""
        manager = ConfigManager(config_path)

        with pytest.raises(MissingConfigError):
            manager.set_config("identity.nickname", "x")
        with pytest.raises(MissingConfigError):
            manager.set_config("nothing.here", "x")

    def test_invalid_log_level(self, config_path):
        """Test values are validated before being applied"""
        manager = ConfigManager(config_path)

        with pytest.raises(InvalidConfigError):
            manager.set_config("logging.log_level", "LOUD")
        assert manager.config.logging.log_level == "WARNING"

    def test_log_level_normalised(self, config_path):
        """Test log levels are upper-cased"""
        manager = ConfigManager(config_path)
        manager.set_config("logging.log_level", "debug")
        assert manager.config.logging.log_level == "DEBUG"

    def test_get_missing_returns_default(self, config_path):
        """Test the default is returned for unknown keys"""
        assert ConfigManager(config_path).get_config("identity.nope", "x") == "x"

    def test_reset_to_defaults(self, config_path):
        """Test reset restores and saves defaults"""
        manager = ConfigManager(config_path)
        manager.set_config("smtp_username", "ada@example.com")

        manager.reset_to_defaults()

        assert manager.config == AppConfig()
        assert ConfigManager(config_path).config.smtp_username == ""


class TestEmailList:
    """Tests for editing the identity email list"""

    def test_parse_email_list(self):
        """Test splitting drops blanks and whitespace"""
        assert parse_email_list(" a@x.com, ,b@y.org,, ") == ["a@x.com", "b@y.org"]
        assert parse_email_list("") == []

    def test_set_emails_commits_list(self, config_path):
        """Test the edit buffer is parsed once on commit"""
        manager = ConfigManager(config_path)
        emails = manager.set_emails("a@x.com, b@y.org")

        assert emails == ["a@x.com", "b@y.org"]
        assert ConfigManager(config_path).config.identity.emails == ["a@x.com", "b@y.org"]

    def test_set_config_accepts_comma_string(self, config_path):
        """Test the emails key also accepts a comma separated string"""
        manager = ConfigManager(config_path)
        manager.set_config("identity.emails", "a@x.com,a@x.com")
        assert manager.config.identity.emails == ["a@x.com", "a@x.com"]


class TestCredentialChecks:
    """Tests for the credential guards"""

    def test_smtp_credentials_required(self):
        """Test missing SMTP credentials raise"""
        with pytest.raises(MissingCredentialsError):
            AppConfig(smtp_username="ada@example.com").require_smtp_credentials()

    def test_worker_required(self):
        """Test a missing worker URL or secret raises"""
        with pytest.raises(MissingConfigError):
            AppConfig(worker_url="https://worker.example.com").require_worker()

    def test_complete_config_passes(self, app_config):
        """Test a complete config passes both guards"""
        app_config.require_smtp_credentials()
        app_config.require_worker()
