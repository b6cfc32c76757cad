"""Tests for simplemail.config."""

import ssl
from dataclasses import FrozenInstanceError

import pytest

from simplemail.config import SmtpConfig, default_ssl_context
from simplemail.exceptions import ConfigurationError


class TestSmtpConfig:
    def test_credentials_enable_auth_and_ssl(self):
        config = SmtpConfig("smtp.example.com", 465, "u", "p")
        assert config.auth_enabled is True
        assert config.ssl_enabled is True

    @pytest.mark.parametrize("username", [None, ""])
    def test_no_credentials_means_plain_smtp(self, username):
        config = SmtpConfig("smtp.example.com", 25, username, None)
        assert config.auth_enabled is False
        assert config.ssl_enabled is False

    def test_immutable(self):
        config = SmtpConfig("smtp.example.com", 25)
        with pytest.raises(FrozenInstanceError):
            config.port = 26

    def test_password_not_in_repr(self):
        config = SmtpConfig("smtp.example.com", 465, "u", "hunter2")
        assert "hunter2" not in repr(config)

    def test_invalid_port(self):
        with pytest.raises(ConfigurationError):
            SmtpConfig("smtp.example.com", 70000)


class TestFromDict:
    def test_server_key(self):
        config = SmtpConfig.from_dict({"server": "smtp.domain.com", "port": 587})
        assert config.host == "smtp.domain.com"
        assert config.port == 587
        assert config.username is None

    def test_all_keys(self):
        config = SmtpConfig.from_dict(
            {"host": "smtp.domain.com", "port": 465, "username": "me", "password": "pw", "timeout": 5}
        )
        assert config == SmtpConfig("smtp.domain.com", 465, "me", "pw", 5)

    def test_missing_port(self):
        with pytest.raises(ConfigurationError, match="port"):
            SmtpConfig.from_dict({"host": "smtp.domain.com"})


class TestFromEnv:
    def test_reads_prefixed_variables(self, monkeypatch):
        monkeypatch.setenv("SIMPLEMAIL_SMTP_HOST", "smtp.env.com")
        monkeypatch.setenv("SIMPLEMAIL_SMTP_PORT", "465")
        monkeypatch.setenv("SIMPLEMAIL_SMTP_USERNAME", "envuser")
        monkeypatch.setenv("SIMPLEMAIL_SMTP_PASSWORD", "envpass")
        monkeypatch.setenv("SIMPLEMAIL_SMTP_TIMEOUT", "2.5")

        config = SmtpConfig.from_env()

        assert config == SmtpConfig("smtp.env.com", 465, "envuser", "envpass", 2.5)

    def test_explicit_mapping_and_prefix(self):
        config = SmtpConfig.from_env({"MAIL_HOST": "relay", "MAIL_PORT": "25"}, prefix="MAIL_")
        assert config.host == "relay"
        assert config.timeout is None
        assert config.auth_enabled is False

    def test_missing_variables(self):
        with pytest.raises(ConfigurationError, match="SIMPLEMAIL_SMTP_HOST"):
            SmtpConfig.from_env({"SIMPLEMAIL_SMTP_PORT": "25"})

    def test_non_numeric_port(self):
        with pytest.raises(ConfigurationError, match="Invalid numeric"):
            SmtpConfig.from_env({"SIMPLEMAIL_SMTP_HOST": "relay", "SIMPLEMAIL_SMTP_PORT": "smtp"})


def test_default_ssl_context_is_shared():
    context = default_ssl_context()
    assert isinstance(context, ssl.SSLContext)
    assert default_ssl_context() is context
