"""
Tests for environment configuration loading.
"""

import pytest
from pydantic import ValidationError

from chatroutes.core.config import ClientConfig, DEFAULT_BASE_URL
from chatroutes.core.env_config import (
    ChatRoutesSettings,
    config_summary,
    load_from_env,
    mask_secret,
)
from chatroutes.core.logging import LogFormat, LogLevel

ENV_VARS = [
    "API_KEY", "BASE_URL", "TIMEOUT", "RETRY_ATTEMPTS", "RETRY_DELAY",
    "LOG_ENABLED", "LOG_LEVEL", "LOG_FORMAT", "LOG_ENABLE_CONSOLE",
    "LOG_ENABLE_FILE", "LOG_FILE_PATH", "LOG_ENABLE_CORRELATION_ID",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """No CHATROUTES_* variables and no stray .env in the working directory."""
    for name in ENV_VARS:
        monkeypatch.delenv(f"CHATROUTES_{name}", raising=False)
    monkeypatch.chdir(tmp_path)


class TestLoadFromEnv:
    """Test load_from_env function."""

    def test_load_with_defaults(self):
        config = load_from_env()
        assert isinstance(config, ClientConfig)
        assert config.api_key is None
        assert config.base_url == DEFAULT_BASE_URL
        assert config.timeout == 30.0
        assert config.retry_attempts == 3
        assert config.logging is None

    def test_load_from_environment(self, monkeypatch):
        monkeypatch.setenv("CHATROUTES_API_KEY", "cr_live_abcdef123456")
        monkeypatch.setenv("CHATROUTES_TIMEOUT", "60")
        monkeypatch.setenv("CHATROUTES_RETRY_ATTEMPTS", "5")
        monkeypatch.setenv("CHATROUTES_RETRY_DELAY", "0.5")

        config = load_from_env()

        assert config.api_key == "cr_live_abcdef123456"
        assert config.timeout == 60.0
        assert config.retry_attempts == 5
        assert config.retry_delay == 0.5

    def test_load_from_env_file(self, tmp_path):
        env_file = tmp_path / ".env.staging"
        env_file.write_text(
            "CHATROUTES_BASE_URL=https://staging.chatroutes.test/\n"
            "CHATROUTES_RETRY_ATTEMPTS=0\n"
        )

        config = load_from_env(env_file=str(env_file))

        assert config.base_url == "https://staging.chatroutes.test"
        assert config.retry_attempts == 0

    def test_default_env_file(self, tmp_path):
        (tmp_path / ".env").write_text("CHATROUTES_TIMEOUT=12\n")
        assert load_from_env().timeout == 12.0

    def test_environment_beats_env_file(self, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text("CHATROUTES_TIMEOUT=12\n")
        monkeypatch.setenv("CHATROUTES_TIMEOUT", "20")
        assert load_from_env().timeout == 20.0

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("CHATROUTES_TIMEOUT", "20")
        config = load_from_env(timeout=45, base_url="https://override.test")
        assert config.timeout == 45
        assert config.base_url == "https://override.test"

    def test_unknown_override(self):
        with pytest.raises(TypeError, match="timeout_connect"):
            load_from_env(timeout_connect=5)

    def test_logging_enabled(self, monkeypatch, tmp_path):
        monkeypatch.setenv("CHATROUTES_LOG_ENABLED", "true")
        monkeypatch.setenv("CHATROUTES_LOG_LEVEL", "debug")
        monkeypatch.setenv("CHATROUTES_LOG_FORMAT", "JSON")
        monkeypatch.setenv("CHATROUTES_LOG_ENABLE_FILE", "true")
        monkeypatch.setenv("CHATROUTES_LOG_FILE_PATH", str(tmp_path / "chatroutes.log"))

        config = load_from_env()

        assert config.logging is not None
        assert config.logging.level is LogLevel.DEBUG
        assert config.logging.format is LogFormat.JSON
        assert config.logging.enable_file is True

    def test_invalid_environment(self, monkeypatch):
        monkeypatch.setenv("CHATROUTES_TIMEOUT", "-1")
        with pytest.raises(ValidationError):
            load_from_env()


class TestChatRoutesSettings:
    """Validation of individual settings."""

    def test_short_api_key_rejected(self):
        with pytest.raises(ValidationError):
            ChatRoutesSettings(api_key="short")

    def test_blank_api_key_is_none(self):
        assert ChatRoutesSettings(api_key="   ").api_key is None

    def test_base_url_scheme(self):
        with pytest.raises(ValidationError):
            ChatRoutesSettings(base_url="api.chatroutes.com")

    def test_retry_attempts_bounds(self):
        with pytest.raises(ValidationError):
            ChatRoutesSettings(retry_attempts=11)
        with pytest.raises(ValidationError):
            ChatRoutesSettings(retry_attempts=-1)

    def test_file_logging_requires_path(self):
        with pytest.raises(ValidationError):
            ChatRoutesSettings(log_enable_file=True)


class TestSecrets:
    """mask_secret and config_summary."""

    def test_mask_secret(self):
        assert mask_secret("cr_live_abcdef123456") == "cr_l***3456"
        assert mask_secret("short") == "***"
        assert mask_secret("") == ""

    def test_summary_masks_api_key(self):
        config = ClientConfig(api_key="cr_live_abcdef123456", headers={"X-Team": "research"})

        summary = config_summary(config)

        assert "cr_live_abcdef123456" not in summary
        assert "cr_l***3456" in summary
        assert "X-Team" in summary
        assert "logging: disabled" in summary

    def test_summary_without_key(self):
        assert "(not set)" in config_summary(ClientConfig())
