"""Tests for settings loading."""

import pytest

from contextguard.config import AnalysisSettings, get_settings, reset_settings
from contextguard.constants import DEFAULT_BATCH_CONCURRENCY, MAX_SOURCE_BYTES
from contextguard.core.exceptions import ConfigurationError, InvalidConfigError


class TestAnalysisSettings:
    """Test AnalysisSettings construction and validation."""

    def test_defaults(self) -> None:
        """Test default settings with an empty environment."""
        settings = AnalysisSettings.from_env({})

        assert settings.enable_secret_detection is True
        assert settings.enable_business_logic_detection is True
        assert settings.enable_framework_detection is True
        assert settings.max_source_bytes == MAX_SOURCE_BYTES
        assert settings.batch_concurrency == DEFAULT_BATCH_CONCURRENCY
        assert settings.log_level == "INFO"
        assert settings.log_file is None
        assert settings.json_logs is False

    def test_from_env(self) -> None:
        """Test reading prefixed variables."""
        settings = AnalysisSettings.from_env(
            {
                "CONTEXTGUARD_ENABLE_FRAMEWORK_DETECTION": "off",
                "CONTEXTGUARD_MAX_SOURCE_BYTES": "2048",
                "CONTEXTGUARD_BATCH_CONCURRENCY": "8",
                "CONTEXTGUARD_LOG_LEVEL": "debug",
                "CONTEXTGUARD_LOG_FILE": "/tmp/decisions.log",
                "CONTEXTGUARD_JSON_LOGS": "Yes",
                "UNRELATED": "ignored",
            }
        )

        assert settings.enable_framework_detection is False
        assert settings.max_source_bytes == 2048
        assert settings.batch_concurrency == 8
        assert settings.log_level == "DEBUG"
        assert settings.log_file == "/tmp/decisions.log"
        assert settings.json_logs is True

    @pytest.mark.parametrize("raw", ["1", "true", "TRUE", " on "])
    def test_true_values(self, raw: str) -> None:
        """Test accepted spellings of true."""
        settings = AnalysisSettings.from_env({"CONTEXTGUARD_JSON_LOGS": raw})
        assert settings.json_logs is True

    def test_invalid_bool(self) -> None:
        """Test that a non-boolean switch is rejected with its variable name."""
        with pytest.raises(InvalidConfigError) as exc_info:
            AnalysisSettings.from_env({"CONTEXTGUARD_ENABLE_SECRET_DETECTION": "maybe"})

        assert exc_info.value.setting == "CONTEXTGUARD_ENABLE_SECRET_DETECTION"

    @pytest.mark.parametrize(
        "key,raw,setting",
        [
            ("CONTEXTGUARD_MAX_SOURCE_BYTES", "0", "max_source_bytes"),
            ("CONTEXTGUARD_MAX_SOURCE_BYTES", "lots", "max_source_bytes"),
            ("CONTEXTGUARD_BATCH_CONCURRENCY", "0", "batch_concurrency"),
            ("CONTEXTGUARD_LOG_LEVEL", "verbose", "log_level"),
        ],
    )
    def test_invalid_values(self, key: str, raw: str, setting: str) -> None:
        """Test that out-of-range values become configuration errors."""
        with pytest.raises(InvalidConfigError) as exc_info:
            AnalysisSettings.from_env({key: raw})

        assert exc_info.value.setting == setting
        assert isinstance(exc_info.value, ConfigurationError)


class TestGlobalSettings:
    """Test the cached global settings."""

    def test_cached_until_reset(self, monkeypatch) -> None:
        """Test that settings are read once and re-read after reset."""
        monkeypatch.setenv("CONTEXTGUARD_BATCH_CONCURRENCY", "3")
        first = get_settings()
        monkeypatch.setenv("CONTEXTGUARD_BATCH_CONCURRENCY", "5")

        assert get_settings() is first
        assert first.batch_concurrency == 3

        reset_settings()
        assert get_settings().batch_concurrency == 5
