"""
Tests for centralized configuration.
"""
import pytest
import os
from dashlens.core.config import Settings, get_settings, reload_settings

ENV_KEYS = ["MAX_FILE_SIZE_MB", "RATE_LIMIT_PER_MINUTE", "MAX_DATA_SOURCES", "LOG_LEVEL"]


@pytest.fixture
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    yield monkeypatch
    reload_settings()


@pytest.mark.unit
def test_settings_defaults(clean_env):
    """Test that settings have sensible defaults."""
    settings = Settings.from_env()

    assert settings.max_file_size_mb == 20
    assert settings.rate_limit_per_minute == 30
    assert settings.request_timeout_seconds == 60
    assert settings.max_data_sources == 50
    assert settings.log_level == "INFO"


@pytest.mark.unit
def test_settings_from_env(clean_env):
    """Test loading settings from environment variables."""
    clean_env.setenv("MAX_FILE_SIZE_MB", "100")
    clean_env.setenv("RATE_LIMIT_PER_MINUTE", "20")
    clean_env.setenv("MAX_DATA_SOURCES", "5")
    clean_env.setenv("LOG_LEVEL", "debug")

    # Reload to pick up new env vars
    settings = reload_settings()

    assert settings.max_file_size_mb == 100
    assert settings.rate_limit_per_minute == 20
    assert settings.max_data_sources == 5
    assert settings.log_level == "DEBUG"


@pytest.mark.unit
def test_settings_validation():
    """Test that settings validate input ranges."""
    with pytest.raises(ValueError):
        Settings(max_file_size_mb=0)  # Below minimum

    with pytest.raises(ValueError):
        Settings(max_file_size_mb=2000)  # Above maximum

    with pytest.raises(ValueError):
        Settings(max_data_sources=0)

    with pytest.raises(ValueError):
        Settings(log_level="INVALID")  # Invalid log level


@pytest.mark.unit
def test_settings_properties():
    """Test computed properties."""
    settings = Settings(max_file_size_mb=50, allowed_origins="http://a.test, ,http://b.test")

    assert settings.max_file_size_bytes == 50 * 1024 * 1024
    assert settings.allowed_origins_list == ["http://a.test", "http://b.test"]


@pytest.mark.unit
def test_settings_singleton():
    """Test that get_settings returns singleton."""
    settings1 = get_settings()
    settings2 = get_settings()

    assert settings1 is settings2
