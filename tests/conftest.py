"""Pytest configuration and fixtures for omo-config tests."""

import pytest

from omo_config.settings import clear_settings_cache, get_path_settings


@pytest.fixture(autouse=True)
def isolate_config_dir(tmp_path_factory, monkeypatch):
    """Point every path setting at a fresh temp directory.

    Keeps tests away from the real ~/.config/opencode, including the host
    opencode.json that supplies the system default model.
    """
    config_dir = tmp_path_factory.mktemp("opencode_config")
    monkeypatch.setenv("OMO_CONFIG_DIR", str(config_dir))
    monkeypatch.delenv("OMO_CONFIG_MODELS_COMMAND", raising=False)
    monkeypatch.delenv("OMO_CONFIG_RECOMMENDATION_LIMIT", raising=False)
    clear_settings_cache()
    yield config_dir
    clear_settings_cache()


@pytest.fixture
def paths():
    """Path settings for the isolated config directory."""
    return get_path_settings()


@pytest.fixture
def available_models():
    """A small catalog spanning three providers."""
    return [
        "anthropic/claude-opus-4-5",
        "anthropic/claude-sonnet-4-5",
        "openai/gpt-5.2",
        "google/gemini-3-pro",
        "google/gemini-3-flash",
    ]
