"""Shared test fixtures and configuration."""

import logging

import pytest


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep a developer's real token out of config tests."""
    monkeypatch.delenv("DESKTOP_DYE_HA_TOKEN", raising=False)


@pytest.fixture
def reset_logger():
    """Remove handlers installed on the desktop_dye logger by setup_logging()."""
    logger = logging.getLogger("desktop_dye")
    logger.handlers.clear()
    logger.setLevel(logging.WARNING)
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.WARNING)


@pytest.fixture
def valid_config_data():
    """Minimal config mapping that passes validation."""
    return {
        "ha_endpoint": "http://homeassistant.local:8123",
        "ha_token": "secret-token",
        "ha_target_entity_id": "input_text.desktop_dye_colors",
    }
