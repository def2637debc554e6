"""
Tests for settings and logging setup.
"""
import logging

import pytest

from flowcanvas.core.config import Settings, get_settings
from flowcanvas.core.logging import get_logger, setup_logging


@pytest.fixture
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


class TestSettings:

    def test_defaults(self):
        settings = Settings()

        assert settings.LAYOUT_CROSSING_SWEEPS == 4
        assert settings.BLOCK_SAVE_ON_ERRORS is True
        assert settings.LOG_FILE is None

    def test_environment_prefix(self, monkeypatch, fresh_settings):
        monkeypatch.setenv("FLOWCANVAS_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("FLOWCANVAS_LAYOUT_CROSSING_SWEEPS", "2")
        monkeypatch.setenv("FLOWCANVAS_BLOCK_SAVE_ON_ERRORS", "false")

        settings = get_settings()

        assert settings.LOG_LEVEL == "DEBUG"
        assert settings.LAYOUT_CROSSING_SWEEPS == 2
        assert settings.BLOCK_SAVE_ON_ERRORS is False

    def test_settings_are_cached(self, fresh_settings):
        assert get_settings() is get_settings()


class TestLogging:

    def test_log_file(self, tmp_path, restore_root_logger):
        log_file = tmp_path / "logs" / "flowcanvas.log"

        setup_logging(Settings(LOG_FILE=str(log_file), LOG_LEVEL="debug"))
        get_logger("flowcanvas.tests").debug("layout ready")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert logging.getLogger().level == logging.DEBUG
        assert "layout ready" in log_file.read_text()

    def test_unknown_level_falls_back_to_info(self, restore_root_logger):
        setup_logging(Settings(LOG_LEVEL="chatty"))
        assert logging.getLogger().level == logging.INFO
