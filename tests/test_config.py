import logging
from pathlib import Path

import pydantic
import pytest

from devhelper.config import EngineSettings, Environment, LogLevel
from devhelper.utils.logger import setup_logging


def test_defaults():
    settings = EngineSettings()
    assert settings.TIMEZONE == "UTC"
    assert settings.STORE_WRITE_TIMEOUT_SECONDS == 5.0
    assert settings.HISTORY_CAPACITY == 100
    assert settings.ACHIEVEMENT_RECHECK_MINUTES == 5
    assert settings.store_path == Path("data") / "devhelper_state.json"


def test_settings_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("DEVHELPER_TIMEZONE", "America/Sao_Paulo")
    monkeypatch.setenv("DEVHELPER_ENVIRONMENT", "production")
    monkeypatch.setenv("DEVHELPER_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("DEVHELPER_HISTORY_CAPACITY", "25")
    monkeypatch.setenv("DEVHELPER_LOG_LEVEL", "DEBUG")

    settings = EngineSettings()

    assert settings.TIMEZONE == "America/Sao_Paulo"
    assert settings.ENVIRONMENT == Environment.PRODUCTION
    assert settings.is_production()
    assert settings.store_path == tmp_path / "devhelper_state.json"
    assert settings.HISTORY_CAPACITY == 25
    assert settings.LOG_LEVEL == LogLevel.DEBUG


def test_unknown_timezone_rejected():
    with pytest.raises(pydantic.ValidationError):
        EngineSettings(TIMEZONE="Mars/Olympus_Mons")


def test_write_timeout_must_be_positive():
    with pytest.raises(pydantic.ValidationError):
        EngineSettings(STORE_WRITE_TIMEOUT_SECONDS=0)


def test_logging_config(tmp_path):
    console_only = EngineSettings().get_logging_config()
    assert console_only["loggers"][""]["handlers"] == ["console"]
    assert "file" not in console_only["handlers"]

    with_file = EngineSettings(LOG_TO_FILE=True, LOG_DIR=tmp_path).get_logging_config()
    assert with_file["loggers"][""]["handlers"] == ["console", "file"]
    assert with_file["handlers"]["file"]["filename"] == str(tmp_path / "devhelper_development.log")
    assert with_file["loggers"]["apscheduler"]["level"] == "WARNING"


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


def test_setup_logging_with_file(tmp_path, restore_root_logger):
    settings = EngineSettings(LOG_TO_FILE=True, LOG_DIR=tmp_path / "logs", LOG_LEVEL="WARNING")

    setup_logging(settings)
    logging.getLogger("devhelper.tests").warning("store unavailable")
    for handler in restore_root_logger.handlers:
        handler.flush()

    log_file = tmp_path / "logs" / "devhelper_development.log"
    assert "store unavailable" in log_file.read_text(encoding="utf-8")
    assert restore_root_logger.level == logging.WARNING
