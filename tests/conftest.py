"""
Shared fixtures: every test gets its own preferences database and a fresh
process-wide registry, so nothing touches the real user data directory.
"""
import logging

import pytest

from savesettings.application.settings.persistence import PreferencesBackend, set_default_backend
from savesettings.shared.application.settings.settings_registry import (
    SettingsRegistry,
    reset_settings_registry,
)
from savesettings.utils.message import Log


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Point user data at tmp_path and forget process-wide state around each test."""
    monkeypatch.setenv("SAVESETTINGS_HOME", str(tmp_path / "home"))
    monkeypatch.setenv("SAVESETTINGS_DB_PATH", str(tmp_path / "home" / "preferences.db"))
    monkeypatch.setenv("SAVESETTINGS_SAVE_ON_EXIT", "0")
    reset_settings_registry()
    set_default_backend(None)
    yield
    reset_settings_registry()
    set_default_backend(None)


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "preferences.db")


@pytest.fixture
def backend(db_path):
    backend = PreferencesBackend.open(db_path)
    yield backend
    backend.close()


@pytest.fixture
def registry(backend):
    return SettingsRegistry(backend)


@pytest.fixture
def log_records(caplog):
    """caplog wired to the savesettings logger (which does not propagate)."""
    logger = Log.get_logger()
    logger.addHandler(caplog.handler)
    previous_level = logger.level
    logger.setLevel(logging.DEBUG)
    caplog.handler.setLevel(logging.DEBUG)
    yield caplog
    logger.removeHandler(caplog.handler)
    logger.setLevel(previous_level)


@pytest.fixture
def error_records(log_records):
    """Callable returning the ERROR-level records captured so far."""
    return lambda: [r for r in log_records.records if r.levelno >= logging.ERROR]
