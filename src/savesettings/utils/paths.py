"""
Path management for savesettings

Handles platform-specific user data directories following standard conventions:
- macOS: ~/Library/Application Support/SaveSettings/
- Linux: ~/.local/share/savesettings/
- Windows: %APPDATA%/SaveSettings/

SAVESETTINGS_HOME overrides the base directory on every platform.
"""
import os
import sys
from pathlib import Path


APP_NAME = "SaveSettings"
HOME_ENV_VAR = "SAVESETTINGS_HOME"


def get_user_data_dir() -> Path:
    """
    Get platform-specific user data directory.

    Returns:
        Path to the directory where the preferences database and logs are stored.
    """
    override = os.getenv(HOME_ENV_VAR)
    if override:
        user_data_dir = Path(override)
    elif sys.platform == "darwin":
        user_data_dir = Path.home() / "Library" / "Application Support" / APP_NAME
    elif sys.platform == "win32":
        user_data_dir = Path(os.getenv("APPDATA", Path.home() / "AppData" / "Roaming")) / APP_NAME
    else:
        user_data_dir = Path.home() / ".local" / "share" / APP_NAME.lower()

    user_data_dir.mkdir(parents=True, exist_ok=True)
    return user_data_dir


def get_logs_dir() -> Path:
    """Directory for log files (inside the user data directory)."""
    logs_dir = get_user_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    return logs_dir


def get_database_path(db_name: str = "preferences") -> Path:
    """
    Get path to the SQLite preferences database.

    Args:
        db_name: Name of database file (without extension)
    """
    return get_user_data_dir() / f"{db_name}.db"
