"""
Framework configuration.

Process-level knobs for the settings framework itself (where preferences
live, how much gets logged, whether the registry saves at exit). Values
come from SAVESETTINGS_* environment variables and fall back to the
dataclass defaults.
"""
import os
from dataclasses import dataclass
from typing import Mapping, Optional


_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_bool(raw: Optional[str], default: bool) -> bool:
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    return default


@dataclass
class FrameworkConfig:
    """
    Attributes:
        database_path: Preferences database file ("" = platform default location)
        log_level: "DEBUG", "INFO", "WARNING" or "ERROR"
        file_logging: Also write timestamped log files under the logs directory
        save_on_exit: Registry saves every registered manager at interpreter exit
    """
    database_path: str = ""
    log_level: str = "INFO"
    file_logging: bool = False
    save_on_exit: bool = True

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "FrameworkConfig":
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            database_path=env.get("SAVESETTINGS_DB_PATH", defaults.database_path),
            log_level=env.get("SAVESETTINGS_LOG_LEVEL", defaults.log_level).upper(),
            file_logging=_parse_bool(env.get("SAVESETTINGS_FILE_LOGGING"), defaults.file_logging),
            save_on_exit=_parse_bool(env.get("SAVESETTINGS_SAVE_ON_EXIT"), defaults.save_on_exit),
        )

    def resolve_database_path(self) -> str:
        """Database file to open, using the platform location when unset."""
        if self.database_path:
            return self.database_path
        from savesettings.utils.paths import get_database_path
        return str(get_database_path())
