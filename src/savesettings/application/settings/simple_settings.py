"""
Simple Settings

Lightweight alternative to the DTO-based settings instances for small
projects: each setting is a single key with a registered default, stored
as its own preferences entry.

Usage:
    simple = SimpleSettingsManager(backend=backend)
    simple.register_setting("graphics.vsync", True)
    simple.load_all_settings()

    simple.set_setting("graphics.vsync", False)
    simple.save_all_settings()
"""
from typing import Any, Dict, Optional, Type, TypeVar, TYPE_CHECKING

from savesettings.application.events.settings_event import SettingsEvent
from savesettings.application.settings.base_settings import clamp01
from savesettings.application.settings.errors import PreferencesDecodeError
from savesettings.application.settings.persistence import PreferencesBackend, get_default_backend
from savesettings.utils.message import Log

if TYPE_CHECKING:
    from savesettings.shared.application.settings.settings_registry import SettingsRegistry


T = TypeVar('T')

_SUPPORTED_TYPES = (bool, int, float, str)


class SimpleSettingsManager:
    """
    Key/value settings with registered defaults.

    Supported value types are bool, int, float and str. Exposes
    save()/load()/reset_to_default() so it can sit in a SettingsRegistry
    next to the DTO-based managers.
    """

    def __init__(
        self,
        backend: Optional[PreferencesBackend] = None,
        registry: Optional['SettingsRegistry'] = None,
    ):
        """
        Args:
            backend: Preferences backend (defaults to the registry's, then the process-wide one)
            registry: If given, this manager registers itself there
        """
        if backend is None:
            backend = registry.backend if registry is not None else get_default_backend()
        self._backend = backend
        self._registry = registry
        self._settings: Dict[str, Any] = {}
        self._defaults: Dict[str, Any] = {}
        self.settings_changed = SettingsEvent("settings_changed")

        if self._registry is not None:
            self._registry.register_manager(self)

    @property
    def name(self) -> str:
        return type(self).__name__

    # =========================================================================
    # Registration
    # =========================================================================

    def register_setting(self, key: str, default_value: Any) -> None:
        """
        Declare a setting and its default. The current value is left alone
        if the key is already known.

        Raises:
            TypeError: If the default is not bool, int, float or str
        """
        if not isinstance(default_value, _SUPPORTED_TYPES):
            raise TypeError(
                f"SimpleSettingsManager: Unsupported type {type(default_value).__name__} for '{key}'"
            )
        self._defaults[key] = default_value
        self._settings.setdefault(key, default_value)

    def is_registered(self, key: str) -> bool:
        return key in self._defaults

    # =========================================================================
    # Access
    # =========================================================================

    def get_setting(self, key: str, expected_type: Optional[Type[T]] = None) -> Optional[T]:
        """
        Current value for key, falling back to its default, then to None.
        """
        if key in self._settings:
            value = self._settings[key]
        else:
            value = self._defaults.get(key)

        if expected_type is not None and value is not None and not isinstance(value, expected_type):
            raise TypeError(
                f"SimpleSettingsManager: '{key}' holds {type(value).__name__}, not {expected_type.__name__}"
            )
        return value

    def set_setting(self, key: str, value: Any) -> None:
        """Set a value and notify listeners. Not persisted until save_all_settings()."""
        self._settings[key] = value
        self.settings_changed.emit(self)

    def get_all(self) -> Dict[str, Any]:
        return dict(self._settings)

    # =========================================================================
    # Persistence
    # =========================================================================

    def load_all_settings(self) -> None:
        """
        Read every registered key from storage. Missing entries keep their
        default; unreadable or wrongly typed entries are logged and reset to
        their default.
        """
        for key, default_value in self._defaults.items():
            try:
                value = self._backend.get_value(key, default_value)
            except PreferencesDecodeError as e:
                Log.error(f"SimpleSettingsManager: {e}. Using default.")
                value = default_value

            value = self._coerce(key, value, default_value)
            self._settings[key] = value

        self.settings_changed.emit(self)

    def save_all_settings(self) -> None:
        for key, value in self._settings.items():
            self._backend.put_value(key, value)

    def reset_to_defaults(self) -> None:
        self._settings = dict(self._defaults)
        self.settings_changed.emit(self)

    def _coerce(self, key: str, value: Any, default_value: Any) -> Any:
        if isinstance(default_value, bool):
            if isinstance(value, bool):
                return value
        elif isinstance(default_value, float):
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                return float(value)
        elif isinstance(value, type(default_value)) and not isinstance(value, bool):
            return value
        Log.warning(
            f"SimpleSettingsManager: Stored value for '{key}' has type {type(value).__name__}, "
            f"expected {type(default_value).__name__}. Using default."
        )
        return default_value

    # Registry surface
    def save(self) -> None:
        self.save_all_settings()

    def load(self) -> None:
        self.load_all_settings()

    def reset_to_default(self) -> None:
        self.reset_to_defaults()

    def destroy(self) -> None:
        if self._registry is not None:
            self._registry.unregister_manager(self)
        self.settings_changed.clear()


class SimpleAudioSettings:
    """
    Audio volume accessors on top of a SimpleSettingsManager.
    Volumes default to 1.0 and are clamped to [0, 1] on write.
    """

    MASTER_VOLUME_KEY = "audio.master_volume"
    BGM_VOLUME_KEY = "audio.bgm_volume"
    SFX_VOLUME_KEY = "audio.sfx_volume"

    def __init__(self, manager: SimpleSettingsManager):
        self._manager = manager
        for key in (self.MASTER_VOLUME_KEY, self.BGM_VOLUME_KEY, self.SFX_VOLUME_KEY):
            manager.register_setting(key, 1.0)

    @property
    def master_volume(self) -> float:
        return self._manager.get_setting(self.MASTER_VOLUME_KEY, float)

    @master_volume.setter
    def master_volume(self, value: float):
        self._manager.set_setting(self.MASTER_VOLUME_KEY, clamp01(value))

    @property
    def bgm_volume(self) -> float:
        return self._manager.get_setting(self.BGM_VOLUME_KEY, float)

    @bgm_volume.setter
    def bgm_volume(self, value: float):
        self._manager.set_setting(self.BGM_VOLUME_KEY, clamp01(value))

    @property
    def sfx_volume(self) -> float:
        return self._manager.get_setting(self.SFX_VOLUME_KEY, float)

    @sfx_volume.setter
    def sfx_volume(self, value: float):
        self._manager.set_setting(self.SFX_VOLUME_KEY, clamp01(value))

    def get_actual_bgm_volume(self) -> float:
        return self.master_volume * self.bgm_volume

    def get_actual_sfx_volume(self) -> float:
        return self.master_volume * self.sfx_volume
