"""
Base Settings Manager

Binds one SettingsInstance to a host object's lifetime and to the
settings registry.

Construction: initialize_settings() -> load() -> subscribe -> register
Destruction:  unsubscribe -> unregister -> dispose instance

Usage:
    class AudioSettingsManager(BaseSettingsManager[AudioSettings]):
        def initialize_settings(self):
            return AudioSettings(AudioSettingsData(), backend=self._backend)

    with AudioSettingsManager(registry=registry, backend=backend) as audio:
        audio.settings.master_volume = 0.4
        audio.save()
"""
from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, TypeVar, TYPE_CHECKING

from savesettings.application.events.settings_event import SettingsEvent
from savesettings.application.settings.errors import StorageKeyConflictError
from savesettings.application.settings.persistence import PreferencesBackend
from savesettings.utils.message import Log

if TYPE_CHECKING:
    from savesettings.application.settings.settings_instance import SettingsInstance
    from savesettings.shared.application.settings.settings_registry import SettingsRegistry


TSettings = TypeVar('TSettings', bound='SettingsInstance')


class BaseSettingsManager(ABC, Generic[TSettings]):
    """
    Abstract base class for all settings managers.

    Provides:
    - Ownership of exactly one settings instance (settings property)
    - Save/Load/Reset delegation (no-op when initialization failed)
    - A forwarded settings_changed event
    - Automatic registry registration for its lifetime

    Subclasses must implement initialize_settings().
    """

    def __init__(
        self,
        registry: Optional['SettingsRegistry'] = None,
        backend: Optional[PreferencesBackend] = None,
        auto_register: bool = True,
    ):
        """
        Args:
            registry: Registry to join (defaults to the process-wide registry)
            backend: Preferences backend handed to initialize_settings() via
                self._backend (defaults to the registry's backend)
            auto_register: Register on construction and unregister on destroy()
        """
        self.settings_changed = SettingsEvent(f"{type(self).__name__}.settings_changed")
        self._auto_register = auto_register
        self._destroyed = False

        if registry is None and (auto_register or backend is None):
            from savesettings.shared.application.settings.settings_registry import get_settings_registry
            registry = get_settings_registry()
        self._registry = registry
        self._backend = backend if backend is not None else registry.backend

        try:
            self._settings: Optional[TSettings] = self.initialize_settings()
        except StorageKeyConflictError as e:
            Log.error(f"{self.name}: {e}")
            self._settings = None
        if self._settings is None:
            Log.warning(f"{self.name}: Settings failed to initialize; save/load/reset will do nothing")

        self.load()

        if self._settings is not None:
            self._settings.settings_changed.subscribe(self._handle_settings_changed)

        if self._auto_register:
            self._registry.register_manager(self)

    # =========================================================================
    # Initialization
    # =========================================================================

    @abstractmethod
    def initialize_settings(self) -> Optional[TSettings]:
        """
        Create the owned settings instance. Return None (after logging why)
        if the instance cannot be built.
        """

    # =========================================================================
    # Access
    # =========================================================================

    @property
    def name(self) -> str:
        return type(self).__name__

    @property
    def settings(self) -> Optional[TSettings]:
        """The owned settings instance, for typed access."""
        return self._settings

    @property
    def registry(self) -> Optional['SettingsRegistry']:
        return self._registry

    @property
    def is_destroyed(self) -> bool:
        return self._destroyed

    # =========================================================================
    # Persistence
    # =========================================================================

    def save(self) -> bool:
        """Save the owned instance. Returns False if the write failed."""
        if self._settings is None:
            return True
        return self._settings.save()

    def load(self) -> None:
        if self._settings is not None:
            self._settings.load()

    def reset_to_default(self) -> None:
        if self._settings is not None:
            self._settings.reset_to_default()

    # =========================================================================
    # Events
    # =========================================================================

    def _handle_settings_changed(self, sender: Any) -> None:
        self.settings_changed.emit(sender)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def destroy(self) -> None:
        """
        Tear down: unsubscribe from the instance, then leave the registry,
        then release the instance. Safe to call more than once.
        """
        if self._destroyed:
            return
        self._destroyed = True

        if self._settings is not None:
            self._settings.settings_changed.unsubscribe(self._handle_settings_changed)

        if self._auto_register and self._registry is not None:
            self._registry.unregister_manager(self)

        if self._settings is not None:
            self._settings.dispose()

        self.settings_changed.clear()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.destroy()
        return False

    def __repr__(self) -> str:
        return f"{self.name}(settings={self._settings!r})"
