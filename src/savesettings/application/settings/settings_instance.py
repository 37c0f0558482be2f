"""
Settings Instance

Generic bridge between a live, mutable data holder and the preferences
backend. A concrete instance knows how to copy its holder into a DTO
(get_data_from_settings) and back (apply_data_to_settings), and how to
put every field back to its default (reset_to_default).

Change notification order for a single mutation:
    domain-specific event -> settings_changed -> manager -> external listeners

Errors never escape save()/load(): failures are logged and load() falls
back to defaults, so a corrupt or missing entry cannot crash the host.
"""
from abc import ABC, abstractmethod
from dataclasses import fields, is_dataclass
from typing import Generic, Optional, Type, TypeVar

from savesettings.application.events.settings_event import SettingsEvent
from savesettings.application.settings.base_settings import BaseSettings, is_serializable
from savesettings.application.settings.persistence import PreferencesBackend, get_default_backend
from savesettings.utils.message import Log


TData = TypeVar('TData', bound=BaseSettings)
THolder = TypeVar('THolder')


class SettingsInstance(ABC, Generic[TData, THolder]):
    """
    Abstract base for all settings instances.

    Subclasses must:
    1. Define DATA_CLASS (a BaseSettings dataclass)
    2. Implement get_data_from_settings / apply_data_to_settings
    3. Implement reset_to_default, raising exactly one change event

    Example:
        class GraphicsSettings(SettingsInstance[GraphicsData, GraphicsProfile]):
            DATA_CLASS = GraphicsData

            def get_data_from_settings(self):
                return GraphicsData(fullscreen=self._holder.fullscreen)

            def apply_data_to_settings(self, data):
                self._holder.fullscreen = data.fullscreen
                self.notify_settings_changed()

            def reset_to_default(self):
                self._holder.fullscreen = True
                self.notify_settings_changed()
    """

    DATA_CLASS: Type[BaseSettings] = BaseSettings

    def __init__(self, holder: THolder, backend: Optional[PreferencesBackend] = None, key: Optional[str] = None):
        """
        Args:
            holder: The data holder this instance reads and writes (required)
            backend: Preferences backend (defaults to the process-wide one)
            key: Storage key (defaults to the concrete class name)

        Raises:
            ValueError: If holder is None
            StorageKeyConflictError: If another live instance uses the same key
        """
        if holder is None:
            Log.error(f"{type(self).__name__}: A data holder is required")
            raise ValueError(f"{type(self).__name__}: holder must not be None")

        self._holder = holder
        self._backend = backend if backend is not None else get_default_backend()
        self._key = key or type(self).__name__
        self.settings_changed = SettingsEvent("settings_changed")

        if not is_serializable(self.DATA_CLASS):
            Log.error(
                f"{type(self).__name__}: Type {getattr(self.DATA_CLASS, '__name__', self.DATA_CLASS)} "
                "is not serializable, which may cause save failures. Supported: str, int, float, "
                "bool, Enum, lists and str-keyed dicts of those, and nested BaseSettings dataclasses."
            )

        self._backend.claim_key(self._key, self)
        self._disposed = False

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def key(self) -> str:
        """Storage key used in the preferences backend."""
        return self._key

    @property
    def holder(self) -> THolder:
        return self._holder

    @property
    def backend(self) -> PreferencesBackend:
        return self._backend

    # =========================================================================
    # Domain hooks
    # =========================================================================

    @abstractmethod
    def get_data_from_settings(self) -> Optional[TData]:
        """Copy the holder's current values into a new DTO."""

    @abstractmethod
    def apply_data_to_settings(self, data: TData) -> None:
        """Write a DTO into the holder (all fields in one pass) and notify."""

    @abstractmethod
    def reset_to_default(self) -> None:
        """Set every field to its default and raise exactly one change event."""

    # =========================================================================
    # Notification
    # =========================================================================

    def notify_settings_changed(self) -> None:
        self.settings_changed.emit(self)

    # =========================================================================
    # Persistence
    # =========================================================================

    def save(self) -> bool:
        """
        Persist the holder's current values. Skipped (and logged) when no
        data can be extracted; the change event fires only after a
        successful write.

        Returns:
            True if the entry was written
        """
        try:
            data = self.get_data_from_settings()
        except Exception as e:
            Log.error(f"{type(self).__name__}: Failed to get settings data for '{self._key}': {e}", exc_info=True)
            return False

        if data is None or (is_dataclass(data) and not fields(data)):
            Log.error(f"{type(self).__name__}: Failed to get settings data for '{self._key}'")
            return False

        try:
            self._backend.put(self._key, data)
        except Exception as e:
            Log.error(f"{type(self).__name__}: Failed to save settings '{self._key}': {e}", exc_info=True)
            return False

        Log.debug(f"{type(self).__name__}: Saved '{self._key}'")
        self.notify_settings_changed()
        return True

    def load(self) -> None:
        """
        Load persisted values into the holder.

        A missing entry is the normal first-run case: defaults are applied
        and the change event still fires. Decode or apply failures are logged
        and also fall back to defaults.
        """
        try:
            if not self._backend.has_key(self._key):
                Log.warning(
                    f"{type(self).__name__}: No stored settings for '{self._key}', using defaults. "
                    "This is normal on first run."
                )
                self.reset_to_default()
                return

            data = self._backend.get(self._key, self.DATA_CLASS)
            validation = data.validate()
            if not validation.valid:
                Log.warning(
                    f"{type(self).__name__}: Stored settings '{self._key}' out of range, clamping: "
                    + "; ".join(validation.errors)
                )
                data = data.clamped()

            self.apply_data_to_settings(data)
        except Exception as e:
            Log.error(f"{type(self).__name__}: Failed to load settings '{self._key}': {e}. Using defaults.", exc_info=True)
            self.reset_to_default()

    def get_current_data(self) -> Optional[TData]:
        """Snapshot of the current values as a DTO."""
        return self.get_data_from_settings()

    def apply_and_save(self, data: Optional[TData]) -> None:
        """Apply a DTO to the holder, then save it."""
        if data is None:
            Log.error(f"{type(self).__name__}: Cannot apply None settings data")
            return

        self.apply_data_to_settings(data)
        self.save()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def dispose(self) -> None:
        """Release the storage key and drop all change subscribers."""
        if self._disposed:
            return
        self._disposed = True
        self._backend.release_key(self._key, self)
        self.settings_changed.clear()

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def __repr__(self) -> str:
        return f"{type(self).__name__}(key={self._key!r})"
