"""
Settings Registry

Process-wide directory of live settings managers, keyed by concrete
manager type, with bulk save/load/reset.

Usage:
    registry = get_settings_registry()        # created on first access
    audio = registry.get_manager(AudioSettingsManager)
    if audio is not None:
        audio.settings.master_volume = 0.5

    report = registry.save_all_settings()
    for outcome in report.failed:
        print(outcome.manager_name, outcome.error)

Features:
- At most one registered manager per concrete type (first registrant wins)
- Bulk operations isolate failures per manager and never abort early
- load_all_settings() resets a manager whose load() raised
- reset_all_settings() persists the reset immediately
- Saves every registered manager at interpreter exit (when enabled)
- Thread-safe registration; bulk operations iterate a snapshot
"""
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple, Type, TypeVar, TYPE_CHECKING
import atexit
import threading

from savesettings.application.settings.errors import SettingsError
from savesettings.application.settings.persistence import PreferencesBackend, get_default_backend
from savesettings.utils.message import Log

if TYPE_CHECKING:
    from savesettings.application.settings.settings_manager import BaseSettingsManager


T = TypeVar('T')


@dataclass
class ManagerOutcome:
    """
    Result of one bulk operation on one manager.

    Attributes:
        manager_name: Concrete manager type name
        succeeded: False if the operation raised
        error: The exception that was raised, if any
        recovered: True if a failed load was followed by a successful reset
    """
    manager_name: str
    succeeded: bool = True
    error: Optional[BaseException] = None
    recovered: bool = False


@dataclass
class BulkOperationReport:
    """
    Per-manager outcomes of a bulk registry operation.

    Truthy when every manager succeeded.
    """
    operation: str
    outcomes: List[ManagerOutcome] = field(default_factory=list)

    @property
    def failed(self) -> List[ManagerOutcome]:
        return [o for o in self.outcomes if not o.succeeded]

    @property
    def succeeded(self) -> List[ManagerOutcome]:
        return [o for o in self.outcomes if o.succeeded]

    def merge(self, other: 'BulkOperationReport') -> None:
        self.outcomes.extend(other.outcomes)

    def __bool__(self) -> bool:
        return not self.failed


class SettingsRegistry:
    """
    Central registry of live settings managers.

    Managers normally join and leave automatically through
    BaseSettingsManager; register_manager()/unregister_manager() can also be
    called directly.

    Thread Safety:
    - Registration and snapshotting are guarded by a lock
    - Bulk operations run on a snapshot, so managers may register or
      unregister from inside save/load/reset callbacks
    """

    def __init__(self, backend: Optional[PreferencesBackend] = None):
        """
        Args:
            backend: Preferences backend managers use by default
                (defaults to the process-wide backend)
        """
        self._backend = backend
        self._lock = threading.RLock()
        self._managers_by_type: Dict[type, 'BaseSettingsManager'] = {}
        # Insertion-ordered; holds exactly the values of _managers_by_type
        self._managers: Dict[int, 'BaseSettingsManager'] = {}
        self._shut_down = False

    @property
    def backend(self) -> PreferencesBackend:
        if self._backend is None:
            self._backend = get_default_backend()
        return self._backend

    # =========================================================================
    # Registration
    # =========================================================================

    def register_manager(self, manager: Optional['BaseSettingsManager']) -> None:
        """
        Register a manager. Ignored for None or when a manager of the same
        concrete type is already registered.
        """
        if manager is None:
            return

        manager_type = type(manager)
        with self._lock:
            if manager_type in self._managers_by_type:
                return
            self._managers_by_type[manager_type] = manager
            self._managers[id(manager)] = manager

        Log.debug(f"SettingsRegistry: Registered manager {manager_type.__name__}")

    def unregister_manager(self, manager: Optional['BaseSettingsManager']) -> None:
        """
        Unregister a manager. Ignored when its type is not registered or the
        slot is held by a different manager of that type.
        """
        if manager is None:
            return

        manager_type = type(manager)
        with self._lock:
            if self._managers_by_type.get(manager_type) is not manager:
                return
            del self._managers_by_type[manager_type]
            del self._managers[id(manager)]

        Log.debug(f"SettingsRegistry: Unregistered manager {manager_type.__name__}")

    def get_manager(self, manager_type: Type[T]) -> Optional[T]:
        """
        Get the registered manager of exactly manager_type.

        Returns:
            The manager, or None if none is registered (a normal state)
        """
        with self._lock:
            return self._managers_by_type.get(manager_type)

    def is_registered(self, manager_type: type) -> bool:
        with self._lock:
            return manager_type in self._managers_by_type

    @property
    def managers(self) -> Tuple['BaseSettingsManager', ...]:
        """Snapshot of all registered managers in registration order."""
        with self._lock:
            return tuple(self._managers.values())

    def clear(self) -> None:
        """
        Unregister every manager. Primarily used for testing.
        """
        with self._lock:
            self._managers_by_type.clear()
            self._managers.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._managers)

    def __contains__(self, manager: object) -> bool:
        with self._lock:
            return id(manager) in self._managers and self._managers[id(manager)] is manager

    # =========================================================================
    # Bulk operations
    # =========================================================================

    def _safe_execute(self, action: Callable[[], Optional[bool]], operation_name: str, manager_name: str) -> Optional[BaseException]:
        # A manager may report a logged failure by returning False instead of raising
        try:
            result = action()
        except Exception as e:
            Log.error(f"SettingsRegistry: {operation_name} failed for {manager_name}: {e}", exc_info=True)
            return e
        if result is False:
            return SettingsError(f"{operation_name} failed for {manager_name}")
        return None

    def save_all_settings(self) -> BulkOperationReport:
        """
        Save every registered manager. One manager failing is logged and
        does not stop the others.
        """
        report = BulkOperationReport("save")
        for manager in self.managers:
            error = self._safe_execute(manager.save, "Save settings", manager.name)
            report.outcomes.append(ManagerOutcome(manager.name, succeeded=error is None, error=error))
        return report

    def load_all_settings(self) -> BulkOperationReport:
        """
        Load every registered manager. A manager whose load() raises is
        reset to defaults before moving on.
        """
        report = BulkOperationReport("load")
        for manager in self.managers:
            error = self._safe_execute(manager.load, "Load settings", manager.name)
            outcome = ManagerOutcome(manager.name, succeeded=error is None, error=error)
            if error is not None:
                reset_error = self._safe_execute(manager.reset_to_default, "Reset after failed load", manager.name)
                outcome.recovered = reset_error is None
            report.outcomes.append(outcome)
        return report

    def reset_all_settings(self) -> BulkOperationReport:
        """
        Reset every registered manager to defaults, then save all so the
        reset is durable.
        """
        report = BulkOperationReport("reset")
        for manager in self.managers:
            error = self._safe_execute(manager.reset_to_default, "Reset settings", manager.name)
            report.outcomes.append(ManagerOutcome(manager.name, succeeded=error is None, error=error))
        report.merge(self.save_all_settings())
        return report

    # =========================================================================
    # Stored entries
    # =========================================================================

    def delete_preferences_by_key(self, key: str) -> None:
        """Delete one stored entry (registered managers keep their in-memory values)."""
        self.backend.delete_key(key)

    def delete_all_preferences(self) -> None:
        """Delete every stored entry."""
        self.backend.delete_all()

    # =========================================================================
    # Shutdown
    # =========================================================================

    def shutdown(self) -> Optional[BulkOperationReport]:
        """
        Save every registered manager. Runs once per registry; later calls
        return None.
        """
        with self._lock:
            if self._shut_down:
                return None
            self._shut_down = True

        Log.info(f"SettingsRegistry: Saving {len(self)} settings manager(s) on shutdown")
        return self.save_all_settings()

    @property
    def is_shut_down(self) -> bool:
        return self._shut_down


# =============================================================================
# Process-wide registry
# =============================================================================

_registry: Optional[SettingsRegistry] = None
_registry_lock = threading.Lock()
_exit_hook_registered = False


def _shutdown_at_exit() -> None:
    # Saves whichever registry is current when the interpreter exits
    registry = _registry
    if registry is not None:
        registry.shutdown()


def _install(registry: SettingsRegistry) -> None:
    global _registry, _exit_hook_registered
    _registry = registry
    from savesettings.utils.config import FrameworkConfig

    if not _exit_hook_registered and FrameworkConfig.from_env().save_on_exit:
        atexit.register(_shutdown_at_exit)
        _exit_hook_registered = True


def get_settings_registry() -> SettingsRegistry:
    """
    The process-wide registry, created on first access.
    """
    with _registry_lock:
        if _registry is None:
            _install(SettingsRegistry())
            Log.debug("SettingsRegistry: Created process-wide registry")
        return _registry


def set_settings_registry(registry: SettingsRegistry) -> SettingsRegistry:
    """
    Install an explicitly bootstrapped registry as the process-wide one.
    """
    with _registry_lock:
        _install(registry)
        return registry


def has_settings_registry() -> bool:
    return _registry is not None


def reset_settings_registry() -> None:
    """
    Forget the process-wide registry without saving. Primarily used for
    testing and re-bootstrapping.
    """
    global _registry
    with _registry_lock:
        _registry = None
