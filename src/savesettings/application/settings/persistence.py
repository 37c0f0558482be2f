"""
Preferences Backend

Typed round-trip between settings DTOs (or plain JSON values) and the
flat preferences store. One entry per key, JSON text as the value.

Usage:
    backend = PreferencesBackend.open("/path/to/preferences.db")
    backend.put("AudioSettings", AudioVolumeData(master_volume=0.5))
    data = backend.get("AudioSettings", AudioVolumeData)   # default DTO if absent
    backend.delete_key("AudioSettings")
"""
import json
import weakref
from typing import Any, List, Optional, Type, TypeVar
from threading import Lock

from savesettings.application.settings.base_settings import BaseSettings
from savesettings.application.settings.errors import PreferencesDecodeError, StorageKeyConflictError
from savesettings.infrastructure.persistence.sqlite.database import Database
from savesettings.infrastructure.persistence.sqlite.preferences_repository_impl import PreferencesRepository
from savesettings.utils.message import Log


TData = TypeVar('TData')


class PreferencesBackend:
    """
    Serializes values to JSON text and stores them in a PreferencesRepository.

    Also tracks which live settings instance owns each storage key, so two
    instances can never silently overwrite each other's entry.
    """

    def __init__(self, repository: PreferencesRepository):
        self._repository = repository
        self._claims: "weakref.WeakValueDictionary[str, Any]" = weakref.WeakValueDictionary()
        self._claims_lock = Lock()

    @classmethod
    def open(cls, db_path: str) -> "PreferencesBackend":
        """Open (or create) a preferences database file. ":memory:" gives a throwaway store."""
        return cls(PreferencesRepository(Database(db_path)))

    @property
    def repository(self) -> PreferencesRepository:
        return self._repository

    # =========================================================================
    # Typed DTO round-trip
    # =========================================================================

    def put(self, key: str, value: Any) -> None:
        """
        Serialize value (a BaseSettings DTO or a JSON value) and store it under key.
        The write is committed before this returns.
        """
        payload = value.to_dict() if isinstance(value, BaseSettings) else value
        try:
            text = Database.json_encode(payload)
        except (TypeError, ValueError) as e:
            raise TypeError(f"Cannot serialize value for '{key}': {e}") from e
        self._repository.set(key, text)

    def get(self, key: str, data_class: Type[TData]) -> TData:
        """
        Load the value stored under key as data_class.

        Returns data_class() when the key is absent or its stored text is
        empty (first run). Raises PreferencesDecodeError when the entry
        exists but cannot be decoded.
        """
        text = self._repository.get(key)
        if not text:
            return data_class()

        try:
            payload = Database.json_decode(text)
        except (json.JSONDecodeError, TypeError) as e:
            raise PreferencesDecodeError(key, f"invalid JSON ({e})") from e

        if isinstance(data_class, type) and issubclass(data_class, BaseSettings):
            try:
                return data_class.from_dict(payload)
            except (TypeError, ValueError) as e:
                raise PreferencesDecodeError(key, str(e)) from e

        if not isinstance(payload, data_class):
            raise PreferencesDecodeError(
                key, f"expected {data_class.__name__}, got {type(payload).__name__}"
            )
        return payload

    # =========================================================================
    # Plain values
    # =========================================================================

    def put_value(self, key: str, value: Any) -> None:
        """Store a plain JSON value (number, string, bool, list, dict)."""
        self.put(key, value)

    def get_value(self, key: str, default: Any = None) -> Any:
        """
        Return the plain JSON value stored under key, or default when the
        key is absent or empty. Raises PreferencesDecodeError for corrupt text.
        """
        text = self._repository.get(key)
        if not text:
            return default
        try:
            return Database.json_decode(text)
        except (json.JSONDecodeError, TypeError) as e:
            raise PreferencesDecodeError(key, f"invalid JSON ({e})") from e

    # =========================================================================
    # Keys
    # =========================================================================

    def has_key(self, key: str) -> bool:
        """True if a non-empty entry exists for key."""
        return bool(self._repository.get(key))

    def keys(self) -> List[str]:
        return self._repository.keys()

    def get_raw(self, key: str) -> Optional[str]:
        return self._repository.get(key)

    def delete_key(self, key: str) -> None:
        """Delete the entry for key. Missing keys are ignored."""
        self._repository.delete(key)
        Log.debug(f"PreferencesBackend: Deleted '{key}'")

    def delete_all(self) -> None:
        """Delete every stored entry."""
        self._repository.clear()

    def close(self) -> None:
        self._repository.db.close()

    # =========================================================================
    # Storage key ownership
    # =========================================================================

    def claim_key(self, key: str, owner: Any) -> None:
        """
        Record owner as the live user of key.

        Raises:
            StorageKeyConflictError: If a different live object already owns key
        """
        with self._claims_lock:
            current = self._claims.get(key)
            if current is not None and current is not owner:
                raise StorageKeyConflictError(key, type(current).__name__, type(owner).__name__)
            self._claims[key] = owner

    def release_key(self, key: str, owner: Any) -> None:
        with self._claims_lock:
            if self._claims.get(key) is owner:
                del self._claims[key]

    def key_owner(self, key: str) -> Optional[Any]:
        with self._claims_lock:
            return self._claims.get(key)


# =============================================================================
# Process-wide backend
# =============================================================================

_default_backend: Optional[PreferencesBackend] = None
_default_backend_lock = Lock()


def get_default_backend() -> PreferencesBackend:
    """
    The process-wide backend, opened on first use at the location given by
    FrameworkConfig (SAVESETTINGS_DB_PATH or the platform user data dir).
    """
    global _default_backend
    with _default_backend_lock:
        if _default_backend is None:
            from savesettings.utils.config import FrameworkConfig

            db_path = FrameworkConfig.from_env().resolve_database_path()
            _default_backend = PreferencesBackend.open(db_path)
            Log.info(f"PreferencesBackend: Opened {db_path}")
        return _default_backend


def set_default_backend(backend: Optional[PreferencesBackend]) -> None:
    """Install (or with None, forget) the process-wide backend."""
    global _default_backend
    with _default_backend_lock:
        _default_backend = backend


def delete_preferences_by_key(key: str, backend: Optional[PreferencesBackend] = None) -> None:
    """Delete one stored settings entry."""
    (backend or get_default_backend()).delete_key(key)


def delete_all_preferences(backend: Optional[PreferencesBackend] = None) -> None:
    """Delete every stored settings entry."""
    (backend or get_default_backend()).delete_all()
