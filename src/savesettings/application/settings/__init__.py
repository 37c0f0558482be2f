"""
Application Settings Module

Classes:
    BaseSettings: Base dataclass for settings DTOs
    SettingsInstance: Generic bridge between a data holder and the preferences backend
    BaseSettingsManager: Binds one settings instance to a host lifetime and the registry
    PreferencesBackend: Typed JSON round-trip over the preferences store
    AudioSettings / AudioSettingsManager: Audio volume domain
    SimpleSettingsManager / SimpleAudioSettings: Per-key settings for small projects
"""

from .base_settings import (
    BaseSettings,
    FieldValidator,
    ValidationResult,
    clamp01,
    is_serializable,
    validated_field,
)
from .errors import SettingsError, StorageKeyConflictError, PreferencesDecodeError
from .persistence import (
    PreferencesBackend,
    get_default_backend,
    set_default_backend,
    delete_preferences_by_key,
    delete_all_preferences,
)
from .settings_instance import SettingsInstance
from .settings_manager import BaseSettingsManager
from .audio_settings import (
    AudioVolumeData,
    AudioSettingsData,
    AudioSettings,
    AudioSettingsManager,
)
from .simple_settings import SimpleSettingsManager, SimpleAudioSettings

__all__ = [
    'BaseSettings',
    'FieldValidator',
    'ValidationResult',
    'clamp01',
    'is_serializable',
    'validated_field',
    'SettingsError',
    'StorageKeyConflictError',
    'PreferencesDecodeError',
    'PreferencesBackend',
    'get_default_backend',
    'set_default_backend',
    'delete_preferences_by_key',
    'delete_all_preferences',
    'SettingsInstance',
    'BaseSettingsManager',
    'AudioVolumeData',
    'AudioSettingsData',
    'AudioSettings',
    'AudioSettingsManager',
    'SimpleSettingsManager',
    'SimpleAudioSettings',
]
