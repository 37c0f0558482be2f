"""
savesettings - typed settings persistence.

Subsystems define a BaseSettings DTO, a SettingsInstance that bridges their
live data holder to the preferences backend, and a BaseSettingsManager that
ties the instance to a host lifetime and the process-wide SettingsRegistry.
"""
from savesettings.application.events import SettingsEvent
from savesettings.application.settings import (
    BaseSettings,
    AudioSettingsManager,
    BaseSettingsManager,
    PreferencesBackend,
    PreferencesDecodeError,
    SettingsError,
    SettingsInstance,
    SimpleSettingsManager,
    StorageKeyConflictError,
    delete_all_preferences,
    delete_preferences_by_key,
    validated_field,
)
from savesettings.shared.application.settings import (
    BulkOperationReport,
    SettingsRegistry,
    get_settings_registry,
    reset_settings_registry,
    set_settings_registry,
)

__version__ = "0.1.0"

__all__ = [
    'SettingsEvent',
    'BaseSettings',
    'AudioSettingsManager',
    'BaseSettingsManager',
    'PreferencesBackend',
    'PreferencesDecodeError',
    'SettingsError',
    'SettingsInstance',
    'SimpleSettingsManager',
    'StorageKeyConflictError',
    'delete_all_preferences',
    'delete_preferences_by_key',
    'validated_field',
    'BulkOperationReport',
    'SettingsRegistry',
    'get_settings_registry',
    'reset_settings_registry',
    'set_settings_registry',
]
