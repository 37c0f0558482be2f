"""
Shared settings module.

Provides:
- SettingsRegistry: process-wide directory of live settings managers
- get_settings_registry / set_settings_registry / reset_settings_registry
"""
from .settings_registry import (
    SettingsRegistry,
    BulkOperationReport,
    ManagerOutcome,
    get_settings_registry,
    set_settings_registry,
    has_settings_registry,
    reset_settings_registry,
)

__all__ = [
    'SettingsRegistry',
    'BulkOperationReport',
    'ManagerOutcome',
    'get_settings_registry',
    'set_settings_registry',
    'has_settings_registry',
    'reset_settings_registry',
]
