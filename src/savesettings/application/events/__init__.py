from .settings_event import SettingsEvent, SettingsHandler

__all__ = [
    'SettingsEvent',
    'SettingsHandler',
]
