from .database import Database
from .preferences_repository_impl import PreferencesRepository

__all__ = [
    'Database',
    'PreferencesRepository',
]
