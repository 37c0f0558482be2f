"""
Settings exceptions.
"""


class SettingsError(Exception):
    """Base exception for settings operations."""
    pass


class StorageKeyConflictError(SettingsError, ValueError):
    """Raised when a second live settings instance tries to use a claimed storage key."""

    def __init__(self, key: str, owner_name: str, claimant_name: str):
        self.key = key
        self.owner_name = owner_name
        self.claimant_name = claimant_name
        super().__init__(
            f"Storage key '{key}' is already used by {owner_name}; "
            f"{claimant_name} must use a different key"
        )


class PreferencesDecodeError(SettingsError, ValueError):
    """Raised when a stored entry cannot be decoded into the requested type."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Cannot decode preference '{key}': {reason}")
