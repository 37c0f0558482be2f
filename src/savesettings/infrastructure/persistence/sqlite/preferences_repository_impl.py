"""
SQLite implementation of PreferencesRepository

Flat key -> text store. Values are stored exactly as given; encoding is
the caller's concern (see PreferencesBackend).
"""
from typing import Optional, List
from datetime import datetime

from savesettings.infrastructure.persistence.sqlite.database import Database
from savesettings.utils.message import Log


class PreferencesRepository:
    """
    Repository for preference entries that persist across sessions.

    One row per key. Writes commit immediately.
    """

    def __init__(self, database: Database):
        """
        Args:
            database: Database instance to use
        """
        self.db = database

    def set(self, key: str, value: str) -> None:
        """
        Store a text value under key, replacing any existing entry.
        """
        now = datetime.now().isoformat()
        with self.db.transaction() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                INSERT INTO preferences (key, value, created_at, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
            """, (key, value, now, now))
        Log.debug(f"Stored preference: {key}")

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """
        Get the raw text stored under key, or default if there is none.
        """
        cursor = self.db.get_connection().cursor()
        cursor.execute("""
            SELECT value FROM preferences WHERE key = ?
        """, (key,))

        row = cursor.fetchone()
        if row is None:
            return default
        return row["value"]

    def keys(self) -> List[str]:
        cursor = self.db.get_connection().cursor()
        cursor.execute("SELECT key FROM preferences ORDER BY key")
        return [row["key"] for row in cursor.fetchall()]

    def delete(self, key: str) -> None:
        """
        Delete a preference. Deleting a missing key does nothing.
        """
        with self.db.transaction() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                DELETE FROM preferences WHERE key = ?
            """, (key,))
        Log.debug(f"Deleted preference: {key}")

    def clear(self) -> None:
        """
        Clear all preferences.
        """
        with self.db.transaction() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM preferences")
        Log.warning("Cleared all preferences")
