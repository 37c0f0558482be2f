"""
SQLite preferences database

File-based SQLite database holding the flat preferences table. Every
transaction commits before returning so writes are durable once a call
completes. ":memory:" is accepted for throwaway stores.
"""
import sqlite3
import json
from pathlib import Path
from typing import Optional, Any

from savesettings.utils.message import Log


MEMORY_PATH = ":memory:"


class Database:
    """
    Owns the SQLite connection and the preferences schema.
    """

    CURRENT_SCHEMA_VERSION = 1

    def __init__(self, db_path: Optional[str] = None):
        if db_path is None:
            raise ValueError("Database path is required")

        if str(db_path) == MEMORY_PATH:
            self.db_path = MEMORY_PATH
        else:
            self.db_path = Path(db_path)
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._connection = sqlite3.connect(str(self.db_path), check_same_thread=False)
        self._connection.row_factory = sqlite3.Row
        self._init_schema()

    def _init_schema(self):
        conn = self._connection
        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS preferences (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                created_at TEXT DEFAULT CURRENT_TIMESTAMP,
                updated_at TEXT DEFAULT CURRENT_TIMESTAMP
            )
        """)

        cursor.execute("SELECT COUNT(*) FROM schema_version")
        if cursor.fetchone()[0] == 0:
            cursor.execute("INSERT INTO schema_version (version) VALUES (?)", (self.CURRENT_SCHEMA_VERSION,))

        conn.commit()

    def get_connection(self) -> sqlite3.Connection:
        return self._connection

    def transaction(self):
        return TransactionContext(self.get_connection())

    def close(self) -> None:
        """Close the database connection."""
        if self._connection:
            self._connection.close()
            self._connection = None
            Log.debug(f"Database connection closed: {self.db_path}")

    @staticmethod
    def json_encode(value: Any) -> str:
        return json.dumps(value, sort_keys=True)

    @staticmethod
    def json_decode(value: str) -> Any:
        return json.loads(value)


class TransactionContext:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def __enter__(self) -> sqlite3.Connection:
        return self.conn

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.conn.commit()
        else:
            self.conn.rollback()
            Log.error(f"Transaction rolled back: {exc_val}")
        return False
