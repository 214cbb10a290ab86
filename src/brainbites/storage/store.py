"""SQLite key-value storage for persisted app state."""

import json
import sqlite3
from pathlib import Path
from typing import Any

from ..errors import StorageError


class KeyValueStore:
    """Persistent key-value storage using SQLite.

    Values are stored as text; the ``*_json`` helpers encode and decode
    JSON payloads on top of the raw item API.
    """

    def __init__(self, db_path: Path) -> None:
        """Initialize the store with a database path.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = Path(db_path)
        self._conn: sqlite3.Connection | None = None

    def _get_connection(self) -> sqlite3.Connection:
        """Get or create the database connection."""
        if self._conn is None:
            try:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
                self._conn = sqlite3.connect(self.db_path)
            except (sqlite3.Error, OSError) as e:
                raise StorageError(f"Cannot open store {self.db_path}: {e}") from e
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def init_db(self) -> None:
        """Create the kv table if it doesn't exist."""
        conn = self._get_connection()
        try:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv (
                    key         TEXT PRIMARY KEY,
                    value       TEXT NOT NULL,
                    updated_at  TEXT NOT NULL DEFAULT (datetime('now'))
                )
            """)
            conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Cannot initialize store: {e}") from e

    def get_item(self, key: str) -> str | None:
        """Get the raw value stored under key.

        Args:
            key: The key to look up.

        Returns:
            The stored text, or None if the key is absent.
        """
        conn = self._get_connection()
        try:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Cannot read {key}: {e}") from e
        return row["value"] if row is not None else None

    def set_item(self, key: str, value: str) -> None:
        """Store a raw value under key, replacing any previous value."""
        conn = self._get_connection()
        try:
            conn.execute(
                """
                INSERT INTO kv (key, value)
                VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = datetime('now')
                """,
                (key, value),
            )
            conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Cannot write {key}: {e}") from e

    def remove_item(self, key: str) -> bool:
        """Delete a key.

        Returns:
            True if a value was deleted, False otherwise.
        """
        conn = self._get_connection()
        try:
            cursor = conn.execute("DELETE FROM kv WHERE key = ?", (key,))
            conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Cannot delete {key}: {e}") from e
        return cursor.rowcount > 0

    def keys(self) -> list[str]:
        """List all stored keys."""
        conn = self._get_connection()
        try:
            cursor = conn.execute("SELECT key FROM kv ORDER BY key")
        except sqlite3.Error as e:
            raise StorageError(f"Cannot list keys: {e}") from e
        return [row["key"] for row in cursor.fetchall()]

    def get_json(self, key: str) -> Any:
        """Get and decode a JSON value, or None if the key is absent."""
        raw = self.get_item(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupt JSON under {key}: {e}") from e

    def set_json(self, key: str, data: Any) -> None:
        """Encode data as JSON and store it under key."""
        self.set_item(key, json.dumps(data))

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
