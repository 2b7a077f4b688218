"""SQLite-backed feed store for RSS Feed Notifier."""

import sqlite3

from rssfeed_notifier.models import FeedKey, FeedRecord
from rssfeed_notifier.store import FeedStore, StoreError, deserialize_record, serialize_record

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS feeds (
    owner_id INTEGER NOT NULL,
    pin INTEGER NOT NULL,
    state TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (datetime('now')),
    PRIMARY KEY (owner_id, pin)
);
"""


class SqliteFeedStore(FeedStore):
    """Feed records stored as JSON blobs in a single SQLite table."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._conn: sqlite3.Connection | None = None

    def connect(self) -> None:
        """Open the database, creating the feeds table if needed.

        Raises:
            StoreError: If the file cannot be opened as a database.
        """
        try:
            conn = sqlite3.connect(self.db_path, check_same_thread=False)
        except sqlite3.Error as e:
            raise StoreError(f"Could not open {self.db_path}: {e}") from e
        try:
            conn.executescript(SCHEMA_SQL)
        except sqlite3.Error as e:
            conn.close()
            raise StoreError(f"Could not open {self.db_path}: {e}") from e
        self._conn = conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
        self._conn = None

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError(f"Feed store {self.db_path} is not open. Call connect() first.")
        return self._conn

    def load(self, key: FeedKey) -> FeedRecord | None:
        try:
            row = self.conn.execute(
                "SELECT state FROM feeds WHERE owner_id = ? AND pin = ?",
                (key.owner_id, key.pin),
            ).fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"Could not load feed {key}: {e}") from e
        return deserialize_record(row[0]) if row else None

    def save(self, key: FeedKey, record: FeedRecord) -> None:
        try:
            self.conn.execute(
                """INSERT INTO feeds (owner_id, pin, state, updated_at)
                   VALUES (?, ?, ?, datetime('now'))
                   ON CONFLICT(owner_id, pin) DO UPDATE SET
                       state = excluded.state,
                       updated_at = excluded.updated_at""",
                (key.owner_id, key.pin, serialize_record(record)),
            )
            self.conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"Could not save feed {key}: {e}") from e

    def delete(self, key: FeedKey) -> bool:
        try:
            cursor = self.conn.execute(
                "DELETE FROM feeds WHERE owner_id = ? AND pin = ?",
                (key.owner_id, key.pin),
            )
            self.conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"Could not delete feed {key}: {e}") from e
        return cursor.rowcount > 0

    def list_keys(self) -> list[FeedKey]:
        try:
            rows = self.conn.execute(
                "SELECT owner_id, pin FROM feeds ORDER BY owner_id, pin"
            ).fetchall()
        except sqlite3.Error as e:
            raise StoreError(f"Could not list feeds: {e}") from e
        return [_row_to_key(r) for r in rows]


def _row_to_key(row: tuple) -> FeedKey:
    """Convert a database row to a FeedKey."""
    owner_id, pin = row
    return FeedKey(owner_id=owner_id, pin=pin)
