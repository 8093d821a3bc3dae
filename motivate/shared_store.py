"""
Shared Store

Both motivate processes (the interactive CLI and the background widget loop) keep their shared
state in one SQLite file: the category preferences and the offline image cache. SQLite does the
cross-process locking for us. Every operation opens its own short-lived connection and runs in a
BEGIN IMMEDIATE transaction, which takes the database's RESERVED lock up front, so two processes
writing at the same time are serialized instead of interleaved, and a write committed by one
process is visible to the very next read made by the other.

Values in the preferences table are stored as JSON text.
"""

import json
import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS preferences (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS cached_images (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    image_id INTEGER,
    data BLOB NOT NULL,
    stored_at REAL NOT NULL,
    last_used REAL
);
CREATE INDEX IF NOT EXISTS cached_images_stored_at ON cached_images (stored_at);
"""


class StoreError(Exception):
    """Raised when the shared store cannot be opened, read or written."""

    pass


class SharedStore:
    """
    File-backed key-value store plus the cached_images table. Holds no connection between calls.
    """

    def __init__(self, path, timeout: float = 5.0):
        self.path = Path(path).expanduser()
        self.timeout = timeout
        self._initialized = False

    def __repr__(self):
        return f"SharedStore({str(self.path)!r})"

    @contextmanager
    def connect(self):
        """
        Yield a connection inside an immediate transaction. Commits when the block exits normally,
        rolls back otherwise. sqlite3 errors are re-raised as StoreError.
        """

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            # isolation_level=None: we issue BEGIN/COMMIT ourselves
            conn = sqlite3.connect(str(self.path), timeout=self.timeout, isolation_level=None)

        except (OSError, sqlite3.Error) as error:
            raise StoreError(f"could not open shared store at {self.path}: {error}")

        try:
            conn.execute("BEGIN IMMEDIATE")
            if not self._initialized:
                for statement in SCHEMA.split(";"):
                    if statement.strip():
                        conn.execute(statement)

            yield conn

            conn.execute("COMMIT")
            self._initialized = True

        except sqlite3.Error as error:
            _rollback(conn)
            raise StoreError(f"shared store operation failed: {error}")

        except BaseException:
            _rollback(conn)
            raise

        finally:
            conn.close()

    def get(self, key: str, default: Any = None) -> Any:
        with self.connect() as conn:
            row = conn.execute(
                "SELECT value FROM preferences WHERE key = ?", (key,)
            ).fetchone()

        if row is None:
            return default

        try:
            return json.loads(row[0])

        except json.JSONDecodeError as error:
            raise StoreError(f"value stored under {key!r} is not valid JSON: {error}")

    def set(self, key: str, value: Any) -> None:
        encoded = json.dumps(value)

        with self.connect() as conn:
            conn.execute(
                "INSERT INTO preferences (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, encoded),
            )

        logger.debug("stored %s=%s in %s", key, encoded, self.path)

    def increment(self, key: str) -> int:
        """Atomically add one to an integer value (missing counts as 0) and return the new value."""

        with self.connect() as conn:
            row = conn.execute(
                "SELECT value FROM preferences WHERE key = ?", (key,)
            ).fetchone()

            try:
                current = int(json.loads(row[0])) if row else 0
            except (TypeError, ValueError):
                current = 0

            conn.execute(
                "INSERT INTO preferences (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, json.dumps(current + 1)),
            )

        return current + 1


def _rollback(conn):
    try:
        conn.execute("ROLLBACK")
    except sqlite3.Error:
        # nothing to roll back if BEGIN itself failed
        pass
