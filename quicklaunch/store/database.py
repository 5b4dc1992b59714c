"""SQLite connection and schema versioning for the application store."""

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Union

from ..exceptions import StoreError

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

# Additive migrations keyed by the version they upgrade to.
# A migration must never drop or rewrite usage_count / last_used.
MIGRATIONS: Dict[int, List[str]] = {
    1: [
        """
        CREATE TABLE IF NOT EXISTS applications (
            app_id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            path TEXT NOT NULL,
            usage_count INTEGER NOT NULL DEFAULT 0,
            last_used INTEGER,
            added_date INTEGER NOT NULL DEFAULT (CAST(strftime('%s', 'now') AS INTEGER))
        )
        """,
        """
        CREATE TABLE IF NOT EXISTS app_state (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at INTEGER NOT NULL DEFAULT (CAST(strftime('%s', 'now') AS INTEGER))
        )
        """,
    ],
}


@contextmanager
def store_errors(action: str) -> Iterator[None]:
    """Translate sqlite3 failures raised inside the block into StoreError."""
    try:
        yield
    except sqlite3.Error as e:
        logger.error("Failed to %s: %s", action, e)
        raise StoreError(f"Failed to {action}: {e}") from e


class Database:
    """Owns the single SQLite connection shared by the stores."""

    def __init__(self, path: Union[str, Path]):
        """
        Open (and create if needed) the database and bring its schema up to date.

        Args:
            path: SQLite file path, or ":memory:"

        Raises:
            StoreError: If the file cannot be opened or migrated
        """
        self.path = str(path)
        self.lock = threading.RLock()
        with store_errors("open database"):
            if self.path != ":memory:":
                Path(self.path).parent.mkdir(parents=True, exist_ok=True)
            self.connection = sqlite3.connect(self.path, check_same_thread=False)
        try:
            self.migrate()
        except Exception:
            self.connection.close()
            raise

    @property
    def version(self) -> int:
        """Current schema version (PRAGMA user_version)."""
        with self.lock, store_errors("read database version"):
            row = self.connection.execute("PRAGMA user_version").fetchone()
        return int(row[0]) if row else 0

    def migrate(self) -> None:
        """Apply every migration newer than the stored schema version."""
        current = self.version
        logger.info("Database version check: current=%d, required=%d", current, SCHEMA_VERSION)
        if current >= SCHEMA_VERSION:
            return
        with self.lock, store_errors("migrate database"):
            with self.connection:
                for version in range(current + 1, SCHEMA_VERSION + 1):
                    logger.info("Migrating database to version %d", version)
                    for statement in MIGRATIONS.get(version, []):
                        self.connection.execute(statement)
            # PRAGMA does not accept bound parameters
            self.connection.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
        logger.info("Database migration completed successfully to version %d", SCHEMA_VERSION)

    def close(self) -> None:
        with self.lock:
            self.connection.close()

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
