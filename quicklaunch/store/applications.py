"""Persistent table of known applications and their usage statistics."""

import logging
import time
from typing import Iterable, Iterator, List, Optional, Sequence

from ..models import ApplicationRecord, WorkingApplication
from ..reconciler import plan_reconciliation
from .database import Database, store_errors

logger = logging.getLogger(__name__)

# Stay well below SQLite's bound-variable limit per statement
DELETE_CHUNK_SIZE = 500

_SELECT_COLUMNS = "app_id, name, path, usage_count, last_used, added_date"


def _chunks(items: Sequence[str], size: int) -> Iterator[Sequence[str]]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


def _row_to_record(row: tuple) -> ApplicationRecord:
    app_id, name, path, usage_count, last_used, added_date = row
    return ApplicationRecord(
        app_id=app_id,
        name=name,
        path=path,
        usage_count=int(usage_count or 0),
        last_used=int(last_used) if last_used is not None else None,
        added_date=int(added_date or 0),
    )


class ApplicationStore:
    """Stores application records and per-application usage counters."""

    def __init__(self, database: Database):
        self.database = database

    def get_all(self) -> List[ApplicationRecord]:
        """
        Read every stored application.

        Returns:
            All records, ordered by name then identity

        Raises:
            StoreError: On any database failure (never returns a partial list)
        """
        logger.debug("Retrieving all applications from database")
        with self.database.lock, store_errors("read applications"):
            rows = self.database.connection.execute(
                f"SELECT {_SELECT_COLUMNS} FROM applications ORDER BY name COLLATE NOCASE, app_id"
            ).fetchall()
        records = [_row_to_record(row) for row in rows]
        logger.debug("Retrieved %d applications from database", len(records))
        return records

    def get(self, app_id: str) -> Optional[ApplicationRecord]:
        with self.database.lock, store_errors(f"read application {app_id}"):
            row = self.database.connection.execute(
                f"SELECT {_SELECT_COLUMNS} FROM applications WHERE app_id = ?", (app_id,)
            ).fetchone()
        return _row_to_record(row) if row else None

    def count(self) -> int:
        with self.database.lock, store_errors("count applications"):
            row = self.database.connection.execute("SELECT COUNT(*) FROM applications").fetchone()
        return int(row[0])

    def iter_app_ids(self) -> Iterator[str]:
        """Stream the stored identities without loading whole records."""
        with self.database.lock, store_errors("read application identities"):
            cursor = self.database.connection.execute("SELECT app_id FROM applications")
            for (app_id,) in cursor:
                yield app_id

    def reconcile(self, candidates: Iterable[WorkingApplication], now: Optional[int] = None) -> List[ApplicationRecord]:
        """
        Replace the stored set with ``candidates`` while keeping usage of unchanged applications.

        New identities are inserted with zero usage, vanished ones are deleted,
        surviving ones are left untouched. All changes run in one transaction.

        Args:
            candidates: Freshly scanned applications (may be empty)
            now: Insert timestamp (defaults to the current time)

        Returns:
            Only the newly inserted records

        Raises:
            StoreError: On any database failure; the stored set is left unchanged
        """
        added_date = int(time.time() if now is None else now)
        connection = self.database.connection
        with self.database.lock, store_errors("reconcile applications"):
            plan = plan_reconciliation(candidates, self.iter_app_ids())
            with connection:
                if plan.deleted:
                    logger.info("Deleting %d applications from database", len(plan.deleted))
                    logger.debug("Deleted applications: %s", plan.deleted)
                    for chunk in _chunks(plan.deleted, DELETE_CHUNK_SIZE):
                        placeholders = ",".join("?" for _ in chunk)
                        connection.execute(
                            f"DELETE FROM applications WHERE app_id IN ({placeholders})", tuple(chunk)
                        )
                if plan.new:
                    logger.info("Inserting %d new applications into database", len(plan.new))
                    connection.executemany(
                        "INSERT INTO applications (app_id, name, path, usage_count, last_used, added_date) "
                        "VALUES (?, ?, ?, 0, NULL, ?)",
                        [(app.app_id, app.name, app.path, added_date) for app in plan.new],
                    )

        return [
            ApplicationRecord(app_id=app.app_id, name=app.name, path=app.path, added_date=added_date)
            for app in plan.new
        ]

    def record_launch(self, app_id: str, now: Optional[int] = None) -> None:
        """
        Count a successful launch of ``app_id``.

        An empty or unknown identity is a no-op so that bookkeeping never blocks a launch.

        Raises:
            StoreError: On database failure
        """
        if not app_id:
            logger.warning("Cannot update usage for application with empty app_id")
            return
        last_used = int(time.time() if now is None else now)
        logger.debug("Updating usage for application: app_id=%s", app_id)
        with self.database.lock, store_errors(f"record launch of {app_id}"):
            with self.database.connection:
                cursor = self.database.connection.execute(
                    "UPDATE applications SET usage_count = usage_count + 1, last_used = ? WHERE app_id = ?",
                    (last_used, app_id),
                )
        if cursor.rowcount == 0:
            logger.warning("No stored application with app_id=%s, usage not recorded", app_id)
