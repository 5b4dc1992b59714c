"""Key/value state table of the application store."""

import logging
import time
from typing import Optional

from ..exceptions import StoreError
from .database import Database, store_errors

logger = logging.getLogger(__name__)

STATE_KEY_LAST_APPLICATION_SEARCH_TIME = "last_application_search_time"


class StateStore:
    """Persists scalar application state such as the last full scan time."""

    def __init__(self, database: Database):
        self.database = database

    def get_state(self, key: str) -> Optional[str]:
        """
        Read a state value.

        Args:
            key: State key

        Returns:
            Stored value, or None if the key was never saved
        """
        with self.database.lock, store_errors(f"read state '{key}'"):
            row = self.database.connection.execute(
                "SELECT value FROM app_state WHERE key = ?", (key,)
            ).fetchone()
        if row is None:
            logger.debug("No state found for key '%s'", key)
            return None
        return row[0]

    def save_state(self, key: str, value: str, now: Optional[int] = None) -> None:
        """Insert or replace a state value."""
        updated_at = int(time.time() if now is None else now)
        logger.debug("Saving state with key '%s' and value '%s'", key, value)
        with self.database.lock, store_errors(f"save state '{key}'"):
            with self.database.connection:
                self.database.connection.execute(
                    "INSERT OR REPLACE INTO app_state (key, value, updated_at) VALUES (?, ?, ?)",
                    (key, value, updated_at),
                )

    def get_last_scan_time(self) -> int:
        """
        Unix seconds of the last full application scan.

        Returns:
            Timestamp, or 0 if no scan was ever recorded

        Raises:
            StoreError: If the stored value is not an integer
        """
        value = self.get_state(STATE_KEY_LAST_APPLICATION_SEARCH_TIME)
        if value is None:
            return 0
        try:
            return int(value)
        except ValueError as e:
            logger.error("Failed to parse last application search time: %r", value)
            raise StoreError(f"Invalid last scan time: {value!r}") from e

    def set_last_scan_time(self, now: Optional[int] = None) -> int:
        """Record ``now`` (defaults to the current time) as the last full scan time."""
        timestamp = int(time.time() if now is None else now)
        self.save_state(STATE_KEY_LAST_APPLICATION_SEARCH_TIME, str(timestamp), timestamp)
        return timestamp
