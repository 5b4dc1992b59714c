"""Persistent application store."""

from pathlib import Path
from typing import Tuple, Union

from .applications import ApplicationStore
from .database import SCHEMA_VERSION, Database
from .state import STATE_KEY_LAST_APPLICATION_SEARCH_TIME, StateStore

__all__ = [
    'ApplicationStore',
    'Database',
    'SCHEMA_VERSION',
    'STATE_KEY_LAST_APPLICATION_SEARCH_TIME',
    'StateStore',
    'open_stores',
]


def open_stores(path: Union[str, Path]) -> Tuple[ApplicationStore, StateStore]:
    """
    Open the database at ``path`` and return both stores sharing its connection.

    Raises:
        StoreError: If the database cannot be opened or migrated
    """
    database = Database(path)
    return ApplicationStore(database), StateStore(database)
