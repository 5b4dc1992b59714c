"""Synchronization of freshly scanned applications with the persisted set."""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Dict, Iterable, List, Optional

from .models import ApplicationRecord, ScanSource, WorkingApplication
from .scanners import scan_sources

if TYPE_CHECKING:
    from .store import ApplicationStore

logger = logging.getLogger(__name__)


@dataclass
class ReconcilePlan:
    """Changes needed to bring the persisted set in line with a scan."""
    new: List[WorkingApplication] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.new and not self.deleted


def plan_reconciliation(
    candidates: Iterable[WorkingApplication],
    persisted_ids: Iterable[str],
) -> ReconcilePlan:
    """
    Diff scanned candidates against persisted identities.

    Persisted identities are consumed as a stream. Identities present on both
    sides survive untouched and appear in neither list.

    Args:
        candidates: Freshly scanned applications
        persisted_ids: Identities currently stored

    Returns:
        ReconcilePlan with the new candidates (in scan order) and the identities to delete
    """
    lookup: Dict[str, WorkingApplication] = {}
    for app in candidates:
        if app.app_id in lookup:
            logger.debug("Ignoring duplicate scan result for %s", app.app_id)
            continue
        lookup[app.app_id] = app

    deleted: List[str] = []
    for app_id in persisted_ids:
        if lookup.pop(app_id, None) is None:
            deleted.append(app_id)

    return ReconcilePlan(new=list(lookup.values()), deleted=deleted)


class Reconciler:
    """Scans the configured sources and applies the result to the store."""

    def __init__(
        self,
        store: "ApplicationStore",
        scanner: Callable[[Iterable[ScanSource]], List[WorkingApplication]] = scan_sources,
    ):
        """
        Args:
            store: Application store to reconcile against
            scanner: Callable producing candidates for a list of sources
        """
        self.store = store
        self.scanner = scanner

    def run(self, sources: Iterable[ScanSource], now: Optional[int] = None) -> List[ApplicationRecord]:
        """
        Scan ``sources`` and reconcile the result.

        Returns:
            Only the newly inserted records

        Raises:
            StoreError: If the store cannot be updated
        """
        candidates = self.scanner(list(sources))
        logger.info("Scan produced %d candidate applications", len(candidates))
        return self.store.reconcile(candidates, now=now)
