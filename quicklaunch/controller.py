"""Index controller: owns the working set and serves search and launch requests."""

import logging
import threading
import time
from enum import Enum
from typing import Callable, List, Optional, Tuple

from .config import Config, IndexConfig
from .enrichment import build_working_set
from .exceptions import IndexNotReadyError, LaunchError, RefreshError, StoreError
from .icons import IconGenerator
from .launcher import launch_application
from .models import AppForView, IndexState, WorkingApplication
from .ranker import Ranker
from .reconciler import Reconciler
from .scanners import scan_sources
from .store import ApplicationStore, StateStore, open_stores
from .utils import PowerShellExecutor


class IndexStatus(Enum):
    """Externally visible controller states."""
    UNINITIALIZED = "uninitialized"
    READY = "ready"


class IndexController:
    """
    Orchestrates scanning, reconciliation, icon generation and ranking.

    The working set is an immutable IndexState snapshot. A refresh builds a
    complete new snapshot and publishes it with a single assignment, so a
    concurrent reader sees either the old or the new set, never a mix.
    Refreshes are serialized by the controller lock.
    """

    def __init__(
        self,
        config: IndexConfig,
        app_store: ApplicationStore,
        state_store: StateStore,
        executor: Optional[PowerShellExecutor] = None,
        icon_generator: Optional[IconGenerator] = None,
        ranker: Optional[Ranker] = None,
        scanner: Optional[Callable] = None,
        logger: Optional[logging.Logger] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the controller. Nothing is loaded until init() is called.

        Args:
            config: Immutable configuration snapshot
            app_store: Application store
            state_store: Key/value state store (last scan time)
            executor: PowerShell executor shared by scanners, icons and launching
            icon_generator: Icon generator for new records (None disables icons)
            ranker: Ranker (defaults to one built from the config)
            scanner: Callable (sources) -> candidates, defaults to the built-in scanners
            logger: Logger to report through
            clock: Time source returning Unix seconds
        """
        self.config = config
        self.app_store = app_store
        self.state_store = state_store
        self.executor = executor or PowerShellExecutor()
        self.icon_generator = icon_generator
        self.ranker = ranker or Ranker(min_score=config.min_score, limit=config.search_limit)
        self.scanner = scanner or (lambda sources: scan_sources(sources, self.executor))
        self.reconciler = Reconciler(app_store, self.scanner)
        self.logger = logger or logging.getLogger(__name__)
        self.clock = clock
        self._lock = threading.RLock()
        self._state: Optional[IndexState] = None

    @classmethod
    def from_config(cls, config: Config, logger: Optional[logging.Logger] = None) -> "IndexController":
        """
        Build a controller with stores, helper executor and icon generator from ``config``.

        Raises:
            StoreError: If the database cannot be opened
        """
        app_store, state_store = open_stores(config.db_path)
        executor = PowerShellExecutor(executable=config.powershell, timeout=config.helper_timeout)
        return cls(
            config.index_config(),
            app_store,
            state_store,
            executor=executor,
            icon_generator=IconGenerator(config.icon_dir, executor),
            logger=logger,
        )

    @property
    def status(self) -> IndexStatus:
        return IndexStatus.READY if self._state is not None else IndexStatus.UNINITIALIZED

    @property
    def state(self) -> Optional[IndexState]:
        return self._state

    @property
    def applications(self) -> Tuple[WorkingApplication, ...]:
        state = self._state
        return state.applications if state is not None else ()

    @property
    def last_scan_time(self) -> int:
        state = self._state
        return state.last_scan_time if state is not None else 0

    def is_rescan_due(self, now: Optional[float] = None) -> bool:
        """
        True if the last full scan is older than the configured interval.

        An unreadable scan time counts as never scanned.
        """
        now = self.clock() if now is None else now
        try:
            last_scan_time = self.state_store.get_last_scan_time()
        except StoreError as e:
            self.logger.warning("Cannot read last scan time, rescanning: %s", e)
            last_scan_time = 0
        return now - last_scan_time > self.config.scan_interval_seconds

    def init(self) -> None:
        """
        Load the working set, rescanning first when the interval has elapsed.

        Raises:
            RefreshError: If the store fails; the controller stays uninitialized
        """
        with self._lock:
            due = self.is_rescan_due()
            if not due:
                self.logger.debug("Application search is not needed.")
            self._publish(self._build_state(rescan=due))
        self.logger.info("Index ready with %d applications", len(self.applications))

    def force_refresh(self) -> None:
        """
        Rescan every source and replace the working set.

        Raises:
            IndexNotReadyError: If init() has not completed yet
            RefreshError: If the store fails; the previous working set stays in place
        """
        with self._lock:
            if self._state is None:
                raise IndexNotReadyError("Index must be initialized before it can be refreshed")
            self._publish(self._build_state(rescan=True))
        self.logger.info("Index refreshed, %d applications", len(self.applications))

    def refresh_in_background(self) -> threading.Thread:
        """Run force_refresh() on a daemon thread; failures are logged."""
        def run():
            try:
                self.force_refresh()
            except (IndexNotReadyError, RefreshError) as e:
                self.logger.error("Background refresh failed: %s", e)

        thread = threading.Thread(target=run, name="quicklaunch-refresh", daemon=True)
        thread.start()
        return thread

    def search(self, query: str) -> List[AppForView]:
        """
        Rank the working set against ``query``.

        Never raises: before init() or on an internal error the result is empty.
        """
        state = self._state
        if state is None:
            self.logger.warning("Search requested before the index is ready")
            return []
        self.logger.debug("Searching for application: %s", query)
        try:
            ranked = self.ranker.rank(query, state.applications)
        except Exception as e:
            self.logger.error("Search for '%s' failed: %s", query, e)
            return []
        return [AppForView.from_application(app) for app in ranked]

    def get_application(self, app_id: str) -> Optional[WorkingApplication]:
        state = self._state
        return state.find(app_id) if state is not None else None

    def record_launch(self, app_id: str) -> bool:
        """
        Persist a usage increment for ``app_id``.

        Unknown identities (the working set may be stale) and store failures
        are logged, never raised.

        Returns:
            True if the launch was recorded
        """
        if self.get_application(app_id) is None:
            self.logger.warning("Application %s is not in the working set, launch not recorded", app_id)
            return False
        try:
            self.app_store.record_launch(app_id, now=int(self.clock()))
        except StoreError as e:
            self.logger.error("Failed to record launch of %s: %s", app_id, e)
            return False
        return True

    def launch_feedback(self, app_id: str) -> None:
        """Fire-and-forget usage recording for the UI layer."""
        self.record_launch(app_id)

    def launch(self, app_id: str) -> bool:
        """
        Start the application and record the launch.

        Returns:
            True if the application was started
        """
        app = self.get_application(app_id)
        if app is None:
            self.logger.warning("Cannot launch unknown application %s", app_id)
            return False
        try:
            launch_application(app, self.executor)
        except LaunchError as e:
            self.logger.error("%s", e)
            return False
        self.record_launch(app_id)
        return True

    def _build_state(self, rescan: bool) -> IndexState:
        now = self.clock()
        try:
            if rescan:
                new_records = self.reconciler.run(self.config.sources, now=int(now))
                self.logger.info("Reconciliation added %d applications", len(new_records))
                if self.icon_generator is not None:
                    self.icon_generator.generate(new_records)
                last_scan_time = self.state_store.set_last_scan_time(int(now))
            else:
                last_scan_time = self.state_store.get_last_scan_time()
            records = self.app_store.get_all()
        except StoreError as e:
            raise RefreshError(f"Failed to load applications: {e}", cause=e) from e

        applications = build_working_set(records, self.config.aliases, self.config.icon_dir, now)
        return IndexState(applications=tuple(applications), last_scan_time=last_scan_time, loaded_at=now)

    def _publish(self, state: IndexState) -> None:
        self._state = state
