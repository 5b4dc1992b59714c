"""Data models for the application index."""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

SECONDS_PER_DAY = 86400

# Source descriptor that selects the platform package registry instead of a directory
PACKAGE_REGISTRY_SENTINEL = "WindowsStoreApp"


def usage_recency_score(usage_count: int, last_used: Optional[int], now: Optional[float] = None) -> float:
    """
    Compute the time-decayed usage signal of an application.

    The score is ``usage_count / (days_since_last_used + 1)``. An unset or
    future ``last_used`` counts as zero elapsed days.

    Args:
        usage_count: Number of recorded launches
        last_used: Unix seconds of the most recent launch, or None
        now: Current Unix time (defaults to time.time())

    Returns:
        Non-negative recency score
    """
    if now is None:
        now = time.time()
    days_since_last_used = 0.0
    if last_used and now > last_used:
        days_since_last_used = (now - last_used) / SECONDS_PER_DAY
    return max(0, usage_count) / (days_since_last_used + 1.0)


@dataclass
class ApplicationRecord:
    """Persisted application row."""
    app_id: str
    name: str
    path: str
    usage_count: int = 0
    last_used: Optional[int] = None
    added_date: int = 0


@dataclass
class WorkingApplication:
    """In-memory application enriched with session-only fields."""
    app_id: str
    name: str
    path: str
    alias: Optional[str] = None
    icon_path: Optional[str] = None
    usage_recency_score: float = 0.0

    @property
    def display_name(self) -> str:
        """Name shown to the user: the configured alias wins over the discovered name."""
        return self.alias or self.name

    @classmethod
    def from_record(cls, record: ApplicationRecord, now: Optional[float] = None) -> "WorkingApplication":
        return cls(
            app_id=record.app_id,
            name=record.name,
            path=record.path,
            usage_recency_score=usage_recency_score(record.usage_count, record.last_used, now),
        )


@dataclass(frozen=True)
class AppForView:
    """Search result handed to the UI layer."""
    name: str
    app_id: str
    icon_path: Optional[str] = None

    @classmethod
    def from_application(cls, app: WorkingApplication) -> "AppForView":
        return cls(name=app.display_name, app_id=app.app_id, icon_path=app.icon_path)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for UI consumption."""
        return {
            "name": self.name,
            "app_id": self.app_id,
            "icon_path": self.icon_path or "",
        }


@dataclass(frozen=True)
class ApplicationNameAlias:
    """User-configured display name for the application at ``path``."""
    path: str
    alias: str


class SourceKind(Enum):
    """Kinds of application sources."""
    FILESYSTEM = "filesystem"
    PACKAGE_REGISTRY = "package_registry"


@dataclass(frozen=True)
class ScanSource:
    """A configured application source: a filesystem root or the package registry."""
    kind: SourceKind
    root: Optional[str] = None

    @classmethod
    def parse(cls, descriptor: str) -> "ScanSource":
        """
        Build a scan source from a configuration descriptor.

        Args:
            descriptor: Directory path, or the package registry sentinel

        Returns:
            ScanSource instance
        """
        descriptor = descriptor.strip()
        if descriptor == PACKAGE_REGISTRY_SENTINEL:
            return cls(SourceKind.PACKAGE_REGISTRY)
        return cls(SourceKind.FILESYSTEM, descriptor)

    def __str__(self) -> str:
        if self.kind is SourceKind.PACKAGE_REGISTRY:
            return PACKAGE_REGISTRY_SENTINEL
        return self.root or ""


@dataclass(frozen=True)
class IndexState:
    """Immutable snapshot of the working set published by the index controller."""
    applications: Tuple[WorkingApplication, ...] = ()
    last_scan_time: int = 0
    loaded_at: float = field(default_factory=time.time)

    def find(self, app_id: str) -> Optional[WorkingApplication]:
        for app in self.applications:
            if app.app_id == app_id:
                return app
        return None
