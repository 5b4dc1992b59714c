"""Application source scanners."""

import logging
from typing import Iterable, List, Optional

from ..exceptions import ScanError
from ..models import ScanSource, SourceKind, WorkingApplication
from ..utils import PowerShellExecutor
from .filesystem import LAUNCHABLE_EXTENSIONS, scan_directory
from .package_registry import scan_package_registry

logger = logging.getLogger(__name__)

__all__ = [
    "LAUNCHABLE_EXTENSIONS",
    "scan_directory",
    "scan_package_registry",
    "scan_source",
    "scan_sources",
]


def scan_source(source: ScanSource, executor: Optional[PowerShellExecutor] = None) -> List[WorkingApplication]:
    """
    Enumerate the applications of a single source.

    Args:
        source: Source to scan
        executor: PowerShell executor for the package registry

    Returns:
        List of discovered applications

    Raises:
        ScanError: If the source kind is unknown or the source has no root
    """
    if source.kind is SourceKind.PACKAGE_REGISTRY:
        return scan_package_registry(executor)
    elif source.kind is SourceKind.FILESYSTEM:
        if not source.root:
            raise ScanError("Filesystem source without a root directory")
        return scan_directory(source.root)
    else:
        raise ScanError(f"Unknown source kind '{source.kind}'")


def scan_sources(
    sources: Iterable[ScanSource],
    executor: Optional[PowerShellExecutor] = None,
) -> List[WorkingApplication]:
    """
    Enumerate applications from every source.

    A failing source contributes nothing; the remaining sources are still scanned.

    Args:
        sources: Sources to scan, in order
        executor: PowerShell executor for the package registry

    Returns:
        Concatenated list of discovered applications
    """
    applications: List[WorkingApplication] = []
    for source in sources:
        logger.debug("Loading applications from: %s", source)
        try:
            applications.extend(scan_source(source, executor))
        except ScanError as e:
            logger.error("Failed to scan source %s: %s", source, e)
        except OSError as e:
            logger.error("I/O error while scanning source %s: %s", source, e)
    return applications
