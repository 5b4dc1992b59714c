"""Discovery of launchable files below a filesystem root."""

import logging
import os
from typing import List

from ..identity import filesystem_app_id
from ..models import WorkingApplication

logger = logging.getLogger(__name__)

# Native executables and shortcuts
LAUNCHABLE_EXTENSIONS = {".exe", ".lnk"}


def is_launchable(file_name: str) -> bool:
    """True if the file extension is on the launchable allow-list (case-insensitive)."""
    _, ext = os.path.splitext(file_name)
    return ext.lower() in LAUNCHABLE_EXTENSIONS


def scan_directory(root: str) -> List[WorkingApplication]:
    """
    Recursively collect launchable files below ``root``.

    Unreadable directories are logged and skipped; they never abort the walk.
    Entries whose names are not valid Unicode are skipped as well.

    Args:
        root: Directory to scan

    Returns:
        List of applications whose identity and launch path are the canonical file path
    """
    logger.info("Scanning directory for applications: %s", root)
    if not os.path.isdir(root):
        logger.warning("Application search path does not exist: %s", root)
        return []

    def on_error(error: OSError) -> None:
        logger.debug("Skipping unreadable entry %s: %s", getattr(error, "filename", "?"), error)

    applications: List[WorkingApplication] = []
    for dirpath, _dirnames, filenames in os.walk(root, onerror=on_error):
        for file_name in sorted(filenames):
            if not is_launchable(file_name):
                continue
            full_path = os.path.join(dirpath, file_name)
            try:
                full_path.encode("utf-8")
            except UnicodeEncodeError:
                logger.debug("Skipping entry with undecodable name: %r", full_path)
                continue
            if not os.path.isfile(full_path):
                # Broken links and special files
                continue
            name = os.path.splitext(file_name)[0]
            if not name:
                continue
            app_id = filesystem_app_id(full_path)
            applications.append(WorkingApplication(app_id=app_id, name=name, path=app_id))

    logger.info("Found %d applications in directory: %s", len(applications), root)
    return applications
