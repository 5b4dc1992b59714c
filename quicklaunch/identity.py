"""Application identity and icon cache key derivation."""

import hashlib
import os

ICON_KEY_LENGTH = 16
ICON_EXTENSION = ".png"


def filesystem_app_id(path: str) -> str:
    """
    Derive the identity of a filesystem application from its location.

    Symlinks are not resolved so that an unchanged install always re-derives
    the same identity.

    Args:
        path: Path of the executable or shortcut

    Returns:
        Canonical absolute path
    """
    return os.path.normpath(os.path.abspath(path))


def icon_key(app_id: str) -> str:
    """
    File name of the cached icon for an application.

    Args:
        app_id: Application identity

    Returns:
        Truncated MD5 hex digest of the identity with the image extension
    """
    digest = hashlib.md5(app_id.encode("utf-8")).hexdigest()
    return f"{digest[:ICON_KEY_LENGTH]}{ICON_EXTENSION}"


def icon_path_for(app_id: str, icon_dir: str) -> str:
    """Absolute path of the cached icon for ``app_id`` inside ``icon_dir``."""
    return os.path.join(os.path.abspath(icon_dir), icon_key(app_id))


def is_package_app(path: str) -> bool:
    """True if the launch target is a package full name rather than a file path."""
    return "\\" not in path and "/" not in path


def package_family_id(path: str) -> str:
    """
    Package name prefix of a package full name.

    Example:
        package_family_id("Microsoft.WindowsCalculator_11.2307.4.0_x64__8wekyb3d8bbwe")
        -> "Microsoft.WindowsCalculator"
    """
    return path.split("_", 1)[0]
