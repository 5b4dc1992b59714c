"""Custom exception classes for the application index."""


class QuickLaunchError(Exception):
    """Base exception for quicklaunch errors."""
    pass


class ScanError(QuickLaunchError):
    """Exception raised when a single scan source cannot be enumerated."""
    pass


class HelperProcessError(ScanError):
    """Exception raised when the external helper process fails or returns malformed output."""
    pass


class StoreError(QuickLaunchError):
    """Exception raised for application store I/O or schema failures."""
    pass


class RefreshError(QuickLaunchError):
    """Exception raised when an index refresh fails; the previous working set stays valid."""

    def __init__(self, message: str, cause: Exception = None):
        super().__init__(message)
        self.cause = cause


class IndexNotReadyError(QuickLaunchError):
    """Exception raised when the index is used before it has been initialized."""
    pass


class LaunchError(QuickLaunchError):
    """Exception raised when an application cannot be started."""
    pass


class ConfigError(QuickLaunchError, ValueError):
    """Exception raised for invalid configuration values."""
    pass
