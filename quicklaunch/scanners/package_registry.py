"""Discovery of store (packaged) applications through the PowerShell helper."""

import logging
from typing import Any, List, Optional

from ..exceptions import HelperProcessError
from ..models import WorkingApplication
from ..utils import PowerShellExecutor

logger = logging.getLogger(__name__)

# Lists Start menu entries that belong to installed store packages as JSON
GET_STORE_APPS_SCRIPT = r'''
$ErrorActionPreference = "Stop"
[Console]::OutputEncoding = [System.Text.Encoding]::UTF8
$packages = @{}
Get-AppxPackage | Where-Object { -not $_.IsFramework } | ForEach-Object {
    $packages[$_.PackageFamilyName] = $_.PackageFullName
}
$apps = Get-StartApps | Where-Object { $_.AppID -like "*!*" } | ForEach-Object {
    $family = $_.AppID.Split("!")[0]
    if ($packages.ContainsKey($family)) {
        [PSCustomObject]@{
            name = $_.Name
            app_id = $_.AppID
            package_fullname = $packages[$family]
        }
    }
}
ConvertTo-Json -InputObject @($apps) -Compress
'''

REQUIRED_KEYS = ("name", "app_id", "package_fullname")


def parse_store_apps(payload: Any) -> List[WorkingApplication]:
    """
    Convert decoded helper output into applications.

    Args:
        payload: Decoded JSON, a list of objects or a single object

    Returns:
        List of applications whose launch path is the package full name

    Raises:
        HelperProcessError: If the payload does not have the expected shape
    """
    if isinstance(payload, dict):
        payload = [payload]
    if not isinstance(payload, list):
        raise HelperProcessError(f"Unexpected store app list type: {type(payload).__name__}")

    applications: List[WorkingApplication] = []
    for entry in payload:
        if not isinstance(entry, dict) or any(not entry.get(key) for key in REQUIRED_KEYS):
            raise HelperProcessError(f"Malformed store app entry: {entry!r}")
        applications.append(
            WorkingApplication(
                app_id=str(entry["app_id"]),
                name=str(entry["name"]),
                path=str(entry["package_fullname"]),
            )
        )
    return applications


def scan_package_registry(executor: Optional[PowerShellExecutor] = None) -> List[WorkingApplication]:
    """
    Query the platform package registry for installed store applications.

    Best-effort: any helper failure is logged and yields an empty list.

    Args:
        executor: PowerShell executor to use (defaults to a new executor)

    Returns:
        List of store applications
    """
    logger.info("Retrieving applications from the package registry")
    executor = executor or PowerShellExecutor()
    try:
        applications = parse_store_apps(executor.run_json(GET_STORE_APPS_SCRIPT))
    except HelperProcessError as e:
        logger.error("Failed to get applications from the package registry: %s", e)
        return []
    logger.info("Found %d package registry applications", len(applications))
    return applications
