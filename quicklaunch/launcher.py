"""Starting applications from the index."""

import logging
import os
import subprocess
import sys
from typing import Optional

from .exceptions import HelperProcessError, LaunchError
from .identity import is_package_app
from .models import WorkingApplication
from .utils import PowerShellExecutor, escape_powershell_string

logger = logging.getLogger(__name__)


def _open_detached(path: str) -> None:
    if sys.platform == "win32":
        os.startfile(path)  # type: ignore[attr-defined]
    elif sys.platform == "darwin":
        subprocess.Popen(["open", path], start_new_session=True)
    else:
        subprocess.Popen(["xdg-open", path], start_new_session=True)


def launch_application(app: WorkingApplication, executor: Optional[PowerShellExecutor] = None) -> None:
    """
    Launch an application without waiting for it.

    Executables and shortcuts are opened with the platform handler; store
    applications are started through their shell:AppsFolder entry.

    Args:
        app: Application to start
        executor: PowerShell executor for store applications

    Raises:
        LaunchError: If the application could not be started
    """
    logger.info("Launching application: %s", app.display_name)
    if not app.path:
        raise LaunchError(f"Application '{app.app_id}' has no launch path")

    if is_package_app(app.path):
        executor = executor or PowerShellExecutor()
        command = f'Start-Process "shell:AppsFolder\\{escape_powershell_string(app.app_id)}"'
        try:
            executor.run(command)
        except HelperProcessError as e:
            raise LaunchError(f"Failed to launch store app '{app.app_id}': {e}") from e
        return

    if not os.path.exists(app.path):
        raise LaunchError(f"Launch target does not exist: {app.path}")
    try:
        _open_detached(app.path)
    except OSError as e:
        raise LaunchError(f"Failed to launch '{app.path}': {e}") from e
