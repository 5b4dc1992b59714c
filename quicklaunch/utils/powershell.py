"""PowerShell helper process execution utilities."""

import json
import logging
import os
import subprocess
import sys
import tempfile
from typing import Any, List, Optional, Tuple

from ..exceptions import HelperProcessError

logger = logging.getLogger(__name__)

DEFAULT_POWERSHELL = r"C:\Windows\System32\WindowsPowerShell\v1.0\powershell.exe"

# Hide the console window of the helper on Windows
CREATE_NO_WINDOW = 0x08000000

UTF8_BOM = b"\xef\xbb\xbf"


def escape_powershell_string(text: str) -> str:
    """
    Escape a value for use inside a double-quoted PowerShell string literal.

    Args:
        text: String to escape

    Returns:
        Escaped string safe for use in PowerShell
    """
    # Backtick is the PowerShell escape character, escape it first
    text = text.replace("`", "``")
    text = text.replace('"', '`"')
    text = text.replace("$", "`$")
    return text


def powershell_array(values: List[str]) -> str:
    """Render values as a comma-separated list of quoted PowerShell strings."""
    return ",".join(f'"{escape_powershell_string(value)}"' for value in values)


class PowerShellExecutor:
    """Centralized PowerShell execution with standardized error handling."""

    def __init__(self, executable: Optional[str] = None, timeout: Optional[float] = None):
        """
        Initialize the PowerShell executor.

        Args:
            executable: Path to powershell.exe (defaults to the system install)
            timeout: Seconds to wait for the helper before giving up (None = no limit)
        """
        self.executable = executable or DEFAULT_POWERSHELL
        self.timeout = timeout

    def execute(self, script: str) -> Tuple[bool, Optional[str], Optional[str]]:
        """
        Execute a PowerShell script.

        The script is written to a temporary ``.ps1`` file (UTF-8 with BOM so
        that Windows PowerShell reads non-ASCII paths correctly) which is
        removed afterwards.

        Args:
            script: PowerShell code to execute

        Returns:
            Tuple of (success, stdout, stderr)
            - success: True if return code is 0, False otherwise
            - stdout: Standard output (None if empty)
            - stderr: Standard error (None if empty)
        """
        script_path = None
        try:
            script_path = self._write_script(script)
            logger.debug("Executing PowerShell script %s", script_path)
            result = subprocess.run(
                [
                    self.executable,
                    "-NoProfile",
                    "-ExecutionPolicy", "Bypass",
                    "-WindowStyle", "Hidden",
                    "-File", script_path,
                ],
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
                creationflags=CREATE_NO_WINDOW if sys.platform == "win32" else 0,
            )

            success = result.returncode == 0
            stdout = result.stdout.strip() if result.stdout and result.stdout.strip() else None
            stderr = result.stderr.strip() if result.stderr and result.stderr.strip() else None

            if not success:
                logger.error("PowerShell exited with status %s: %s", result.returncode, stderr)
            return success, stdout, stderr
        except subprocess.TimeoutExpired:
            logger.error("PowerShell did not finish within %s seconds", self.timeout)
            return False, None, f"timed out after {self.timeout} seconds"
        except OSError as e:
            logger.error("Failed to run PowerShell: %s", e)
            return False, None, str(e)
        finally:
            if script_path is not None:
                try:
                    os.remove(script_path)
                except OSError as e:
                    logger.warning("Failed to remove temporary script file %s: %s", script_path, e)

    def run(self, script: str) -> str:
        """
        Execute a PowerShell script and return its output.

        Args:
            script: PowerShell code to execute

        Returns:
            Standard output ("" if empty)

        Raises:
            HelperProcessError: If the helper cannot be started or exits non-zero
        """
        success, stdout, stderr = self.execute(script)
        if not success:
            raise HelperProcessError(f"PowerShell command failed, stdout: {stdout}, stderr: {stderr}")
        if stderr:
            logger.warning("PowerShell stderr: %s", stderr)
        return stdout or ""

    def run_json(self, script: str) -> Any:
        """
        Execute a PowerShell script whose output is JSON.

        Raises:
            HelperProcessError: On helper failure or malformed output
        """
        output = self.run(script).strip()
        if not output:
            raise HelperProcessError("PowerShell returned no output")
        try:
            return json.loads(output)
        except json.JSONDecodeError as e:
            preview = output if len(output) <= 200 else output[:200]
            logger.debug("Problematic output: %s", preview)
            raise HelperProcessError(f"Failed to parse JSON output: {e}") from e

    def _write_script(self, script: str) -> str:
        fd, path = tempfile.mkstemp(prefix="quicklaunch_ps_", suffix=".ps1")
        with os.fdopen(fd, "wb") as f:
            f.write(UTF8_BOM)
            f.write(script.encode("utf-8"))
        return path
