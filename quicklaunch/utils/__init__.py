"""Utility modules for the application index."""

from .powershell import PowerShellExecutor, escape_powershell_string, powershell_array

__all__ = ["PowerShellExecutor", "escape_powershell_string", "powershell_array"]
