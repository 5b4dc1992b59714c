"""Icon generation for newly discovered applications through the PowerShell helper."""

import logging
import os
from typing import Iterable, List, Optional

from .exceptions import HelperProcessError
from .identity import icon_path_for, is_package_app, package_family_id
from .models import ApplicationRecord
from .utils import PowerShellExecutor, powershell_array

logger = logging.getLogger(__name__)

# Extracts the associated icon of every source and saves it as PNG
SAVE_APP_ICON_SCRIPT = r'''
$ErrorActionPreference = "Continue"
Add-Type -AssemblyName System.Drawing
$sources = @({SOURCE_ARR})
$targets = @({OUTPUT_ARR})
for ($i = 0; $i -lt $sources.Count; $i++) {
    $source = $sources[$i]
    $target = $targets[$i]
    try {
        if (Test-Path -LiteralPath $source) {
            $icon = [System.Drawing.Icon]::ExtractAssociatedIcon($source)
            $bitmap = $icon.ToBitmap()
        } else {
            $package = Get-AppxPackage -Name $source | Select-Object -First 1
            if ($null -eq $package) { continue }
            $manifest = Get-AppxPackageManifest -Package $package.PackageFullName
            $logo = $manifest.Package.Properties.Logo
            $logoPath = Join-Path $package.InstallLocation $logo
            $candidate = Get-ChildItem -LiteralPath (Split-Path $logoPath) -Filter ("{0}*" -f [System.IO.Path]::GetFileNameWithoutExtension($logoPath)) | Select-Object -First 1
            if ($null -eq $candidate) { continue }
            $bitmap = [System.Drawing.Bitmap]::FromFile($candidate.FullName)
        }
        $bitmap.Save($target, [System.Drawing.Imaging.ImageFormat]::Png)
        $bitmap.Dispose()
    } catch {
        Write-Error ("Failed to save icon for {0}: {1}" -f $source, $_)
    }
}
'''


class IconGenerator:
    """Asks the helper process to write cached icons for applications."""

    def __init__(self, icon_dir: str, executor: Optional[PowerShellExecutor] = None):
        """
        Args:
            icon_dir: Directory the icons are written to
            executor: PowerShell executor to use
        """
        self.icon_dir = icon_dir
        self.executor = executor or PowerShellExecutor()

    def build_script(self, records: Iterable[ApplicationRecord]) -> str:
        """Render the icon extraction script for ``records``."""
        sources: List[str] = []
        targets: List[str] = []
        for record in records:
            if is_package_app(record.path):
                sources.append(package_family_id(record.path))
            else:
                sources.append(record.path)
            targets.append(icon_path_for(record.app_id, self.icon_dir))
        return (
            SAVE_APP_ICON_SCRIPT
            .replace("{SOURCE_ARR}", powershell_array(sources))
            .replace("{OUTPUT_ARR}", powershell_array(targets))
        )

    def generate(self, records: List[ApplicationRecord]) -> bool:
        """
        Create icons for ``records``.

        Failures are logged and reported through the return value only; a
        missing icon never blocks indexing.

        Returns:
            True if the helper succeeded (or there was nothing to do)
        """
        if not records:
            return True
        logger.info("Creating application icons for %d applications", len(records))
        try:
            os.makedirs(self.icon_dir, exist_ok=True)
        except OSError as e:
            logger.error("Failed to create icon directory %s: %s", self.icon_dir, e)
            return False
        try:
            self.executor.run(self.build_script(records))
        except HelperProcessError as e:
            logger.error("Failed to create app icons: %s", e)
            return False
        logger.info("Icon extraction completed for %d applications", len(records))
        return True
