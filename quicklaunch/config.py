"""Configuration for the application index."""

import json
import os
import sys
from dataclasses import dataclass
from typing import List, Optional, Tuple

from dotenv import load_dotenv

from .exceptions import ConfigError
from .models import PACKAGE_REGISTRY_SENTINEL, ApplicationNameAlias, ScanSource
from .ranker import MINIMUM_MATCH_SCORE, SEARCH_RESULT_LIMIT

# Load environment variables from .env file
load_dotenv()

VALID_LOG_LEVELS = ["error", "warn", "warning", "info", "debug"]


def default_search_paths() -> List[str]:
    """Start menu folders plus the package registry on Windows, nothing elsewhere."""
    if sys.platform != "win32":
        return []
    paths = []
    appdata = os.getenv("APPDATA")
    if appdata:
        paths.append(os.path.join(appdata, "Microsoft", "Windows", "Start Menu", "Programs"))
    programdata = os.getenv("PROGRAMDATA")
    if programdata:
        paths.append(os.path.join(programdata, "Microsoft", "Windows", "Start Menu", "Programs"))
    paths.append(PACKAGE_REGISTRY_SENTINEL)
    return paths


def parse_aliases(value: str) -> List[ApplicationNameAlias]:
    """
    Parse the alias setting.

    Args:
        value: JSON list of {"path": ..., "alias": ...} objects, or a path to a file containing one

    Returns:
        List of aliases (empty if value is blank)

    Raises:
        ConfigError: If the value cannot be parsed
    """
    value = (value or "").strip()
    if not value:
        return []
    if not value.startswith("["):
        try:
            with open(os.path.expanduser(value), "r", encoding="utf-8") as f:
                value = f.read()
        except OSError as e:
            raise ConfigError(f"Cannot read alias file '{value}': {e}") from e
    try:
        entries = json.loads(value)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid alias JSON: {e}") from e
    if not isinstance(entries, list):
        raise ConfigError("Aliases must be a JSON list")

    aliases = []
    for entry in entries:
        if not isinstance(entry, dict) or not entry.get("path") or not entry.get("alias"):
            raise ConfigError(f"Alias entry needs 'path' and 'alias': {entry!r}")
        aliases.append(ApplicationNameAlias(path=str(entry["path"]), alias=str(entry["alias"])))
    return aliases


@dataclass(frozen=True)
class IndexConfig:
    """Immutable configuration snapshot handed to the index controller."""
    sources: Tuple[ScanSource, ...] = ()
    scan_interval_minutes: int = 1440
    aliases: Tuple[ApplicationNameAlias, ...] = ()
    icon_dir: Optional[str] = None
    min_score: int = MINIMUM_MATCH_SCORE
    search_limit: int = SEARCH_RESULT_LIMIT

    @property
    def scan_interval_seconds(self) -> int:
        return self.scan_interval_minutes * 60


class Config:
    """Configuration class for the application index."""

    def __init__(self):
        """Initialize configuration from environment variables."""
        # Base directory for the database, cached icons and logs
        self.data_dir = os.path.expanduser(os.getenv("QUICKLAUNCH_DATA_DIR", "~/.quicklaunch"))
        self.db_path = os.path.expanduser(
            os.getenv("QUICKLAUNCH_DB_PATH", os.path.join(self.data_dir, "quicklaunch.db"))
        )
        self.icon_dir = os.path.expanduser(
            os.getenv("QUICKLAUNCH_ICON_DIR", os.path.join(self.data_dir, "icons"))
        )

        # Scan sources: directories, or "WindowsStoreApp" for the package registry
        raw_paths = os.getenv("QUICKLAUNCH_SEARCH_PATHS")
        if raw_paths is None:
            self.search_paths = default_search_paths()
        else:
            self.search_paths = [p.strip() for p in raw_paths.split(os.pathsep) if p.strip()]

        self.scan_interval_minutes = self._int("QUICKLAUNCH_SCAN_INTERVAL_MINUTES", 1440)
        self.aliases = parse_aliases(os.getenv("QUICKLAUNCH_ALIASES", ""))

        # Ranking
        self.search_limit = self._int("QUICKLAUNCH_SEARCH_LIMIT", SEARCH_RESULT_LIMIT)
        self.min_score = self._int("QUICKLAUNCH_MIN_SCORE", MINIMUM_MATCH_SCORE)

        # Logging
        self.log_level = os.getenv("QUICKLAUNCH_LOG_LEVEL", "info").lower()
        self.log_file = os.getenv("QUICKLAUNCH_LOG_FILE", os.path.join(self.data_dir, "logs", "quicklaunch.log"))

        # Local API for the UI client
        self.api_port = self._int("QUICKLAUNCH_API_PORT", 8771)

        # Helper process
        self.helper_timeout = self._float("QUICKLAUNCH_HELPER_TIMEOUT", 60.0)
        self.powershell = os.getenv("QUICKLAUNCH_POWERSHELL") or None

        # Validate configuration
        self._validate()

    @staticmethod
    def _int(name: str, default: int) -> int:
        value = os.getenv(name)
        if value is None or not value.strip():
            return default
        try:
            return int(value)
        except ValueError as e:
            raise ConfigError(f"{name} must be an integer, got '{value}'") from e

    @staticmethod
    def _float(name: str, default: float) -> float:
        value = os.getenv(name)
        if value is None or not value.strip():
            return default
        try:
            return float(value)
        except ValueError as e:
            raise ConfigError(f"{name} must be a number, got '{value}'") from e

    def _validate(self):
        """Validate configuration values."""
        if self.scan_interval_minutes < 0:
            raise ConfigError(f"Scan interval must not be negative, got {self.scan_interval_minutes}")

        if self.search_limit <= 0:
            raise ConfigError(f"Search limit must be positive, got {self.search_limit}")

        if self.log_level not in VALID_LOG_LEVELS:
            raise ConfigError(
                f"Invalid log level '{self.log_level}'. "
                f"Must be one of: {', '.join(VALID_LOG_LEVELS)}"
            )

        if not 0 < self.api_port < 65536:
            raise ConfigError(f"API port out of range: {self.api_port}")

        if self.helper_timeout <= 0:
            raise ConfigError(f"Helper timeout must be positive, got {self.helper_timeout}")

    def index_config(self) -> IndexConfig:
        """Snapshot of the settings the index controller needs."""
        return IndexConfig(
            sources=tuple(ScanSource.parse(path) for path in self.search_paths),
            scan_interval_minutes=self.scan_interval_minutes,
            aliases=tuple(self.aliases),
            icon_dir=self.icon_dir,
            min_score=self.min_score,
            search_limit=self.search_limit,
        )


def load_config() -> Config:
    """Read the configuration from the environment (and .env file)."""
    return Config()


__all__ = [
    "Config",
    "IndexConfig",
    "default_search_paths",
    "load_config",
    "parse_aliases",
]
