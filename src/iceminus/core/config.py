"""
Purpose: Load environment and command-line settings for a redaction run.
Constraints: Pure config I/O only; never touches scanned files.
"""

# Imports
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from iceminus.core.config_models import LoggingSettings, ScanSettings, Settings
from iceminus.core.errors import ConfigError
from iceminus.core.logging import get_logger

logger = get_logger(__name__)

ENV_PREFIX = "ICEMINUS_"
_TRUE_VALUES = ("1", "true", "yes", "y", "on")


# Helpers
def _env(name: str) -> Optional[str]:
    value = os.getenv(ENV_PREFIX + name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _env_bool(name: str) -> Optional[bool]:
    value = _env(name)
    if value is None:
        return None
    return value.lower() in _TRUE_VALUES


def _env_list(name: str) -> Optional[List[str]]:
    value = _env(name)
    if value is None:
        return None
    return [part.strip() for part in value.split(",") if part.strip()]


def default_scan_path() -> str:
    """Rime keeps user dictionaries under %APPDATA%\\Rime\\cn_dicts on Windows."""
    if sys.platform != "win32":
        return ""
    try:
        home = Path.home()
    except RuntimeError:
        return ""
    return str(home / "AppData" / "Roaming" / "Rime" / "cn_dicts")


# Public API
class ConfigManager:
    """Builds Settings with precedence: CLI args > environment > defaults."""

    def __init__(self, env_file: Optional[str] = None):
        self.env_file = env_file
        self.loaded_env_file: Optional[Path] = None

    def load_env(self) -> Optional[Path]:
        """Load the first dotenv file found; existing variables win."""
        if self.env_file:
            candidates = [Path(self.env_file)]
            if not candidates[0].exists():
                raise ConfigError(f"env file not found: {self.env_file}")
        else:
            candidates = [Path.cwd() / ".env", Path.home() / ".iceminus.env"]

        for env_file in candidates:
            if env_file.exists():
                load_dotenv(env_file, override=False)
                self.loaded_env_file = env_file
                logger.debug("Loaded environment from %s", env_file)
                break
        return self.loaded_env_file

    def env_values(self) -> Dict[str, Dict[str, Any]]:
        scan = {
            "path": _env("PATH"),
            "dry_run": _env_bool("DRY_RUN"),
            "sensitive": _env("SENSITIVE"),
            "extensions": _env_list("EXTENSIONS"),
            "continue_on_error": _env_bool("CONTINUE_ON_ERROR"),
        }
        log = {
            "log_level": _env("LOG_LEVEL"),
            "log_dir": _env("LOG_DIR"),
            "json_logging": _env_bool("JSON_LOGGING"),
            "sentry_dsn": (os.getenv("SENTRY_DSN") or "").strip() or None,
        }
        return {"scan": scan, "log": log}

    def load(self, overrides: Optional[Mapping[str, Mapping[str, Any]]] = None) -> Settings:
        """Merge defaults, environment and CLI overrides into validated Settings."""
        self.load_env()
        merged: Dict[str, Dict[str, Any]] = {"scan": {}, "log": {}}
        for layer in (self.env_values(), overrides or {}):
            for section, values in layer.items():
                for key, value in (values or {}).items():
                    if value is not None:
                        merged[section][key] = value

        if not merged["scan"].get("path"):
            fallback = default_scan_path()
            if fallback:
                merged["scan"]["path"] = fallback

        try:
            settings = Settings(
                scan=ScanSettings(**merged["scan"]),
                log=LoggingSettings(**merged["log"]),
            )
        except ValidationError as exc:
            raise ConfigError(f"invalid settings: {exc}") from exc

        if not settings.scan.path:
            raise ConfigError("--path is required")
        return settings
