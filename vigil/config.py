"""Read-only JSON settings.

Refresh cadence, git timeouts, theme and log level can be tuned in
``config.json`` under the platform config directory. Access is defensive:
a missing or malformed file, or a bad value for one key, falls back to the
defaults without aborting startup.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

APP_NAME = "vigil"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class VigilSettings:
    """Effective runtime settings after defaults and validation."""

    status_poll_seconds: float = 1.0
    upstream_poll_seconds: float = 60.0
    git_timeout_seconds: float = 10.0
    fetch_timeout_seconds: float = 30.0
    theme: str = "default"
    log_level: str = "WARNING"
    exclude: str = ".git"


def load_config(path: Path | None = None) -> dict[str, object]:
    """Load the JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    config_path = CONFIG_PATH if path is None else path
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logging.getLogger(__name__).warning(f"Ignoring unreadable config {config_path}: {exc}")
        return {}
    return data if isinstance(data, dict) else {}


def _positive_seconds(value: object, default: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if value <= 0:
        return default
    return float(value)


def _nonempty_str(value: object, default: str) -> str:
    if not isinstance(value, str):
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _log_level(value: object, default: str) -> str:
    level = _nonempty_str(value, default).upper()
    return level if level in LOG_LEVELS else default


def _exclude_name(value: object, default: str) -> str:
    """Accept a relative directory name; absolute or escaping paths are rejected."""
    name = _nonempty_str(value, default)
    if Path(name).is_absolute() or ".." in Path(name).parts:
        return default
    return name.strip("/") or default


def load_settings(path: Path | None = None) -> VigilSettings:
    """Build ``VigilSettings`` from the config file, validating each key."""
    data = load_config(path)
    defaults = VigilSettings()
    return VigilSettings(
        status_poll_seconds=_positive_seconds(data.get("status_poll_seconds"), defaults.status_poll_seconds),
        upstream_poll_seconds=_positive_seconds(data.get("upstream_poll_seconds"), defaults.upstream_poll_seconds),
        git_timeout_seconds=_positive_seconds(data.get("git_timeout_seconds"), defaults.git_timeout_seconds),
        fetch_timeout_seconds=_positive_seconds(data.get("fetch_timeout_seconds"), defaults.fetch_timeout_seconds),
        theme=_nonempty_str(data.get("theme"), defaults.theme),
        log_level=_log_level(data.get("log_level"), defaults.log_level),
        exclude=_exclude_name(data.get("exclude"), defaults.exclude),
    )
