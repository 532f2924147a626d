"""File-based logging setup.

The dashboard owns the terminal, so log records go to a file under the
platform log directory instead of stderr.
"""

from __future__ import annotations

import logging
from pathlib import Path

from platformdirs import user_log_dir

APP_NAME = "vigil"
LOG_FILENAME = "vigil.log"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s"


def default_log_path() -> Path:
    return Path(user_log_dir(APP_NAME, appauthor=False)) / LOG_FILENAME


def configure_logging(level: str = "WARNING", log_path: Path | None = None) -> Path | None:
    """Attach a file handler to the ``vigil`` logger.

    Returns the log file path, or ``None`` when the file cannot be opened; in
    that case records are discarded rather than written over the TUI.
    """
    target = default_log_path() if log_path is None else log_path
    package_logger = logging.getLogger(APP_NAME)
    package_logger.setLevel(level.upper())
    package_logger.propagate = False
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(target, encoding="utf-8")
    except OSError:
        package_logger.addHandler(logging.NullHandler())
        return None

    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(file_handler)
    return target
