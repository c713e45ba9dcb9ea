"""Process-wide log setup for the console.

Command outcomes, confirmation races and remote failures are all reported
through stdlib loggers named after their modules. The first ``get_logger``
call installs the handlers chosen by ``LOG_LEVEL`` and ``LOG_FILE``.
"""

from __future__ import annotations

import logging
import sys
import threading
from pathlib import Path

from guard_console.config import LoggingSettings, load_settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

_logging_configured = False
_logging_lock = threading.Lock()

_logger = logging.getLogger(__name__)


def _console_handlers(options: LoggingSettings) -> list[logging.Handler]:
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if options.file:
        log_path = Path(options.file)
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(log_path))
        except OSError as exc:
            # stderr still gets everything
            _logger.warning("Cannot write console log to %s: %s", log_path, exc)

    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure_logging() -> None:
    global _logging_configured

    options = load_settings().logging
    level = getattr(logging, options.level.upper(), logging.INFO)
    logging.basicConfig(level=level, handlers=_console_handlers(options), force=True)
    # one INFO line per API request otherwise
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))

    _logging_configured = True


def get_logger(name: str) -> logging.Logger:
    if not _logging_configured:
        with _logging_lock:
            if not _logging_configured:
                configure_logging()
    return logging.getLogger(name)
