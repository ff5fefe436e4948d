from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

ROOT_LOGGER_NAME = "badgemaker"
_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_DATE_FORMAT = "%H:%M:%S"

_log_file_path: Path | None = None


def get_logger(name: str | None = None) -> logging.Logger:
    if not name:
        return logging.getLogger(ROOT_LOGGER_NAME)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def get_log_file_path() -> Path | None:
    return _log_file_path


def setup_logging(level: str = "info", log_file: Path | None = None) -> None:
    """Console logging for the package, plus a rotating log file when ``log_file`` is given."""
    global _log_file_path
    root = get_logger()
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT)
    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    _log_file_path = None
    if log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(log_file, maxBytes=1_000_000, backupCount=3, encoding="utf-8")
        except OSError as exc:
            root.warning("cannot open log file %s: %s", log_file, exc)
        else:
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)
            _log_file_path = log_file
    root.propagate = False
