from __future__ import annotations

import argparse
import sys
import traceback
from pathlib import Path

from badgemaker.config import get_default_log_path, load_config
from badgemaker.log import get_log_file_path, get_logger, setup_logging

_log = get_logger("main")


def _filter_platform_startup_args(argv: list[str]) -> list[str]:
    """Drop arguments injected by the macOS launcher so argparse does not reject them."""
    filtered_args: list[str] = []
    for arg in argv:
        if sys.platform == "darwin" and arg.startswith("-psn_"):
            continue
        filtered_args.append(arg)
    return filtered_args


def _install_exception_logging() -> None:
    """Windowed builds have no console; send uncaught exceptions to the log file."""

    def _log_uncaught_exception(exc_type, exc_value, exc_tb) -> None:
        message = "".join(traceback.format_exception(exc_type, exc_value, exc_tb))
        _log.error("uncaught exception\n%s", message.rstrip())
        sys.__excepthook__(exc_type, exc_value, exc_tb)

    sys.excepthook = _log_uncaught_exception


def main() -> None:
    config = load_config()
    setup_logging(str(config.get("log_level") or "info"), get_default_log_path())
    _install_exception_logging()
    _log.info("startup argv=%s", sys.argv[1:])
    log_file = get_log_file_path()
    if log_file:
        _log.info("log file=%s", log_file)

    parser = argparse.ArgumentParser(description="Launch the Badge Maker window.")
    parser.add_argument(
        "--template",
        default=None,
        help="Template id to select on startup (e.g. speaking, attending).",
    )
    parser.add_argument(
        "--photo",
        type=Path,
        default=None,
        help="Photo to load on startup.",
    )
    args = parser.parse_args(_filter_platform_startup_args(sys.argv[1:]))

    try:
        from badgemaker.gui import launch_gui
    except ImportError as exc:
        _log.error("GUI import failed: %s", exc)
        raise SystemExit(f"GUI is unavailable: {exc}") from exc

    startup_photo = args.photo.resolve(strict=False) if args.photo else None
    _log.info("launching GUI template=%s photo=%s", args.template, startup_photo)
    launch_gui(startup_template=args.template, startup_photo=startup_photo)
    _log.info("GUI returned normally")


if __name__ == "__main__":
    main()
