from __future__ import annotations

import copy
import os
import platform
from pathlib import Path
from typing import Any

import yaml

from badgemaker.constants import DEFAULT_TEMPLATE_ID, NAME_MAX_LENGTH

APP_DIR_NAME = "BadgeMaker"

DEFAULT_CONFIG: dict[str, Any] = {
    "default_template": DEFAULT_TEMPLATE_ID,
    "template_dir": None,
    "font_path": None,
    "name_max_length": NAME_MAX_LENGTH,
    "export_dir": None,
    "log_level": "info",
}


def get_user_data_dir() -> Path:
    """Per-user writable directory for config, templates and logs."""
    system_name = platform.system().lower()
    if system_name == "windows":
        base = (
            os.environ.get("APPDATA")
            or os.environ.get("LOCALAPPDATA")
            or str(Path.home() / "AppData" / "Roaming")
        )
        return Path(base) / APP_DIR_NAME
    if system_name == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_DIR_NAME

    xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config_home:
        return Path(xdg_config_home) / APP_DIR_NAME
    return Path.home() / ".config" / APP_DIR_NAME


def get_config_path() -> Path:
    return get_user_data_dir() / "config.yaml"


def get_default_log_path() -> Path:
    return get_user_data_dir() / "logs" / "badgemaker.log"


def _deep_merge(base: dict[str, Any], incoming: dict[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in incoming.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: Path | None = None) -> dict[str, Any]:
    cfg_path = path or get_config_path()
    if not cfg_path.exists():
        return copy.deepcopy(DEFAULT_CONFIG)

    text = cfg_path.read_text(encoding="utf-8")
    loaded = yaml.safe_load(text) or {}
    if not isinstance(loaded, dict):
        loaded = {}
    cfg = _deep_merge(DEFAULT_CONFIG, loaded)
    try:
        cfg["name_max_length"] = max(1, int(cfg.get("name_max_length") or NAME_MAX_LENGTH))
    except (TypeError, ValueError):
        cfg["name_max_length"] = NAME_MAX_LENGTH
    return cfg


def write_default_config(path: Path | None = None, force: bool = False) -> Path:
    cfg_path = path or get_config_path()
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    if cfg_path.exists() and not force:
        return cfg_path
    cfg_path.write_text(
        yaml.safe_dump(copy.deepcopy(DEFAULT_CONFIG), sort_keys=False, allow_unicode=True),
        encoding="utf-8",
    )
    return cfg_path


def optional_path(value: Any) -> Path | None:
    text = str(value or "").strip()
    if not text:
        return None
    return Path(text).expanduser()
