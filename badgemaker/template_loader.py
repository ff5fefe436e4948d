from __future__ import annotations

import json
from dataclasses import replace
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from PIL import ImageColor

from badgemaker.constants import BASELINE_SIZE
from badgemaker.log import get_logger
from badgemaker.models import BadgeTemplate, Region

_log = get_logger("templates")

_TEMPLATE_SUFFIXES = (".yaml", ".yml", ".json")


def _builtin_dir() -> Path:
    return Path(str(resources.files("badgemaker.templates")))


def list_builtin_templates() -> list[str]:
    names = []
    for item in _builtin_dir().iterdir():
        if item.name.endswith(_TEMPLATE_SUFFIXES):
            names.append(Path(item.name).stem)
    return sorted(set(names))


def _parse_text(text: str, suffix: str) -> Any:
    if suffix.lower() == ".json":
        return json.loads(text)
    return yaml.safe_load(text)


def _load_file(path: Path) -> dict[str, Any]:
    data = _parse_text(path.read_text(encoding="utf-8"), path.suffix)
    if not isinstance(data, dict):
        raise ValueError(f"template file is not a dict: {path}")
    return data


def _find_builtin(name: str) -> Path:
    pkg = _builtin_dir()
    for suffix in _TEMPLATE_SUFFIXES:
        candidate = pkg / f"{name}{suffix}"
        if candidate.is_file():
            return candidate
    raise FileNotFoundError(f"built-in template not found: {name}")


def _parse_region(data: Any, key: str) -> Region:
    if not isinstance(data, dict):
        raise ValueError(f"{key} must be a mapping with x, y, w, h")
    try:
        region = Region(
            x=float(data["x"]),
            y=float(data["y"]),
            w=float(data["w"]),
            h=float(data["h"]),
        )
    except KeyError as exc:
        missing = str(exc).strip("'")
        raise ValueError(f"{key} is missing '{missing}'") from exc
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{key} has a non-numeric value: {exc}") from exc

    if region.w <= 0 or region.h <= 0:
        raise ValueError(f"{key} must have a positive size")
    if region.x < 0 or region.y < 0 or region.x + region.w > BASELINE_SIZE or region.y + region.h > BASELINE_SIZE:
        raise ValueError(f"{key} lies outside the {BASELINE_SIZE}x{BASELINE_SIZE} baseline")
    return region


def _parse_color(value: Any, fallback: str) -> str:
    text = str(value or "").strip()
    if not text:
        return fallback
    try:
        ImageColor.getrgb(text)
    except ValueError:
        _log.warning("invalid color %r, using %s", text, fallback)
        return fallback
    return text


def _resolve_relative(value: Any, base_dir: Path) -> Path | None:
    text = str(value or "").strip()
    if not text:
        return None
    path = Path(text).expanduser()
    if not path.is_absolute():
        path = base_dir / path
    return path


def normalize_template_dict(data: dict[str, Any], base_dir: Path, fallback_id: str = "custom") -> BadgeTemplate:
    template_id = str(data.get("id") or fallback_id).strip()
    if not template_id:
        raise ValueError("template id must not be empty")
    asset = _resolve_relative(data.get("asset"), base_dir)
    if asset is None:
        raise ValueError(f"template {template_id!r} has no asset")

    try:
        order = int(data.get("order") or 0)
    except (TypeError, ValueError):
        order = 0

    return BadgeTemplate(
        id=template_id,
        title=str(data.get("title") or template_id),
        asset=asset,
        photo_window=_parse_region(data.get("photo_window"), "photo_window"),
        name_window=_parse_region(data.get("name_window"), "name_window"),
        border_color=_parse_color(data.get("border_color"), "#000000"),
        text_color=_parse_color(data.get("text_color"), "#000000"),
        font_path=_resolve_relative(data.get("font"), base_dir),
        order=order,
    )


def load_template_file(path: Path) -> BadgeTemplate:
    return normalize_template_dict(_load_file(path), path.parent, fallback_id=path.stem)


def load_template(template_name_or_path: str) -> BadgeTemplate:
    path = Path(template_name_or_path)
    if path.is_file():
        return load_template_file(path)
    return load_template_file(_find_builtin(template_name_or_path))


def load_templates(
    extra_dir: Path | None = None,
    default_font: Path | None = None,
) -> dict[str, BadgeTemplate]:
    """Built-in templates followed by any valid ones in ``extra_dir``.

    A user template with the same id replaces the built-in one. Templates
    without their own font use ``default_font``.
    """
    templates: dict[str, BadgeTemplate] = {}
    for name in list_builtin_templates():
        tpl = load_template_file(_find_builtin(name))
        templates[tpl.id] = tpl

    if extra_dir is not None and extra_dir.is_dir():
        for path in sorted(extra_dir.iterdir()):
            if not path.is_file() or path.suffix.lower() not in _TEMPLATE_SUFFIXES:
                continue
            try:
                tpl = load_template_file(path)
            except (OSError, ValueError, yaml.YAMLError) as exc:
                _log.warning("skipping template %s: %s", path, exc)
                continue
            templates[tpl.id] = tpl

    if default_font is not None:
        templates = {
            key: tpl if tpl.font_path else replace(tpl, font_path=default_font)
            for key, tpl in templates.items()
        }

    ordered = sorted(templates.values(), key=lambda tpl: (tpl.order, tpl.id))
    return {tpl.id: tpl for tpl in ordered}
