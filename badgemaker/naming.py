from __future__ import annotations

import re

from badgemaker.constants import EXPORT_NAME_TEMPLATE

INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1F]')


def sanitize_token(value: str | None, fallback: str = "badge") -> str:
    text = (value or "").strip()
    if not text:
        text = fallback
    text = INVALID_FILENAME_CHARS.sub("_", text)
    text = re.sub(r"\s+", "_", text)
    text = text.strip(" ._")
    return text or fallback


def build_export_name(template_id: str) -> str:
    return EXPORT_NAME_TEMPLATE.format(template_id=sanitize_token(template_id))
