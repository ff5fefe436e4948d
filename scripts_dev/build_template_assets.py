#!/usr/bin/env python3
"""
Generate placeholder artwork for the built-in badge templates:
- badgemaker/templates/images/Speaker.png
- badgemaker/templates/images/Attendee.png

The photo and name windows are outlined from the template definitions so the
artwork always lines up with the geometry. Replace the files with the real
event artwork before shipping.

Run from the project root after `pip install -e .`:
  python scripts_dev/build_template_assets.py [--size 1080]
"""
from __future__ import annotations

import argparse
import sys

from PIL import Image, ImageDraw

from badgemaker.constants import BASELINE_SIZE
from badgemaker.render.geometry import map_region
from badgemaker.render.typography import load_font
from badgemaker.template_loader import load_templates

PALETTE = {
    "speaking": ("#232F3E", "#FF9900"),
    "attending": ("#FF9900", "#232F3E"),
}


def build_artwork(template, size: int) -> Image.Image:
    background, accent = PALETTE.get(template.id, ("#FFFFFF", "#333333"))
    image = Image.new("RGBA", (size, size), background)
    draw = ImageDraw.Draw(image)

    photo = map_region(template.photo_window, size, size)
    name = map_region(template.name_window, size, size)
    pad = max(4, size // 98)
    draw.rounded_rectangle(
        (photo.x - pad, photo.y - pad, photo.right + pad, photo.bottom + pad),
        radius=size // 40,
        fill="#FFFFFF",
    )
    draw.rectangle((name.x, name.y, name.right, name.bottom), fill="#FFFFFF")

    title_font = load_font(None, max(12, size * 56 // BASELINE_SIZE))
    draw.multiline_text(
        (size // 14, size // 6),
        template.title.replace(" at", "\nat"),
        font=title_font,
        fill=accent,
        spacing=size // 60,
    )
    return image


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--size", type=int, default=1080, help="Square artwork size in pixels.")
    args = parser.parse_args()

    for template in load_templates().values():
        target = template.asset
        target.parent.mkdir(parents=True, exist_ok=True)
        build_artwork(template, args.size).save(target, format="PNG", optimize=True)
        print(f"OK: {target}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
