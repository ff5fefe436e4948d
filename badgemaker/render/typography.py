from __future__ import annotations

import platform
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Callable

from PIL import ImageFont

from badgemaker.constants import (
    NAME_FONT_FLOOR,
    NAME_FONT_HEIGHT_RATIO,
    NAME_FONT_STEP,
    NAME_LINE_SPACING,
    NAME_MAX_WIDTH_RATIO,
)
from badgemaker.models import PixelRegion
from badgemaker.render.geometry import round_half_up
from badgemaker.render.surface import RasterSurface

MeasureFn = Callable[[str, int], float]


def _system_bold_font_candidates() -> list[Path]:
    system = platform.system().lower()
    if "windows" in system:
        return [
            Path(r"C:\Windows\Fonts\segoeuib.ttf"),
            Path(r"C:\Windows\Fonts\arialbd.ttf"),
            Path(r"C:\Windows\Fonts\msyhbd.ttc"),
        ]
    if "darwin" in system:
        return [
            Path("/System/Library/Fonts/Supplemental/Arial Bold.ttf"),
            Path("/Library/Fonts/Arial Bold.ttf"),
            Path("/System/Library/Fonts/Helvetica.ttc"),
        ]
    return [
        Path("/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"),
        Path("/usr/share/fonts/dejavu/DejaVuSans-Bold.ttf"),
        Path("/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf"),
        Path("/usr/share/fonts/opentype/noto/NotoSans-Bold.ttf"),
    ]


@lru_cache(maxsize=128)
def _load_font_cached(font_path: str, size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    candidates: list[Path] = []
    if font_path:
        candidates.append(Path(font_path))
    candidates.extend(_system_bold_font_candidates())
    for candidate in candidates:
        if candidate.exists():
            try:
                return ImageFont.truetype(str(candidate), size=size)
            except OSError:
                continue
    return ImageFont.load_default(size=size)


def load_font(font_path: Path | None, size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    return _load_font_cached(str(font_path) if font_path else "", max(1, int(size)))


@dataclass(frozen=True, slots=True)
class TextLayout:
    font_size: int
    lines: tuple[str, ...]
    # Vertical offsets of each line centre relative to the box midpoint.
    line_offsets: tuple[float, ...]
    overflows: bool = False

    @property
    def wrapped(self) -> bool:
        return len(self.lines) > 1


def initial_font_size(box_height: float) -> int:
    return round_half_up(box_height * NAME_FONT_HEIGHT_RATIO)


def fit_name(name: str, box_width: float, box_height: float, measure: MeasureFn) -> TextLayout | None:
    """Pick the largest font size (in 2px steps) that keeps ``name`` within 90% of the box.

    Falls back to two lines (all words but the last / the last word) when the
    floor is reached and the name still does not fit. A single overlong word
    is returned as one overflowing line.
    """
    words = (name or "").split()
    if not words:
        return None
    full_text = " ".join(words)
    max_width = box_width * NAME_MAX_WIDTH_RATIO

    font_size = initial_font_size(box_height)
    width = measure(full_text, font_size)
    while width > max_width and font_size > NAME_FONT_FLOOR:
        font_size -= NAME_FONT_STEP
        width = measure(full_text, font_size)

    if width > max_width and len(words) > 1:
        line_height = font_size * NAME_LINE_SPACING
        return TextLayout(
            font_size=font_size,
            lines=(" ".join(words[:-1]), words[-1]),
            line_offsets=(-line_height / 2, line_height / 2),
        )
    return TextLayout(
        font_size=font_size,
        lines=(full_text,),
        line_offsets=(0.0,),
        overflows=width > max_width,
    )


def draw_name(
    surface: RasterSurface,
    name: str,
    window: PixelRegion,
    *,
    font_path: Path | None = None,
    color: str = "#000000",
) -> TextLayout | None:
    if not (name or "").strip():
        return None

    center_x, center_y = window.center
    with surface.clip_rect(window) as layer:

        def _measure(text: str, size: int) -> float:
            return layer.measure_text(text, load_font(font_path, size))

        layout = fit_name(name, window.w, window.h, _measure)
        if layout is not None:
            font = load_font(font_path, layout.font_size)
            for line, offset in zip(layout.lines, layout.line_offsets):
                layer.fill_text(line, (center_x, center_y + offset), font, color)
    return layout
