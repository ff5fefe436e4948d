"""Minimal 2D raster surface on top of a Pillow RGBA image.

The compositor and the text fitter only need a handful of operations:
clip to a (rounded) rectangle, draw a bitmap into a float rectangle,
measure and fill text, stroke a rounded outline. Coordinates passed to a
surface are always canvas coordinates; a clip layer carries its own origin.
"""
from __future__ import annotations

import math
from contextlib import contextmanager
from typing import Iterator

from PIL import Image, ImageChops, ImageDraw, ImageFont

from badgemaker.models import PixelRegion


class RasterSurface:
    def __init__(self, image: Image.Image, origin: tuple[int, int] = (0, 0)) -> None:
        self.image = image if image.mode == "RGBA" else image.convert("RGBA")
        self.origin = origin

    @classmethod
    def blank(cls, width: int, height: int) -> RasterSurface:
        return cls(Image.new("RGBA", (max(1, width), max(1, height)), (0, 0, 0, 0)))

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size

    def _local(self, x: float, y: float) -> tuple[float, float]:
        return (x - self.origin[0], y - self.origin[1])

    def draw_image(self, source: Image.Image, left: float, top: float, width: float, height: float) -> None:
        """Scale ``source`` into the given rectangle; only the visible part is resampled."""
        if width <= 0 or height <= 0 or source.width <= 0 or source.height <= 0:
            return
        left, top = self._local(left, top)
        x0 = max(0, int(math.floor(left)))
        y0 = max(0, int(math.floor(top)))
        x1 = min(self.width, int(math.ceil(left + width)))
        y1 = min(self.height, int(math.ceil(top + height)))
        if x1 <= x0 or y1 <= y0:
            return

        sx = source.width / width
        sy = source.height / height
        box = (
            max(0.0, (x0 - left) * sx),
            max(0.0, (y0 - top) * sy),
            min(float(source.width), (x1 - left) * sx),
            min(float(source.height), (y1 - top) * sy),
        )
        if box[2] <= box[0] or box[3] <= box[1]:
            return

        rgba = source if source.mode == "RGBA" else source.convert("RGBA")
        patch = rgba.resize((x1 - x0, y1 - y0), Image.Resampling.LANCZOS, box=box)
        self.image.alpha_composite(patch, dest=(x0, y0))

    def paste_full(self, source: Image.Image) -> None:
        """Draw ``source`` stretched over the whole surface."""
        self.draw_image(source, self.origin[0], self.origin[1], self.width, self.height)

    @contextmanager
    def clip_rect(self, region: PixelRegion, radius: float = 0.0) -> Iterator[RasterSurface]:
        """Yield a layer limited to ``region``; it is composited back on exit."""
        layer = RasterSurface.blank(region.w, region.h)
        layer.origin = (region.x, region.y)
        yield layer

        mask = Image.new("L", layer.size, 0)
        mask_draw = ImageDraw.Draw(mask)
        box = (0, 0, layer.width - 1, layer.height - 1)
        if radius > 0:
            mask_draw.rounded_rectangle(box, radius=int(round(radius)), fill=255)
        else:
            mask_draw.rectangle(box, fill=255)

        clipped = layer.image
        clipped.putalpha(ImageChops.multiply(clipped.getchannel("A"), mask))

        dest_x, dest_y = (int(v) for v in self._local(region.x, region.y))
        if dest_x < 0 or dest_y < 0:
            crop_x = max(0, -dest_x)
            crop_y = max(0, -dest_y)
            if crop_x >= clipped.width or crop_y >= clipped.height:
                return
            clipped = clipped.crop((crop_x, crop_y, clipped.width, clipped.height))
            dest_x = max(0, dest_x)
            dest_y = max(0, dest_y)
        self.image.alpha_composite(clipped, dest=(dest_x, dest_y))

    def stroke_rounded_rect(self, region: PixelRegion, radius: float, width: float, color: str) -> None:
        # Pillow strokes inwards from the box edge; grow the box by half the
        # line width so the stroke is centred on the region outline.
        line = max(1, int(round(width)))
        half = line / 2.0
        left, top = self._local(region.x, region.y)
        box = (
            int(round(left - half)),
            int(round(top - half)),
            int(round(left + region.w + half)) - 1,
            int(round(top + region.h + half)) - 1,
        )
        draw = ImageDraw.Draw(self.image)
        draw.rounded_rectangle(box, radius=max(0, int(round(radius + half))), outline=color, width=line)

    def measure_text(self, text: str, font: ImageFont.ImageFont) -> float:
        return float(ImageDraw.Draw(self.image).textlength(text, font=font))

    def fill_text(self, text: str, center: tuple[float, float], font: ImageFont.ImageFont, color: str) -> None:
        draw = ImageDraw.Draw(self.image)
        draw.text(self._local(*center), text, font=font, fill=color, anchor="mm")
