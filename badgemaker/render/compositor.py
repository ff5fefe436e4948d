from __future__ import annotations

from dataclasses import dataclass

from PIL import Image

from badgemaker.constants import PHOTO_BORDER_WIDTH, PHOTO_CORNER_RADIUS, ZOOM_MAX, ZOOM_MIN
from badgemaker.models import PixelRegion, ViewState
from badgemaker.render.geometry import scaled_length
from badgemaker.render.surface import RasterSurface


@dataclass(frozen=True, slots=True)
class PhotoPlacement:
    base_scale: float
    scale: float
    left: float
    top: float
    width: float
    height: float

    @property
    def rect(self) -> tuple[float, float, float, float]:
        return (self.left, self.top, self.left + self.width, self.top + self.height)

    @property
    def center(self) -> tuple[float, float]:
        return (self.left + self.width / 2, self.top + self.height / 2)


def clamp_zoom(zoom: float) -> float:
    return max(ZOOM_MIN, min(ZOOM_MAX, float(zoom)))


def cover_scale(photo_size: tuple[int, int], window: PixelRegion) -> float:
    """Smallest scale at which the photo covers the window on both axes."""
    photo_w = max(1, photo_size[0])
    photo_h = max(1, photo_size[1])
    return max(window.w / float(photo_w), window.h / float(photo_h))


def compute_photo_placement(
    photo_size: tuple[int, int],
    window: PixelRegion,
    zoom: float = ZOOM_MIN,
    offset: tuple[float, float] = (0.0, 0.0),
) -> PhotoPlacement:
    base = cover_scale(photo_size, window)
    scale = base * clamp_zoom(zoom)
    draw_w = photo_size[0] * scale
    draw_h = photo_size[1] * scale
    # Offset is not clamped; panning past the photo edge shows the template.
    center_x, center_y = window.center
    center_x += offset[0]
    center_y += offset[1]
    return PhotoPlacement(
        base_scale=base,
        scale=scale,
        left=center_x - draw_w / 2,
        top=center_y - draw_h / 2,
        width=draw_w,
        height=draw_h,
    )


def composite_photo(
    surface: RasterSurface,
    photo: Image.Image,
    window: PixelRegion,
    view: ViewState,
    *,
    border_color: str = "#000000",
) -> PhotoPlacement:
    placement = compute_photo_placement(
        photo.size,
        window,
        zoom=view.zoom,
        offset=(view.offset_x, view.offset_y),
    )
    radius = scaled_length(PHOTO_CORNER_RADIUS, surface.width)
    with surface.clip_rect(window, radius=radius) as layer:
        layer.draw_image(photo, placement.left, placement.top, placement.width, placement.height)

    surface.stroke_rounded_rect(
        window,
        radius=radius,
        width=scaled_length(PHOTO_BORDER_WIDTH, surface.width),
        color=border_color,
    )
    return placement
