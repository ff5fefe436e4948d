from __future__ import annotations

import io
from dataclasses import dataclass

from PIL import Image

from badgemaker.log import get_logger
from badgemaker.models import BadgeTemplate, PixelRegion, SessionState
from badgemaker.render.compositor import PhotoPlacement, composite_photo
from badgemaker.render.geometry import map_region
from badgemaker.render.surface import RasterSurface
from badgemaker.render.typography import TextLayout, draw_name

_log = get_logger("render")


@dataclass(frozen=True, slots=True)
class BadgeGeometry:
    width: int
    height: int
    photo_window: PixelRegion
    name_window: PixelRegion


@dataclass(slots=True)
class RenderResult:
    image: Image.Image
    geometry: BadgeGeometry
    placement: PhotoPlacement | None = None
    text_layout: TextLayout | None = None


def compute_geometry(template: BadgeTemplate, width: int, height: int) -> BadgeGeometry:
    return BadgeGeometry(
        width=width,
        height=height,
        photo_window=map_region(template.photo_window, width, height),
        name_window=map_region(template.name_window, width, height),
    )


def render_badge(
    template: BadgeTemplate,
    template_image: Image.Image,
    state: SessionState,
    photo: Image.Image | None = None,
) -> RenderResult:
    """Full render pass at the template's native size.

    Order is fixed: template artwork, geometry, photo, name.
    """
    width, height = template_image.size
    surface = RasterSurface.blank(width, height)
    surface.paste_full(template_image)

    geometry = compute_geometry(template, width, height)

    placement = None
    if photo is not None:
        placement = composite_photo(
            surface,
            photo,
            geometry.photo_window,
            state.view,
            border_color=template.border_color,
        )

    text_layout = draw_name(
        surface,
        state.name,
        geometry.name_window,
        font_path=template.font_path,
        color=template.text_color,
    )
    _log.debug(
        "rendered template=%s size=%sx%s photo=%s zoom=%.2f name_lines=%s",
        template.id,
        width,
        height,
        photo is not None,
        state.view.zoom,
        len(text_layout.lines) if text_layout else 0,
    )
    return RenderResult(image=surface.image, geometry=geometry, placement=placement, text_layout=text_layout)


def encode_png(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG", optimize=True)
    return buffer.getvalue()
