"""Pointer and wheel handling for the photo window.

All functions take the explicit ``SessionState`` and mutate its view and pan
fields. Pointer coordinates are display coordinates (widget pixels); they are
converted to canvas pixels only for the photo-window hit test. Pan deltas are
applied in display pixels as they arrive.
"""
from __future__ import annotations

from dataclasses import dataclass

from badgemaker.constants import BUTTON_ZOOM_STEP, WHEEL_ZOOM_STEP
from badgemaker.models import PixelRegion, SessionState
from badgemaker.render.compositor import clamp_zoom


@dataclass(frozen=True, slots=True)
class Viewport:
    """Where the canvas buffer is shown on screen."""

    left: float
    top: float
    display_width: float
    display_height: float
    canvas_width: int
    canvas_height: int

    def to_canvas(self, x: float, y: float) -> tuple[float, float]:
        scale_x = self.canvas_width / self.display_width if self.display_width > 0 else 1.0
        scale_y = self.canvas_height / self.display_height if self.display_height > 0 else 1.0
        return ((x - self.left) * scale_x, (y - self.top) * scale_y)


def display_to_canvas(viewport: Viewport, x: float, y: float) -> tuple[float, float]:
    return viewport.to_canvas(x, y)


def hit_photo_window(viewport: Viewport, window: PixelRegion, x: float, y: float) -> bool:
    canvas_x, canvas_y = viewport.to_canvas(x, y)
    return window.contains(canvas_x, canvas_y)


def step_zoom(zoom: float, delta: float) -> float:
    return clamp_zoom(round(zoom + delta, 2))


def pointer_down(state: SessionState, viewport: Viewport, window: PixelRegion, x: float, y: float) -> bool:
    """Start panning when the press lands inside the photo window."""
    if not hit_photo_window(viewport, window, x, y):
        return False
    state.pan_point = (x, y)
    return True


def pointer_move(state: SessionState, x: float, y: float) -> bool:
    if state.pan_point is None:
        return False
    last_x, last_y = state.pan_point
    state.pan_point = (x, y)
    state.view.offset_x += x - last_x
    state.view.offset_y += y - last_y
    return True


def end_pan(state: SessionState) -> bool:
    """Pointer up, cancel or leave. Returns whether a pan was in progress."""
    was_panning = state.pan_point is not None
    state.pan_point = None
    return was_panning


def wheel(
    state: SessionState,
    viewport: Viewport,
    window: PixelRegion,
    x: float,
    y: float,
    delta_y: float,
) -> bool:
    """Zoom by one wheel tick inside the photo window.

    Returns True when the event was consumed and the host should suppress its
    default scrolling.
    """
    if not hit_photo_window(viewport, window, x, y):
        return False
    if delta_y == 0:
        return True
    step = -WHEEL_ZOOM_STEP if delta_y > 0 else WHEEL_ZOOM_STEP
    state.view.zoom = step_zoom(state.view.zoom, step)
    return True


def zoom_in(state: SessionState) -> float:
    state.view.zoom = step_zoom(state.view.zoom, BUTTON_ZOOM_STEP)
    return state.view.zoom


def zoom_out(state: SessionState) -> float:
    state.view.zoom = step_zoom(state.view.zoom, -BUTTON_ZOOM_STEP)
    return state.view.zoom


def set_zoom(state: SessionState, zoom: float) -> float:
    state.view.zoom = clamp_zoom(zoom)
    return state.view.zoom


def reset_view(state: SessionState) -> None:
    state.reset_view()
