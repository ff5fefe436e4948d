import random

from badgemaker import interaction
from badgemaker.interaction import Viewport
from badgemaker.models import PixelRegion, SessionState

PHOTO_WINDOW = PixelRegion(602, 443, 230, 250)
# 980px canvas shown at 490px, offset inside its widget.
VIEWPORT = Viewport(left=10, top=20, display_width=490, display_height=490, canvas_width=980, canvas_height=980)


def _display_point(canvas_x: float, canvas_y: float) -> tuple[float, float]:
    return (VIEWPORT.left + canvas_x / 2, VIEWPORT.top + canvas_y / 2)


def test_display_to_canvas_uses_buffer_to_display_ratio() -> None:
    assert interaction.display_to_canvas(VIEWPORT, 10, 20) == (0.0, 0.0)
    assert interaction.display_to_canvas(VIEWPORT, 500, 510) == (980.0, 980.0)


def test_pointer_down_outside_window_does_not_start_pan() -> None:
    state = SessionState()
    x, y = _display_point(100, 100)

    assert not interaction.pointer_down(state, VIEWPORT, PHOTO_WINDOW, x, y)
    assert not state.panning


def test_pan_accumulates_display_deltas() -> None:
    state = SessionState()
    x, y = _display_point(700, 500)

    assert interaction.pointer_down(state, VIEWPORT, PHOTO_WINDOW, x, y)
    assert state.panning
    assert interaction.pointer_move(state, x + 10, y + 5)
    assert interaction.pointer_move(state, x + 13, y + 3)

    # Deltas are applied in display pixels without conversion.
    assert (state.view.offset_x, state.view.offset_y) == (13.0, 3.0)
    assert state.pan_point == (x + 13, y + 3)


def test_pan_may_continue_outside_window() -> None:
    state = SessionState()
    x, y = _display_point(700, 500)
    interaction.pointer_down(state, VIEWPORT, PHOTO_WINDOW, x, y)

    assert interaction.pointer_move(state, 0, 0)
    assert state.view.offset_x == -x
    assert state.view.offset_y == -y


def test_end_pan_returns_to_idle() -> None:
    state = SessionState()
    x, y = _display_point(700, 500)
    interaction.pointer_down(state, VIEWPORT, PHOTO_WINDOW, x, y)

    assert interaction.end_pan(state)
    assert not state.panning
    assert not interaction.end_pan(state)
    assert not interaction.pointer_move(state, x + 50, y + 50)
    assert (state.view.offset_x, state.view.offset_y) == (0.0, 0.0)


def test_wheel_inside_window_zooms_and_is_consumed() -> None:
    state = SessionState()
    x, y = _display_point(700, 500)

    assert interaction.wheel(state, VIEWPORT, PHOTO_WINDOW, x, y, delta_y=-120)
    assert state.view.zoom == 1.05
    assert interaction.wheel(state, VIEWPORT, PHOTO_WINDOW, x, y, delta_y=120)
    assert state.view.zoom == 1.0
    assert interaction.wheel(state, VIEWPORT, PHOTO_WINDOW, x, y, delta_y=120)
    assert state.view.zoom == 1.0


def test_wheel_outside_window_is_ignored() -> None:
    state = SessionState()
    x, y = _display_point(50, 50)

    assert not interaction.wheel(state, VIEWPORT, PHOTO_WINDOW, x, y, delta_y=-120)
    assert state.view.zoom == 1.0


def test_wheel_zoom_stays_clamped_and_rounded() -> None:
    state = SessionState()
    x, y = _display_point(700, 500)
    rng = random.Random(7)
    for _ in range(400):
        interaction.wheel(state, VIEWPORT, PHOTO_WINDOW, x, y, delta_y=rng.choice([-120, 120, -120]))
        assert 1.0 <= state.view.zoom <= 3.0
        assert round(state.view.zoom, 2) == state.view.zoom

    for _ in range(60):
        interaction.wheel(state, VIEWPORT, PHOTO_WINDOW, x, y, delta_y=-120)
    assert state.view.zoom == 3.0


def test_zoom_buttons_slider_and_reset() -> None:
    state = SessionState()

    assert interaction.zoom_in(state) == 1.1
    assert interaction.zoom_in(state) == 1.2
    assert interaction.zoom_out(state) == 1.1
    assert interaction.set_zoom(state, 7.5) == 3.0
    assert interaction.set_zoom(state, 0.25) == 1.0

    state.view.offset_x = 40.0
    state.pan_point = (1.0, 2.0)
    interaction.reset_view(state)
    assert state.view.zoom == 1.0
    assert (state.view.offset_x, state.view.offset_y) == (0.0, 0.0)
    assert not state.panning


def test_hit_test_follows_canvas_scaling() -> None:
    small = Viewport(left=0, top=0, display_width=245, display_height=245, canvas_width=980, canvas_height=980)

    assert interaction.hit_photo_window(small, PHOTO_WINDOW, 602 / 4, 443 / 4)
    assert interaction.hit_photo_window(small, PHOTO_WINDOW, 832 / 4, 693 / 4)
    assert not interaction.hit_photo_window(small, PHOTO_WINDOW, 601 / 4, 500 / 4)


def test_horizontal_only_wheel_is_consumed_without_zooming() -> None:
    state = SessionState()
    state.view.zoom = 1.5
    x, y = _display_point(700, 500)

    assert interaction.wheel(state, VIEWPORT, PHOTO_WINDOW, x, y, delta_y=0)
    assert state.view.zoom == 1.5
