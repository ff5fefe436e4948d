from PIL import Image, ImageChops

from badgemaker.constants import NAME_FONT_FLOOR
from badgemaker.models import PixelRegion
from badgemaker.render.surface import RasterSurface
from badgemaker.render.typography import draw_name, fit_name, initial_font_size

NAME_WINDOW = PixelRegion(565, 700, 300, 95)
WHITE = (255, 255, 255, 255)


def _changed_area(image: Image.Image, reference: Image.Image) -> tuple[int, int, int, int] | None:
    return ImageChops.difference(image.convert("RGB"), reference.convert("RGB")).getbbox()


def _narrow_measure(text: str, size: int) -> float:
    return len(text) * size * 0.6


def _wide_measure(text: str, size: int) -> float:
    return len(text) * size * 1.0


def test_initial_font_size_is_35_percent_of_height() -> None:
    assert initial_font_size(95) == 33
    assert initial_font_size(100) == 35

    layout = fit_name("Al", 300, 95, _narrow_measure)
    assert layout is not None
    assert layout.font_size == 33
    assert layout.lines == ("Al",)
    assert layout.line_offsets == (0.0,)


def test_empty_or_whitespace_name_draws_nothing() -> None:
    assert fit_name("", 300, 95, _narrow_measure) is None
    assert fit_name("   \t ", 300, 95, _narrow_measure) is None


def test_font_shrinks_in_two_pixel_steps_until_it_fits() -> None:
    layout = fit_name("Alexandria Jonathan-Whitfield", 300, 95, _narrow_measure)

    assert layout is not None
    # 29 chars * 0.6 * size <= 270 first holds at 15px (33, 31, ..., 15).
    assert layout.font_size == 15
    assert layout.lines == ("Alexandria Jonathan-Whitfield",)
    assert not layout.overflows


def test_two_line_fallback_when_floor_is_reached() -> None:
    layout = fit_name("Alexandria Jonathan-Whitfield", 300, 95, _wide_measure)

    assert layout is not None
    assert layout.font_size <= NAME_FONT_FLOOR
    assert layout.wrapped
    assert layout.lines == ("Alexandria", "Jonathan-Whitfield")
    spacing = layout.font_size * 1.2
    assert layout.line_offsets == (-spacing / 2, spacing / 2)


def test_first_line_keeps_all_but_last_word() -> None:
    layout = fit_name("Maria de la Cruz Fernandez", 120, 95, _wide_measure)

    assert layout is not None
    assert layout.lines == ("Maria de la Cruz", "Fernandez")


def test_single_overlong_word_stays_on_one_line() -> None:
    layout = fit_name("Supercalifragilisticexpialidocious", 300, 95, _wide_measure)

    assert layout is not None
    assert layout.lines == ("Supercalifragilisticexpialidocious",)
    assert layout.overflows


def test_even_start_stops_exactly_at_floor() -> None:
    layout = fit_name("x" * 100, 300, 40, _wide_measure)

    assert layout is not None
    assert layout.font_size == NAME_FONT_FLOOR


def test_whitespace_between_words_is_collapsed() -> None:
    layout = fit_name("  Ada   Lovelace ", 300, 95, _narrow_measure)

    assert layout is not None
    assert layout.lines == ("Ada Lovelace",)


def test_font_size_never_grows_as_name_lengthens() -> None:
    words = ["Ana", "Beatriz", "Carvalho", "Domingues", "Esteves", "Ferreira", "Gomes"]
    previous_size = None
    for count in range(1, len(words) + 1):
        layout = fit_name(" ".join(words[:count]), 300, 95, _narrow_measure)
        assert layout is not None
        if previous_size is not None:
            assert layout.font_size <= previous_size
        previous_size = layout.font_size
        if layout.font_size <= NAME_FONT_FLOOR and _narrow_measure(" ".join(words[:count]), layout.font_size) > 270:
            assert layout.wrapped


def test_draw_name_renders_inside_name_window_only() -> None:
    base = Image.new("RGBA", (980, 980), WHITE)
    for name in ("Ada Lovelace", "W" * 40):
        surface = RasterSurface(base.copy())
        layout = draw_name(surface, name, NAME_WINDOW)

        assert layout is not None
        bbox = _changed_area(surface.image, base)
        assert bbox is not None
        left, top, right, bottom = bbox
        assert left >= NAME_WINDOW.x
        assert top >= NAME_WINDOW.y
        assert right <= NAME_WINDOW.right
        assert bottom <= NAME_WINDOW.bottom


def test_draw_name_skips_blank_names() -> None:
    base = Image.new("RGBA", (980, 980), WHITE)
    surface = RasterSurface(base.copy())

    assert draw_name(surface, "   ", NAME_WINDOW) is None
    assert _changed_area(surface.image, base) is None


def test_overlong_word_is_cut_at_window_edges() -> None:
    base = Image.new("RGBA", (980, 980), WHITE)
    surface = RasterSurface(base.copy())

    layout = draw_name(surface, "W" * 40, NAME_WINDOW)

    assert layout is not None
    assert layout.font_size <= NAME_FONT_FLOOR
    assert layout.overflows
    bbox = _changed_area(surface.image, base)
    assert bbox is not None
    left, _, right, _ = bbox
    assert left <= NAME_WINDOW.x + 12
    assert right >= NAME_WINDOW.right - 12
    # Nothing spills past the window on either side.
    assert surface.image.getpixel((NAME_WINDOW.x - 1, int(NAME_WINDOW.center[1]))) == WHITE
    assert surface.image.getpixel((NAME_WINDOW.right + 1, int(NAME_WINDOW.center[1]))) == WHITE
