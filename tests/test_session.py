import io
from pathlib import Path

import pytest
from PIL import Image

from badgemaker.models import BadgeTemplate, Region, SessionState
from badgemaker.session import BadgeSession, LoadTracker, read_photo
from badgemaker.template_loader import load_templates

PHOTO_WINDOW = Region(602, 443, 230, 250)
NAME_WINDOW = Region(565, 700, 300, 95)


def _template(tmp_path: Path, template_id: str, size: tuple[int, int] | None = (980, 980), order: int = 0) -> BadgeTemplate:
    asset = tmp_path / f"{template_id}.png"
    if size is not None:
        Image.new("RGB", size, "white").save(asset)
    return BadgeTemplate(
        id=template_id,
        title=template_id.title(),
        asset=asset,
        photo_window=PHOTO_WINDOW,
        name_window=NAME_WINDOW,
        order=order,
    )


def _session(tmp_path: Path, **kwargs) -> BadgeSession:
    templates = {
        "speaking": _template(tmp_path, "speaking", order=0),
        "attending": _template(tmp_path, "attending", size=(1080, 1350), order=1),
    }
    return BadgeSession(templates, initial_template="attending", **kwargs)


def _png_bytes(size: tuple[int, int], color: str) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


def test_load_tracker_only_accepts_latest_token() -> None:
    tracker = LoadTracker()
    first = tracker.begin("photo")
    second = tracker.begin("photo")
    other = tracker.begin("template")

    assert not tracker.is_current(first)
    assert tracker.is_current(second)
    assert tracker.is_current(other)


def test_template_loads_at_native_size(tmp_path: Path) -> None:
    session = _session(tmp_path)
    assert not session.can_export
    assert session.render() is None

    assert session.load_template_image()
    result = session.render()

    assert result is not None
    assert result.image.size == (1080, 1350)
    assert session.photo_window is not None
    assert (session.photo_window.x, session.photo_window.y) == (663, 610)


def test_missing_asset_disables_export(tmp_path: Path) -> None:
    templates = {"broken": _template(tmp_path, "broken", size=None)}
    session = BadgeSession(templates)

    assert session.load_template_image()
    assert session.template_image is None
    assert not session.can_export
    with pytest.raises(RuntimeError):
        session.export_png()


def test_stale_template_load_is_discarded(tmp_path: Path) -> None:
    session = _session(tmp_path)
    stale = session.select_template("speaking")
    current = session.select_template("attending")

    assert not session.apply_template_image(stale, Image.new("RGBA", (980, 980), "red"))
    assert session.template_image is None
    assert session.apply_template_image(current, Image.new("RGBA", (1080, 1350), "white"))
    assert session.template_image is not None
    assert session.template_image.size == (1080, 1350)


def test_template_switch_resets_view_and_pan(tmp_path: Path) -> None:
    session = _session(tmp_path)
    session.state.view.zoom = 2.5
    session.state.view.offset_x = 30.0
    session.state.pan_point = (5.0, 5.0)
    session.set_name("Grace")

    session.select_template("speaking")

    assert session.state.view.zoom == 1.0
    assert (session.state.view.offset_x, session.state.view.offset_y) == (0.0, 0.0)
    assert not session.state.panning
    assert session.state.name == "Grace"
    assert session.template_image is None


def test_unknown_template_raises(tmp_path: Path) -> None:
    session = _session(tmp_path)
    with pytest.raises(KeyError):
        session.select_template("sponsor")


def test_photo_load_resets_view(tmp_path: Path) -> None:
    session = _session(tmp_path)
    session.state.view.zoom = 2.0
    session.state.view.offset_y = -12.0

    assert session.load_photo_bytes(_png_bytes((400, 300), "red"))

    assert session.photo is not None
    assert session.photo.size == (400, 300)
    assert session.state.view.zoom == 1.0
    assert session.state.view.offset_y == 0.0


def test_stale_photo_load_is_discarded(tmp_path: Path) -> None:
    session = _session(tmp_path)
    stale = session.begin_photo_load()
    current = session.begin_photo_load()

    assert not session.apply_photo(stale, Image.new("RGB", (10, 10), "blue"))
    assert session.photo is None
    assert session.apply_photo(current, Image.new("RGB", (20, 10), "green"))
    assert session.photo is not None
    assert session.photo.size == (20, 10)


def test_photo_decode_failure_shows_template_only(tmp_path: Path) -> None:
    session = _session(tmp_path)
    session.load_photo_bytes(_png_bytes((50, 50), "red"))

    assert session.load_photo_bytes(b"definitely not an image")
    assert session.photo is None

    bad_file = tmp_path / "broken.jpg"
    bad_file.write_bytes(b"\x00\x01\x02")
    assert session.load_photo(bad_file)
    assert session.photo is None


def test_name_is_truncated(tmp_path: Path) -> None:
    session = _session(tmp_path)
    assert session.set_name("x" * 45) == "x" * 30

    short = _session(tmp_path, name_max_length=5)
    assert short.set_name("Katherine") == "Kathe"


def test_export_png_and_filename(tmp_path: Path) -> None:
    session = _session(tmp_path)
    session.load_template_image()
    session.load_photo_bytes(_png_bytes((640, 480), "red"))
    session.set_name("Ada Lovelace")

    assert session.export_filename() == "attending-badge.png"
    data = session.export_png()
    with Image.open(io.BytesIO(data)) as exported:
        assert exported.format == "PNG"
        assert exported.size == (1080, 1350)

    target = session.save_png(tmp_path / "out")
    assert target.name == "attending-badge.png"
    assert target.read_bytes() == data


def test_clear_photo_discards_pending_load(tmp_path: Path) -> None:
    session = _session(tmp_path)
    pending = session.begin_photo_load()
    session.clear_photo()

    assert not session.apply_photo(pending, Image.new("RGB", (10, 10), "blue"))
    assert session.photo is None


def test_session_state_round_trips_through_dict() -> None:
    state = SessionState(template_id="speaking", name="Linus", pan_point=(3.0, 4.0))
    state.view.zoom = 1.75
    state.view.offset_x = -8.0

    restored = SessionState.from_dict(state.to_dict())

    assert restored == state
    assert SessionState.from_dict({"zoom": 9}).view.zoom == 3.0


def test_oversized_photo_reverts_to_no_photo(monkeypatch, tmp_path: Path) -> None:
    session = _session(tmp_path)
    session.load_photo_bytes(_png_bytes((50, 50), "red"))
    path = tmp_path / "huge.png"
    Image.new("RGB", (200, 200), "white").save(path)
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)

    assert read_photo(path) is None
    assert session.load_photo(path)
    assert session.photo is None
    assert session.load_photo_bytes(path.read_bytes())
    assert session.photo is None


def test_builtin_templates_are_ready_to_export() -> None:
    templates = load_templates()
    for template_id, template in templates.items():
        assert template.asset.is_file()

        session = BadgeSession(templates, initial_template=template_id)
        assert session.load_template_image()
        assert session.can_export

        session.set_name("Ada Lovelace")
        result = session.render()
        assert result is not None
        assert result.image.size == (1080, 1080)
        assert session.export_png().startswith(b"\x89PNG")
