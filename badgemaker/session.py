from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from PIL import Image

from badgemaker.constants import NAME_MAX_LENGTH
from badgemaker.decoders.image_decoder import decode_image, decode_image_bytes
from badgemaker.log import get_logger
from badgemaker.models import BadgeTemplate, PixelRegion, SessionState
from badgemaker.naming import build_export_name
from badgemaker.render.badge import BadgeGeometry, RenderResult, compute_geometry, encode_png, render_badge

_log = get_logger("session")


@dataclass(frozen=True, slots=True)
class LoadToken:
    slot: str
    generation: int


class LoadTracker:
    """Monotonic generation counter per load slot.

    Only the result of the most recently started load for a slot is applied;
    anything older is discarded when it finishes.
    """

    def __init__(self) -> None:
        self._generations: dict[str, int] = {}

    def begin(self, slot: str) -> LoadToken:
        generation = self._generations.get(slot, 0) + 1
        self._generations[slot] = generation
        return LoadToken(slot=slot, generation=generation)

    def is_current(self, token: LoadToken) -> bool:
        return self._generations.get(token.slot, 0) == token.generation


class BadgeSession:
    """Everything one user has on screen: template choice, photo, view and name."""

    TEMPLATE_SLOT = "template"
    PHOTO_SLOT = "photo"

    def __init__(
        self,
        templates: dict[str, BadgeTemplate],
        *,
        initial_template: str | None = None,
        name_max_length: int = NAME_MAX_LENGTH,
    ) -> None:
        if not templates:
            raise ValueError("at least one template is required")
        self.templates = dict(templates)
        template_id = initial_template if initial_template in self.templates else next(iter(self.templates))
        self.state = SessionState(template_id=template_id)
        self.name_max_length = max(1, int(name_max_length))
        self.template_image: Image.Image | None = None
        self.photo: Image.Image | None = None
        self._loads = LoadTracker()

    @property
    def template(self) -> BadgeTemplate:
        return self.templates[self.state.template_id]

    @property
    def can_export(self) -> bool:
        return self.template_image is not None

    @property
    def geometry(self) -> BadgeGeometry | None:
        if self.template_image is None:
            return None
        return compute_geometry(self.template, *self.template_image.size)

    @property
    def photo_window(self) -> PixelRegion | None:
        geometry = self.geometry
        return geometry.photo_window if geometry else None

    # Template

    def select_template(self, template_id: str) -> LoadToken:
        """Switch template and start a new artwork load.

        The view and any pan in progress are reset; the previous artwork is
        dropped so nothing renders until the new one arrives.
        """
        if template_id not in self.templates:
            raise KeyError(f"unknown template: {template_id}")
        self.state.template_id = template_id
        self.state.reset_view()
        self.template_image = None
        token = self._loads.begin(self.TEMPLATE_SLOT)
        _log.info("template selected id=%s generation=%s", template_id, token.generation)
        return token

    def apply_template_image(self, token: LoadToken, image: Image.Image | None) -> bool:
        if not self._loads.is_current(token):
            _log.debug("discarding stale template load generation=%s", token.generation)
            return False
        self.template_image = image.convert("RGBA") if image is not None else None
        if image is None:
            _log.warning("template image unavailable id=%s", self.state.template_id)
        return True

    def load_template_image(self) -> bool:
        token = self._loads.begin(self.TEMPLATE_SLOT)
        return self.apply_template_image(token, read_template_asset(self.template))

    # Photo

    def begin_photo_load(self) -> LoadToken:
        return self._loads.begin(self.PHOTO_SLOT)

    def apply_photo(self, token: LoadToken, image: Image.Image | None) -> bool:
        """Install a decoded upload; ``None`` means decoding failed."""
        if not self._loads.is_current(token):
            _log.debug("discarding stale photo load generation=%s", token.generation)
            return False
        self.photo = image.convert("RGBA") if image is not None else None
        self.state.reset_view()
        if image is None:
            _log.info("photo could not be decoded, showing template only")
        else:
            _log.info("photo loaded size=%sx%s", image.width, image.height)
        return True

    def load_photo(self, path: Path) -> bool:
        token = self.begin_photo_load()
        return self.apply_photo(token, read_photo(path))

    def load_photo_bytes(self, data: bytes) -> bool:
        token = self.begin_photo_load()
        try:
            image = decode_image_bytes(data)
        except (OSError, RuntimeError) as exc:
            _log.warning("uploaded photo failed to decode: %s", exc)
            image = None
        return self.apply_photo(token, image)

    def clear_photo(self) -> None:
        self.begin_photo_load()
        self.photo = None
        self.state.reset_view()

    # Name

    def set_name(self, name: str) -> str:
        self.state.name = (name or "")[: self.name_max_length]
        return self.state.name

    # Output

    def render(self) -> RenderResult | None:
        if self.template_image is None:
            return None
        return render_badge(self.template, self.template_image, self.state, self.photo)

    def export_filename(self) -> str:
        return build_export_name(self.state.template_id)

    def export_png(self) -> bytes:
        result = self.render()
        if result is None:
            raise RuntimeError("export is unavailable until the template image has loaded")
        return encode_png(result.image)

    def save_png(self, directory: Path) -> Path:
        data = self.export_png()
        directory.mkdir(parents=True, exist_ok=True)
        target = directory / self.export_filename()
        target.write_bytes(data)
        _log.info("exported badge %s", target)
        return target


def read_template_asset(template: BadgeTemplate) -> Image.Image | None:
    """Decode a template's artwork; failures yield ``None``."""
    try:
        return decode_image(template.asset)
    except (OSError, RuntimeError) as exc:
        _log.warning("template asset failed to load %s: %s", template.asset, exc)
        return None


def read_photo(path: Path) -> Image.Image | None:
    try:
        return decode_image(path)
    except (OSError, RuntimeError) as exc:
        _log.warning("photo failed to load %s: %s", path, exc)
        return None
