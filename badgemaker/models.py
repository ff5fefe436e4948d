from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from badgemaker.constants import DEFAULT_TEMPLATE_ID, ZOOM_MAX, ZOOM_MIN


@dataclass(frozen=True, slots=True)
class Region:
    """Rectangle in the 980x980 baseline space."""

    x: float
    y: float
    w: float
    h: float


@dataclass(frozen=True, slots=True)
class PixelRegion:
    """Rectangle in native template pixels."""

    x: int
    y: int
    w: int
    h: int

    @property
    def right(self) -> int:
        return self.x + self.w

    @property
    def bottom(self) -> int:
        return self.y + self.h

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + self.w / 2, self.y + self.h / 2)

    def contains(self, px: float, py: float) -> bool:
        # Edges count as inside.
        return self.x <= px <= self.right and self.y <= py <= self.bottom


@dataclass(frozen=True, slots=True)
class BadgeTemplate:
    id: str
    title: str
    asset: Path
    photo_window: Region
    name_window: Region
    border_color: str = "#000000"
    text_color: str = "#000000"
    font_path: Path | None = None
    order: int = 0


@dataclass(slots=True)
class ViewState:
    zoom: float = ZOOM_MIN
    offset_x: float = 0.0
    offset_y: float = 0.0

    def reset(self) -> None:
        self.zoom = ZOOM_MIN
        self.offset_x = 0.0
        self.offset_y = 0.0


@dataclass(slots=True)
class SessionState:
    template_id: str = DEFAULT_TEMPLATE_ID
    view: ViewState = field(default_factory=ViewState)
    name: str = ""
    pan_point: tuple[float, float] | None = None

    @property
    def panning(self) -> bool:
        return self.pan_point is not None

    def reset_view(self) -> None:
        self.view.reset()
        self.pan_point = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "template_id": self.template_id,
            "zoom": self.view.zoom,
            "offset": {"x": self.view.offset_x, "y": self.view.offset_y},
            "name": self.name,
            "pan_point": list(self.pan_point) if self.pan_point else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SessionState:
        offset = data.get("offset") or {}
        pan_point = data.get("pan_point")
        zoom = float(data.get("zoom") or ZOOM_MIN)
        return cls(
            template_id=str(data.get("template_id") or DEFAULT_TEMPLATE_ID),
            view=ViewState(
                zoom=min(ZOOM_MAX, max(ZOOM_MIN, zoom)),
                offset_x=float(offset.get("x") or 0.0),
                offset_y=float(offset.get("y") or 0.0),
            ),
            name=str(data.get("name") or ""),
            pan_point=(float(pan_point[0]), float(pan_point[1])) if pan_point else None,
        )
