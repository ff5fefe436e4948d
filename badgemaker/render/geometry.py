from __future__ import annotations

import math

from badgemaker.constants import BASELINE_SIZE
from badgemaker.models import PixelRegion, Region


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (not banker's rounding)."""
    return int(math.floor(value + 0.5))


def scale_factors(width: int, height: int) -> tuple[float, float]:
    return (width / float(BASELINE_SIZE), height / float(BASELINE_SIZE))


def scaled_length(value: float, width: int) -> float:
    """Scale a baseline length (radius, stroke) by the horizontal factor."""
    return value * (width / float(BASELINE_SIZE))


def map_region(region: Region, width: int, height: int) -> PixelRegion:
    scale_x, scale_y = scale_factors(width, height)
    return PixelRegion(
        x=round_half_up(region.x * scale_x),
        y=round_half_up(region.y * scale_y),
        w=round_half_up(region.w * scale_x),
        h=round_half_up(region.h * scale_y),
    )
