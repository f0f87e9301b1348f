"""Portal frame geometry: pitch, slope and rafter lengths."""

from __future__ import annotations

import math
from functools import lru_cache

from src.builders.facility.spec.types import FrameGeometry
from src.schema import ConfigError, StructureConfig


@lru_cache(maxsize=32)
def compute_frame_geometry(structure: StructureConfig) -> FrameGeometry:
    """Derive the shared frame geometry for one structure configuration.

    Cached per (frozen, hashable) config value; a changed config is a new
    value and gets its own entry, nothing is mutated in place.
    """
    if structure.width_m <= 0:
        raise ConfigError(f"structure.width_m must be > 0 (got {structure.width_m!r})")
    if structure.ridge_height_m <= structure.eaves_height_m:
        raise ConfigError(
            "structure.ridge_height_m must be greater than structure.eaves_height_m "
            f"(got ridge={structure.ridge_height_m!r}, eaves={structure.eaves_height_m!r})"
        )

    half_span_m = structure.width_m / 2.0
    rise_m = structure.ridge_height_m - structure.eaves_height_m
    slope_length_m = math.hypot(rise_m, half_span_m)
    return FrameGeometry(
        half_span_m=half_span_m,
        rise_m=rise_m,
        pitch_rad=math.atan(rise_m / half_span_m),
        slope_length_m=slope_length_m,
        rafter_length_m=slope_length_m + structure.rafter_overhang_m,
        eaves_height_m=structure.eaves_height_m,
    )
