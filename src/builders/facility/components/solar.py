"""Solar array component: a panel grid tiled onto each roof slope.

Each slope is handled in its own local frame: x runs down/up the slope,
z along the structure length. The grid offsets are computed flat, rotated
by the slope pitch about the length axis and added to the slope anchor.

The right slope reuses the left slope's grid with the along-slope offset
negated (so row order mirrors about the ridge), and its anchor is then
pushed ``overhang_fix_m`` down-slope. Only the right slope gets that shift.

Panels wider than the slope are accepted as configured; the overflow is
reported as a ``SOLAR_SLOPE_OVERFLOW`` warning, never clamped.
"""

from __future__ import annotations

import math

from src.builders.facility.diagnostics import Severity, emit_simple
from src.builders.facility.geom_utils import add, rotate_about_z
from src.builders.facility.plan_types import InstanceKind, PlacedInstance
from src.builders.facility.spec.types import BuildContext, FrameGeometry, default_context
from src.schema import ConfigError, SolarConfig

# (side, slope sign); the left slope is rotated by +pitch.
SLOPES = (("left", 1), ("right", -1))


def along_slope_offset(solar: SolarConfig, row: int) -> float:
    return (
        (row * (solar.panel_length_m + solar.gap_along_slope_m))
        - ((solar.rows_per_slope * solar.panel_length_m) / 2.0)
        + (solar.panel_length_m / 2.0)
    )


def along_length_offset(solar: SolarConfig, col: int) -> float:
    return (
        (col * (solar.panel_width_m + solar.gap_along_length_m))
        - ((solar.panels_per_row * solar.panel_width_m) / 2.0)
    )


def grid_offsets(solar: SolarConfig) -> list[tuple[int, int, float, float]]:
    """Raw (row, col, x_off, z_off) for one slope, rows outermost."""
    return [
        (row, col, along_slope_offset(solar, row), along_length_offset(solar, col))
        for row in range(solar.rows_per_slope)
        for col in range(solar.panels_per_row)
    ]


def slope_extent_m(solar: SolarConfig) -> float:
    """Along-slope length covered by one slope's rows, gaps included."""
    return (solar.rows_per_slope * solar.panel_length_m) + (
        max(0, solar.rows_per_slope - 1) * solar.gap_along_slope_m
    )


def slope_anchor(solar: SolarConfig, frame: FrameGeometry, slope_sign: int) -> tuple[float, float, float]:
    cx = -slope_sign * frame.half_span_m / 2.0
    cy = frame.slope_mid_height_m + solar.panel_standoff_m
    if slope_sign < 0:
        cx += math.cos(frame.pitch_rad) * solar.overhang_fix_m
        cy -= math.sin(frame.pitch_rad) * solar.overhang_fix_m
    return (cx, cy, 0.0)


def expected_panel_count(solar: SolarConfig) -> int:
    return solar.rows_per_slope * solar.panels_per_row * len(SLOPES)


def place_solar_array(
    solar: SolarConfig,
    frame: FrameGeometry,
    ctx: BuildContext | None = None,
) -> list[PlacedInstance]:
    ctx = ctx or default_context()
    if solar.rows_per_slope <= 0 or solar.panels_per_row <= 0:
        raise ConfigError(
            "solar.rows_per_slope and solar.panels_per_row must be > 0 "
            f"(got {solar.rows_per_slope!r} x {solar.panels_per_row!r})"
        )

    panel_dims = (solar.panel_length_m, solar.panel_thickness_m, solar.panel_width_m)
    offsets = grid_offsets(solar)
    instances: list[PlacedInstance] = []
    for side, slope_sign in SLOPES:
        anchor = slope_anchor(solar, frame, slope_sign)
        pitch = slope_sign * frame.pitch_rad
        for row, col, x_off, z_off in offsets:
            local = (slope_sign * x_off, 0.0, z_off)
            instances.append(
                PlacedInstance(
                    name=f"solar_{side}_r{row + 1}_c{col + 1}",
                    kind=InstanceKind.solar_panel,
                    location_m=add(anchor, rotate_about_z(local, pitch)),
                    rotation_rad=(0.0, 0.0, pitch),
                    dimensions_m=panel_dims,
                    params={"side": side, "row": row, "col": col},
                )
            )

    extent_m = slope_extent_m(solar)
    if extent_m > frame.slope_length_m:
        emit_simple(
            ctx.diag,
            run_id=ctx.run_id,
            stage="layout",
            component="solar",
            code="SOLAR_SLOPE_OVERFLOW",
            severity=Severity.WARN,
            path="solar.rows_per_slope",
            source="computed",
            reason="panel rows are longer than the roof slope; accepted without clamping",
            input_value=solar.rows_per_slope,
            resolved_value={
                "extent_m": round(extent_m, 6),
                "slope_length_m": round(frame.slope_length_m, 6),
            },
        )
    emit_simple(
        ctx.diag,
        run_id=ctx.run_id,
        stage="layout",
        component="solar",
        code="GENERATOR_DONE",
        severity=Severity.INFO,
        source="computed",
        reason="solar array placed",
        payload={"panels": len(instances)},
    )
    return instances
