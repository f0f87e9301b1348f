"""Portal frame component: columns, rafters and roof slope sheets."""

from __future__ import annotations

import math

from src.builders.facility.diagnostics import Severity, emit_simple
from src.builders.facility.plan_types import InstanceKind, PlacedInstance
from src.builders.facility.spec.types import BuildContext, FrameGeometry, default_context
from src.schema import ConfigError, StructureConfig

_SIDES = (("left", -1.0, 1.0), ("right", 1.0, -1.0))


def column_count(structure: StructureConfig) -> int:
    if structure.column_spacing_m <= 0:
        raise ConfigError(
            f"structure.column_spacing_m must be > 0 (got {structure.column_spacing_m!r})"
        )
    count = math.ceil(structure.length_m / structure.column_spacing_m) + 1
    if count < 2:
        raise ConfigError(f"structure yields {count} column line(s); at least 2 are required")
    return count


def column_positions_z(structure: StructureConfig) -> list[float]:
    """Column ticks from -length/2 in steps of the spacing.

    The last tick may land beyond +length/2; it is kept, not clipped.
    """
    half_length = structure.length_m / 2.0
    return [
        (i * structure.column_spacing_m) - half_length
        for i in range(column_count(structure))
    ]


def build_structure(
    structure: StructureConfig,
    frame: FrameGeometry,
    ctx: BuildContext | None = None,
) -> list[PlacedInstance]:
    ctx = ctx or default_context()
    instances: list[PlacedInstance] = []

    column_dims = (structure.column_size_m, structure.eaves_height_m, structure.column_size_m)
    rafter_dims = (frame.rafter_length_m, structure.rafter_depth_m, structure.rafter_thickness_m)
    half_width = structure.width_m / 2.0

    ticks = column_positions_z(structure)
    for index, z in enumerate(ticks, start=1):
        for side, x_sign, _ in _SIDES:
            instances.append(
                PlacedInstance(
                    name=f"column_{side}_{index}",
                    kind=InstanceKind.column,
                    location_m=(x_sign * half_width, structure.eaves_height_m / 2.0, z),
                    dimensions_m=column_dims,
                    params={"side": side, "tick": index},
                )
            )
        # Rafters sit on the slope midpoint: halfway along the run and the rise.
        for side, x_sign, pitch_sign in _SIDES:
            instances.append(
                PlacedInstance(
                    name=f"rafter_{side}_{index}",
                    kind=InstanceKind.rafter,
                    location_m=(x_sign * frame.half_span_m / 2.0, frame.slope_mid_height_m, z),
                    rotation_rad=(0.0, 0.0, pitch_sign * frame.pitch_rad),
                    dimensions_m=rafter_dims,
                    params={"side": side, "tick": index},
                )
            )

    roof_dims = (
        frame.rafter_length_m,
        structure.roof_sheet_thickness_m,
        structure.length_m + structure.roof_overhang_m,
    )
    for side, x_sign, pitch_sign in _SIDES:
        instances.append(
            PlacedInstance(
                name=f"roof_slope_{side}",
                kind=InstanceKind.roof_slope,
                location_m=(
                    x_sign * frame.half_span_m / 2.0,
                    frame.slope_mid_height_m + structure.roof_sheet_lift_m,
                    0.0,
                ),
                rotation_rad=(0.0, 0.0, pitch_sign * frame.pitch_rad),
                dimensions_m=roof_dims,
                params={"side": side},
            )
        )

    overhang_m = ticks[-1] - (structure.length_m / 2.0)
    if overhang_m > 1e-9:
        emit_simple(
            ctx.diag,
            run_id=ctx.run_id,
            stage="layout",
            component="structure",
            code="COLUMN_OVERHANG",
            severity=Severity.WARN,
            path="structure.column_spacing_m",
            source="computed",
            reason="last column line lies beyond the structure end",
            input_value=structure.column_spacing_m,
            resolved_value=round(overhang_m, 6),
        )
    emit_simple(
        ctx.diag,
        run_id=ctx.run_id,
        stage="layout",
        component="structure",
        code="GENERATOR_DONE",
        severity=Severity.INFO,
        source="computed",
        reason="structure laid out",
        payload={"column_lines": len(ticks), "instances": len(instances)},
    )
    return instances
