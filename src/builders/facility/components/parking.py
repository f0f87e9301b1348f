"""Parking component: angled bay dividers and optional vehicle occupants.

Bays are laid along an aisle parallel to the structure length (z). For bay
``i`` the divider pivots on the aisle-side point ``(pivot_x, z_i)`` with
``z_i = start_z + i * bay_pitch`` and ``bay_pitch = width / sin(angle)``.

Side signs: a bay row with side ``+1`` opens towards -x and its divider is
rotated by ``+angle`` about y; side ``-1`` opens towards +x with ``-angle``.
A two-row class has one row of each side around its aisle centre; a
one-row class has a single ``-1`` row whose pivot line sits
``aisle_offset_m`` to the -x side of the aisle centre.

Occupancy is one Bernoulli draw per bay side from the injected ``rng``,
taken after both dividers of the bay have been laid out, in row order.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import replace

from src.builders.facility.components.parking_strategies import (
    anchor_occupant_aisle_midpoint,
    anchor_occupant_bay_perpendicular,
)
from src.builders.facility.diagnostics import Severity, emit_simple
from src.builders.facility.plan_types import InstanceKind, PlacedInstance
from src.builders.facility.spec.types import BuildContext, ParkingBay, default_context
from src.schema import (
    ConfigError,
    OccupantAnchor,
    ParkingConfig,
    VehicleClassConfig,
    VehicleKind,
)

RandomSource = Callable[[], float]

MIN_BAYS = 2
GROUND_LIFT_M = 0.02
MARKING_THICKNESS_M = 0.02

OCCUPANT_STRATEGIES: dict[OccupantAnchor, Callable] = {
    OccupantAnchor.aisle_midpoint: anchor_occupant_aisle_midpoint,
    OccupantAnchor.bay_perpendicular: anchor_occupant_bay_perpendicular,
}


def bay_angle_rad(vehicle: VehicleClassConfig) -> float:
    if not 0.0 < vehicle.angle_degrees < 90.0:
        raise ConfigError(
            f"parking.angle_degrees must be strictly between 0 and 90 (got {vehicle.angle_degrees!r})"
        )
    return vehicle.angle_degrees * (math.pi / 180.0)


def bay_pitch_m(vehicle: VehicleClassConfig) -> float:
    """Spacing between successive dividers along the aisle."""
    return vehicle.width_m / math.sin(bay_angle_rad(vehicle))


def available_length_m(vehicle: VehicleClassConfig, structure_length_m: float) -> float:
    return structure_length_m - vehicle.length_allowance_m


def bay_count(vehicle: VehicleClassConfig, structure_length_m: float) -> int:
    count = (
        math.floor(available_length_m(vehicle, structure_length_m) / bay_pitch_m(vehicle))
        - vehicle.margin_bays
    )
    if count < MIN_BAYS:
        raise ConfigError(
            f"parking class fits {count} bay(s) along {structure_length_m!r} m; "
            f"at least {MIN_BAYS} are required"
        )
    return count


def bay_start_z(vehicle: VehicleClassConfig, structure_length_m: float) -> float:
    return -(structure_length_m / 2.0) + vehicle.start_offset_m


def row_pivots(vehicle: VehicleClassConfig) -> list[tuple[int, float]]:
    """(side_sign, pivot_x) per bay row, in draw order."""
    center = vehicle.aisle_center_x_m
    offset = vehicle.aisle_offset_m
    if vehicle.rows == 2:
        return [(1, center - offset), (-1, center + offset)]
    if vehicle.rows == 1:
        return [(-1, center - offset)]
    raise ConfigError(f"parking.rows must be 1 or 2 (got {vehicle.rows!r})")


def divider_center(bay: ParkingBay, *, length_m: float, angle_rad: float) -> tuple[float, float]:
    half = length_m / 2.0
    x = bay.pivot_x - (bay.side_sign * math.sin(angle_rad) * half)
    z = bay.aisle_position_z + (math.cos(angle_rad) * half)
    return x, z


def _divider_instance(
    kind: VehicleKind,
    bay: ParkingBay,
    vehicle: VehicleClassConfig,
    angle_rad: float,
) -> PlacedInstance:
    x, z = divider_center(bay, length_m=vehicle.length_m, angle_rad=angle_rad)
    return PlacedInstance(
        name=f"{kind.value}_divider_{_row_label(bay)}_{bay.index + 1}",
        kind=InstanceKind.parking_divider,
        location_m=(x, GROUND_LIFT_M, z),
        rotation_rad=(0.0, bay.side_sign * angle_rad, 0.0),
        dimensions_m=(vehicle.line_width_m, MARKING_THICKNESS_M, vehicle.length_m),
        params={"vehicle_class": kind.value, "bay": bay.index, "side": bay.side_sign},
    )


def _occupant_instance(
    bay: ParkingBay,
    vehicle: VehicleClassConfig,
    angle_rad: float,
    pitch_m: float,
    strategy: Callable,
) -> PlacedInstance:
    kind = bay.vehicle_kind
    x, z = strategy(bay, vehicle=vehicle, angle_rad=angle_rad, bay_pitch_m=pitch_m)
    return PlacedInstance(
        name=f"{kind.value}_{_row_label(bay)}_{bay.index + 1}",
        kind=InstanceKind.vehicle,
        location_m=(x, GROUND_LIFT_M, z),
        # Flipped to face the aisle.
        rotation_rad=(0.0, (bay.side_sign * angle_rad) + math.pi, 0.0),
        dimensions_m=tuple(float(v) for v in vehicle.vehicle_size_m),
        params={"vehicle_class": kind.value, "bay": bay.index, "side": bay.side_sign},
    )


def _row_label(bay: ParkingBay) -> str:
    return "left" if bay.side_sign > 0 else "right"


def validate_vehicle_class(vehicle: VehicleClassConfig, structure_length_m: float) -> int:
    """Check every precondition of ``plan_vehicle_class``; return the bay count."""
    for name in ("width_m", "length_m", "line_width_m"):
        value = getattr(vehicle, name)
        if not value > 0:
            raise ConfigError(f"parking.{name} must be > 0 (got {value!r})")
    if not 0.0 <= vehicle.fill_probability <= 1.0:
        raise ConfigError(
            f"parking.fill_probability must be within [0, 1] (got {vehicle.fill_probability!r})"
        )
    row_pivots(vehicle)
    return bay_count(vehicle, structure_length_m)


def plan_vehicle_class(
    kind: VehicleKind,
    vehicle: VehicleClassConfig,
    structure_length_m: float,
    rng: RandomSource,
    ctx: BuildContext | None = None,
) -> list[PlacedInstance]:
    ctx = ctx or default_context()
    count = validate_vehicle_class(vehicle, structure_length_m)
    angle_rad = bay_angle_rad(vehicle)
    pitch_m = bay_pitch_m(vehicle)
    start_z = bay_start_z(vehicle, structure_length_m)
    rows = row_pivots(vehicle)
    fill_threshold = 1.0 - vehicle.fill_probability

    strategy = OCCUPANT_STRATEGIES[OccupantAnchor(vehicle.occupant_anchor)]
    emit_simple(
        ctx.diag,
        run_id=ctx.run_id,
        stage="layout",
        component="parking",
        code="STRATEGY_SELECTED",
        severity=Severity.INFO,
        path=f"parking.{kind.value}.occupant_anchor",
        source="config",
        reason="occupant anchoring strategy selected",
        payload={
            "strategy": OccupantAnchor(vehicle.occupant_anchor).value,
            "handler": strategy.__name__.removeprefix("anchor_occupant_"),
        },
    )

    instances: list[PlacedInstance] = []
    occupied_count = 0
    for index in range(count):
        z = start_z + (index * pitch_m)
        bays = [
            ParkingBay(index=index, aisle_position_z=z, side_sign=side, pivot_x=pivot_x, occupied=False)
            for side, pivot_x in rows
        ]
        for bay in bays:
            instances.append(_divider_instance(kind, bay, vehicle, angle_rad))
        bays = [
            replace(bay, occupied=True, vehicle_kind=kind) if rng() > fill_threshold else bay
            for bay in bays
        ]
        for bay in bays:
            if not bay.occupied:
                continue
            occupied_count += 1
            instances.append(_occupant_instance(bay, vehicle, angle_rad, pitch_m, strategy))

    last_far_end_z = start_z + ((count - 1) * pitch_m) + (math.cos(angle_rad) * vehicle.length_m)
    if last_far_end_z > structure_length_m / 2.0:
        emit_simple(
            ctx.diag,
            run_id=ctx.run_id,
            stage="layout",
            component="parking",
            code="PARKING_BAY_OVERRUN",
            severity=Severity.WARN,
            path=f"parking.{kind.value}",
            source="computed",
            reason="last bay extends past the structure end",
            resolved_value=round(last_far_end_z, 6),
        )
    emit_simple(
        ctx.diag,
        run_id=ctx.run_id,
        stage="layout",
        component="parking",
        code="BAYS_PLANNED",
        severity=Severity.INFO,
        path=f"parking.{kind.value}",
        source="computed",
        reason="bays planned for vehicle class",
        payload={
            "bays": count,
            "rows": len(rows),
            "bay_pitch_m": round(pitch_m, 6),
            "occupied": occupied_count,
        },
    )
    return instances


def plan_parking(
    parking: ParkingConfig,
    structure_length_m: float,
    rng: RandomSource,
    ctx: BuildContext | None = None,
) -> list[PlacedInstance]:
    ctx = ctx or default_context()
    instances: list[PlacedInstance] = []
    for kind, vehicle in parking.classes():
        if not vehicle.enabled:
            continue
        instances.extend(plan_vehicle_class(kind, vehicle, structure_length_m, rng, ctx))
    emit_simple(
        ctx.diag,
        run_id=ctx.run_id,
        stage="layout",
        component="parking",
        code="GENERATOR_DONE",
        severity=Severity.INFO,
        source="computed",
        reason="parking planned",
        payload={"instances": len(instances)},
    )
    return instances
