"""Bay-perpendicular occupant anchoring.

The vehicle sits halfway along the divider axis from the pivot, then half
a bay width across the divider, into the bay it bounds.
"""

from __future__ import annotations

import math

from src.builders.facility.spec.types import ParkingBay
from src.schema import VehicleClassConfig


def anchor_occupant_bay_perpendicular(
    bay: ParkingBay,
    *,
    vehicle: VehicleClassConfig,
    angle_rad: float,
    bay_pitch_m: float,
) -> tuple[float, float]:
    del bay_pitch_m
    reach_m = vehicle.length_m / 2.0
    across_m = vehicle.width_m / 2.0
    sin_a, cos_a = math.sin(angle_rad), math.cos(angle_rad)
    x = bay.pivot_x - (bay.side_sign * ((sin_a * reach_m) + (cos_a * across_m)))
    z = bay.aisle_position_z + (cos_a * reach_m) - (sin_a * across_m)
    return x, z
