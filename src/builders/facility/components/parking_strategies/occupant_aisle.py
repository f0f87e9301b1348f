"""Aisle-midpoint occupant anchoring.

The vehicle sits halfway along the divider axis from the pivot, shifted
half a bay pitch along the aisle so it lands between two dividers.
"""

from __future__ import annotations

import math

from src.builders.facility.spec.types import ParkingBay
from src.schema import VehicleClassConfig


def anchor_occupant_aisle_midpoint(
    bay: ParkingBay,
    *,
    vehicle: VehicleClassConfig,
    angle_rad: float,
    bay_pitch_m: float,
) -> tuple[float, float]:
    reach_m = vehicle.length_m / 2.0
    x = bay.pivot_x - (bay.side_sign * math.sin(angle_rad) * reach_m)
    z = bay.aisle_position_z + (bay_pitch_m / 2.0) + (math.cos(angle_rad) * reach_m)
    return x, z
