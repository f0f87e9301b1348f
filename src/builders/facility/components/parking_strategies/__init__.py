"""Occupant anchoring strategies for angled parking bays."""

from src.builders.facility.components.parking_strategies.occupant_aisle import (
    anchor_occupant_aisle_midpoint,
)
from src.builders.facility.components.parking_strategies.occupant_perpendicular import (
    anchor_occupant_bay_perpendicular,
)

__all__ = [
    "anchor_occupant_aisle_midpoint",
    "anchor_occupant_bay_perpendicular",
]
