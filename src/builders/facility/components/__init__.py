"""Facility layout components."""

from src.builders.facility.components.parking import plan_parking, plan_vehicle_class
from src.builders.facility.components.site import build_site, translate_instances
from src.builders.facility.components.solar import place_solar_array
from src.builders.facility.components.structure import build_structure

__all__ = [
    "build_site",
    "build_structure",
    "place_solar_array",
    "plan_parking",
    "plan_vehicle_class",
    "translate_instances",
]
