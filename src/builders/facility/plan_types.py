"""Plan result dataclasses shared by the compiler and components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple


Vec3 = Tuple[float, float, float]


class InstanceKind(str, Enum):
    """Opaque tag the renderer groups draw calls by."""

    column = "column"
    rafter = "rafter"
    roof_slope = "roofSlope"
    solar_panel = "solarPanel"
    parking_divider = "parkingDivider"
    vehicle = "vehicle"
    gutter = "gutter"
    container = "container"


@dataclass(frozen=True)
class PlacedInstance:
    """One placed element.

    Coordinate system: x is the structure width, y is up, z runs along the
    structure length. ``rotation_rad`` is an XYZ Euler triple in radians;
    ``dimensions_m`` is the unrotated box size (x, y, z) when the element
    has one. ``params`` is frozen into a read-only mapping and is left out
    of the hash.
    """

    name: str
    kind: InstanceKind
    location_m: Vec3
    rotation_rad: Vec3 = (0.0, 0.0, 0.0)
    dimensions_m: Optional[Vec3] = None
    params: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))


@dataclass
class LayoutPlan:
    """Flat, ordered container of placed instances for one facility."""

    instances: List[PlacedInstance] = field(default_factory=list)
    metadata: Dict[str, str] = field(default_factory=dict)

    def by_kind(self) -> Dict[InstanceKind, List[PlacedInstance]]:
        grouped: Dict[InstanceKind, List[PlacedInstance]] = {}
        for instance in self.instances:
            grouped.setdefault(instance.kind, []).append(instance)
        return grouped

    def count(self, kind: InstanceKind) -> int:
        return sum(1 for instance in self.instances if instance.kind == kind)
