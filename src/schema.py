from __future__ import annotations

from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# =========================
# Errors
# =========================

class ConfigError(Exception):
    """Raised for a layout configuration that cannot produce a valid facility.

    Not a ValueError subclass: pydantic re-wraps ValueError raised inside
    validators, while other exceptions propagate unchanged.
    """


def _require_positive(owner: str, **values: float) -> None:
    for name, value in values.items():
        if not value > 0:
            raise ConfigError(f"{owner}.{name} must be > 0 (got {value!r})")


# =========================
# Enums / core types
# =========================

class VehicleKind(str, Enum):
    car = "car"
    coach = "coach"


class OccupantAnchor(str, Enum):
    aisle_midpoint = "aisle_midpoint"
    bay_perpendicular = "bay_perpendicular"


_FROZEN = ConfigDict(frozen=True, extra="forbid")


# =========================
# Structure (portal frame)
# =========================

class StructureConfig(BaseModel):
    """Dual-pitch portal frame. Length runs along z, width along x."""

    model_config = _FROZEN

    length_m: float = 96.0
    width_m: float = 12.0
    column_spacing_m: float = 6.0
    eaves_height_m: float = 5.0
    ridge_height_m: float = 5.9

    column_size_m: float = 0.2
    # Added to the slope length to give the rafter length.
    rafter_overhang_m: float = 0.5
    rafter_depth_m: float = 0.3
    rafter_thickness_m: float = 0.15
    # Added to the structure length for the two roof slope sheets.
    roof_overhang_m: float = 1.0
    roof_sheet_thickness_m: float = 0.05
    roof_sheet_lift_m: float = 0.15

    @model_validator(mode="after")
    def sanity(self):
        _require_positive(
            "structure",
            length_m=self.length_m,
            width_m=self.width_m,
            column_spacing_m=self.column_spacing_m,
            eaves_height_m=self.eaves_height_m,
            column_size_m=self.column_size_m,
        )
        if self.ridge_height_m <= self.eaves_height_m:
            raise ConfigError(
                "structure.ridge_height_m must be greater than structure.eaves_height_m "
                f"(got ridge={self.ridge_height_m!r}, eaves={self.eaves_height_m!r})"
            )
        return self


# =========================
# Solar array
# =========================

class SolarConfig(BaseModel):
    """Panel grid tiled onto each roof slope.

    Panels are laid with their long edge (panel_length_m) running down the
    slope and their short edge (panel_width_m) along the structure length.
    """

    model_config = _FROZEN

    panel_width_m: float = 1.134
    panel_length_m: float = 1.762
    rows_per_slope: int = 3
    panels_per_row: int = 83
    gap_along_slope_m: float = 0.05
    gap_along_length_m: float = 0.03

    panel_thickness_m: float = 0.04
    # Height of the slope anchor above the rafter midpoint.
    panel_standoff_m: float = 0.2
    # Right slope only: shift down-slope, away from the ridge. The right
    # slope mirrors the row offsets, which would otherwise let its top row
    # cross the ridge line.
    overhang_fix_m: float = 0.2

    @model_validator(mode="after")
    def sanity(self):
        _require_positive(
            "solar",
            panel_width_m=self.panel_width_m,
            panel_length_m=self.panel_length_m,
            rows_per_slope=self.rows_per_slope,
            panels_per_row=self.panels_per_row,
        )
        if self.gap_along_slope_m < 0 or self.gap_along_length_m < 0:
            raise ConfigError("solar gaps must be >= 0")
        return self


# =========================
# Parking
# =========================

class VehicleClassConfig(BaseModel):
    """Angled bays for one vehicle class along an aisle parallel to z."""

    model_config = _FROZEN

    width_m: float = 2.4
    length_m: float = 4.8
    angle_degrees: float = 45.0
    # Distance from the aisle centre line to the bay pivot line.
    aisle_offset_m: float = 1.5
    fill_probability: float = 0.7

    rows: int = 2
    aisle_center_x_m: float = -6.0
    # First bay pivot sits this far in from the -z end of the structure.
    start_offset_m: float = 2.0
    # Subtracted from the structure length before fitting bays.
    length_allowance_m: float = 0.0
    margin_bays: int = 1
    line_width_m: float = 0.1
    occupant_anchor: OccupantAnchor = OccupantAnchor.aisle_midpoint
    vehicle_size_m: Tuple[float, float, float] = (1.8, 1.5, 4.5)
    enabled: bool = True

    @field_validator("occupant_anchor", mode="before")
    @classmethod
    def _v_occupant_anchor(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @model_validator(mode="after")
    def sanity(self):
        _require_positive(
            "parking",
            width_m=self.width_m,
            length_m=self.length_m,
            line_width_m=self.line_width_m,
        )
        if not 0.0 < self.angle_degrees < 90.0:
            raise ConfigError(
                f"parking.angle_degrees must be strictly between 0 and 90 (got {self.angle_degrees!r})"
            )
        if not 0.0 <= self.fill_probability <= 1.0:
            raise ConfigError(
                f"parking.fill_probability must be within [0, 1] (got {self.fill_probability!r})"
            )
        if self.rows not in (1, 2):
            raise ConfigError(f"parking.rows must be 1 or 2 (got {self.rows!r})")
        if self.margin_bays < 0:
            raise ConfigError(f"parking.margin_bays must be >= 0 (got {self.margin_bays!r})")
        return self


def _coach_defaults() -> VehicleClassConfig:
    return VehicleClassConfig(
        width_m=3.5,
        length_m=12.0,
        angle_degrees=30.0,
        aisle_offset_m=3.0,
        fill_probability=0.6,
        rows=1,
        aisle_center_x_m=6.0,
        start_offset_m=10.0,
        length_allowance_m=10.0,
        margin_bays=0,
        line_width_m=0.15,
        occupant_anchor=OccupantAnchor.bay_perpendicular,
        vehicle_size_m=(2.5, 3.7, 12.0),
    )


class ParkingConfig(BaseModel):
    model_config = _FROZEN

    car: VehicleClassConfig = Field(default_factory=VehicleClassConfig)
    coach: VehicleClassConfig = Field(default_factory=_coach_defaults)

    def classes(self) -> Tuple[Tuple[VehicleKind, VehicleClassConfig], ...]:
        """Vehicle classes in planning order."""
        return ((VehicleKind.car, self.car), (VehicleKind.coach, self.coach))


# =========================
# Site (ports, gutter, containers)
# =========================

class GutterConfig(BaseModel):
    model_config = _FROZEN

    enabled: bool = True
    x_m: float = 0.0
    width_m: float = 0.5
    depth_m: float = 0.2


class ContainerConfig(BaseModel):
    model_config = _FROZEN

    x_m: float
    z_m: float = 0.0
    width_m: float = 8.0
    height_m: float = 5.0
    # None means "match the structure length".
    length_m: Optional[float] = None

    @model_validator(mode="after")
    def sanity(self):
        _require_positive("site.containers", width_m=self.width_m, height_m=self.height_m)
        if self.length_m is not None:
            _require_positive("site.containers", length_m=self.length_m)
        return self


class SiteConfig(BaseModel):
    model_config = _FROZEN

    # One structure + solar array per entry, translated along x.
    port_offsets_x_m: Tuple[float, ...] = (-6.0, 6.0)
    gutter: GutterConfig = Field(default_factory=GutterConfig)
    containers: Tuple[ContainerConfig, ...] = (
        ContainerConfig(x_m=-16.0, z_m=0.0),
        ContainerConfig(x_m=-16.0, z_m=53.0, length_m=7.0),
    )

    @model_validator(mode="after")
    def sanity(self):
        if not self.port_offsets_x_m:
            raise ConfigError("site.port_offsets_x_m must list at least one port")
        return self


# =========================
# Layout (root)
# =========================

class LayoutConfig(BaseModel):
    """Complete facility configuration. Lengths in meters, angles in degrees."""

    model_config = _FROZEN

    structure: StructureConfig = Field(default_factory=StructureConfig)
    solar: SolarConfig = Field(default_factory=SolarConfig)
    parking: ParkingConfig = Field(default_factory=ParkingConfig)
    site: SiteConfig = Field(default_factory=SiteConfig)
