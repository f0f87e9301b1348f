from __future__ import annotations

import math
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.builders.facility.components.parking import plan_vehicle_class
from src.builders.facility.components.structure import build_structure
from src.builders.facility.frame import compute_frame_geometry
from src.builders.facility.geom_utils import (
    instance_bbox_world,
    instances_union_bbox,
    rotate_euler_xyz,
)
from src.builders.facility.plan_types import InstanceKind, PlacedInstance
from src.builders.facility.spec.types import BuildContext
from src.schema import StructureConfig, VehicleClassConfig, VehicleKind


def _assert_close_tuple(actual, expected, eps=1e-6):
    assert len(actual) == len(expected)
    for actual_value, expected_value in zip(actual, expected):
        assert abs(float(actual_value) - float(expected_value)) <= eps


def test_euler_rotation_applies_z_then_y():
    # z: x -> y, then y leaves y untouched.
    _assert_close_tuple(rotate_euler_xyz((1.0, 0.0, 0.0), (0.0, math.pi / 2.0, math.pi / 2.0)), (0.0, 1.0, 0.0))
    # y: z -> x.
    _assert_close_tuple(rotate_euler_xyz((0.0, 0.0, 1.0), (0.0, math.pi / 2.0, 0.0)), (1.0, 0.0, 0.0))


def test_rafter_bbox_spans_the_slope():
    structure = StructureConfig()
    frame = compute_frame_geometry(structure)
    instances = build_structure(structure, frame, BuildContext(run_id="bbox"))
    rafter = next(item for item in instances if item.name == "rafter_left_1")

    bbox = instance_bbox_world(rafter)
    c, s = math.cos(frame.pitch_rad), math.sin(frame.pitch_rad)
    half_x = (c * frame.rafter_length_m / 2.0) + (s * structure.rafter_depth_m / 2.0)
    half_y = (s * frame.rafter_length_m / 2.0) + (c * structure.rafter_depth_m / 2.0)
    _assert_close_tuple(bbox["min"], (-3.0 - half_x, 5.45 - half_y, -48.0 - 0.075))
    _assert_close_tuple(bbox["max"], (-3.0 + half_x, 5.45 + half_y, -48.0 + 0.075))


def test_divider_bbox_follows_the_bay_angle():
    instances = plan_vehicle_class(
        VehicleKind.car, VehicleClassConfig(), 96.0, lambda: 0.0, BuildContext(run_id="bbox")
    )
    divider = next(item for item in instances if item.kind == InstanceKind.parking_divider)
    bbox = instance_bbox_world(divider)
    half = math.sqrt(0.5) * (4.8 + 0.1) / 2.0
    x, _, z = divider.location_m
    _assert_close_tuple((bbox["min"][0], bbox["max"][0]), (x - half, x + half))
    _assert_close_tuple((bbox["min"][2], bbox["max"][2]), (z - half, z + half))
    _assert_close_tuple((bbox["min"][1], bbox["max"][1]), (0.01, 0.03))


def test_union_bbox_and_dimensionless_instances():
    marker = PlacedInstance(name="marker", kind=InstanceKind.gutter, location_m=(1.0, 2.0, 3.0))
    box = PlacedInstance(
        name="box",
        kind=InstanceKind.container,
        location_m=(0.0, 2.5, 0.0),
        dimensions_m=(8.0, 5.0, 10.0),
    )
    assert instance_bbox_world(marker) == {"min": (1.0, 2.0, 3.0), "max": (1.0, 2.0, 3.0)}
    union = instances_union_bbox([marker, box])
    _assert_close_tuple(union["min"], (-4.0, 0.0, -5.0))
    _assert_close_tuple(union["max"], (4.0, 5.0, 5.0))
    assert instances_union_bbox([]) == {"min": (0.0, 0.0, 0.0), "max": (0.0, 0.0, 0.0)}
