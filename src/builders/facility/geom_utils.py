"""Rotation and bounding-box helpers for placed facility instances."""

from __future__ import annotations

import itertools
import math
from typing import Dict, Iterable, Protocol, Tuple

Vec3 = Tuple[float, float, float]


class InstanceLike(Protocol):
    dimensions_m: Vec3 | None
    location_m: Vec3
    rotation_rad: Vec3


def rotate_about_x(vector: Vec3, angle_rad: float) -> Vec3:
    x, y, z = vector
    c, s = math.cos(angle_rad), math.sin(angle_rad)
    return (x, y * c - z * s, y * s + z * c)


def rotate_about_y(vector: Vec3, angle_rad: float) -> Vec3:
    x, y, z = vector
    c, s = math.cos(angle_rad), math.sin(angle_rad)
    return (x * c + z * s, y, -x * s + z * c)


def rotate_about_z(vector: Vec3, angle_rad: float) -> Vec3:
    """Rotate about the structure length axis (right-handed, x towards y)."""
    x, y, z = vector
    c, s = math.cos(angle_rad), math.sin(angle_rad)
    return (x * c - y * s, x * s + y * c, z)


def rotate_euler_xyz(vector: Vec3, rotation_rad: Vec3) -> Vec3:
    """Apply an XYZ Euler rotation: z first, then y, then x."""
    rx, ry, rz = rotation_rad
    return rotate_about_x(rotate_about_y(rotate_about_z(vector, rz), ry), rx)


def add(a: Vec3, b: Vec3) -> Vec3:
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def instance_bbox_world(instance: InstanceLike) -> Dict[str, Vec3]:
    """World AABB of the instance box; a point when it has no dimensions."""
    if instance.dimensions_m is None:
        return {"min": instance.location_m, "max": instance.location_m}

    half = [float(size) / 2.0 for size in instance.dimensions_m]
    corners = [
        add(instance.location_m, rotate_euler_xyz(corner, instance.rotation_rad))
        for corner in itertools.product((-half[0], half[0]), (-half[1], half[1]), (-half[2], half[2]))
    ]
    return {
        "min": tuple(min(corner[axis] for corner in corners) for axis in range(3)),
        "max": tuple(max(corner[axis] for corner in corners) for axis in range(3)),
    }


def instances_union_bbox(instances: Iterable[InstanceLike]) -> Dict[str, Vec3]:
    boxes = [instance_bbox_world(instance) for instance in instances]
    if not boxes:
        return {"min": (0.0, 0.0, 0.0), "max": (0.0, 0.0, 0.0)}
    return {
        "min": tuple(min(box["min"][axis] for box in boxes) for axis in range(3)),
        "max": tuple(max(box["max"][axis] for box in boxes) for axis in range(3)),
    }
