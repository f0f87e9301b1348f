"""Stable plain-data view of layout plans for regression snapshots."""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any

from src.builders.facility.plan_types import LayoutPlan


def _round_value(value: Any):
    if isinstance(value, bool):
        return value
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (int, float)):
        return round(float(value), 6)
    if isinstance(value, (list, tuple)):
        return [_round_value(item) for item in value]
    if isinstance(value, Mapping):
        normalized: dict[str, Any] = {}
        for key in sorted(value, key=str):
            normalized[str(key)] = _round_value(value[key])
        return normalized
    return value


def layout_to_snapshot(plan: LayoutPlan) -> dict[str, Any]:
    instances: list[dict[str, Any]] = []
    for instance in plan.instances:
        item: dict[str, Any] = {
            "name": instance.name,
            "kind": instance.kind.value,
            "location_m": _round_value(instance.location_m),
            "rotation_rad": _round_value(instance.rotation_rad),
        }
        if instance.dimensions_m is not None:
            item["dimensions_m"] = _round_value(instance.dimensions_m)
        if instance.params:
            item["params"] = _round_value(instance.params)
        instances.append(item)

    return {
        "instances": instances,
        "metadata": {str(key): str(plan.metadata[key]) for key in sorted(plan.metadata)},
    }
