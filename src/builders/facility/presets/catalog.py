"""Facility preset catalog for the layout resolver.

Merge precedence (low -> high):
1) global defaults (the model defaults in ``src.schema``)
2) preset overrides
3) optional preset variant overrides

Raw configuration values remain the highest-precedence layer and are
applied later by the resolver.
"""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Mapping

from src.schema import LayoutConfig

PresetDict = dict[str, Any]

DEFAULT_PRESET_ID = "default"


@dataclass(frozen=True)
class PresetDefinition:
    base: Mapping[str, Any] = field(default_factory=dict)
    variants: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)


@dataclass(frozen=True)
class PresetLayer:
    layer_id: str
    values: Mapping[str, Any]


def _global_defaults() -> PresetDict:
    return LayoutConfig().model_dump(mode="json")


_PRESETS: dict[str, PresetDefinition] = {
    "default": PresetDefinition(
        variants={
            "cars_only": {"parking": {"coach": {"enabled": False}}},
            "no_containers": {"site": {"containers": []}},
        },
    ),
    "car_port_only": PresetDefinition(
        base={
            "parking": {
                "car": {"aisle_center_x_m": 0.0},
                "coach": {"enabled": False},
            },
            "site": {
                "port_offsets_x_m": [0.0],
                "containers": [],
            },
        },
    ),
}


def deep_merge(base: Mapping[str, Any], patch: Mapping[str, Any]) -> PresetDict:
    merged: PresetDict = deepcopy(dict(base))
    for key, value in patch.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = deepcopy(value)
    return merged


def preset_ids() -> tuple[str, ...]:
    return tuple(sorted(_PRESETS))


def has_preset(preset_id: str | None) -> bool:
    return str(preset_id or "").strip() in _PRESETS


def get_preset_layers(preset_id: str | None, variant_id: str | None = None) -> tuple[PresetLayer, ...]:
    normalized_preset_id = str(preset_id or "").strip() or DEFAULT_PRESET_ID
    normalized_variant_id = str(variant_id or "").strip()

    layers: list[PresetLayer] = [PresetLayer(layer_id="global", values=_global_defaults())]

    selected_preset_id = normalized_preset_id
    selected_preset = _PRESETS.get(selected_preset_id)
    if selected_preset is None:
        selected_preset_id = DEFAULT_PRESET_ID
        selected_preset = _PRESETS[DEFAULT_PRESET_ID]

    if selected_preset.base:
        layers.append(PresetLayer(layer_id=f"preset:{selected_preset_id}", values=selected_preset.base))

    if normalized_variant_id:
        variant_patch = selected_preset.variants.get(normalized_variant_id)
        if variant_patch:
            layers.append(
                PresetLayer(
                    layer_id=f"variant:{selected_preset_id}:{normalized_variant_id}",
                    values=variant_patch,
                )
            )

    return tuple(layers)


def get_preset(preset_id: str | None, variant_id: str | None = None) -> PresetDict:
    """Return merged preset values as a plain mapping."""
    merged: PresetDict = {}
    for layer in get_preset_layers(preset_id=preset_id, variant_id=variant_id):
        merged = deep_merge(merged, layer.values)
    return merged
