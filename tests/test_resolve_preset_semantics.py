from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.builders.facility.presets.catalog import get_preset, get_preset_layers, preset_ids
from src.builders.facility.spec.resolve import load_layout_config, resolve
from src.schema import ConfigError, LayoutConfig, OccupantAnchor


def test_empty_config_resolves_to_model_defaults():
    config, diagnostics = resolve({})
    assert config == LayoutConfig()
    assert diagnostics.warnings == []


def test_explicit_values_override_preset_and_defaults():
    config, _ = resolve(
        {
            "preset_id": "car_port_only",
            "structure": {"length_m": 48.0},
            "site": {"port_offsets_x_m": [-6.0, 6.0]},
        }
    )
    assert config.structure.length_m == 48.0
    assert config.structure.width_m == 12.0
    # Preset values survive where nothing explicit overrides them.
    assert config.parking.coach.enabled is False
    assert config.site.containers == ()
    # Explicit values win over the preset.
    assert config.site.port_offsets_x_m == (-6.0, 6.0)


def test_argument_preset_wins_over_raw_preset_id():
    config, _ = resolve({"preset_id": "default"}, preset_id="car_port_only")
    assert config.site.port_offsets_x_m == (0.0,)


def test_unknown_preset_falls_back_to_default_with_warning():
    config, diagnostics = resolve({}, preset_id="warehouse_xl")
    assert config == LayoutConfig()
    assert len(diagnostics.warnings) == 1
    warning = diagnostics.warnings[0]
    assert warning.code == "PRESET_FALLBACK"
    assert warning.stage == "resolve"
    assert warning.component == "resolver"
    assert warning.input_value == "warehouse_xl"
    assert warning.resolved_value == "default"
    assert warning.severity_label == "warn"


def test_unknown_preset_falls_back_to_default_layers():
    assert get_preset("warehouse_xl") == get_preset("default")


def test_preset_layers_are_stable():
    assert [layer.layer_id for layer in get_preset_layers("default")] == ["global"]
    assert [layer.layer_id for layer in get_preset_layers("car_port_only")] == [
        "global",
        "preset:car_port_only",
    ]
    assert [layer.layer_id for layer in get_preset_layers("default", "cars_only")] == [
        "global",
        "variant:default:cars_only",
    ]
    assert preset_ids() == ("car_port_only", "default")


def test_variant_applies_on_top_of_preset():
    config, _ = resolve({"variant_id": "cars_only"})
    assert config.parking.coach.enabled is False
    assert config.parking.car.enabled is True


def test_unknown_variant_id_is_noop():
    baseline = get_preset("default")
    with_unknown_variant = get_preset("default", variant_id="missing_variant")
    assert with_unknown_variant == baseline


def test_occupant_anchor_is_normalized():
    config, _ = resolve({"parking": {"car": {"occupant_anchor": "  Bay_Perpendicular "}}})
    assert config.parking.car.occupant_anchor == OccupantAnchor.bay_perpendicular


def test_unknown_key_is_wrapped_config_error():
    with pytest.raises(ConfigError) as excinfo:
        resolve({"structure": {"lenght_m": 50.0}})
    assert isinstance(excinfo.value.__cause__, ValidationError)
    assert "structure.lenght_m" in str(excinfo.value)


def test_wrong_type_is_wrapped_config_error():
    with pytest.raises(ConfigError):
        resolve({"solar": {"rows_per_slope": "three"}})


def test_semantic_violation_raises_config_error_directly():
    with pytest.raises(ConfigError) as excinfo:
        resolve({"structure": {"ridge_height_m": 4.0}})
    assert excinfo.value.__cause__ is None


def test_non_mapping_raises_config_error():
    with pytest.raises(ConfigError):
        resolve([1, 2, 3])


def test_example_configs_load():
    default_config, default_diag = load_layout_config(ROOT / "data" / "examples" / "facility_default.json")
    assert default_config == LayoutConfig()
    assert default_diag.warnings == []

    small, _ = load_layout_config(ROOT / "data" / "examples" / "car_port_small.json")
    assert small.structure.length_m == 48.0
    assert small.site.port_offsets_x_m == (0.0,)
    assert small.parking.car.occupant_anchor == OccupantAnchor.bay_perpendicular


def test_invalid_json_raises_config_error(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{\"structure\": ", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_layout_config(path)

    valid = tmp_path / "ok.json"
    valid.write_text(json.dumps({"solar": {"panels_per_row": 10}}), encoding="utf-8")
    config, _ = load_layout_config(valid)
    assert config.solar.panels_per_row == 10
