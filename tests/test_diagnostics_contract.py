from __future__ import annotations

import io
import json
import sys
from collections import Counter
from contextlib import redirect_stdout
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.builders.facility.compiler import compile_layout
from src.builders.facility.diagnostics import (
    Event,
    JsonlDiagnosticsSink,
    Severity,
    VALID_COMPONENTS,
    VALID_SEVERITIES,
    VALID_SOURCES,
    VALID_STAGES,
    emit_simple,
    max_severity,
)
from src.builders.facility.spec.resolve import resolve
from src.builders.facility.spec.types import BuildContext


LIFECYCLE_CODES = {"COMPILE_START", "COMPILE_DONE", "GENERATOR_DONE"}


class ListDiagnosticsSink:
    def __init__(self) -> None:
        self.events: list[Event] = []

    def emit(self, event: Event) -> None:
        self.events.append(event)


def test_compile_pipeline_is_stdout_silent():
    config, diagnostics = resolve({})
    buf = io.StringIO()
    with redirect_stdout(buf):
        plan = compile_layout(config, lambda: 0.5, BuildContext(run_id="silent"), diagnostics)
    assert plan.instances
    assert buf.getvalue() == ""


def test_diagnostics_event_contract_and_stability():
    sink = ListDiagnosticsSink()
    # Force one resolve warning event.
    config, diagnostics = resolve({}, preset_id="no_such_preset")

    with redirect_stdout(io.StringIO()):
        compile_layout(config, lambda: 0.5, BuildContext(run_id="run-42", diag=sink), diagnostics)

    assert sink.events
    required_keys = {
        "ts",
        "run_id",
        "stage",
        "component",
        "code",
        "severity",
        "path",
        "source",
        "input_value",
        "resolved_value",
        "reason",
        "meta",
    }
    signatures: list[tuple[str, str, str, int]] = []
    for event in sink.events:
        payload = event.to_dict()
        assert set(payload.keys()) == required_keys
        assert payload["run_id"] == "run-42"
        assert payload["severity"] in VALID_SEVERITIES
        assert payload["stage"] in VALID_STAGES
        assert payload["source"] in VALID_SOURCES
        assert payload["component"] in VALID_COMPONENTS
        assert isinstance(payload["code"], str) and payload["code"]
        if payload["path"] == "":
            assert payload["code"] in LIFECYCLE_CODES
            assert payload["reason"] or payload["meta"]
        assert "normalized_from" not in payload["meta"]
        json.dumps(payload)
        signatures.append(
            (
                payload["stage"],
                payload["component"],
                payload["code"],
                int(payload["severity"]),
            )
        )

    counts = Counter(signatures)
    assert counts[("resolve", "resolver", "PRESET_FALLBACK", int(Severity.WARN))] == 1
    assert counts[("compile", "compiler", "COMPILE_START", int(Severity.INFO))] == 1
    assert counts[("compile", "compiler", "COMPILE_DONE", int(Severity.INFO))] == 1
    assert counts[("layout", "structure", "GENERATOR_DONE", int(Severity.INFO))] == 2
    assert counts[("layout", "solar", "GENERATOR_DONE", int(Severity.INFO))] == 2
    assert counts[("layout", "parking", "GENERATOR_DONE", int(Severity.INFO))] == 1
    assert counts[("layout", "site", "GENERATOR_DONE", int(Severity.INFO))] == 1
    assert counts[("layout", "parking", "BAYS_PLANNED", int(Severity.INFO))] == 2
    assert counts[("layout", "parking", "PARKING_BAY_OVERRUN", int(Severity.WARN))] == 1

    codes = [event.code for event in sink.events]
    assert codes[0] == "PRESET_FALLBACK"
    assert codes[1] == "COMPILE_START"
    assert codes[-1] == "COMPILE_DONE"
    assert max_severity(sink.events) == int(Severity.WARN)

    done = sink.events[-1]
    assert done.meta["payload"]["solarPanel"] == 996
    assert done.meta["payload"]["column"] == 68


def test_emit_simple_contract_and_normalization() -> None:
    sink = ListDiagnosticsSink()
    event = emit_simple(
        sink,
        run_id="run-1",
        stage="layout",
        component="solar",
        code="UNIT_EVENT",
        path="solar.rows_per_slope",
        payload={"min": 1, "max": 3},
        severity=Severity.WARN,
        slope="left",
        source="computed",
        reason="unit test",
        input_value=4,
        resolved_value=3,
        meta={"hint": "overflow"},
    )
    assert sink.events and sink.events[-1] is event
    event_payload = event.to_dict()
    assert event_payload["stage"] == "layout"
    assert event_payload["component"] == "solar"
    assert event_payload["source"] == "computed"
    assert event_payload["meta"]["slope"] == "left"
    assert event_payload["meta"]["payload"] == {"min": 1, "max": 3}
    assert event_payload["meta"]["hint"] == "overflow"
    assert event.severity_label == "warn"

    normalized = emit_simple(
        sink,
        code="UNIT_EVENT_NORMALIZE",
        stage="unknown_stage",
        component="unknown_component",
        source="unknown_source",
        severity=99,
    )
    assert normalized.stage == "layout"
    assert normalized.component == "compiler"
    assert normalized.source == "computed"
    assert normalized.severity == int(Severity.FATAL)
    assert normalized.meta["normalized_from"] == {
        "stage": "unknown_stage",
        "component": "unknown_component",
        "source": "unknown_source",
    }
    assert normalized.reason


def test_jsonl_sink_appends_one_line_per_event(tmp_path):
    path = tmp_path / "diag" / "events.jsonl"
    sink = JsonlDiagnosticsSink(path)
    config, _ = resolve({"preset_id": "car_port_only"})
    compile_layout(config, lambda: 0.5, BuildContext(run_id="jsonl", diag=sink))

    lines = path.read_text(encoding="utf-8").splitlines()
    records = [json.loads(line) for line in lines]
    assert records[0]["code"] == "COMPILE_START"
    assert records[-1]["code"] == "COMPILE_DONE"
    assert {record["run_id"] for record in records} == {"jsonl"}
