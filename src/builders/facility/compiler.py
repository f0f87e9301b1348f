"""Compile a resolved facility configuration into a layout plan."""

from __future__ import annotations

from src.builders.facility.components import (
    build_site,
    build_structure,
    place_solar_array,
    plan_parking,
    translate_instances,
)
from src.builders.facility.components.parking import RandomSource, validate_vehicle_class
from src.builders.facility.components.solar import expected_panel_count
from src.builders.facility.components.structure import column_count
from src.builders.facility.diagnostics import Severity, emit_simple, rebind_run_id
from src.builders.facility.frame import compute_frame_geometry
from src.builders.facility.plan_types import LayoutPlan
from src.builders.facility.spec.types import (
    BuildContext,
    FrameGeometry,
    ResolveDiagnostics,
    default_context,
)
from src.schema import ConfigError, LayoutConfig


def _preflight(config: LayoutConfig) -> tuple[FrameGeometry, dict[str, int]]:
    """Run every generator precondition; raise before anything is placed."""
    frame = compute_frame_geometry(config.structure)
    counts = {
        "column_lines": column_count(config.structure),
        "panels_per_port": expected_panel_count(config.solar),
    }
    if counts["panels_per_port"] <= 0:
        raise ConfigError("solar array must contain at least one panel")
    for kind, vehicle in config.parking.classes():
        if vehicle.enabled:
            counts[f"{kind.value}_bays"] = validate_vehicle_class(vehicle, config.structure.length_m)
    if not config.site.port_offsets_x_m:
        raise ConfigError("site.port_offsets_x_m must list at least one port")
    return frame, counts


def compile_layout(
    config: LayoutConfig,
    rng: RandomSource,
    ctx: BuildContext | None = None,
    resolve_diagnostics: ResolveDiagnostics | None = None,
) -> LayoutPlan:
    """Build every facility element for ``config``.

    Coordinate system: x is width, y is up, z runs along the structure
    length. ``rng`` is the only source of randomness (parking occupancy);
    the same config and the same draw sequence give an identical plan.
    """
    ctx = ctx or default_context()

    # 1) Replay resolve warnings into this run.
    if resolve_diagnostics is not None:
        for event in resolve_diagnostics.warnings:
            ctx.diag.emit(rebind_run_id(event, ctx.run_id))

    # 2) Validate all preconditions up front so a rejected config yields no plan.
    try:
        frame, counts = _preflight(config)
    except ConfigError as exc:
        emit_simple(
            ctx.diag,
            run_id=ctx.run_id,
            stage="validate",
            component="compiler",
            code="CONFIG_REJECTED",
            severity=Severity.ERROR,
            source="config",
            reason=str(exc),
        )
        raise

    emit_simple(
        ctx.diag,
        run_id=ctx.run_id,
        stage="compile",
        component="compiler",
        code="COMPILE_START",
        severity=Severity.INFO,
        source="computed",
        reason="layout compile start",
        resolved_value={
            "ports": len(config.site.port_offsets_x_m),
            "pitch_rad": round(frame.pitch_rad, 6),
        },
        payload=counts,
    )

    # 3) Generators in stable order; instance order is regression-sensitive.
    plan = LayoutPlan()
    for port, offset_x_m in enumerate(config.site.port_offsets_x_m, start=1):
        port_instances = build_structure(config.structure, frame, ctx)
        port_instances.extend(place_solar_array(config.solar, frame, ctx))
        plan.instances.extend(translate_instances(port_instances, offset_x_m, port=port))

    plan.instances.extend(plan_parking(config.parking, config.structure.length_m, rng, ctx))
    plan.instances.extend(build_site(config.site, config.structure, ctx))

    kind_counts = {kind.value: len(items) for kind, items in plan.by_kind().items()}
    plan.metadata.update(
        {
            "run_id": ctx.run_id,
            "ports": str(len(config.site.port_offsets_x_m)),
            "column_lines": str(counts["column_lines"]),
            "pitch_rad": str(round(frame.pitch_rad, 6)),
            "slope_length_m": str(round(frame.slope_length_m, 6)),
            "instances": str(len(plan.instances)),
        }
    )

    emit_simple(
        ctx.diag,
        run_id=ctx.run_id,
        stage="compile",
        component="compiler",
        code="COMPILE_DONE",
        severity=Severity.INFO,
        source="computed",
        reason="layout compile done",
        payload=kind_counts,
    )
    return plan
