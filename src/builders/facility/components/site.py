"""Site component: port placement, the valley gutter and storage containers."""

from __future__ import annotations

from dataclasses import replace

from src.builders.facility.diagnostics import Severity, emit_simple
from src.builders.facility.plan_types import InstanceKind, PlacedInstance
from src.builders.facility.spec.types import BuildContext, default_context
from src.schema import SiteConfig, StructureConfig


def translate_instances(
    instances: list[PlacedInstance],
    offset_x_m: float,
    *,
    port: int,
) -> list[PlacedInstance]:
    """Shift a port-local frame along x and tag its instances with the port."""
    moved: list[PlacedInstance] = []
    for instance in instances:
        x, y, z = instance.location_m
        moved.append(
            replace(
                instance,
                name=f"port{port}_{instance.name}",
                location_m=(x + offset_x_m, y, z),
                params={**instance.params, "port": port},
            )
        )
    return moved


def build_site(
    site: SiteConfig,
    structure: StructureConfig,
    ctx: BuildContext | None = None,
) -> list[PlacedInstance]:
    ctx = ctx or default_context()
    instances: list[PlacedInstance] = []

    # The gutter runs along the shared eaves line between adjacent ports.
    if site.gutter.enabled and len(site.port_offsets_x_m) > 1:
        instances.append(
            PlacedInstance(
                name="gutter",
                kind=InstanceKind.gutter,
                location_m=(site.gutter.x_m, structure.eaves_height_m, 0.0),
                dimensions_m=(site.gutter.width_m, site.gutter.depth_m, structure.length_m),
            )
        )

    for index, container in enumerate(site.containers, start=1):
        length_m = container.length_m if container.length_m is not None else structure.length_m
        instances.append(
            PlacedInstance(
                name=f"container_{index}",
                kind=InstanceKind.container,
                location_m=(container.x_m, container.height_m / 2.0, container.z_m),
                dimensions_m=(container.width_m, container.height_m, length_m),
            )
        )

    emit_simple(
        ctx.diag,
        run_id=ctx.run_id,
        stage="layout",
        component="site",
        code="GENERATOR_DONE",
        severity=Severity.INFO,
        source="computed",
        reason="site elements placed",
        payload={"ports": len(site.port_offsets_x_m), "instances": len(instances)},
    )
    return instances
