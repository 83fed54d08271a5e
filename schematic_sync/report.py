"""Sync report pipeline: mapper -> comparator -> planner.

Usage:
    report = generate_sync_report(schematic_devices, netlist.devices)
    print(format_sync_report(report))
"""

from __future__ import annotations

import logging
import time
from typing import Iterable, List

from extraction.netlist import DeviceType, NetlistDevice

from .comparator import DEFAULT_TOLERANCE, ParameterComparator
from .mapper import SyncMapper
from .planner import ActionPlanner
from .types import SchematicDevice, SchematicPin, SyncReport

logger = logging.getLogger(__name__)


def generate_sync_report(
    schematic_devices: Iterable[SchematicDevice],
    layout_devices: Iterable[NetlistDevice],
    tolerance: float = DEFAULT_TOLERANCE,
) -> SyncReport:
    """Map, compare and plan in one call.

    Args:
        schematic_devices: Schematic device list
        layout_devices: Extracted (or otherwise supplied) layout devices
        tolerance: Relative parameter tolerance (0.05 = 5%)
    """
    start = time.perf_counter()
    schematic_devices = list(schematic_devices)
    layout_devices = list(layout_devices)

    mappings = SyncMapper(ParameterComparator(tolerance)).build(schematic_devices, layout_devices)
    planner = ActionPlanner()
    actions = planner.plan(mappings)
    summary = planner.summarize(mappings, len(schematic_devices), len(layout_devices))

    duration_ms = (time.perf_counter() - start) * 1000
    logger.info(
        f"Sync: {summary.synced} synced, {summary.param_mismatches} param mismatches, "
        f"{summary.missing_in_layout} missing in layout, {summary.missing_in_schematic} missing in schematic"
    )
    return SyncReport(
        timestamp=time.time(),
        duration_ms=duration_ms,
        mappings=mappings,
        actions=actions,
        summary=summary,
    )


def format_sync_report(report: SyncReport) -> str:
    """Format a sync report as a summary string."""
    s = report.summary
    lines = []
    lines.append("=" * 60)
    lines.append("Schematic / Layout Sync Report")
    lines.append("=" * 60)
    lines.append(f"Schematic devices: {s.total_schematic_devices}")
    lines.append(f"Layout devices: {s.total_layout_devices}")
    lines.append(f"  Synced: {s.synced}")
    lines.append(f"  Parameter mismatches: {s.param_mismatches}")
    lines.append(f"  Missing in layout: {s.missing_in_layout}")
    lines.append(f"  Missing in schematic: {s.missing_in_schematic}")
    if s.unlinked:
        lines.append(f"  Unlinked: {s.unlinked}")
    lines.append(f"  Net mismatches: {s.net_mismatches}")

    lines.append("")
    lines.append(f"{'Instance':<10} {'Status':<18} Deltas")
    lines.append("-" * 60)
    for m in report.mappings:
        deltas = ", ".join(
            f"{d.param} {d.schematic_value}->{d.layout_value}"
            + (f" ({d.percent_diff}%)" if d.percent_diff is not None else "")
            for d in m.parameter_deltas
        )
        lines.append(f"{m.instance_name:<10} {m.status.value:<18} {deltas}")

    if report.actions:
        lines.append("")
        lines.append("Actions:")
        for a in report.actions:
            lines.append(f"  [{a.priority}] {a.description}")

    lines.append("=" * 60)
    return "\n".join(lines)


# =============================================================================
# Demo data: CMOS inverter plus a resistor, layout with one extra device
# =============================================================================

def demo_schematic_devices() -> List[SchematicDevice]:
    return [
        SchematicDevice(
            id='s1', instance_name='M0', device_type='nmos',
            pins=(SchematicPin('D', 'OUT'), SchematicPin('G', 'IN'),
                  SchematicPin('S', 'VSS'), SchematicPin('B', 'VSS')),
            parameters={'w': 0.42, 'l': 0.15, 'nf': 1},
        ),
        SchematicDevice(
            id='s2', instance_name='M1', device_type='pmos',
            pins=(SchematicPin('D', 'OUT'), SchematicPin('G', 'IN'),
                  SchematicPin('S', 'VDD'), SchematicPin('B', 'VDD')),
            parameters={'w': 0.84, 'l': 0.15, 'nf': 1},
        ),
        SchematicDevice(
            id='s3', instance_name='R0', device_type='resistor',
            pins=(SchematicPin('A', 'OUT'), SchematicPin('B', 'net1')),
            parameters={'r': 1000, 'w': 0.35},
        ),
    ]


def demo_layout_devices() -> List[NetlistDevice]:
    return [
        NetlistDevice(
            name='M0', device_type=DeviceType.NMOS, model='sky130_fd_pr__nfet_01v8',
            terminals={'drain': 'OUT', 'gate': 'IN', 'source': 'VSS', 'body': 'VSS'},
            parameters={'w': 0.42, 'l': 0.15, 'nf': 1},
            geometry_indices=(0, 1),
        ),
        NetlistDevice(
            name='M1', device_type=DeviceType.PMOS, model='sky130_fd_pr__pfet_01v8',
            terminals={'drain': 'OUT', 'gate': 'IN', 'source': 'VDD', 'body': 'VDD'},
            parameters={'w': 0.80, 'l': 0.15, 'nf': 1},
            geometry_indices=(2, 3),
        ),
        NetlistDevice(
            name='M2', device_type=DeviceType.NMOS, model='sky130_fd_pr__nfet_01v8',
            terminals={'drain': 'net2', 'gate': 'ctrl', 'source': 'VSS', 'body': 'VSS'},
            parameters={'w': 0.42, 'l': 0.15, 'nf': 1},
            geometry_indices=(4, 5),
        ),
    ]


def build_demo_report(tolerance: float = DEFAULT_TOLERANCE) -> SyncReport:
    """Sync report for the demo inverter data set."""
    return generate_sync_report(demo_schematic_devices(), demo_layout_devices(), tolerance)
