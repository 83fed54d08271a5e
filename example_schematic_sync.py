"""Schematic / Layout Sync Example

Runs the sync pipeline on the demo inverter data set: name-based pairing,
parameter comparison, action planning, LVS refinement, placement
suggestions for schematic-only devices and back-annotation of an extracted
layout.

Usage:
    python example_schematic_sync.py --tolerance 0.01
    python example_schematic_sync.py --json report.json
"""

import argparse
import json
import logging

from extraction import extract_netlist
from schematic_sync import (
    LvsDeviceMatch,
    LvsMatchStatus,
    LvsParameterDiff,
    apply_back_annotation,
    format_sync_report,
    generate_back_annotations,
    generate_sync_report,
    refine_mappings_from_lvs,
    suggest_layout_placements,
)
from schematic_sync.report import demo_layout_devices, demo_schematic_devices
from example_extraction import inverter_layout


def main():
    parser = argparse.ArgumentParser(
        description="Schematic/layout synchronisation demo",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--tolerance", type=float, default=0.05, help="Relative parameter tolerance")
    parser.add_argument("--json", type=str, default=None, help="Write the sync report as JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=log_level, format='%(levelname)s: %(message)s')

    schematic = demo_schematic_devices()
    layout_devices = demo_layout_devices()

    # Step 1: name-based sync report
    print("\n[1] Sync report")
    report = generate_sync_report(schematic, layout_devices, tolerance=args.tolerance)
    print(format_sync_report(report))

    # Step 2: refine with an LVS verdict for M1
    print("\n[2] LVS refinement")
    lvs_matches = [
        LvsDeviceMatch(
            status=LvsMatchStatus.MISMATCH,
            schematic_device_name='M1',
            layout_device_name='M1',
            geometry_indices=(2, 3),
            parameter_diffs=(LvsParameterDiff('w', 0.84, 0.80, tolerance=0.01, within_tolerance=False),),
        ),
    ]
    refined = refine_mappings_from_lvs(report.mappings, lvs_matches)
    for m in refined:
        print(f"  {m.instance_name:<6} {m.status.value}")

    # Step 3: where to put schematic-only devices
    print("\n[3] Placement suggestions")
    geometries = inverter_layout()
    for s in suggest_layout_placements(refined, geometries, schematic):
        print(f"  {s.instance_name} ({s.device_type}) at ({s.x:.1f}, {s.y:.1f})")

    # Step 4: back-annotate the extracted inverter
    print("\n[4] Back-annotation")
    netlist = extract_netlist(geometries, extract_capacitance=True)
    result = apply_back_annotation(generate_back_annotations(netlist), schematic)
    for device_id in result:
        print(f"  {device_id}: {result[device_id]}")
    if result.unannotated:
        print(f"  Not annotated: {', '.join(result.unannotated)}")

    if args.json:
        with open(args.json, 'w') as f:
            json.dump(report.to_dict(), f, indent=2)
        print(f"\nReport written to {args.json}")


if __name__ == "__main__":
    main()
