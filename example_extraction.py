"""Netlist Extraction Example

Extracts a SPICE netlist from a small CMOS inverter layout (or from a JSON
geometry file exported by the layout store), prints the extraction summary
and optionally writes the SPICE deck.

Usage:
    python example_extraction.py
    python example_extraction.py --capacitance --spice inverter.sp
    python example_extraction.py --geometry layout.json --verbose
"""

import argparse
import json
import logging

from core.statistics import NetlistStatistics
from extraction import SKY130, Geometry, ExtractionWorker, extract_netlist, path, rect, via


def inverter_layout():
    return [
        rect(0, 'NW', 0.0, 4.0, 4.0, 8.0),
        rect(1, 'DIFF', 0.5, 1.0, 2.5, 1.42),
        rect(2, 'DIFF', 0.5, 5.0, 2.5, 5.84),
        rect(3, 'POLY', 1.425, 0.5, 1.575, 6.5),
        path(4, 'M1', [(0.0, 0.0), (10.0, 0.0)], width=0.14),
        rect(5, 'M1', 0.0, 3.0, 4.0, 3.5),
        rect(6, 'LI', 0.0, 2.0, 2.0, 2.17),
        via(7, 'MCON', 1.0, 3.25, 0.17),
        via(8, 'VIA1', 3.0, 3.25, 0.15),
    ]


def load_geometry(filename):
    with open(filename) as f:
        data = json.load(f)
    return [Geometry.from_dict(d) for d in data]


def main():
    parser = argparse.ArgumentParser(
        description="Layout netlist extraction",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--geometry", type=str, default=None, help="JSON geometry list (default: built-in inverter)")
    parser.add_argument("--capacitance", action="store_true", help="Extract plate capacitance")
    parser.add_argument("--spice", type=str, default=None, help="Write the SPICE deck to this file")
    parser.add_argument("--copies", type=int, default=1, help="Extract this many copies concurrently")
    parser.add_argument("--progress", action="store_true", help="Show progress bars")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=log_level, format='%(levelname)s: %(message)s')

    geometries = load_geometry(args.geometry) if args.geometry else inverter_layout()
    print(f"Layout: {len(geometries)} geometries, technology {SKY130.name}")

    if args.copies > 1:
        with ExtractionWorker(max_workers=min(args.copies, 4)) as worker:
            netlists = worker.map([geometries] * args.copies, extract_capacitance=args.capacitance)
        netlist = netlists[0]
        print(f"Extracted {len(netlists)} copies concurrently")
    else:
        netlist = extract_netlist(geometries, extract_capacitance=args.capacitance, show_progress=args.progress)

    print(NetlistStatistics.format_summary(netlist))

    for d in netlist.devices:
        print(f"  {d.name}: {d.device_type.value} W={d.parameters['w']}u L={d.parameters['l']}u")

    if args.spice:
        with open(args.spice, 'w') as f:
            f.write(netlist.spice_text + "\n")
        print(f"SPICE deck written to {args.spice}")
    else:
        print()
        print(netlist.spice_text)


if __name__ == "__main__":
    main()
