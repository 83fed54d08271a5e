"""Statistics for extracted netlists.

Provides per-layer parasitic statistics and a printable summary of an
extraction run.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from extraction.netlist import ExtractedNetlist, ParasiticElement


@dataclass
class LayerStats:
    """Statistics for a single layer.

    Attributes:
        layer: Resolved layer alias
        geometry_count: Number of geometries on this layer
        resistor_count: Number of parasitic resistors extracted from the layer
        total_resistance: Sum of resistor values (Ohms)
        capacitor_count: Number of parasitic capacitors attributed to the layer
        total_capacitance: Sum of capacitance values (Farads)
    """
    layer: str
    geometry_count: int = 0
    resistor_count: int = 0
    total_resistance: float = 0.0
    capacitor_count: int = 0
    total_capacitance: float = 0.0


class NetlistStatistics:
    """Compute per-layer statistics for extracted parasitics.

    Example:
        stats_calc = NetlistStatistics(netlist.parasitics, geometry_counts)
        layer_stats = stats_calc.compute()
        print(stats_calc.format_summary(netlist))
    """

    def __init__(
        self,
        parasitics: Iterable["ParasiticElement"],
        geometry_counts: Optional[Mapping[str, int]] = None,
    ):
        """Initialize statistics calculator.

        Args:
            parasitics: Extracted parasitic elements (layer attribute set)
            geometry_counts: Optional layer -> number of geometries
        """
        self.parasitics = list(parasitics)
        self.geometry_counts = dict(geometry_counts or {})

    def compute(self) -> Dict[str, LayerStats]:
        """Compute statistics for every layer that has geometry or parasitics.

        Returns:
            Layer alias -> LayerStats, layers in first-seen order
        """
        layer_stats: Dict[str, LayerStats] = {}
        for layer, count in self.geometry_counts.items():
            layer_stats[layer] = LayerStats(layer=layer, geometry_count=count)

        r_values: Dict[str, List[float]] = defaultdict(list)
        c_values: Dict[str, List[float]] = defaultdict(list)
        for p in self.parasitics:
            if p.layer is None:
                continue
            if p.layer not in layer_stats:
                layer_stats[p.layer] = LayerStats(layer=p.layer)
            if p.element_type.spice_prefix == 'R':
                r_values[p.layer].append(p.value)
            else:
                c_values[p.layer].append(p.value)

        for layer, values in r_values.items():
            layer_stats[layer].resistor_count = len(values)
            layer_stats[layer].total_resistance = float(np.sum(values))
        for layer, values in c_values.items():
            layer_stats[layer].capacitor_count = len(values)
            layer_stats[layer].total_capacitance = float(np.sum(values))

        return layer_stats

    @staticmethod
    def format_summary(netlist: "ExtractedNetlist") -> str:
        """Format extraction statistics as a summary string."""
        stats = netlist.stats
        lines = []
        lines.append("=" * 60)
        lines.append(f"Extraction Statistics - {netlist.title}")
        lines.append("=" * 60)
        lines.append(f"Devices: {stats.device_count}")
        lines.append(f"Nodes: {stats.node_count}")
        lines.append(f"Parasitics: {stats.parasitic_count}")
        lines.append(f"  Resistors: {stats.resistor_count}")
        if stats.capacitor_count > 0:
            lines.append(f"  Capacitors: {stats.capacitor_count}")
        lines.append(f"Extraction time: {stats.extraction_time_ms:.2f} ms")

        if stats.layer_stats:
            lines.append("")
            lines.append(f"{'Layer':<10} {'Geoms':>6} {'Res':>6} {'Total R (Ohm)':>14} {'Cap':>6} {'Total C (fF)':>13}")
            lines.append("-" * 60)
            for layer, ls in stats.layer_stats.items():
                lines.append(
                    f"{layer:<10} {ls.geometry_count:>6} {ls.resistor_count:>6} "
                    f"{ls.total_resistance:>14.3f} {ls.capacitor_count:>6} "
                    f"{ls.total_capacitance * 1e15:>13.3f}"
                )

        if stats.skipped_layers:
            lines.append("")
            skipped = ", ".join(f"{k} ({v})" for k, v in stats.skipped_layers.items())
            lines.append(f"Layers without technology data: {skipped}")
        if stats.skipped_geometries:
            dropped = sum(stats.skipped_geometries.values())
            lines.append(f"Degenerate geometries skipped: {dropped}")

        lines.append("=" * 60)
        return "\n".join(lines)
