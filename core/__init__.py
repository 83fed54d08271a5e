"""Shared core for netlist extraction and schematic sync.

Provides the rustworkx-backed parasitic connectivity graph and per-layer
extraction statistics.
"""

from .rx_graph import ParasiticGraph
from .statistics import LayerStats, NetlistStatistics

__all__ = [
    'ParasiticGraph',
    'LayerStats',
    'NetlistStatistics',
]
