"""Netlist assembly: geometry in, ExtractedNetlist out.

Pipeline:
1. Group geometry by resolved layer alias
2. Recognise MOS devices (poly x diffusion)
3. Extract wire/via resistors (and plate capacitors when enabled)
4. Register nodes (VDD, GND first; first-seen order, no duplicates)
5. Compute statistics and write the SPICE deck
"""

from __future__ import annotations

import logging
import time
from collections import Counter
from typing import Dict, Iterable, List, Optional

from core.statistics import NetlistStatistics

from .capacitance import CapacitanceExtractor
from .context import CancellationToken, ExtractionContext
from .device_recognizer import DeviceRecognizer
from .geometry import Geometry, group_by_layer
from .netlist import (
    ExtractedNetlist,
    ExtractionStats,
    GROUND_NET,
    NetlistDevice,
    NetlistNode,
    NodeType,
    ParasiticElement,
    POWER_NET,
)
from .parasitic_extractor import ParasiticExtractor
from .spice_writer import SpiceWriter
from .technology import SKY130, Technology

logger = logging.getLogger(__name__)

DEFAULT_TITLE = 'Extracted Netlist'


class NetlistAssembler:
    """Run device recognition and parasitic extraction for one layout.

    The assembler itself is stateless between calls; every call to
    assemble() creates a fresh ExtractionContext unless one is passed in.

    Example:
        assembler = NetlistAssembler(SKY130, extract_capacitance=True)
        netlist = assembler.assemble(geometries)
        print(netlist.spice_text)
    """

    def __init__(
        self,
        technology: Technology = SKY130,
        extract_capacitance: bool = False,
        show_progress: bool = False,
        title: str = DEFAULT_TITLE,
    ):
        """
        Args:
            technology: Layer stack and model table
            extract_capacitance: Add substrate/inter-layer plate capacitors
            show_progress: Show tqdm progress bars for the outer loops
            title: Netlist title (first SPICE comment line)
        """
        self.technology = technology
        self.extract_capacitance = extract_capacitance
        self.title = title
        self.recognizer = DeviceRecognizer(technology, show_progress=show_progress)
        self.parasitic_extractor = ParasiticExtractor(technology, show_progress=show_progress)
        self.capacitance_extractor = CapacitanceExtractor(technology)
        self.spice_writer = SpiceWriter(technology)

    def assemble(
        self,
        geometries: Iterable[Geometry],
        context: Optional[ExtractionContext] = None,
        timestamp: Optional[float] = None,
    ) -> ExtractedNetlist:
        """Extract a netlist from layout geometry.

        Args:
            geometries: Layout shapes (never modified)
            context: Per-call counters/cancellation; a fresh one if omitted
            timestamp: Epoch seconds recorded in the result and SPICE header
                (defaults to now)

        Returns:
            A new ExtractedNetlist

        Raises:
            ExtractionCancelled: If the context's token is cancelled
        """
        start = time.perf_counter()
        ctx = context if context is not None else ExtractionContext()
        ctx.check_cancelled()

        geometries = list(geometries)
        by_layer = group_by_layer(geometries, self.technology)

        devices = self.recognizer.recognize(by_layer, ctx)
        parasitics = self.parasitic_extractor.extract(by_layer, ctx)
        if self.extract_capacitance:
            parasitics.extend(self.capacitance_extractor.extract(by_layer, ctx))
        self.parasitic_extractor.unknown_layers(by_layer, ctx)
        ctx.check_cancelled()

        nodes = self._register_nodes(devices, parasitics)

        if timestamp is None:
            timestamp = time.time()
        spice_text = self.spice_writer.write(self.title, devices, parasitics, timestamp=timestamp)

        geometry_counts = Counter()
        for alias, geoms in by_layer.items():
            geometry_counts[alias] = len(geoms)
        layer_stats = NetlistStatistics(parasitics, geometry_counts).compute()

        resistor_count = sum(1 for p in parasitics if p.element_type.spice_prefix == 'R')
        elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
        stats = ExtractionStats(
            device_count=len(devices),
            node_count=len(nodes),
            parasitic_count=len(parasitics),
            extraction_time_ms=elapsed_ms,
            resistor_count=resistor_count,
            capacitor_count=len(parasitics) - resistor_count,
            skipped_geometries=dict(ctx.skipped_geometries),
            skipped_layers=dict(ctx.skipped_layers),
            layer_stats=layer_stats,
        )

        logger.info(
            f"Extracted {stats.device_count} devices, {stats.parasitic_count} parasitics, "
            f"{stats.node_count} nodes from {len(geometries)} geometries in {elapsed_ms:.2f} ms"
        )

        return ExtractedNetlist(
            title=self.title,
            nodes=tuple(nodes),
            devices=tuple(devices),
            parasitics=tuple(parasitics),
            spice_text=spice_text,
            timestamp=timestamp,
            stats=stats,
        )

    @staticmethod
    def _register_nodes(
        devices: List[NetlistDevice],
        parasitics: List[ParasiticElement],
    ) -> List[NetlistNode]:
        """Every referenced net exactly once, VDD and GND first."""
        registered: Dict[str, NetlistNode] = {
            POWER_NET: NetlistNode(POWER_NET, NodeType.POWER),
            GROUND_NET: NetlistNode(GROUND_NET, NodeType.GROUND),
        }

        def register(name: str) -> None:
            if name and name not in registered:
                registered[name] = NetlistNode(name, NodeType.SIGNAL)

        for d in devices:
            for net in d.terminals.values():
                register(net)
        for p in parasitics:
            register(p.node_a)
            register(p.node_b)
        return list(registered.values())


def extract_netlist(
    geometries: Iterable[Geometry],
    technology: Technology = SKY130,
    extract_capacitance: bool = False,
    cancel_token: Optional[CancellationToken] = None,
    show_progress: bool = False,
    title: str = DEFAULT_TITLE,
    timestamp: Optional[float] = None,
) -> ExtractedNetlist:
    """Extract a netlist in one call.

    Example:
        netlist = extract_netlist(geoms)
        print(netlist.stats.device_count, netlist.stats.parasitic_count)
    """
    assembler = NetlistAssembler(
        technology,
        extract_capacitance=extract_capacitance,
        show_progress=show_progress,
        title=title,
    )
    context = ExtractionContext(cancel_token)
    return assembler.assemble(geometries, context=context, timestamp=timestamp)
