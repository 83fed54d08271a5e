"""Post-layout back-annotation.

generate_back_annotations() summarizes, per extracted device, the parasitics
touching its terminal nets; apply_back_annotation() turns those summaries into
new schematic parameter maps without modifying the schematic.

Attribution rule: a parasitic touching the device's net set is booked on
node_a if node_a is one of the device's nets, otherwise on node_b. A parasitic
shared by two devices is booked independently for each of them.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from core.rx_graph import ParasiticGraph
from extraction.netlist import DEVICE_PARAMETERS, ExtractedNetlist

from .types import ParamValue, SchematicDevice

logger = logging.getLogger(__name__)

FARADS_TO_FF = 1e15
ANNOTATION_DECIMALS = 3

PARASITIC_R_KEY = '_parasitic_R'
PARASITIC_C_KEY = '_parasitic_C_fF'


@dataclass(frozen=True)
class TerminalParasitics:
    resistance: float = 0.0     # Ohms
    capacitance: float = 0.0    # fF


@dataclass(frozen=True)
class ParasiticSummary:
    """Parasitics on one device's nets.

    Attributes:
        total_resistance: Sum of attributed resistors (Ohms)
        total_capacitance: Sum of attributed capacitors (fF)
        per_terminal: Terminal -> totals booked on that terminal's net
    """
    total_resistance: float = 0.0
    total_capacitance: float = 0.0
    per_terminal: Dict[str, TerminalParasitics] = field(default_factory=dict)


@dataclass(frozen=True)
class BackAnnotation:
    instance_name: str
    extracted_params: Dict[str, float]
    parasitics: ParasiticSummary
    net_connections: Dict[str, str]


@dataclass(frozen=True)
class BackAnnotationResult:
    """Parameter updates keyed by schematic device id.

    Devices without a matching annotation have no entry in updates and are
    listed in unannotated instead.
    """
    updates: Dict[str, Dict[str, ParamValue]] = field(default_factory=dict)
    unannotated: Tuple[str, ...] = field(default_factory=tuple)

    def __contains__(self, device_id: str) -> bool:
        return device_id in self.updates

    def __getitem__(self, device_id: str) -> Dict[str, ParamValue]:
        return self.updates[device_id]

    def get(self, device_id: str, default=None) -> Optional[Dict[str, ParamValue]]:
        return self.updates.get(device_id, default)

    def __len__(self) -> int:
        return len(self.updates)

    def __iter__(self) -> Iterator[str]:
        return iter(self.updates)


def generate_back_annotations(
    netlist: ExtractedNetlist,
    graph: Optional[ParasiticGraph] = None,
) -> List[BackAnnotation]:
    """Summarize parasitics per extracted device.

    Args:
        netlist: Extraction result
        graph: Prebuilt parasitic graph for the netlist (built if omitted)

    Returns:
        One BackAnnotation per device, in device order
    """
    if graph is None:
        graph = ParasiticGraph.from_netlist(netlist)

    annotations: List[BackAnnotation] = []
    for device in netlist.devices:
        nets = list(dict.fromkeys(device.terminals.values()))
        net_set = set(nets)
        r_by_net: Dict[str, float] = defaultdict(float)
        c_by_net: Dict[str, float] = defaultdict(float)

        seen = set()
        for net in nets:
            for key, u, v, data in graph.incident_edges(net):
                if key in seen:
                    continue
                seen.add(key)
                booked = u if u in net_set else v
                if data['type'] == 'R':
                    r_by_net[booked] += data['value']
                else:
                    c_by_net[booked] += data['value'] * FARADS_TO_FF

        per_terminal = {
            terminal: TerminalParasitics(
                resistance=r_by_net.get(net, 0.0),
                capacitance=c_by_net.get(net, 0.0),
            )
            for terminal, net in device.terminals.items()
        }
        annotations.append(BackAnnotation(
            instance_name=device.name,
            extracted_params=dict(device.parameters),
            parasitics=ParasiticSummary(
                total_resistance=sum(r_by_net.values()),
                total_capacitance=sum(c_by_net.values()),
                per_terminal=per_terminal,
            ),
            net_connections=dict(device.terminals),
        ))

    logger.debug(f"Generated {len(annotations)} back-annotations")
    return annotations


def apply_back_annotation(
    annotations: Iterable[BackAnnotation],
    schematic_devices: Iterable[SchematicDevice],
) -> BackAnnotationResult:
    """New parameter maps for schematic devices with a matching annotation.

    Matching is by instance name, case-insensitive; the first annotation with
    a given name wins. Only geometric/electrical parameters (w, l, nf, mult,
    r, c) are copied over the existing parameters; _parasitic_R (Ohms) and
    _parasitic_C_fF (fF) are added, rounded to 3 decimals. Neither the
    annotations nor the schematic devices are modified.
    """
    by_name: Dict[str, BackAnnotation] = {}
    for a in annotations:
        key = a.instance_name.upper()
        if key in by_name:
            logger.warning(f"Duplicate back-annotation for {a.instance_name!r}; keeping the first")
            continue
        by_name[key] = a

    updates: Dict[str, Dict[str, ParamValue]] = {}
    unannotated: List[str] = []
    for sym in schematic_devices:
        annotation = by_name.get(sym.instance_name.upper())
        if annotation is None:
            unannotated.append(sym.id)
            continue

        params: Dict[str, ParamValue] = dict(sym.parameters)
        for key, value in annotation.extracted_params.items():
            if key in DEVICE_PARAMETERS:
                params[key] = value
        params[PARASITIC_R_KEY] = round(annotation.parasitics.total_resistance, ANNOTATION_DECIMALS)
        params[PARASITIC_C_KEY] = round(annotation.parasitics.total_capacitance, ANNOTATION_DECIMALS)
        updates[sym.id] = params

    logger.info(f"Back-annotated {len(updates)} schematic devices ({len(unannotated)} without annotation)")
    return BackAnnotationResult(updates=updates, unannotated=tuple(unannotated))
