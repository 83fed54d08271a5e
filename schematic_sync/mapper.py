"""Name-based pairing of schematic devices with layout devices.

Instance names are compared case-insensitively in a single pass. Pairing is
one-to-one: a layout device is consumed by the first schematic device that
claims its name. Duplicate names on either side are logged; the surplus
devices end up missing-layout / missing-schematic.
"""

from __future__ import annotations

import logging
from collections import Counter, OrderedDict, deque
from typing import Deque, Dict, Iterable, List, Optional

from extraction.netlist import NetlistDevice

from .comparator import DEFAULT_TOLERANCE, ParameterComparator
from .types import SchematicDevice, SyncMapping

logger = logging.getLogger(__name__)

MOS_TYPES = ('nmos', 'pmos')
TWO_TERMINAL_TYPES = ('resistor', 'capacitor', 'inductor', 'diode')

MOS_PINS = {
    'D': 'drain', 'DRAIN': 'drain',
    'G': 'gate', 'GATE': 'gate',
    'S': 'source', 'SOURCE': 'source',
    'B': 'body', 'BODY': 'body', 'BULK': 'body',
}
TWO_TERMINAL_PINS = {
    'A': 'plus', '+': 'plus',
    'B': 'minus', '-': 'minus', 'K': 'minus',
}


def pin_to_terminal(pin_name: str, device_type: str) -> str:
    """Layout terminal name for a schematic pin.

    pin_to_terminal('G', 'nmos')     -> 'gate'
    pin_to_terminal('A', 'resistor') -> 'plus'
    pin_to_terminal('OUT', 'opamp')  -> 'out'
    """
    key = pin_name.upper()
    dtype = (device_type or '').lower()
    if dtype in MOS_TYPES and key in MOS_PINS:
        return MOS_PINS[key]
    if dtype in TWO_TERMINAL_TYPES and key in TWO_TERMINAL_PINS:
        return TWO_TERMINAL_PINS[key]
    return pin_name.lower()


class SyncMapper:
    """Build SyncMappings between schematic and layout device lists.

    Example:
        mapper = SyncMapper(ParameterComparator(tolerance=0.05))
        mappings = mapper.build(schematic_devices, netlist.devices)
    """

    def __init__(self, comparator: Optional[ParameterComparator] = None):
        self.comparator = comparator if comparator is not None else ParameterComparator()

    def build(
        self,
        schematic_devices: Iterable[SchematicDevice],
        layout_devices: Iterable[NetlistDevice],
    ) -> List[SyncMapping]:
        """Return schematic-order mappings, then unmatched layout devices.

        Inputs are never modified.
        """
        schematic_devices = list(schematic_devices)
        layout_devices = list(layout_devices)
        self._warn_duplicates('schematic', (s.instance_name for s in schematic_devices))
        self._warn_duplicates('layout', (d.name for d in layout_devices))

        available: Dict[str, Deque[int]] = OrderedDict()
        for i, ld in enumerate(layout_devices):
            available.setdefault(ld.name.upper(), deque()).append(i)

        matched = set()
        mappings: List[SyncMapping] = []
        for sym in schematic_devices:
            queue = available.get(sym.instance_name.upper())
            if queue:
                i = queue.popleft()
                matched.add(i)
                mappings.append(self._paired(sym, layout_devices[i]))
            else:
                mappings.append(SyncMapping(
                    schematic_id=sym.id,
                    instance_name=sym.instance_name,
                    has_layout=False,
                ))

        for i, ld in enumerate(layout_devices):
            if i not in matched:
                mappings.append(SyncMapping(
                    schematic_id='',
                    instance_name=ld.name,
                    layout_geometry_indices=tuple(ld.geometry_indices),
                    has_schematic=False,
                ))

        logger.debug(f"Built {len(mappings)} sync mappings "
                     f"({len(matched)} paired of {len(schematic_devices)} schematic, {len(layout_devices)} layout)")
        return mappings

    def _paired(self, sym: SchematicDevice, layout_device: NetlistDevice) -> SyncMapping:
        deltas = self.comparator.compare(sym.parameters, layout_device.parameters)

        net_mappings: Dict[str, str] = {}
        for pin in sym.pins:
            if pin.net_name:
                terminal = pin_to_terminal(pin.name, sym.device_type)
                net_mappings[pin.name] = layout_device.terminals.get(terminal) or ''

        return SyncMapping(
            schematic_id=sym.id,
            instance_name=sym.instance_name,
            layout_geometry_indices=tuple(layout_device.geometry_indices),
            net_mappings=net_mappings,
            parameter_deltas=tuple(deltas),
        )

    @staticmethod
    def _warn_duplicates(side: str, names: Iterable[str]) -> None:
        counts = Counter(n.upper() for n in names)
        for name, count in counts.items():
            if count > 1:
                logger.warning(f"Duplicate {side} instance name {name!r} ({count} devices); first match wins")


def build_sync_mappings(
    schematic_devices: Iterable[SchematicDevice],
    layout_devices: Iterable[NetlistDevice],
    tolerance: float = DEFAULT_TOLERANCE,
) -> List[SyncMapping]:
    """Pair devices by instance name and compare their parameters."""
    return SyncMapper(ParameterComparator(tolerance)).build(schematic_devices, layout_devices)
