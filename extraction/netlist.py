"""Netlist value types produced by layout extraction.

An ExtractedNetlist is a fresh value per extraction call and is never
mutated afterwards (the dataclass is frozen and its collections are tuples).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from core.statistics import LayerStats

POWER_NET = 'VDD'
GROUND_NET = 'GND'
GLOBAL_NETS = (POWER_NET, GROUND_NET)

# Parameter keys a device may carry
DEVICE_PARAMETERS = ('w', 'l', 'nf', 'mult', 'r', 'c')


class NodeType(Enum):
    SIGNAL = 'signal'
    POWER = 'power'
    GROUND = 'ground'
    IO = 'io'


class DeviceType(Enum):
    NMOS = 'nmos'
    PMOS = 'pmos'
    RESISTOR = 'resistor'
    CAPACITOR = 'capacitor'

    @property
    def is_mos(self) -> bool:
        return self in (DeviceType.NMOS, DeviceType.PMOS)


class ParasiticType(Enum):
    RESISTOR = 'resistor'
    CAPACITOR = 'capacitor'

    @property
    def spice_prefix(self) -> str:
        """SPICE element letter ('R' or 'C')."""
        return 'R' if self is ParasiticType.RESISTOR else 'C'


@dataclass(frozen=True)
class NetlistNode:
    name: str
    node_type: NodeType = NodeType.SIGNAL

    def to_dict(self) -> Dict:
        return {'name': self.name, 'type': self.node_type.value}


@dataclass(frozen=True)
class NetlistDevice:
    """An extracted (or externally supplied) layout device.

    Attributes:
        name: Instance name (M0, R0, ...)
        device_type: nmos / pmos / resistor / capacitor
        model: Model name from the technology
        terminals: Terminal name -> net name (drain/gate/source/body for MOS,
            plus/minus for two-terminal devices)
        parameters: Numeric parameters (w, l, nf, mult, r, c)
        geometry_indices: Source geometry indices ([poly, diff] for MOS)
    """
    name: str
    device_type: DeviceType
    model: str
    terminals: Dict[str, str] = field(default_factory=dict)
    parameters: Dict[str, float] = field(default_factory=dict)
    geometry_indices: Tuple[int, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict:
        return {
            'name': self.name,
            'type': self.device_type.value,
            'model': self.model,
            'terminals': dict(self.terminals),
            'parameters': dict(self.parameters),
            'geometry_indices': list(self.geometry_indices),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'NetlistDevice':
        """Reconstruct from dictionary.

        Raises:
            ValueError: If the device type is unknown
        """
        type_str = d.get('type', d.get('device_type'))
        try:
            device_type = DeviceType(type_str)
        except ValueError:
            raise ValueError(f"Unknown device type: {type_str!r}")
        return cls(
            name=d['name'],
            device_type=device_type,
            model=d.get('model', ''),
            terminals=dict(d.get('terminals', {})),
            parameters=dict(d.get('parameters', {})),
            geometry_indices=tuple(d.get('geometry_indices', d.get('geometryIndices', ()))),
        )


@dataclass(frozen=True)
class ParasiticElement:
    """A parasitic resistor or capacitor derived from wire/via geometry.

    Attributes:
        name: Instance name (R0, C1, ...)
        element_type: resistor / capacitor
        node_a, node_b: Endpoint net names
        value: Ohms (resistor) or Farads (capacitor)
        geometry_index: Source geometry index, if any
        layer: Resolved layer alias of the source geometry, if any
    """
    name: str
    element_type: ParasiticType
    node_a: str
    node_b: str
    value: float
    geometry_index: Optional[int] = None
    layer: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            'name': self.name,
            'type': self.element_type.value,
            'node_a': self.node_a,
            'node_b': self.node_b,
            'value': self.value,
            'geometry_index': self.geometry_index,
            'layer': self.layer,
        }


@dataclass(frozen=True)
class ExtractionStats:
    """Counts and timing for one extraction.

    Attributes:
        device_count: Number of recognised devices
        node_count: Number of distinct nets (VDD/GND included)
        parasitic_count: Number of parasitic elements (R and C)
        extraction_time_ms: Wall-clock time, rounded to 0.01 ms
        resistor_count / capacitor_count: Parasitic breakdown
        skipped_geometries: Degenerate geometries dropped, per layer
        skipped_layers: Geometries on layers without a technology entry, per layer
        layer_stats: Per-layer parasitic statistics
    """
    device_count: int = 0
    node_count: int = 0
    parasitic_count: int = 0
    extraction_time_ms: float = 0.0
    resistor_count: int = 0
    capacitor_count: int = 0
    skipped_geometries: Dict[str, int] = field(default_factory=dict)
    skipped_layers: Dict[str, int] = field(default_factory=dict)
    layer_stats: Dict[str, LayerStats] = field(default_factory=dict)


@dataclass(frozen=True)
class ExtractedNetlist:
    """Result of one extraction call."""
    title: str
    nodes: Tuple[NetlistNode, ...]
    devices: Tuple[NetlistDevice, ...]
    parasitics: Tuple[ParasiticElement, ...]
    spice_text: str
    timestamp: float
    stats: ExtractionStats

    @property
    def node_names(self) -> List[str]:
        return [n.name for n in self.nodes]

    def device(self, name: str) -> Optional[NetlistDevice]:
        """Look up a device by instance name (case-insensitive)."""
        key = name.upper()
        for d in self.devices:
            if d.name.upper() == key:
                return d
        return None

    def resistors(self) -> List[ParasiticElement]:
        return [p for p in self.parasitics if p.element_type is ParasiticType.RESISTOR]

    def capacitors(self) -> List[ParasiticElement]:
        return [p for p in self.parasitics if p.element_type is ParasiticType.CAPACITOR]

    def to_dict(self) -> Dict:
        """Serialize to a JSON-compatible dictionary."""
        return {
            'title': self.title,
            'nodes': [n.to_dict() for n in self.nodes],
            'devices': [d.to_dict() for d in self.devices],
            'parasitics': [p.to_dict() for p in self.parasitics],
            'spice_text': self.spice_text,
            'timestamp': self.timestamp,
            'stats': {
                'device_count': self.stats.device_count,
                'node_count': self.stats.node_count,
                'parasitic_count': self.stats.parasitic_count,
                'extraction_time_ms': self.stats.extraction_time_ms,
            },
        }
