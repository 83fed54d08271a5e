"""Data types for schematic/layout synchronisation.

Schematic devices and LVS matches are caller input; mappings, actions and
reports are produced by the sync pipeline. A mapping's status is never
stored: it is derived from which sides are present, the LVS verdict (if the
mapping was refined from LVS) and the parameter deltas.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

ParamValue = Union[float, int, str]

MISSING = 'missing'


class SyncStatus(Enum):
    SYNCED = 'synced'
    PARAM_MISMATCH = 'param-mismatch'
    MISSING_LAYOUT = 'missing-layout'
    MISSING_SCHEMATIC = 'missing-schematic'
    UNLINKED = 'unlinked'


class SyncActionType(Enum):
    CREATE_LAYOUT_DEVICE = 'create-layout-device'
    CREATE_SCHEMATIC_SYMBOL = 'create-schematic-symbol'
    UPDATE_LAYOUT_PARAMS = 'update-layout-params'
    UPDATE_SCHEMATIC_PARAMS = 'update-schematic-params'
    FIX_NET_CONNECTION = 'fix-net-connection'
    REMOVE_EXTRA_LAYOUT = 'remove-extra-layout'
    REMOVE_EXTRA_SCHEMATIC = 'remove-extra-schematic'


class LvsMatchStatus(Enum):
    MATCH = 'match'
    MISMATCH = 'mismatch'
    EXTRA = 'extra'
    MISSING = 'missing'


# =============================================================================
# Schematic input
# =============================================================================

@dataclass(frozen=True)
class SchematicPin:
    name: str
    net_name: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'SchematicPin':
        return cls(name=d['name'], net_name=d.get('net_name', d.get('netName')))


@dataclass(frozen=True)
class SchematicDevice:
    """A schematic symbol instance.

    Attributes:
        id: Schematic symbol ID
        instance_name: Instance name (M0, R1, ...)
        device_type: nmos / pmos / resistor / capacitor / ...
        pins: Symbol pins with their connected net names
        parameters: Parameter values (numbers or strings)
    """
    id: str
    instance_name: str
    device_type: str
    pins: Tuple[SchematicPin, ...] = field(default_factory=tuple)
    parameters: Dict[str, ParamValue] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'SchematicDevice':
        """Build from the schematic-store dict form (camelCase or snake_case)."""
        return cls(
            id=d['id'],
            instance_name=d.get('instance_name', d.get('instanceName', '')),
            device_type=d.get('device_type', d.get('deviceType', '')),
            pins=tuple(SchematicPin.from_dict(p) for p in d.get('pins', ())),
            parameters=dict(d.get('parameters', {})),
        )


# =============================================================================
# LVS input
# =============================================================================

@dataclass(frozen=True)
class LvsParameterDiff:
    parameter: str
    schematic_value: Optional[float] = None
    layout_value: Optional[float] = None
    tolerance: float = 0.0
    within_tolerance: bool = True


@dataclass(frozen=True)
class LvsDeviceMatch:
    """One device pairing reported by an LVS run."""
    status: LvsMatchStatus
    schematic_device_name: Optional[str] = None
    layout_device_name: Optional[str] = None
    geometry_indices: Tuple[int, ...] = field(default_factory=tuple)
    parameter_diffs: Tuple[LvsParameterDiff, ...] = field(default_factory=tuple)


# =============================================================================
# Sync results
# =============================================================================

@dataclass(frozen=True)
class ParameterDelta:
    """A flagged parameter difference.

    Values are the numeric parameters for numeric comparisons, the raw values
    for string comparisons, and 'missing' for an absent side.
    """
    param: str
    schematic_value: ParamValue
    layout_value: ParamValue
    percent_diff: Optional[float] = None

    def to_dict(self) -> Dict:
        d = {'param': self.param, 'schematic_value': self.schematic_value, 'layout_value': self.layout_value}
        if self.percent_diff is not None:
            d['percent_diff'] = self.percent_diff
        return d


@dataclass(frozen=True)
class SyncMapping:
    """Pairing of one schematic device with its layout counterpart.

    Attributes:
        schematic_id: Schematic symbol ID ('' when the device is layout-only)
        instance_name: Instance name as written on the present side
        layout_geometry_indices: Geometry indices of the layout device
        layout_instance_id: Layout cell instance ID, if placed via cells
        net_mappings: Schematic pin name -> layout net ('' if the terminal
            does not exist on the layout device)
        parameter_deltas: Out-of-tolerance parameter differences
        has_schematic / has_layout: Which sides are present
        lvs_match: LVS verdict if the mapping was refined from LVS
            (True = match, False = mismatch), None otherwise
    """
    schematic_id: str
    instance_name: str
    layout_geometry_indices: Tuple[int, ...] = field(default_factory=tuple)
    layout_instance_id: Optional[str] = None
    net_mappings: Dict[str, str] = field(default_factory=dict)
    parameter_deltas: Tuple[ParameterDelta, ...] = field(default_factory=tuple)
    has_schematic: bool = True
    has_layout: bool = True
    lvs_match: Optional[bool] = None

    @property
    def status(self) -> SyncStatus:
        if not self.has_schematic and not self.has_layout:
            return SyncStatus.UNLINKED
        if not self.has_layout:
            return SyncStatus.MISSING_LAYOUT
        if not self.has_schematic:
            return SyncStatus.MISSING_SCHEMATIC
        if self.lvs_match is not None:
            return SyncStatus.SYNCED if self.lvs_match else SyncStatus.PARAM_MISMATCH
        return SyncStatus.PARAM_MISMATCH if self.parameter_deltas else SyncStatus.SYNCED

    def to_dict(self) -> Dict:
        return {
            'schematic_id': self.schematic_id,
            'instance_name': self.instance_name,
            'layout_geometry_indices': list(self.layout_geometry_indices),
            'layout_instance_id': self.layout_instance_id,
            'net_mappings': dict(self.net_mappings),
            'status': self.status.value,
            'parameter_deltas': [d.to_dict() for d in self.parameter_deltas],
        }


@dataclass(frozen=True)
class SyncAction:
    """A suggested remediation step (lower priority value = more urgent)."""
    action_type: SyncActionType
    description: str
    instance_name: str
    priority: int
    mapping: Optional[SyncMapping] = None
    suggested_params: Optional[Dict[str, ParamValue]] = None

    def to_dict(self) -> Dict:
        return {
            'type': self.action_type.value,
            'description': self.description,
            'instance_name': self.instance_name,
            'priority': self.priority,
            'suggested_params': dict(self.suggested_params) if self.suggested_params is not None else None,
        }


@dataclass(frozen=True)
class SyncSummary:
    total_schematic_devices: int = 0
    total_layout_devices: int = 0
    synced: int = 0
    param_mismatches: int = 0
    missing_in_layout: int = 0
    missing_in_schematic: int = 0
    unlinked: int = 0
    net_mismatches: int = 0

    @property
    def total_mappings(self) -> int:
        return (self.synced + self.param_mismatches + self.missing_in_layout
                + self.missing_in_schematic + self.unlinked)

    def to_dict(self) -> Dict[str, int]:
        return {
            'total_schematic_devices': self.total_schematic_devices,
            'total_layout_devices': self.total_layout_devices,
            'synced': self.synced,
            'param_mismatches': self.param_mismatches,
            'missing_in_layout': self.missing_in_layout,
            'missing_in_schematic': self.missing_in_schematic,
            'unlinked': self.unlinked,
            'net_mismatches': self.net_mismatches,
        }


@dataclass(frozen=True)
class SyncReport:
    timestamp: float
    duration_ms: float
    mappings: List[SyncMapping]
    actions: List[SyncAction]
    summary: SyncSummary

    def mapping(self, instance_name: str) -> Optional[SyncMapping]:
        """First mapping with the given instance name (case-insensitive)."""
        key = instance_name.upper()
        for m in self.mappings:
            if m.instance_name.upper() == key:
                return m
        return None

    def to_dict(self) -> Dict:
        return {
            'timestamp': self.timestamp,
            'duration_ms': self.duration_ms,
            'mappings': [m.to_dict() for m in self.mappings],
            'actions': [a.to_dict() for a in self.actions],
            'summary': self.summary.to_dict(),
        }
