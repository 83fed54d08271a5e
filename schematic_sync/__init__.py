"""Schematic/layout synchronisation package.

Pairs schematic devices with extracted layout devices, flags parameter
differences, plans remediation actions, refines pairings from LVS and
back-annotates extracted parameters and parasitics into the schematic.
"""

from .types import (
    LvsDeviceMatch,
    LvsMatchStatus,
    LvsParameterDiff,
    ParameterDelta,
    SchematicDevice,
    SchematicPin,
    SyncAction,
    SyncActionType,
    SyncMapping,
    SyncReport,
    SyncStatus,
    SyncSummary,
)
from .comparator import COMPARED_PARAMETERS, DEFAULT_TOLERANCE, ParameterComparator
from .mapper import SyncMapper, build_sync_mappings, pin_to_terminal
from .planner import ActionPlanner, count_net_mismatches
from .back_annotation import (
    BackAnnotation,
    BackAnnotationResult,
    ParasiticSummary,
    TerminalParasitics,
    apply_back_annotation,
    generate_back_annotations,
)
from .lvs_refiner import refine_mappings_from_lvs
from .placement import PlacementSuggestion, suggest_layout_placements
from .report import build_demo_report, format_sync_report, generate_sync_report

__all__ = [
    # Types
    'LvsDeviceMatch',
    'LvsMatchStatus',
    'LvsParameterDiff',
    'ParameterDelta',
    'SchematicDevice',
    'SchematicPin',
    'SyncAction',
    'SyncActionType',
    'SyncMapping',
    'SyncReport',
    'SyncStatus',
    'SyncSummary',
    # Comparison and mapping
    'COMPARED_PARAMETERS',
    'DEFAULT_TOLERANCE',
    'ParameterComparator',
    'SyncMapper',
    'build_sync_mappings',
    'pin_to_terminal',
    # Planning
    'ActionPlanner',
    'count_net_mismatches',
    # Back-annotation
    'BackAnnotation',
    'BackAnnotationResult',
    'ParasiticSummary',
    'TerminalParasitics',
    'apply_back_annotation',
    'generate_back_annotations',
    # LVS and placement
    'refine_mappings_from_lvs',
    'PlacementSuggestion',
    'suggest_layout_placements',
    # Reports
    'build_demo_report',
    'format_sync_report',
    'generate_sync_report',
]
