"""Layout-to-netlist extraction package.

Recognises MOS transistors from poly/diffusion overlap, derives parasitic
resistors (and optionally plate capacitors) from wire and via geometry, and
serializes the result as a SPICE deck.
"""

from .geometry import BBox, Geometry, GeometryType, group_by_layer, path, rect, via
from .technology import SKY130, TechLayer, Technology, ViaDefinition
from .context import CancellationToken, ExtractionCancelled, ExtractionContext
from .netlist import (
    DeviceType,
    ExtractedNetlist,
    ExtractionStats,
    GROUND_NET,
    NetlistDevice,
    NetlistNode,
    NodeType,
    ParasiticElement,
    ParasiticType,
    POWER_NET,
)
from .device_recognizer import DeviceRecognizer
from .parasitic_extractor import ParasiticExtractor
from .capacitance import CapacitanceExtractor
from .spice_writer import SpiceWriter, format_spice_value
from .assembler import NetlistAssembler, extract_netlist
from .worker import ExtractionJob, ExtractionWorker

__all__ = [
    # Geometry
    'BBox',
    'Geometry',
    'GeometryType',
    'group_by_layer',
    'path',
    'rect',
    'via',
    # Technology
    'SKY130',
    'TechLayer',
    'Technology',
    'ViaDefinition',
    # Context
    'CancellationToken',
    'ExtractionCancelled',
    'ExtractionContext',
    # Netlist types
    'DeviceType',
    'ExtractedNetlist',
    'ExtractionStats',
    'GROUND_NET',
    'NetlistDevice',
    'NetlistNode',
    'NodeType',
    'ParasiticElement',
    'ParasiticType',
    'POWER_NET',
    # Extraction
    'DeviceRecognizer',
    'ParasiticExtractor',
    'CapacitanceExtractor',
    'SpiceWriter',
    'format_spice_value',
    'NetlistAssembler',
    'extract_netlist',
    # Background
    'ExtractionJob',
    'ExtractionWorker',
]
