"""Parasitic resistance extraction from wire and via geometry.

Wires:  R = sheet_resistance * length / width
    - path: length = polyline length, width = path width (or DEFAULT_PATH_WIDTH)
    - rect: length = longer bbox side, width = shorter bbox side
Vias:   R = fixed contact resistance of the cut layer (no geometric scaling)

Resistances below NOISE_FLOOR_OHMS are dropped. Every resistor gets two
fresh, unmerged net names.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from tqdm import tqdm

from .context import ExtractionContext
from .geometry import Geometry, GeometryType
from .netlist import ParasiticElement, ParasiticType
from .technology import Technology, TechLayer, ViaDefinition

logger = logging.getLogger(__name__)

DEFAULT_PATH_WIDTH = 0.14   # microns, used when a path carries no width
NOISE_FLOOR_OHMS = 0.01     # smaller resistances are discarded
RESISTANCE_DECIMALS = 3

RESISTOR_PREFIX = 'R'


def wire_resistance(sheet_resistance: float, length: float, width: float) -> float:
    """Resistance of a uniform wire in Ohms (0 for non-positive width)."""
    if width <= 0:
        return 0.0
    return sheet_resistance * length / width


class ParasiticExtractor:
    """Extract wire and via resistors from layer-grouped geometry.

    Example:
        extractor = ParasiticExtractor(SKY130)
        resistors = extractor.extract(group_by_layer(geoms, SKY130), ExtractionContext())
    """

    def __init__(
        self,
        technology: Technology,
        default_path_width: float = DEFAULT_PATH_WIDTH,
        noise_floor: float = NOISE_FLOOR_OHMS,
        show_progress: bool = False,
    ):
        """
        Args:
            technology: Sheet and contact resistance source
            default_path_width: Width assumed for paths without one (microns)
            noise_floor: Resistances below this value (Ohms) are dropped
            show_progress: Show tqdm progress bars per layer
        """
        self.technology = technology
        self.default_path_width = default_path_width
        self.noise_floor = noise_floor
        self.show_progress = show_progress

    def extract(
        self,
        by_layer: Dict[str, List[Geometry]],
        context: ExtractionContext,
    ) -> List[ParasiticElement]:
        """Return wire resistors (technology layer order) then via resistors.

        Raises:
            ExtractionCancelled: If the context's token is cancelled
        """
        parasitics: List[ParasiticElement] = []

        for tech_layer in self.technology.routing_layers():
            geoms = by_layer.get(tech_layer.alias)
            if not geoms:
                continue
            if tech_layer.sheet_resistance is None:
                self._skip_layer(tech_layer.alias, len(geoms), context, "no sheet resistance")
                continue
            parasitics.extend(self._extract_wires(tech_layer, geoms, context))

        for via_def in self.technology.vias:
            geoms = by_layer.get(via_def.cut_layer)
            if not geoms:
                continue
            if via_def.resistance is None:
                self._skip_layer(via_def.cut_layer, len(geoms), context, "no contact resistance")
                continue
            parasitics.extend(self._extract_vias(via_def, geoms, context))

        logger.debug(f"Extracted {len(parasitics)} parasitic resistors")
        return parasitics

    def unknown_layers(self, by_layer: Dict[str, List[Geometry]], context: ExtractionContext) -> None:
        """Record layers that have geometry but no technology entry at all."""
        tech = self.technology
        for alias, geoms in by_layer.items():
            if alias in (tech.poly_layer, tech.diffusion_layer, tech.nwell_layer):
                continue
            if tech.layer(alias) is None and tech.via_for_cut(alias) is None:
                self._skip_layer(alias, len(geoms), context, "not in technology table")

    def _extract_wires(
        self,
        tech_layer: TechLayer,
        geoms: Iterable[Geometry],
        context: ExtractionContext,
    ) -> List[ParasiticElement]:
        result = []
        for g in tqdm(geoms, desc=f"Wires {tech_layer.alias}", disable=not self.show_progress):
            context.check_cancelled()
            resistance = self._wire_resistance(g, tech_layer, context)
            if resistance is None or resistance < self.noise_floor:
                continue
            result.append(self._resistor(round(resistance, RESISTANCE_DECIMALS), g, tech_layer.alias, context))
        return result

    def _wire_resistance(
        self,
        g: Geometry,
        tech_layer: TechLayer,
        context: ExtractionContext,
    ) -> Optional[float]:
        """Resistance of one wire shape, or None if the shape does not qualify."""
        sheet_resistance = tech_layer.sheet_resistance
        if g.geometry_type is GeometryType.PATH:
            if len(g.points) < 2:
                context.skipped_geometries[tech_layer.alias] += 1
                return None
            width = g.width if g.width else self.default_path_width
            return wire_resistance(sheet_resistance, g.path_length(), width)

        if g.geometry_type is GeometryType.RECT:
            w, h = g.bbox.width, g.bbox.height
            if w <= 0 or h <= 0:
                context.skipped_geometries[tech_layer.alias] += 1
                return None
            return wire_resistance(sheet_resistance, max(w, h), min(w, h))

        # Polygons and stray vias on a routing layer carry no resistance model
        return None

    def _extract_vias(
        self,
        via_def: ViaDefinition,
        geoms: Iterable[Geometry],
        context: ExtractionContext,
    ) -> List[ParasiticElement]:
        result = []
        for g in tqdm(geoms, desc=f"Vias {via_def.cut_layer}", disable=not self.show_progress):
            context.check_cancelled()
            result.append(self._resistor(via_def.resistance, g, via_def.cut_layer, context))
        return result

    @staticmethod
    def _resistor(value: float, g: Geometry, layer: str, context: ExtractionContext) -> ParasiticElement:
        return ParasiticElement(
            name=context.next_parasitic(RESISTOR_PREFIX),
            element_type=ParasiticType.RESISTOR,
            node_a=context.next_net(),
            node_b=context.next_net(),
            value=value,
            geometry_index=g.index,
            layer=layer,
        )

    @staticmethod
    def _skip_layer(alias: str, count: int, context: ExtractionContext, reason: str) -> None:
        context.skipped_layers[alias] += count
        logger.info(f"Skipping {count} geometries on layer {alias}: {reason}")
