"""Plate-model parasitic capacitance (opt-in).

    C = eps_ox * A / d

- Substrate capacitance for DIFF/POLY/LI and every metal layer with a known
  height and thickness: A = bbox area, d = height + thickness / 2, the other
  plate is GND.
- Inter-layer capacitance between vertically adjacent metal layers:
  A = bbox overlap area, d = upper.height - (lower.height + lower.thickness).

Dimensions are in microns, so permittivity is expressed in F/um.
Capacitors with C <= MIN_CAPACITANCE are dropped.
"""

from __future__ import annotations

import logging
from typing import Dict, List

import numpy as np

from .context import ExtractionContext
from .geometry import Geometry, bbox_array
from .netlist import GROUND_NET, ParasiticElement, ParasiticType
from .technology import Technology, TechLayer

logger = logging.getLogger(__name__)

EPSILON_0 = 8.854e-18            # F/um
EPSILON_OX = 3.9 * EPSILON_0     # SiO2
MIN_CAPACITANCE = 1e-21          # F

CAPACITOR_PREFIX = 'C'

# Non-metal layers that see the substrate directly
SUBSTRATE_LAYERS = ('DIFF', 'POLY')


def plate_capacitance(area: float, distance: float) -> float:
    """Parallel-plate capacitance in Farads (0 for non-positive distance)."""
    if distance <= 0 or area <= 0:
        return 0.0
    return EPSILON_OX * area / distance


class CapacitanceExtractor:
    """Extract substrate and inter-layer plate capacitors.

    Example:
        caps = CapacitanceExtractor(SKY130).extract(by_layer, ExtractionContext())
    """

    def __init__(self, technology: Technology, min_capacitance: float = MIN_CAPACITANCE):
        self.technology = technology
        self.min_capacitance = min_capacitance

    def extract(
        self,
        by_layer: Dict[str, List[Geometry]],
        context: ExtractionContext,
    ) -> List[ParasiticElement]:
        """Return substrate capacitors, then inter-layer capacitors.

        Raises:
            ExtractionCancelled: If the context's token is cancelled
        """
        caps: List[ParasiticElement] = []

        substrate_layers: List[TechLayer] = []
        for alias in SUBSTRATE_LAYERS:
            tl = self.technology.layer(alias)
            if tl is not None and tl.height is not None and tl.thickness is not None:
                substrate_layers.append(tl)
        stack = self.technology.metal_stack()
        substrate_layers.extend(stack)

        for tl in substrate_layers:
            distance = tl.height + tl.thickness / 2
            for g in by_layer.get(tl.alias, []):
                context.check_cancelled()
                cap = plate_capacitance(g.bbox.area, distance)
                if cap > self.min_capacitance:
                    caps.append(self._capacitor(cap, context.next_net(), GROUND_NET, g, tl.alias, context))

        for lower, upper in zip(stack, stack[1:]):
            distance = upper.height - (lower.height + lower.thickness)
            if distance <= 0:
                continue
            caps.extend(self._interlayer(lower, upper, distance, by_layer, context))

        logger.debug(f"Extracted {len(caps)} parasitic capacitors")
        return caps

    def _interlayer(
        self,
        lower: TechLayer,
        upper: TechLayer,
        distance: float,
        by_layer: Dict[str, List[Geometry]],
        context: ExtractionContext,
    ) -> List[ParasiticElement]:
        lower_geoms = by_layer.get(lower.alias, [])
        upper_geoms = by_layer.get(upper.alias, [])
        if not lower_geoms or not upper_geoms:
            return []

        upper_boxes = bbox_array(upper_geoms)
        caps = []
        for lg in lower_geoms:
            context.check_cancelled()
            b = lg.bbox
            ox = np.maximum(0.0, np.minimum(b.max_x, upper_boxes[:, 2]) - np.maximum(b.min_x, upper_boxes[:, 0]))
            oy = np.maximum(0.0, np.minimum(b.max_y, upper_boxes[:, 3]) - np.maximum(b.min_y, upper_boxes[:, 1]))
            areas = ox * oy
            for j in np.flatnonzero(areas > 0):
                cap = plate_capacitance(float(areas[j]), distance)
                if cap > self.min_capacitance:
                    caps.append(self._capacitor(cap, context.next_net(), context.next_net(), lg, lower.alias, context))
        return caps

    @staticmethod
    def _capacitor(
        value: float,
        node_a: str,
        node_b: str,
        g: Geometry,
        layer: str,
        context: ExtractionContext,
    ) -> ParasiticElement:
        return ParasiticElement(
            name=context.next_parasitic(CAPACITOR_PREFIX),
            element_type=ParasiticType.CAPACITOR,
            node_a=node_a,
            node_b=node_b,
            value=value,
            geometry_index=g.index,
            layer=layer,
        )
