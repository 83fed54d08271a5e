"""Transistor recognition from poly/diffusion overlap.

Every (poly, diffusion) pair whose bounding boxes overlap forms one MOS
device. The gate window is the intersection of the two boxes:

    W = vertical extent of the intersection
    L = horizontal extent of the intersection

The axis convention is fixed (horizontal poly fingers are not detected as
such). A device is PMOS when the diffusion's bbox center lies inside any
n-well bbox, NMOS otherwise.

Each device gets three fresh nets (drain, gate, source); no net is shared
between devices since the extractor does not trace connectivity. Identical
or overlapping detection windows are reported as separate devices.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Sequence

import numpy as np
from tqdm import tqdm

from .context import ExtractionContext
from .geometry import Geometry, bbox_array
from .netlist import DeviceType, GROUND_NET, NetlistDevice, POWER_NET
from .technology import Technology

logger = logging.getLogger(__name__)

MOS_PREFIX = 'M'


class DeviceRecognizer:
    """Detect MOS transistors in layer-grouped geometry.

    Example:
        recognizer = DeviceRecognizer(SKY130)
        devices = recognizer.recognize(group_by_layer(geoms, SKY130), ExtractionContext())
    """

    def __init__(self, technology: Technology, show_progress: bool = False):
        """
        Args:
            technology: Supplies layer roles and MOS model names
            show_progress: Show a tqdm progress bar over poly shapes
        """
        self.technology = technology
        self.show_progress = show_progress

    def recognize(
        self,
        by_layer: Dict[str, List[Geometry]],
        context: ExtractionContext,
    ) -> List[NetlistDevice]:
        """Return recognised devices, poly-major in input order.

        Raises:
            ExtractionCancelled: If the context's token is cancelled
        """
        tech = self.technology
        polys = self._usable(by_layer.get(tech.poly_layer, []), tech.poly_layer, context)
        diffs = self._usable(by_layer.get(tech.diffusion_layer, []), tech.diffusion_layer, context)
        nwells = self._usable(by_layer.get(tech.nwell_layer, []), tech.nwell_layer, context)

        devices: List[NetlistDevice] = []
        if not polys or not diffs:
            logger.debug(f"No transistor candidates: {len(polys)} poly, {len(diffs)} diffusion shapes")
            return devices

        diff_boxes = bbox_array(diffs)
        in_nwell = self._diffusions_in_nwell(diff_boxes, bbox_array(nwells))

        for poly in tqdm(polys, desc="Recognizing devices", disable=not self.show_progress):
            context.check_cancelled()
            p = poly.bbox

            overlap = ((p.min_x < diff_boxes[:, 2]) & (p.max_x > diff_boxes[:, 0]) &
                       (p.min_y < diff_boxes[:, 3]) & (p.max_y > diff_boxes[:, 1]))
            gate_l = np.minimum(p.max_x, diff_boxes[:, 2]) - np.maximum(p.min_x, diff_boxes[:, 0])
            gate_w = np.minimum(p.max_y, diff_boxes[:, 3]) - np.maximum(p.min_y, diff_boxes[:, 1])
            hits = np.flatnonzero(overlap & (gate_w > 0) & (gate_l > 0))

            for j in hits:
                devices.append(self._make_device(
                    poly, diffs[j], float(gate_w[j]), float(gate_l[j]), bool(in_nwell[j]), context,
                ))

        logger.debug(f"Recognized {len(devices)} devices from {len(polys)} poly x {len(diffs)} diffusion shapes")
        return devices

    def _make_device(
        self,
        poly: Geometry,
        diff: Geometry,
        gate_w: float,
        gate_l: float,
        is_pmos: bool,
        context: ExtractionContext,
    ) -> NetlistDevice:
        tech = self.technology
        terminals = {
            'drain': context.next_net(),
            'gate': context.next_net(),
            'source': context.next_net(),
            'body': POWER_NET if is_pmos else GROUND_NET,
        }
        return NetlistDevice(
            name=context.next_device(MOS_PREFIX),
            device_type=DeviceType.PMOS if is_pmos else DeviceType.NMOS,
            model=tech.pmos_model if is_pmos else tech.nmos_model,
            terminals=terminals,
            parameters={
                'w': round(gate_w, 6),
                'l': round(gate_l, 6),
                'nf': 1,
                'mult': 1,
            },
            geometry_indices=(poly.index, diff.index),
        )

    @staticmethod
    def _usable(geoms: Sequence[Geometry], layer: str, context: ExtractionContext) -> List[Geometry]:
        """Drop degenerate shapes, recording how many were dropped."""
        usable = [g for g in geoms if not g.is_degenerate]
        dropped = len(geoms) - len(usable)
        if dropped:
            context.skipped_geometries[layer] += dropped
            logger.debug(f"Skipped {dropped} degenerate {layer} geometries")
        return usable

    @staticmethod
    def _diffusions_in_nwell(diff_boxes: np.ndarray, nwell_boxes: np.ndarray) -> np.ndarray:
        """Boolean mask: diffusion bbox center inside (inclusive) any n-well bbox."""
        cx = ((diff_boxes[:, 0] + diff_boxes[:, 2]) / 2)[:, None]
        cy = ((diff_boxes[:, 1] + diff_boxes[:, 3]) / 2)[:, None]
        inside = ((cx >= nwell_boxes[:, 0]) & (cx <= nwell_boxes[:, 2]) &
                  (cy >= nwell_boxes[:, 1]) & (cy <= nwell_boxes[:, 3]))
        return inside.any(axis=1)
