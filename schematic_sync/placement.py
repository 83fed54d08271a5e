"""Layout placement suggestions for schematic-only devices.

New devices go in a single row to the right of the existing layout:

    x = max_x + PLACE_PITCH_X * (col + 1)
    y = PLACE_PITCH_Y
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from extraction.geometry import Geometry

from .types import SchematicDevice, SyncMapping, SyncStatus

PLACE_PITCH_X = 2.0   # microns
PLACE_PITCH_Y = 3.0


@dataclass(frozen=True)
class PlacementSuggestion:
    instance_name: str
    schematic_id: str
    x: float
    y: float
    device_type: str = ''


def layout_extent(geometries: Iterable[Geometry]):
    """(max_x, max_y) over all geometry points, never below (0, 0).

    Shapes without points contribute their bounding box corner.
    """
    max_x = 0.0
    max_y = 0.0
    for g in geometries:
        if g.points:
            for x, y in g.points:
                max_x = max(max_x, x)
                max_y = max(max_y, y)
        else:
            max_x = max(max_x, g.bbox.max_x)
            max_y = max(max_y, g.bbox.max_y)
    return max_x, max_y


def suggest_layout_placements(
    mappings: Iterable[SyncMapping],
    geometries: Iterable[Geometry],
    schematic_devices: Optional[Iterable[SchematicDevice]] = None,
) -> List[PlacementSuggestion]:
    """One suggestion per missing-layout mapping, in mapping order.

    Args:
        mappings: Sync mappings (other statuses are ignored)
        geometries: Existing layout geometry
        schematic_devices: If given, fills device_type by schematic id
    """
    max_x, _ = layout_extent(geometries)
    device_types = {s.id: s.device_type for s in (schematic_devices or ())}

    suggestions = []
    col = 0
    for m in mappings:
        if m.status is not SyncStatus.MISSING_LAYOUT:
            continue
        suggestions.append(PlacementSuggestion(
            instance_name=m.instance_name,
            schematic_id=m.schematic_id,
            x=max_x + PLACE_PITCH_X * (col + 1),
            y=PLACE_PITCH_Y,
            device_type=device_types.get(m.schematic_id, ''),
        ))
        col += 1
    return suggestions
