"""Layout geometry records consumed by netlist extraction.

Geometries arrive from the layout store with resolved bounding boxes and
layer aliases. They are read-only input: extraction never modifies them.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from .technology import Technology

Point = Tuple[float, float]


class GeometryType(Enum):
    """Shape kinds stored by the layout database."""
    RECT = 'rect'
    POLYGON = 'polygon'
    PATH = 'path'
    VIA = 'via'


@dataclass(frozen=True)
class BBox:
    """Axis-aligned bounding box in microns."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        """Horizontal extent."""
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        """Vertical extent."""
        return self.max_y - self.min_y

    @property
    def area(self) -> float:
        return max(0.0, self.width) * max(0.0, self.height)

    @property
    def center(self) -> Point:
        return ((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)

    def overlaps(self, other: 'BBox') -> bool:
        """Strict overlap test (touching edges do not overlap)."""
        return (self.min_x < other.max_x and self.max_x > other.min_x and
                self.min_y < other.max_y and self.max_y > other.min_y)

    def intersection(self, other: 'BBox') -> 'BBox':
        """Intersection window; may be degenerate if the boxes do not overlap."""
        return BBox(
            max(self.min_x, other.min_x),
            max(self.min_y, other.min_y),
            min(self.max_x, other.max_x),
            min(self.max_y, other.max_y),
        )

    def overlap_area(self, other: 'BBox') -> float:
        ox = max(0.0, min(self.max_x, other.max_x) - max(self.min_x, other.min_x))
        oy = max(0.0, min(self.max_y, other.max_y) - max(self.min_y, other.min_y))
        return ox * oy

    def contains_point(self, x: float, y: float) -> bool:
        """Inclusive containment test."""
        return self.min_x <= x <= self.max_x and self.min_y <= y <= self.max_y

    def as_array(self) -> np.ndarray:
        return np.array([self.min_x, self.min_y, self.max_x, self.max_y], dtype=float)

    @classmethod
    def from_points(cls, points: Sequence[Point]) -> 'BBox':
        """Bounding box of a point list."""
        if not points:
            raise ValueError("Cannot compute bounding box of an empty point list")
        pts = np.asarray(points, dtype=float)
        mins = pts.min(axis=0)
        maxs = pts.max(axis=0)
        return cls(float(mins[0]), float(mins[1]), float(maxs[0]), float(maxs[1]))

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'BBox':
        """Accepts both camelCase (minX) and snake_case (min_x) keys."""
        def pick(snake: str, camel: str) -> float:
            return float(d[snake] if snake in d else d[camel])
        return cls(
            min_x=pick('min_x', 'minX'),
            min_y=pick('min_y', 'minY'),
            max_x=pick('max_x', 'maxX'),
            max_y=pick('max_y', 'maxY'),
        )


@dataclass(frozen=True)
class Geometry:
    """One layout shape.

    Attributes:
        index: Position of the shape in the layout store (reported back as
            device/parasitic source indices)
        geometry_type: Shape kind
        layer_alias: Layer alias as stored by the layout (resolved against the
            technology table during extraction)
        bbox: Resolved bounding box
        points: Outline (polygon), centerline (path) or corner points
        width: Path width in microns, if set
    """
    index: int
    geometry_type: GeometryType
    layer_alias: str
    bbox: BBox
    points: Tuple[Point, ...] = field(default_factory=tuple)
    width: Optional[float] = None

    @property
    def is_degenerate(self) -> bool:
        """Zero-area bounding box, or an outline/centerline without points."""
        if self.bbox.width <= 0 or self.bbox.height <= 0:
            return True
        if self.geometry_type in (GeometryType.PATH, GeometryType.POLYGON) and not self.points:
            return True
        return False

    def path_length(self) -> float:
        """Total polyline length through the point list."""
        if len(self.points) < 2:
            return 0.0
        pts = np.asarray(self.points, dtype=float)
        segments = np.diff(pts, axis=0)
        return float(np.hypot(segments[:, 0], segments[:, 1]).sum())

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'Geometry':
        """Build from the layout-store dict form.

        Raises:
            ValueError: If the geometry type is not one of rect/polygon/path/via
        """
        type_str = d.get('type', d.get('geometry_type'))
        try:
            geometry_type = GeometryType(type_str)
        except ValueError:
            raise ValueError(f"Unknown geometry type: {type_str!r}")

        points = tuple((float(p['x']), float(p['y'])) if isinstance(p, dict) else (float(p[0]), float(p[1]))
                       for p in d.get('points', ()))
        if 'bbox' in d:
            bbox = BBox.from_dict(d['bbox'])
        else:
            bbox = BBox.from_points(points)

        width = d.get('width')
        return cls(
            index=int(d['index']),
            geometry_type=geometry_type,
            layer_alias=d.get('layer_alias', d.get('layerAlias', '')),
            bbox=bbox,
            points=points,
            width=float(width) if width is not None else None,
        )


def rect(index: int, layer: str, min_x: float, min_y: float, max_x: float, max_y: float) -> Geometry:
    """Convenience constructor for a rectangle."""
    bbox = BBox(min_x, min_y, max_x, max_y)
    corners = ((min_x, min_y), (max_x, min_y), (max_x, max_y), (min_x, max_y))
    return Geometry(index, GeometryType.RECT, layer, bbox, corners)


def path(index: int, layer: str, points: Sequence[Point], width: Optional[float] = None) -> Geometry:
    """Convenience constructor for a wire centerline.

    The bounding box is grown by half the width so straight wires keep a
    non-zero area.
    """
    pts = tuple((float(x), float(y)) for x, y in points)
    half = (width if width is not None else 0.0) / 2
    core = BBox.from_points(pts)
    bbox = BBox(core.min_x - half, core.min_y - half, core.max_x + half, core.max_y + half)
    return Geometry(index, GeometryType.PATH, layer, bbox, pts, width)


def via(index: int, layer: str, x: float, y: float, size: float) -> Geometry:
    """Convenience constructor for a square cut centred on (x, y)."""
    half = size / 2
    bbox = BBox(x - half, y - half, x + half, y + half)
    return Geometry(index, GeometryType.VIA, layer, bbox, ((x, y),))


def group_by_layer(
    geometries: Iterable[Geometry],
    technology: Optional["Technology"] = None,
) -> Dict[str, List[Geometry]]:
    """Group geometries by resolved layer alias, preserving input order."""
    by_layer: Dict[str, List[Geometry]] = defaultdict(list)
    for g in geometries:
        alias = technology.resolve_layer_alias(g.layer_alias) if technology else g.layer_alias
        by_layer[alias].append(g)
    return dict(by_layer)


def bbox_array(geometries: Sequence[Geometry]) -> np.ndarray:
    """Stack bounding boxes into an (N, 4) array of [min_x, min_y, max_x, max_y]."""
    if not geometries:
        return np.empty((0, 4), dtype=float)
    return np.array(
        [[g.bbox.min_x, g.bbox.min_y, g.bbox.max_x, g.bbox.max_y] for g in geometries],
        dtype=float,
    )
