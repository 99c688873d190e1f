"""Overlap tests between placed outlines.

Two implementations share one interface:

- BoundingBoxOverlap: inclusive axis-aligned box intersection. Fast and
  conservative, the default.
- SeparatingAxisOverlap: separating-axis test on the convex hulls of both
  outlines. Exact for convex shapes, and never looser than the box test.

Both treat touching shapes as overlapping.
"""

import math
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Sequence, Tuple, Type

from shapely.geometry import MultiPoint

from .geometry import BoundingBox, Outline, Point, bounding_box


def boxes_overlap(a: BoundingBox, b: BoundingBox) -> bool:
    """Inclusive box intersection: shared edges or corners count as overlap."""
    return not (
        a.max_x < b.min_x or a.min_x > b.max_x
        or a.max_y < b.min_y or a.min_y > b.max_y
    )


class OverlapTest(ABC):
    """Predicate deciding whether two outlines overlap."""

    name: str = ""

    @abstractmethod
    def overlaps(self, a: Outline, b: Outline) -> bool:
        """Check whether two outlines overlap."""

    def collides(self, candidate: Outline, placed: Iterable[Outline]) -> bool:
        """Check a candidate against every already placed outline."""
        return any(self.overlaps(candidate, other) for other in placed)


class BoundingBoxOverlap(OverlapTest):
    """Axis-aligned bounding-box overlap."""

    name = "bbox"

    def overlaps(self, a: Outline, b: Outline) -> bool:
        return boxes_overlap(bounding_box(a), bounding_box(b))

    def collides(self, candidate: Outline, placed: Iterable[Outline]) -> bool:
        box = bounding_box(candidate)
        return any(boxes_overlap(box, bounding_box(other)) for other in placed)


class SeparatingAxisOverlap(OverlapTest):
    """
    Separating-axis overlap on convex hulls.

    Concave outlines are tested through their hulls, so a reported
    separation is always real. Two-point hulls also test along their own
    direction, otherwise disjoint collinear segments would never separate.
    """

    name = "sat"

    def overlaps(self, a: Outline, b: Outline) -> bool:
        if not boxes_overlap(bounding_box(a), bounding_box(b)):
            return False

        hull_a = convex_hull(a.points)
        hull_b = convex_hull(b.points)

        for axis in _axes(hull_a) + _axes(hull_b):
            min_a, max_a = _project(hull_a, axis)
            min_b, max_b = _project(hull_b, axis)
            if max_a < min_b or max_b < min_a:
                return False
        return True


def convex_hull(points: Sequence[Point]) -> List[Point]:
    """Convex hull vertices (open ring) of a point set."""
    hull = MultiPoint(list(points)).convex_hull
    if hull.geom_type == "Polygon":
        return list(hull.exterior.coords)[:-1]
    return [(x, y) for x, y in hull.coords]


def _axes(hull: Sequence[Point]) -> List[Tuple[float, float]]:
    """Edge normals of a hull, plus the edge direction for a segment."""
    axes = []
    count = len(hull)
    if count < 2:
        return axes

    edges = count if count > 2 else 1
    for i in range(edges):
        x1, y1 = hull[i]
        x2, y2 = hull[(i + 1) % count]
        ex, ey = x2 - x1, y2 - y1
        length = math.hypot(ex, ey)
        if length == 0:
            continue
        axes.append((-ey / length, ex / length))
        if count == 2:
            axes.append((ex / length, ey / length))
    return axes


def _project(hull: Sequence[Point], axis: Tuple[float, float]) -> Tuple[float, float]:
    """Project a hull onto a unit axis."""
    dots = [x * axis[0] + y * axis[1] for x, y in hull]
    return min(dots), max(dots)


OVERLAP_TESTS: Dict[str, Type[OverlapTest]] = {
    BoundingBoxOverlap.name: BoundingBoxOverlap,
    SeparatingAxisOverlap.name: SeparatingAxisOverlap,
}


def get_overlap_test(name: str = "bbox") -> OverlapTest:
    """Get an overlap test by name ('bbox' or 'sat')."""
    try:
        return OVERLAP_TESTS[name]()
    except KeyError:
        available = ", ".join(sorted(OVERLAP_TESTS))
        raise ValueError(f"Unknown overlap test '{name}' (available: {available})") from None
