"""Geometry primitives for nesting.

Outlines are immutable point sequences. Every transform returns a new
outline of the same kind, so an input outline can be rotated from its
original pose as many times as the search needs.
"""

import math
from dataclasses import dataclass, replace
from typing import ClassVar, Iterable, Sequence, Tuple

Point = Tuple[float, float]


class NestingError(Exception):
    """Base class for nesting errors."""
    pass


class DegenerateOutlineError(NestingError, ValueError):
    """Raised when an outline has too few points to define a shape."""
    pass


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned bounding box."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def center(self) -> Point:
        return ((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)

    def to_tuple(self) -> Tuple[float, float, float, float]:
        return (self.min_x, self.min_y, self.max_x, self.max_y)


@dataclass(frozen=True)
class Sheet:
    """Rectangular work area with its origin at (0, 0)."""
    width: float
    height: float

    def __post_init__(self):
        if not (0 < self.width < math.inf and 0 < self.height < math.inf):
            raise ValueError(f"Sheet dimensions must be positive and finite, got {self.width}x{self.height}")

    @property
    def area(self) -> float:
        return self.width * self.height

    def contains(self, box: BoundingBox) -> bool:
        """Check that a box lies entirely within [0, width] x [0, height]."""
        return (
            box.min_x >= 0 and box.min_y >= 0
            and box.max_x <= self.width and box.max_y <= self.height
        )


@dataclass(frozen=True)
class Outline:
    """
    Ordered point sequence of a flat shape.

    Only the two concrete kinds, OpenSegment and ClosedPolyline, are
    constructed. ``source_index`` is the position of the originating entity
    in the input drawing and survives every transform.
    """
    points: Tuple[Point, ...]
    layer: str = "0"
    source_index: int = -1

    kind: ClassVar[str] = ""
    is_closed: ClassVar[bool] = False

    def __post_init__(self):
        points = tuple((float(x), float(y)) for x, y in self.points)
        if len(points) < 2:
            raise DegenerateOutlineError(
                f"{self.kind or 'Outline'} needs at least 2 points, got {len(points)}"
            )
        if not all(math.isfinite(v) for point in points for v in point):
            raise DegenerateOutlineError(f"{self.kind or 'Outline'} has a non-finite coordinate")
        object.__setattr__(self, "points", points)

    @property
    def label(self) -> str:
        """Readable identifier used in reports."""
        if self.source_index < 0:
            return self.kind
        return f"{self.kind}#{self.source_index}"

    @property
    def bounds(self) -> BoundingBox:
        return bounding_box(self)

    def with_points(self, points: Iterable[Point]) -> "Outline":
        """Return a copy of this outline with new points."""
        return replace(self, points=tuple(points))

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "kind": self.kind,
            "layer": self.layer,
            "source_index": self.source_index,
            "points": [list(p) for p in self.points],
        }


@dataclass(frozen=True)
class OpenSegment(Outline):
    """A single edge between two points (DXF LINE)."""

    kind: ClassVar[str] = "LINE"
    is_closed: ClassVar[bool] = False

    def __post_init__(self):
        super().__post_init__()
        if len(self.points) != 2:
            raise DegenerateOutlineError(
                f"LINE needs exactly 2 points, got {len(self.points)}"
            )


@dataclass(frozen=True)
class ClosedPolyline(Outline):
    """Polyline with an implicit closing edge (DXF LWPOLYLINE)."""

    kind: ClassVar[str] = "LWPOLYLINE"
    is_closed: ClassVar[bool] = True


def rotate_point(x: float, y: float, angle: float,
                 cx: float = 0.0, cy: float = 0.0) -> Point:
    """Rotate (x, y) counter-clockwise by ``angle`` degrees about (cx, cy)."""
    rad = math.radians(angle)
    cos_a = math.cos(rad)
    sin_a = math.sin(rad)
    dx = x - cx
    dy = y - cy
    return (cos_a * dx - sin_a * dy + cx, sin_a * dx + cos_a * dy + cy)


def bounding_box(outline: Outline) -> BoundingBox:
    """Compute the bounding box of an outline's current points."""
    return points_bounding_box(outline.points)


def points_bounding_box(points: Sequence[Point]) -> BoundingBox:
    """Compute the bounding box of a point sequence."""
    if not points:
        raise DegenerateOutlineError("Cannot compute bounding box of an empty point sequence")

    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    return BoundingBox(min(xs), min(ys), max(xs), max(ys))


def rotate(outline: Outline, angle: float) -> Outline:
    """
    Rotate an outline about its bounding-box center.

    The pivot comes from the outline's current bounding box, so
    ``rotate(rotate(o, a), -a)`` is not in general ``o``. Always rotate
    from the unrotated outline.
    """
    cx, cy = bounding_box(outline).center
    return outline.with_points(rotate_point(x, y, angle, cx, cy) for x, y in outline.points)


def translate(outline: Outline, dx: float, dy: float) -> Outline:
    """Shift every point of an outline by (dx, dy)."""
    return outline.with_points((x + dx, y + dy) for x, y in outline.points)
