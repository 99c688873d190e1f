"""Nesting module for packing DXF outlines onto a sheet.

Provides the geometry primitives, overlap tests, ordering policy,
placement search and the nesting engine that drives them.
"""

from dxfnest.nesting.geometry import (
    BoundingBox,
    ClosedPolyline,
    DegenerateOutlineError,
    NestingError,
    OpenSegment,
    Outline,
    Sheet,
    bounding_box,
    rotate,
    rotate_point,
    translate,
)
from dxfnest.nesting.overlap import (
    BoundingBoxOverlap,
    OverlapTest,
    SeparatingAxisOverlap,
    boxes_overlap,
    get_overlap_test,
)
from dxfnest.nesting.ordering import order_by_area
from dxfnest.nesting.placement import (
    CancellationToken,
    PlacedOutline,
    PlacementSearch,
)
from dxfnest.nesting.engine import (
    ExportOrder,
    NestingConfig,
    NestingEngine,
    NestingJob,
    NestingResult,
    UnplacedOutline,
    UnplacedReason,
    nest_outlines,
)

__all__ = [
    # Geometry
    "BoundingBox",
    "ClosedPolyline",
    "DegenerateOutlineError",
    "NestingError",
    "OpenSegment",
    "Outline",
    "Sheet",
    "bounding_box",
    "rotate",
    "rotate_point",
    "translate",
    # Overlap
    "BoundingBoxOverlap",
    "OverlapTest",
    "SeparatingAxisOverlap",
    "boxes_overlap",
    "get_overlap_test",
    # Ordering
    "order_by_area",
    # Placement
    "CancellationToken",
    "PlacedOutline",
    "PlacementSearch",
    # Engine
    "ExportOrder",
    "NestingConfig",
    "NestingEngine",
    "NestingJob",
    "NestingResult",
    "UnplacedOutline",
    "UnplacedReason",
    "nest_outlines",
]
