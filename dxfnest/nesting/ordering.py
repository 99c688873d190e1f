"""Placement ordering for first-fit-decreasing nesting."""

from typing import Iterable, List

from .geometry import Outline, bounding_box


def outline_area(outline: Outline) -> float:
    """Bounding-box area of an unrotated outline."""
    return bounding_box(outline).area


def order_by_area(outlines: Iterable[Outline]) -> List[Outline]:
    """
    Sort outlines largest bounding box first.

    The sort is stable, so outlines of equal area keep their input order.
    """
    return sorted(outlines, key=outline_area, reverse=True)
