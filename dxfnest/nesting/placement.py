"""Discretized first-fit placement search for a single outline."""

import asyncio
import math
import threading
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

from dxfnest.utils import get_logger

from .geometry import BoundingBox, Outline, Sheet, bounding_box, rotate, translate
from .overlap import BoundingBoxOverlap, OverlapTest

logger = get_logger("nesting.placement")


class CancellationToken:
    """
    Cooperative cancellation flag for a running search.

    Backed by a threading.Event so it can be set from another thread
    as well as from a coroutine on the search's own event loop.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    def reset(self) -> None:
        self._event.clear()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass(frozen=True)
class PlacedOutline:
    """An outline accepted onto the sheet."""
    source: Outline  # Original, untransformed outline
    outline: Outline  # Outline after rotation then translation
    rotation: float  # Degrees, about the source's bounding-box center
    dx: float  # Translation applied after rotation
    dy: float

    @property
    def bounds(self) -> BoundingBox:
        return bounding_box(self.outline)

    @property
    def source_index(self) -> int:
        return self.source.source_index

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        box = self.bounds
        return {
            "label": self.source.label,
            "source_index": self.source_index,
            "rotation": self.rotation,
            "dx": self.dx,
            "dy": self.dy,
            "bounds": list(box.to_tuple()),
            "points": [list(p) for p in self.outline.points],
        }


class PlacementSearch:
    """
    Brute-force first-fit placement search.

    Candidates are enumerated by rotation angle, then x, then y on a
    regular grid. The first candidate that lies on the sheet and does not
    overlap an already placed outline is accepted.

    Usage:
        search = PlacementSearch(Sheet(1000, 1000))
        placed = search.find(outline, already_placed)
        if placed is None:
            print("No room")
    """

    def __init__(
        self,
        sheet: Sheet,
        rotation_step: float = 1.0,
        translation_step: float = 10.0,
        overlap: Optional[OverlapTest] = None,
    ):
        """
        Initialize placement search.

        Args:
            sheet: Target sheet
            rotation_step: Angle increment in degrees
            translation_step: Grid increment in drawing units
            overlap: Overlap test (bounding boxes by default)
        """
        if not 0 < rotation_step <= 360:
            raise ValueError(f"rotation_step must be in (0, 360], got {rotation_step}")
        if not 0 < translation_step < math.inf:
            raise ValueError(f"translation_step must be positive and finite, got {translation_step}")

        self.sheet = sheet
        self.rotation_step = rotation_step
        self.translation_step = translation_step
        self.overlap = overlap or BoundingBoxOverlap()

    def angles(self) -> Iterator[float]:
        """Candidate rotation angles: 0, step, 2*step, ... below 360."""
        i = 0
        while True:
            angle = i * self.rotation_step
            if angle >= 360:
                return
            yield angle
            i += 1

    def _grid(self, limit: float) -> Iterator[float]:
        """Grid positions 0, step, 2*step, ... up to and including limit."""
        i = 0
        while True:
            value = i * self.translation_step
            if value > limit:
                return
            yield value
            i += 1

    def try_angle(
        self,
        outline: Outline,
        angle: float,
        placed: Sequence[PlacedOutline],
    ) -> Optional[PlacedOutline]:
        """Search every grid position of one rotation angle."""
        rotated = rotate(outline, angle)
        box = bounding_box(rotated)
        others = [p.outline for p in placed]

        for x in self._grid(self.sheet.width - box.width):
            for y in self._grid(self.sheet.height - box.height):
                dx = x - box.min_x
                dy = y - box.min_y
                candidate = translate(rotated, dx, dy)
                if not self.sheet.contains(bounding_box(candidate)):
                    continue
                if self.overlap.collides(candidate, others):
                    continue
                return PlacedOutline(
                    source=outline,
                    outline=candidate,
                    rotation=angle,
                    dx=dx,
                    dy=dy,
                )
        return None

    def search(
        self,
        outline: Outline,
        placed: Sequence[PlacedOutline],
        token: Optional[CancellationToken] = None,
    ) -> Tuple[Optional[PlacedOutline], bool]:
        """
        Find the first feasible placement for an outline.

        Args:
            outline: Outline in its original pose
            placed: Outlines already accepted on the sheet
            token: Optional cancellation token, checked once per angle

        Returns:
            (placement or None, whether the token stopped the search)
        """
        for angle in self.angles():
            if token is not None and token.cancelled:
                logger.debug(f"Search for {outline.label} cancelled at {angle}°")
                return None, True
            result = self.try_angle(outline, angle, placed)
            if result is not None:
                return result, False
        return None, False

    async def search_async(
        self,
        outline: Outline,
        placed: Sequence[PlacedOutline],
        token: Optional[CancellationToken] = None,
    ) -> Tuple[Optional[PlacedOutline], bool]:
        """Same as search(), yielding to the event loop after every angle."""
        for angle in self.angles():
            if token is not None and token.cancelled:
                logger.debug(f"Search for {outline.label} cancelled at {angle}°")
                return None, True
            result = self.try_angle(outline, angle, placed)
            if result is not None:
                return result, False
            await asyncio.sleep(0)
        return None, False

    def find(
        self,
        outline: Outline,
        placed: Sequence[PlacedOutline],
        token: Optional[CancellationToken] = None,
    ) -> Optional[PlacedOutline]:
        """The accepted placement, or None if unplaceable or cancelled."""
        return self.search(outline, placed, token)[0]

    async def find_async(
        self,
        outline: Outline,
        placed: Sequence[PlacedOutline],
        token: Optional[CancellationToken] = None,
    ) -> Optional[PlacedOutline]:
        """Async form of find()."""
        placed_outline, _ = await self.search_async(outline, placed, token)
        return placed_outline


def fits_anywhere(outline: Outline, sheet: Sheet, angles: List[float]) -> bool:
    """Check whether an outline's box fits the empty sheet at any angle."""
    for angle in angles:
        box = bounding_box(rotate(outline, angle))
        if box.width <= sheet.width and box.height <= sheet.height:
            return True
    return False
