"""Nesting engine: first-fit-decreasing placement of outlines on a sheet.

The engine orders outlines by bounding-box area, then runs the placement
search for each one in turn against everything accepted so far.
"""

import math
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, List, Optional

from dxfnest.config import Settings, get_settings
from dxfnest.utils import get_logger

from .geometry import Outline, Sheet
from .ordering import order_by_area
from .overlap import OverlapTest, get_overlap_test
from .placement import CancellationToken, PlacedOutline, PlacementSearch, fits_anywhere

logger = get_logger("nesting.engine")

ProgressCallback = Callable[[int, int, Outline, Optional[PlacedOutline]], None]


class ExportOrder(str, Enum):
    """Entity order used when handing placed outlines to an exporter."""
    SOURCE = "source"  # Input drawing order
    PLACEMENT = "placement"  # Processing order (largest first)


class UnplacedReason(str, Enum):
    """Why an outline was left off the sheet."""
    TOO_LARGE = "too_large"  # Does not fit the empty sheet at any angle
    NO_ROOM = "no_room"  # Fits alone, but not beside the placed outlines
    CANCELLED = "cancelled"  # Search stopped by the cancellation token


@dataclass
class NestingConfig:
    """Configuration for a nesting run."""
    sheet_width: float = 1000.0
    sheet_height: float = 1000.0
    rotation_step: float = 1.0  # Degrees
    translation_step: float = 10.0  # Drawing units
    overlap_mode: str = "bbox"
    export_order: ExportOrder = ExportOrder.SOURCE

    def __post_init__(self):
        self.export_order = ExportOrder(self.export_order)
        if not 0 < self.rotation_step <= 360:
            raise ValueError(f"rotation_step must be in (0, 360], got {self.rotation_step}")
        if not 0 < self.translation_step < math.inf:
            raise ValueError(f"translation_step must be positive and finite, got {self.translation_step}")
        Sheet(self.sheet_width, self.sheet_height)

    @property
    def sheet(self) -> Sheet:
        return Sheet(self.sheet_width, self.sheet_height)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "sheet_width": self.sheet_width,
            "sheet_height": self.sheet_height,
            "rotation_step": self.rotation_step,
            "translation_step": self.translation_step,
            "overlap_mode": self.overlap_mode,
            "export_order": self.export_order.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "NestingConfig":
        """Create from dictionary."""
        return cls(
            sheet_width=data.get("sheet_width", 1000.0),
            sheet_height=data.get("sheet_height", 1000.0),
            rotation_step=data.get("rotation_step", 1.0),
            translation_step=data.get("translation_step", 10.0),
            overlap_mode=data.get("overlap_mode", "bbox"),
            export_order=ExportOrder(data.get("export_order", "source")),
        )

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "NestingConfig":
        """Create from application settings."""
        settings = settings or get_settings()
        return cls(
            sheet_width=settings.sheet_width,
            sheet_height=settings.sheet_height,
            rotation_step=settings.rotation_step,
            translation_step=settings.translation_step,
            overlap_mode=settings.overlap_mode,
            export_order=ExportOrder(settings.export_order),
        )


@dataclass(frozen=True)
class UnplacedOutline:
    """An outline the search could not place."""
    outline: Outline
    reason: UnplacedReason

    def to_dict(self) -> dict:
        return {
            "label": self.outline.label,
            "source_index": self.outline.source_index,
            "reason": self.reason.value,
        }


@dataclass
class NestingResult:
    """Result of a nesting run."""
    sheet: Sheet
    placed: List[PlacedOutline] = field(default_factory=list)  # Processing order
    unplaced: List[UnplacedOutline] = field(default_factory=list)
    cancelled: bool = False
    processing_time: float = 0.0

    @property
    def success(self) -> bool:
        """True when every outline was placed."""
        return not self.unplaced and not self.cancelled

    @property
    def utilization(self) -> float:
        """Placed bounding-box area as a percentage of the sheet."""
        used = sum(p.bounds.area for p in self.placed)
        return min(100.0, used / self.sheet.area * 100)

    @property
    def unplaced_labels(self) -> List[str]:
        return [u.outline.label for u in self.unplaced]

    def in_source_order(self) -> List[PlacedOutline]:
        """Placed outlines sorted back into input drawing order."""
        return sorted(self.placed, key=lambda p: p.source_index)

    def ordered(self, order: ExportOrder) -> List[PlacedOutline]:
        """Placed outlines in the requested export order."""
        if ExportOrder(order) == ExportOrder.SOURCE:
            return self.in_source_order()
        return list(self.placed)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "success": self.success,
            "sheet": {"width": self.sheet.width, "height": self.sheet.height},
            "placed": [p.to_dict() for p in self.placed],
            "unplaced": [u.to_dict() for u in self.unplaced],
            "cancelled": self.cancelled,
            "utilization": self.utilization,
            "processing_time": self.processing_time,
        }


@dataclass
class NestingJob:
    """
    Everything one nesting run needs and produces.

    Owned by the caller and passed through the engine, so no state
    survives between runs.
    """
    outlines: List[Outline]
    config: NestingConfig = field(default_factory=NestingConfig)
    token: CancellationToken = field(default_factory=CancellationToken)
    result: Optional[NestingResult] = None

    def cancel(self) -> None:
        self.token.cancel()


class NestingEngine:
    """
    First-fit-decreasing nesting engine.

    Usage:
        engine = NestingEngine(NestingConfig(sheet_width=500, sheet_height=300))
        result = engine.nest(outlines)
        for placed in result.placed:
            print(placed.source.label, placed.bounds)
    """

    def __init__(
        self,
        config: Optional[NestingConfig] = None,
        overlap: Optional[OverlapTest] = None,
        on_progress: Optional[ProgressCallback] = None,
    ):
        """
        Initialize nesting engine.

        Args:
            config: Nesting configuration
            overlap: Overlap test, overriding config.overlap_mode
            on_progress: Called after each outline with
                (index, total, outline, placement or None)
        """
        self.config = config or NestingConfig()
        self.overlap = overlap or get_overlap_test(self.config.overlap_mode)
        self.on_progress = on_progress
        self.search = PlacementSearch(
            self.config.sheet,
            rotation_step=self.config.rotation_step,
            translation_step=self.config.translation_step,
            overlap=self.overlap,
        )

    def run(self, job: NestingJob) -> NestingJob:
        """Nest a job's outlines and store the result on the job."""
        job.result = self.nest(job.outlines, job.token)
        return job

    async def run_async(self, job: NestingJob) -> NestingJob:
        """Async form of run()."""
        job.result = await self.nest_async(job.outlines, job.token)
        return job

    def nest(
        self,
        outlines: Iterable[Outline],
        token: Optional[CancellationToken] = None,
    ) -> NestingResult:
        """
        Nest outlines onto the sheet.

        Args:
            outlines: Input outlines in drawing order
            token: Optional cancellation token

        Returns:
            Nesting result; placed outlines are in processing order
        """
        start_time = time.perf_counter()
        ordered = self._start(outlines)
        result = NestingResult(sheet=self.search.sheet)

        for index, outline in enumerate(ordered):
            if token is not None and token.cancelled:
                self._record(result, index, len(ordered), outline, None, True)
                continue
            placed, stopped = self.search.search(outline, result.placed, token)
            self._record(result, index, len(ordered), outline, placed, stopped)

        return self._finish(result, start_time)

    async def nest_async(
        self,
        outlines: Iterable[Outline],
        token: Optional[CancellationToken] = None,
    ) -> NestingResult:
        """Async form of nest(), yielding once per rotation angle."""
        start_time = time.perf_counter()
        ordered = self._start(outlines)
        result = NestingResult(sheet=self.search.sheet)

        for index, outline in enumerate(ordered):
            if token is not None and token.cancelled:
                self._record(result, index, len(ordered), outline, None, True)
                continue
            placed, stopped = await self.search.search_async(outline, result.placed, token)
            self._record(result, index, len(ordered), outline, placed, stopped)

        return self._finish(result, start_time)

    def _start(self, outlines: Iterable[Outline]) -> List[Outline]:
        ordered = order_by_area(outlines)
        sheet = self.search.sheet
        logger.info(
            f"Nesting {len(ordered)} outlines on {sheet.width:g}x{sheet.height:g} "
            f"(rotation step {self.config.rotation_step:g}°, "
            f"grid {self.config.translation_step:g}, overlap {self.overlap.name})"
        )
        return ordered

    def _record(
        self,
        result: NestingResult,
        index: int,
        total: int,
        outline: Outline,
        placed: Optional[PlacedOutline],
        cancelled: bool,
    ) -> None:
        if placed is not None:
            result.placed.append(placed)
            box = placed.bounds
            logger.debug(
                f"Placed {outline.label} at ({box.min_x:.1f}, {box.min_y:.1f}) "
                f"rotated {placed.rotation:g}°"
            )
        else:
            if cancelled:
                reason = UnplacedReason.CANCELLED
                result.cancelled = True
            elif not fits_anywhere(outline, self.search.sheet, list(self.search.angles())):
                reason = UnplacedReason.TOO_LARGE
            else:
                reason = UnplacedReason.NO_ROOM
            result.unplaced.append(UnplacedOutline(outline, reason))
            logger.warning(f"Could not place {outline.label}: {reason.value}")

        if self.on_progress:
            self.on_progress(index, total, outline, placed)

    def _finish(self, result: NestingResult, start_time: float) -> NestingResult:
        result.processing_time = time.perf_counter() - start_time
        logger.info(
            f"Placed {len(result.placed)} outlines, {len(result.unplaced)} unplaced, "
            f"utilization {result.utilization:.1f}% in {result.processing_time:.2f}s"
        )
        return result


# Convenience functions
def nest_outlines(
    outlines: Iterable[Outline],
    sheet_width: float = 1000.0,
    sheet_height: float = 1000.0,
    rotation_step: float = 1.0,
    translation_step: float = 10.0,
    overlap_mode: str = "bbox",
) -> NestingResult:
    """
    Nest outlines on a sheet.

    Args:
        outlines: Input outlines
        sheet_width: Sheet width
        sheet_height: Sheet height
        rotation_step: Angle increment in degrees
        translation_step: Grid increment
        overlap_mode: 'bbox' or 'sat'

    Returns:
        Nesting result
    """
    config = NestingConfig(
        sheet_width=sheet_width,
        sheet_height=sheet_height,
        rotation_step=rotation_step,
        translation_step=translation_step,
        overlap_mode=overlap_mode,
    )
    return NestingEngine(config).nest(outlines)
