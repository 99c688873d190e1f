"""
DXF Writer for Nested Outlines.

Generates a minimal ASCII DXF (AutoCAD Drawing Exchange Format) document
holding one ENTITIES section. Open segments become LINE entities and closed
polylines become LWPOLYLINE entities, each on the layer it was read from.
"""

from pathlib import Path
from typing import Iterable, List, Union

from dxfnest.nesting.engine import ExportOrder, NestingResult
from dxfnest.nesting.geometry import Outline
from dxfnest.utils import ensure_dir, get_logger

logger = get_logger("dxf.writer")


class DXFWriter:
    """
    Writes outlines to DXF format.

    Usage:
        writer = DXFWriter()
        dxf_content = writer.outlines_to_dxf(outlines)
        writer.save_result(result, 'nested.dxf')
    """

    def __init__(self, precision: int = 6):
        """
        Initialize DXF writer.

        Args:
            precision: Decimal precision for coordinates
        """
        self.precision = precision

    def outlines_to_dxf(self, outlines: Iterable[Outline]) -> str:
        """
        Convert outlines to DXF string.

        Args:
            outlines: Outlines in the order they should be written

        Returns:
            DXF content as string
        """
        lines = [
            '0', 'SECTION',
            '2', 'ENTITIES',
        ]

        count = 0
        for outline in outlines:
            if outline.is_closed:
                lines.extend(self._lwpolyline(outline))
            else:
                lines.extend(self._line(outline))
            count += 1

        lines.extend([
            '0', 'ENDSEC',
            '0', 'EOF',
        ])

        logger.debug(f"Wrote {count} entities")
        return '\n'.join(lines) + '\n'

    def result_to_dxf(self, result: NestingResult,
                      order: ExportOrder = ExportOrder.SOURCE) -> str:
        """
        Convert a nesting result's placed outlines to DXF.

        Args:
            result: Nesting result
            order: SOURCE keeps input drawing order, PLACEMENT keeps
                processing order

        Returns:
            DXF content string
        """
        return self.outlines_to_dxf(p.outline for p in result.ordered(order))

    def save(self, outlines: Iterable[Outline], filepath: Union[str, Path]) -> Path:
        """
        Save outlines to DXF file.

        Args:
            outlines: Outlines to write
            filepath: Output file path

        Returns:
            Path written
        """
        return self._write(self.outlines_to_dxf(outlines), filepath)

    def save_result(self, result: NestingResult, filepath: Union[str, Path],
                    order: ExportOrder = ExportOrder.SOURCE) -> Path:
        """Save a nesting result to DXF file."""
        return self._write(self.result_to_dxf(result, order), filepath)

    def _write(self, content: str, filepath: Union[str, Path]) -> Path:
        filepath = Path(filepath)
        ensure_dir(filepath.parent)

        with open(filepath, 'w', encoding='utf-8') as f:
            f.write(content)

        logger.info(f"Saved {filepath}")
        return filepath

    def _coord(self, value: float) -> str:
        return f'{value:.{self.precision}f}'

    def _line(self, outline: Outline) -> List[str]:
        """Create a LINE entity."""
        (x1, y1), (x2, y2) = outline.points
        return [
            '0', 'LINE',
            '8', outline.layer,
            '10', self._coord(x1),
            '20', self._coord(y1),
            '11', self._coord(x2),
            '21', self._coord(y2),
        ]

    def _lwpolyline(self, outline: Outline) -> List[str]:
        """Create a closed LWPOLYLINE entity."""
        lines = [
            '0', 'LWPOLYLINE',
            '8', outline.layer,
            '90', str(len(outline.points)),  # Number of vertices
            '70', '1',  # Closed flag
        ]

        for x, y in outline.points:
            lines.extend([
                '10', self._coord(x),
                '20', self._coord(y),
            ])

        return lines


def outlines_to_dxf(outlines: Iterable[Outline], precision: int = 6) -> str:
    """
    Convenience function to convert outlines to a DXF string.

    Args:
        outlines: Outlines to write
        precision: Decimal precision for coordinates

    Returns:
        DXF content string
    """
    return DXFWriter(precision).outlines_to_dxf(outlines)


def export_result(result: NestingResult, filepath: Union[str, Path],
                  order: ExportOrder = ExportOrder.SOURCE) -> Path:
    """
    Convenience function to export a nesting result to a DXF file.

    Args:
        result: Nesting result
        filepath: Output file path
        order: Entity order

    Returns:
        Path written
    """
    return DXFWriter().save_result(result, filepath, order)
