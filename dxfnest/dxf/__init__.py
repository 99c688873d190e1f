"""
DXF adapters for nesting.

Reads LINE and LWPOLYLINE entities into outlines and writes placed
outlines back to a minimal DXF document.
"""

from .reader import (
    DrawingParseError,
    parse_outlines,
    read_outlines,
)
from .writer import (
    DXFWriter,
    export_result,
    outlines_to_dxf,
)

__all__ = [
    # Reader
    "DrawingParseError",
    "parse_outlines",
    "read_outlines",
    # Writer
    "DXFWriter",
    "export_result",
    "outlines_to_dxf",
]
