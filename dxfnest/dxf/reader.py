"""
DXF reader for nesting input.

Reads the ENTITIES section of an ASCII DXF drawing and turns each LINE
into an OpenSegment and each LWPOLYLINE into a ClosedPolyline. Other
entity types are skipped.
"""

import io
import math
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union

from ezdxf.lldxf.const import DXFStructureError
from ezdxf.lldxf.tagger import ascii_tags_loader

from dxfnest.nesting.geometry import (
    ClosedPolyline,
    DegenerateOutlineError,
    NestingError,
    OpenSegment,
    Outline,
)
from dxfnest.utils import get_logger

logger = get_logger("dxf.reader")

Tag = Tuple[int, str]

SUPPORTED_ENTITIES = ("LINE", "LWPOLYLINE")


class DrawingParseError(NestingError):
    """Raised when a drawing cannot be read."""
    pass


def parse_outlines(text: str) -> List[Outline]:
    """
    Parse DXF text into outlines.

    Args:
        text: ASCII DXF content

    Returns:
        Outlines in drawing order; ``source_index`` is the entity's
        position in the ENTITIES section

    Raises:
        DrawingParseError: Text is not a readable DXF drawing
        DegenerateOutlineError: An entity has too few points
    """
    if not text or not text.strip():
        raise DrawingParseError("Drawing is empty")

    try:
        tags = [(tag.code, tag.value.strip()) for tag in ascii_tags_loader(io.StringIO(text))]
    except DXFStructureError as e:
        raise DrawingParseError(f"Malformed DXF: {e}") from e

    entities = _entities_section(tags)
    if entities is None:
        raise DrawingParseError("Drawing has no ENTITIES section")

    outlines = []
    skipped: Dict[str, int] = {}
    for index, (entity_type, entity_tags) in enumerate(_split_entities(entities)):
        if entity_type == "LINE":
            outlines.append(_line(entity_tags, index))
        elif entity_type == "LWPOLYLINE":
            outlines.append(_lwpolyline(entity_tags, index))
        else:
            skipped[entity_type] = skipped.get(entity_type, 0) + 1

    if skipped:
        summary = ", ".join(f"{count} {name}" for name, count in sorted(skipped.items()))
        logger.debug(f"Skipped unsupported entities: {summary}")

    logger.info(f"Read {len(outlines)} outlines")
    return outlines


def read_outlines(path: Union[str, Path], encoding: str = "utf-8") -> List[Outline]:
    """Read outlines from a DXF file."""
    path = Path(path)
    try:
        text = path.read_text(encoding=encoding)
    except UnicodeDecodeError as e:
        raise DrawingParseError(f"{path.name} is not a text DXF file: {e}") from e
    return parse_outlines(text)


def _entities_section(tags: Sequence[Tag]) -> Optional[List[Tag]]:
    """Tags between 'SECTION/ENTITIES' and its ENDSEC."""
    for i in range(len(tags) - 1):
        if tags[i] == (0, "SECTION") and tags[i + 1] == (2, "ENTITIES"):
            section = []
            for tag in tags[i + 2:]:
                if tag == (0, "ENDSEC"):
                    return section
                section.append(tag)
            raise DrawingParseError("ENTITIES section is not terminated by ENDSEC")
    return None


def _split_entities(tags: Sequence[Tag]) -> Iterator[Tuple[str, List[Tag]]]:
    """Group section tags into (entity type, entity tags) pairs."""
    entity_type = None
    entity_tags: List[Tag] = []
    for code, value in tags:
        if code == 0:
            if entity_type is not None:
                yield entity_type, entity_tags
            entity_type = value
            entity_tags = []
        elif entity_type is None:
            raise DrawingParseError(f"Unexpected group code {code} before the first entity")
        else:
            entity_tags.append((code, value))
    if entity_type is not None:
        yield entity_type, entity_tags


def _float(value: str, code: int, entity: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise DrawingParseError(f"{entity}: group code {code} is not a number: {value!r}") from None
    if not math.isfinite(number):
        raise DrawingParseError(f"{entity}: group code {code} is not a finite number: {value!r}")
    return number


def _layer(tags: Sequence[Tag]) -> str:
    for code, value in tags:
        if code == 8:
            return value
    return "0"


def _line(tags: Sequence[Tag], index: int) -> Outline:
    name = f"LINE#{index}"
    coords = {code: _float(value, code, name) for code, value in tags if code in (10, 20, 11, 21)}
    missing = [code for code in (10, 20, 11, 21) if code not in coords]
    if missing:
        raise DrawingParseError(f"{name}: missing group codes {missing}")

    return OpenSegment(
        points=((coords[10], coords[20]), (coords[11], coords[21])),
        layer=_layer(tags),
        source_index=index,
    )


def _lwpolyline(tags: Sequence[Tag], index: int) -> Outline:
    name = f"LWPOLYLINE#{index}"
    points = []
    x = None
    for code, value in tags:
        if code == 10:
            x = _float(value, code, name)
        elif code == 20:
            if x is None:
                raise DrawingParseError(f"{name}: Y coordinate without X")
            points.append((x, _float(value, code, name)))
            x = None
    if x is not None:
        raise DrawingParseError(f"{name}: X coordinate without Y")

    try:
        return ClosedPolyline(points=tuple(points), layer=_layer(tags), source_index=index)
    except DegenerateOutlineError as e:
        raise DegenerateOutlineError(f"{name}: {e}") from e
