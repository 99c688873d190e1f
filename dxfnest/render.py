"""Raster previews of nesting results."""

from pathlib import Path
from typing import Iterable, Tuple, Union

from PIL import Image, ImageDraw

from dxfnest.nesting.engine import NestingResult
from dxfnest.nesting.geometry import Outline, Sheet
from dxfnest.utils import ensure_dir, get_logger

logger = get_logger("render")

Color = Tuple[int, int, int]

BACKGROUND: Color = (250, 251, 253)
SHEET_FILL: Color = (255, 255, 255)
SHEET_BORDER: Color = (190, 200, 210)
OUTLINE_COLOR: Color = (20, 80, 160)


def render_outlines(
    outlines: Iterable[Outline],
    sheet: Sheet,
    scale: float = 1.0,
    margin: int = 10,
    line_width: int = 1,
) -> Image.Image:
    """
    Draw outlines on a picture of the sheet.

    Each outline is drawn as connected segments through its points; closed
    polylines also join the last point back to the first. DXF Y points up,
    so Y is flipped into image rows.

    Args:
        outlines: Placed outlines
        sheet: Sheet the outlines were placed on
        scale: Pixels per drawing unit
        margin: Border around the sheet in pixels
        line_width: Stroke width in pixels

    Returns:
        RGB image
    """
    if scale <= 0:
        raise ValueError(f"scale must be positive, got {scale}")

    w_px = max(1, round(sheet.width * scale))
    h_px = max(1, round(sheet.height * scale))
    img = Image.new("RGB", (w_px + margin * 2, h_px + margin * 2), BACKGROUND)
    draw = ImageDraw.Draw(img)
    draw.rectangle(
        [margin, margin, margin + w_px, margin + h_px],
        outline=SHEET_BORDER,
        fill=SHEET_FILL,
    )

    def project(x: float, y: float) -> Tuple[float, float]:
        return (margin + x * scale, margin + (sheet.height - y) * scale)

    count = 0
    for outline in outlines:
        pts = [project(x, y) for x, y in outline.points]
        if outline.is_closed:
            pts.append(pts[0])
        draw.line(pts, fill=OUTLINE_COLOR, width=line_width)
        count += 1

    logger.debug(f"Rendered {count} outlines at {scale:g}px/unit")
    return img


def render_result(result: NestingResult, scale: float = 1.0, margin: int = 10) -> Image.Image:
    """Draw every placed outline of a nesting result."""
    return render_outlines((p.outline for p in result.placed), result.sheet, scale, margin)


def save_preview(result: NestingResult, path: Union[str, Path],
                 scale: float = 1.0, margin: int = 10) -> Path:
    """Render a nesting result and save it as an image (format from suffix)."""
    path = Path(path)
    ensure_dir(path.parent)
    render_result(result, scale, margin).save(path)
    logger.info(f"Saved preview {path}")
    return path
