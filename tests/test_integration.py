"""
Integration Tests for dxfnest.

Tests the complete pipeline from a DXF drawing to a nested drawing and preview.
"""

import asyncio
import tempfile
from pathlib import Path


def write_parts(path: Path) -> None:
    """Write a drawing with mixed parts and one unsupported entity."""
    from dxfnest.dxf import outlines_to_dxf
    from dxfnest.nesting import ClosedPolyline, OpenSegment

    parts = [
        ClosedPolyline(points=((0, 0), (120, 0), (120, 80), (0, 80))),
        OpenSegment(points=((10, 10), (70, 50))),
        ClosedPolyline(points=((0, 0), (60, 0), (30, 50))),
        ClosedPolyline(points=((0, 0), (40, 0), (40, 40), (0, 40))),
    ]
    content = outlines_to_dxf(parts)
    circle = "0\nCIRCLE\n8\n0\n10\n5\n20\n5\n40\n2\n"
    # Unsupported entity after the first part
    first_end = content.index("0\nLINE\n")
    path.write_text(content[:first_end] + circle + content[first_end:])


def test_dxf_to_dxf_workflow():
    """Test reading, nesting, writing and reading back a drawing."""
    print("Testing: DXF Nesting Workflow")

    from dxfnest.dxf import DXFWriter, read_outlines
    from dxfnest.nesting import NestingConfig, NestingEngine, boxes_overlap

    with tempfile.TemporaryDirectory() as tmpdir:
        source = Path(tmpdir) / "parts.dxf"
        write_parts(source)

        outlines = read_outlines(source)
        assert [o.source_index for o in outlines] == [0, 2, 3, 4], "CIRCLE should keep its index"

        config = NestingConfig(sheet_width=300, sheet_height=200, rotation_step=90)
        result = NestingEngine(config).nest(outlines)
        assert result.success, "All parts should fit"
        assert result.placed[0].source_index == 0, "Largest part goes first"

        boxes = [p.bounds for p in result.placed]
        for i, a in enumerate(boxes):
            assert config.sheet.contains(a), "Parts stay on the sheet"
            for b in boxes[i + 1:]:
                assert not boxes_overlap(a, b), "Parts never overlap"

        nested = DXFWriter().save_result(result, Path(tmpdir) / "nested.dxf")
        reread = read_outlines(nested)
        assert [o.kind for o in reread] == ["LWPOLYLINE", "LINE", "LWPOLYLINE", "LWPOLYLINE"]

        for placed, outline in zip(result.in_source_order(), reread):
            for (px, py), (rx, ry) in zip(placed.outline.points, outline.points):
                assert abs(px - rx) < 1e-5 and abs(py - ry) < 1e-5, "Coordinates survive export"

    print("  ✓ DXF workflow passed")
    return True


def test_async_workflow_with_preview():
    """Test async nesting and preview rendering."""
    print("Testing: Async Nesting and Preview")

    from dxfnest.dxf import read_outlines
    from dxfnest.nesting import NestingConfig, NestingEngine, NestingJob
    from dxfnest.render import save_preview

    with tempfile.TemporaryDirectory() as tmpdir:
        source = Path(tmpdir) / "parts.dxf"
        write_parts(source)

        config = NestingConfig(sheet_width=300, sheet_height=200, rotation_step=45)
        job = NestingJob(outlines=read_outlines(source), config=config)
        asyncio.run(NestingEngine(config).run_async(job))

        sync_result = NestingEngine(config).nest(job.outlines)
        assert [p.bounds for p in job.result.placed] == [p.bounds for p in sync_result.placed], \
            "Async and sync runs should agree"

        preview = save_preview(job.result, Path(tmpdir) / "preview.png")
        assert preview.exists(), "Preview should be written"

    print("  ✓ Async workflow passed")
    return True
