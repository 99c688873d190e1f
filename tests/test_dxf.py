"""Tests for DXF reading and writing."""

import pytest

from dxfnest.dxf import (
    DXFWriter,
    DrawingParseError,
    export_result,
    outlines_to_dxf,
    parse_outlines,
    read_outlines,
)
from dxfnest.nesting import (
    ClosedPolyline,
    DegenerateOutlineError,
    ExportOrder,
    NestingConfig,
    NestingEngine,
    OpenSegment,
)


def dxf(*lines):
    return "\n".join(str(line) for line in lines) + "\n"


def entities(*body):
    return dxf("0", "SECTION", "2", "ENTITIES", *body, "0", "ENDSEC", "0", "EOF")


LINE = ("0", "LINE", "8", "0", "10", "0", "20", "0", "11", "10", "21", "0")
SQUARE = (
    "0", "LWPOLYLINE", "8", "CUT", "90", "4", "70", "1",
    "10", "0", "20", "0",
    "10", "10", "20", "0",
    "10", "10", "20", "10",
    "10", "0", "20", "10",
)


@pytest.fixture
def segment():
    return OpenSegment(points=((0, 0), (10, 0)), source_index=0)


@pytest.fixture
def square():
    return ClosedPolyline(points=((0, 0), (10, 0), (10, 10), (0, 10)), layer="CUT", source_index=1)


class TestParseOutlines:
    """Tests for parse_outlines."""

    def test_line_and_polyline(self):
        """Test LINE and LWPOLYLINE entities become outlines."""
        outlines = parse_outlines(entities(*LINE, *SQUARE))

        assert len(outlines) == 2
        line, square = outlines
        assert isinstance(line, OpenSegment)
        assert line.points == ((0, 0), (10, 0))
        assert line.source_index == 0
        assert isinstance(square, ClosedPolyline)
        assert square.points == ((0, 0), (10, 0), (10, 10), (0, 10))
        assert square.layer == "CUT"
        assert square.source_index == 1

    def test_skips_unsupported_entities(self):
        """Test other entities are ignored but still counted in source indexes."""
        circle = ("0", "CIRCLE", "8", "0", "10", "5", "20", "5", "40", "2")
        outlines = parse_outlines(entities(*LINE, *circle, *SQUARE))

        assert [o.kind for o in outlines] == ["LINE", "LWPOLYLINE"]
        assert [o.source_index for o in outlines] == [0, 2]

    def test_open_polyline_is_closed(self):
        """Test polylines without the closed flag are still read as closed."""
        open_flag = ("0", "LWPOLYLINE", "90", "3", "70", "0",
                     "10", "0", "20", "0", "10", "5", "20", "0", "10", "0", "20", "5")
        outline = parse_outlines(entities(*open_flag))[0]

        assert outline.is_closed is True
        assert outline.layer == "0"

    def test_full_drawing(self):
        """Test a drawing with header, extra group codes and padded values."""
        text = dxf(
            "  0", "SECTION",
            "  2", "HEADER",
            "  9", "$ACADVER",
            "  1", "AC1015",
            "  0", "ENDSEC",
            "  0", "SECTION",
            "  2", "ENTITIES",
            "  0", "LINE",
            "  5", "2A",
            "100", "AcDbEntity",
            "  8", "MARK",
            "100", "AcDbLine",
            " 10", " 1.5",
            " 20", "2.25",
            " 30", "0.0",
            " 11", "-3",
            " 21", "4e1",
            " 31", "0.0",
            "  0", "ENDSEC",
            "  0", "EOF",
        )
        outlines = parse_outlines(text)

        assert len(outlines) == 1
        assert outlines[0].layer == "MARK"
        assert outlines[0].points == ((1.5, 2.25), (-3.0, 40.0))

    def test_empty_entities_section(self):
        """Test a drawing without supported entities gives no outlines."""
        assert parse_outlines(entities()) == []


class TestParseErrors:
    """Tests for unreadable drawings."""

    @pytest.mark.parametrize("text", ["", "   \n"])
    def test_empty(self, text):
        """Test empty text is rejected."""
        with pytest.raises(DrawingParseError, match="empty"):
            parse_outlines(text)

    def test_no_entities_section(self):
        """Test a drawing without ENTITIES is rejected."""
        text = dxf("0", "SECTION", "2", "HEADER", "0", "ENDSEC", "0", "EOF")
        with pytest.raises(DrawingParseError, match="no ENTITIES"):
            parse_outlines(text)

    def test_unterminated_section(self):
        """Test an ENTITIES section without ENDSEC is rejected."""
        text = dxf("0", "SECTION", "2", "ENTITIES", *LINE)
        with pytest.raises(DrawingParseError, match="ENDSEC"):
            parse_outlines(text)

    def test_invalid_group_code(self):
        """Test a non-integer group code is rejected."""
        with pytest.raises(DrawingParseError, match="Malformed DXF"):
            parse_outlines("abc\nSECTION\n")

    def test_line_missing_coordinates(self):
        """Test a LINE without its end point is rejected."""
        line = ("0", "LINE", "10", "0", "20", "0", "11", "10")
        with pytest.raises(DrawingParseError, match="LINE#0"):
            parse_outlines(entities(*line))

    def test_non_numeric_coordinate(self):
        """Test coordinates must be numbers."""
        line = ("0", "LINE", "10", "zero", "20", "0", "11", "10", "21", "0")
        with pytest.raises(DrawingParseError, match="not a number"):
            parse_outlines(entities(*line))

    def test_y_without_x(self):
        """Test a vertex Y with no preceding X is rejected."""
        polyline = ("0", "LWPOLYLINE", "20", "0", "10", "1", "20", "1")
        with pytest.raises(DrawingParseError, match="Y coordinate without X"):
            parse_outlines(entities(*polyline))

    def test_x_without_y(self):
        """Test a trailing vertex X with no Y is rejected."""
        polyline = ("0", "LWPOLYLINE", "10", "0", "20", "0", "10", "5", "20", "0", "10", "5")
        with pytest.raises(DrawingParseError, match="X coordinate without Y"):
            parse_outlines(entities(*polyline))

    @pytest.mark.parametrize("value", ["nan", "inf", "-inf", "NaN"])
    def test_non_finite_line_coordinate(self, value):
        """Test LINE coordinates must be finite."""
        line = ("0", "LINE", "10", value, "20", "0", "11", "10", "21", "0")
        with pytest.raises(DrawingParseError, match="not a finite number"):
            parse_outlines(entities(*line))

    @pytest.mark.parametrize("value", ["nan", "inf"])
    def test_non_finite_polyline_coordinate(self, value):
        """Test LWPOLYLINE vertices must be finite."""
        polyline = ("0", "LWPOLYLINE", "10", "0", "20", "0", "10", "5", "20", value, "10", "0", "20", "5")
        with pytest.raises(DrawingParseError, match="LWPOLYLINE#0"):
            parse_outlines(entities(*polyline))

    def test_single_vertex_polyline(self):
        """Test a polyline with one vertex is degenerate."""
        polyline = ("0", "LWPOLYLINE", "90", "1", "10", "1", "20", "1")
        with pytest.raises(DegenerateOutlineError, match="LWPOLYLINE#0"):
            parse_outlines(entities(*polyline))

    def test_binary_file(self, tmp_path):
        """Test a file that is not text is rejected."""
        path = tmp_path / "binary.dxf"
        path.write_bytes(b"\xff\xfe\x00\x01AutoCAD Binary DXF")

        with pytest.raises(DrawingParseError):
            read_outlines(path)


class TestDXFWriter:
    """Tests for DXFWriter."""

    def test_document_structure(self, segment, square):
        """Test the document is a single ENTITIES section."""
        lines = DXFWriter().outlines_to_dxf([segment, square]).splitlines()

        assert lines[:4] == ["0", "SECTION", "2", "ENTITIES"]
        assert lines[-4:] == ["0", "ENDSEC", "0", "EOF"]
        assert lines.count("LINE") == 1
        assert lines.count("LWPOLYLINE") == 1

    def test_polyline_entity(self, square):
        """Test LWPOLYLINE carries vertex count, closed flag and layer."""
        lines = DXFWriter().outlines_to_dxf([square]).splitlines()
        start = lines.index("LWPOLYLINE")

        assert lines[start + 1:start + 7] == ["8", "CUT", "90", "4", "70", "1"]

    def test_precision(self):
        """Test coordinate precision."""
        outline = OpenSegment(points=((1.23456, 0), (2, 3)))
        content = DXFWriter(precision=2).outlines_to_dxf([outline])

        assert "1.23\n" in content
        assert "1.23456" not in content

    def test_round_trip(self, segment, square):
        """Test written outlines read back with the same kinds and points."""
        outlines = parse_outlines(outlines_to_dxf([segment, square]))

        assert [o.kind for o in outlines] == ["LINE", "LWPOLYLINE"]
        assert outlines[0].points == segment.points
        assert outlines[1].points == square.points
        assert outlines[1].layer == "CUT"

    def test_save(self, tmp_path, segment):
        """Test saving creates missing directories."""
        path = DXFWriter().save([segment], tmp_path / "out" / "parts.dxf")

        assert path.exists()
        assert read_outlines(path)[0].points == segment.points


class TestExportResult:
    """Tests for writing nesting results."""

    @pytest.fixture
    def result(self, segment, square):
        config = NestingConfig(sheet_width=100, sheet_height=100, rotation_step=90)
        return NestingEngine(config).nest([segment, square])

    def test_source_order(self, result):
        """Test results are written in input drawing order by default."""
        outlines = parse_outlines(DXFWriter().result_to_dxf(result))

        assert [o.kind for o in outlines] == ["LINE", "LWPOLYLINE"]

    def test_placement_order(self, result):
        """Test results can be written in processing order."""
        outlines = parse_outlines(DXFWriter().result_to_dxf(result, ExportOrder.PLACEMENT))

        assert [o.kind for o in outlines] == ["LWPOLYLINE", "LINE"]

    def test_placed_coordinates(self, result):
        """Test the written outlines are the placed ones."""
        square = parse_outlines(DXFWriter().result_to_dxf(result))[1]

        assert square.points == ((0, 0), (10, 0), (10, 10), (0, 10))

    def test_unplaced_not_written(self, segment):
        """Test unplaceable outlines are left out of the drawing."""
        big = ClosedPolyline(points=((0, 0), (500, 0), (500, 500)), source_index=1)
        result = NestingEngine(NestingConfig(sheet_width=100, sheet_height=100, rotation_step=90)).nest([segment, big])

        outlines = parse_outlines(DXFWriter().result_to_dxf(result))

        assert [o.kind for o in outlines] == ["LINE"]

    def test_export_result(self, tmp_path, result):
        """Test export_result convenience function."""
        path = export_result(result, tmp_path / "nested.dxf")

        assert len(read_outlines(path)) == 2
