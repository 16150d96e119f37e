"""Unit tests for CSV rendering."""

from __future__ import annotations

from stackreport.artifacts.tabular import CSV_HEADER, format_csv_row, render_csv
from stackreport.series.models import NormalizedPoint


def _point(value: float | None) -> NormalizedPoint:
    return NormalizedPoint(
        epoch_seconds=1541289600,
        local_datetime="2018-11-04 00:00:00",
        value=value,
    )


class TestCsvRendering:
    """Tests for CSV output."""

    def test_value_row(self) -> None:
        """Values are written with fixed-point formatting."""
        assert format_csv_row(_point(3.0)) == "1541289600,2018-11-04 00:00:00,3.000000"

    def test_gap_row_has_empty_value(self) -> None:
        """Gaps keep the trailing comma with an empty field."""
        assert format_csv_row(_point(None)) == "1541289600,2018-11-04 00:00:00,"

    def test_zero_is_not_a_gap(self) -> None:
        """A real zero is written as a number."""
        assert format_csv_row(_point(0.0)).endswith(",0.000000")

    def test_render_has_header_and_one_line_per_point(self) -> None:
        """``N`` points render to ``N + 1`` lines with no trailing newline."""
        text = render_csv([_point(1.5), _point(None)])

        lines = text.split("\n")
        assert lines[0] == CSV_HEADER == "timestamp,datetime,value"
        assert len(lines) == 3
        assert not text.endswith("\n")

    def test_empty_series_is_header_only(self) -> None:
        """No points renders just the header."""
        assert render_csv([]) == CSV_HEADER
