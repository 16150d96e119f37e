"""CSV rendering of normalized series."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from stackreport.series.models import NormalizedPoint

CSV_HEADER = "timestamp,datetime,value"


def format_csv_row(point: NormalizedPoint) -> str:
    """Render one point; gaps leave the trailing value field empty."""
    value = "" if point.value is None else f"{point.value:f}"
    return f"{point.epoch_seconds},{point.local_datetime},{value}"


def render_csv(points: cabc.Iterable[NormalizedPoint]) -> str:
    """Render the header plus one row per point, newline separated.

    The output has no trailing newline, so ``N`` points always produce
    ``N + 1`` lines.
    """
    return "\n".join([CSV_HEADER, *(format_csv_row(point) for point in points)])
