"""PNG line charts of normalized series.

Charts are drawn with matplotlib's object-oriented API on an Agg canvas so
rendering is safe from worker threads (no pyplot global state).
"""

from __future__ import annotations

import datetime as dt
import io
import math
import typing as typ

from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure
from matplotlib.font_manager import FontProperties
from matplotlib.ticker import FuncFormatter

from stackreport.monitoring.catalogue import MetricFamily
from stackreport.periods import DataRange

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from stackreport.series.models import NormalizedPoint

CHART_WIDTH_PX = 1096
CHART_HEIGHT_PX = 400
CHART_DPI = 100
_SCALE_THRESHOLD = 1000
_BYTES_STEP = 1024
_GRID_COLOUR = "#d1d1d1"


def format_cpu_value(value: float, _position: object = None) -> str:
    """Format a CPU rate, switching from ms/s to s/s above 1000 ms/s."""
    unit = "ms/s"
    if value > _SCALE_THRESHOLD:
        value /= _SCALE_THRESHOLD
        unit = " s/s"
    return f"+{value:6.2f}{unit}"


def format_memory_value(value: float, _position: object = None) -> str:
    """Format a byte count, stepping through B, KB, MB and GB."""
    unit = " B"
    for next_unit in ("KB", "MB", "GB"):
        if value <= _SCALE_THRESHOLD:
            break
        value /= _BYTES_STEP
        unit = next_unit
    return f"+{value:8.2f}{unit}"


_FORMATTERS: dict[MetricFamily, cabc.Callable[[float, object], str]] = {
    MetricFamily.CPU: format_cpu_value,
    MetricFamily.MEMORY: format_memory_value,
}


def tick_indices(total_ticks: int, label_every: int) -> list[int]:
    """Return the point indices that carry an x-axis label.

    The first point is always labelled, then the last point of every
    ``label_every``-sized block (index 23, 47, ... for hourly data).

    Examples
    --------
    >>> tick_indices(72, 24)
    [0, 23, 47, 71]

    """
    if total_ticks <= 0:
        return []
    indices = [0]
    indices.extend(range(label_every - 1, total_ticks, label_every))
    return sorted(set(indices))


def _x_label(data_range: DataRange) -> str:
    if data_range is DataRange.DAILY:
        return "DateTime (1 minute interval)"
    return "DateTime (1 hour interval)"


def _tick_format(data_range: DataRange) -> str:
    return "%H:%M" if data_range is DataRange.DAILY else "%Y-%m-%d"


def _local_instant(point: NormalizedPoint) -> dt.datetime:
    # epoch_seconds already carries the configured offset; render wall clock.
    return dt.datetime.fromtimestamp(point.epoch_seconds, dt.UTC).replace(tzinfo=None)


def render_chart(
    points: cabc.Sequence[NormalizedPoint],
    *,
    family: MetricFamily,
    data_range: DataRange,
    font_path: Path | None = None,
) -> bytes:
    """Render ``points`` as a PNG line chart.

    Parameters
    ----------
    points
        Dense normalized series; gaps are drawn as breaks in the line.
    family
        Metric family selecting the y-axis value formatter.
    data_range
        Cadence selecting x-axis label spacing and format.
    font_path
        Optional TrueType font used for all chart text.

    Returns
    -------
    bytes
        Encoded PNG image.

    Raises
    ------
    ValueError
        If ``points`` is empty.

    """
    if not points:
        msg = "cannot render a chart without points"
        raise ValueError(msg)

    font = FontProperties(fname=font_path) if font_path is not None else None
    x_values = [_local_instant(point) for point in points]
    y_values = [math.nan if point.value is None else point.value for point in points]

    figure = Figure(
        figsize=(CHART_WIDTH_PX / CHART_DPI, CHART_HEIGHT_PX / CHART_DPI),
        dpi=CHART_DPI,
    )
    canvas = FigureCanvasAgg(figure)
    axes = figure.add_subplot()
    axes.plot(x_values, y_values, linewidth=1.2)

    labelled = tick_indices(len(points), data_range.label_every)
    tick_format = _tick_format(data_range)
    axes.set_xticks([x_values[index] for index in labelled])
    axes.set_xticklabels(
        [x_values[index].strftime(tick_format) for index in labelled],
        fontproperties=font,
    )
    axes.yaxis.set_major_formatter(FuncFormatter(_FORMATTERS[family]))
    axes.grid(visible=True, axis="x", color=_GRID_COLOUR, linewidth=1.0)
    axes.grid(
        visible=True, axis="y", color=_GRID_COLOUR, linewidth=1.0, linestyle="--"
    )
    axes.set_xlabel(_x_label(data_range), fontproperties=font)
    axes.set_ylabel("Value", fontproperties=font)
    figure.tight_layout()

    buffer = io.BytesIO()
    canvas.print_png(buffer)
    return buffer.getvalue()
