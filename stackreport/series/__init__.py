"""Dense-grid normalization of sparse monitoring samples.

Public API
----------
Sample
    One aligned monitoring point.
Interval
    Dense grid of ticks (start, end, step).
NormalizedPoint
    One gap-filled, time-zone shifted row.
align_to_grid
    Generic sparse-to-dense merge with configurable matching and gap fill.
normalize
    Monitoring-specific normalization producing ``NormalizedPoint`` rows.
"""

from stackreport.series.align import GridAlignment, align_to_grid
from stackreport.series.models import Interval, NormalizedPoint, Sample
from stackreport.series.normalizer import normalize

__all__ = [
    "GridAlignment",
    "Interval",
    "NormalizedPoint",
    "Sample",
    "align_to_grid",
    "normalize",
]
