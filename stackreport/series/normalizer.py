"""Normalize monitoring samples into a dense, time-zone shifted series."""

from __future__ import annotations

import datetime as dt
import typing as typ

from stackreport.logging import get_logger, log_debug
from stackreport.series.align import align_to_grid
from stackreport.series.models import NormalizedPoint

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from stackreport.series.models import Interval, Sample

logger = get_logger(__name__)

LOCAL_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def _shifted_point(
    instant: dt.datetime, offset: dt.tzinfo, value: float | None
) -> NormalizedPoint:
    delta = offset.utcoffset(None) or dt.timedelta(0)
    shifted = instant + delta
    return NormalizedPoint(
        epoch_seconds=int(shifted.timestamp()),
        local_datetime=shifted.strftime(LOCAL_DATETIME_FORMAT),
        value=value,
    )


def normalize(
    samples: cabc.Sequence[Sample],
    interval: Interval,
    offset: dt.tzinfo,
) -> list[NormalizedPoint]:
    """Build one ``NormalizedPoint`` per tick of ``interval``.

    Parameters
    ----------
    samples
        Samples in the latest-first order the monitoring API returns them.
        They are consumed from the tail so the oldest sample meets the first
        tick.
    interval
        Grid to fill. Tick ``i`` of the output is ``start + (i + 1) * step``.
    offset
        Fixed-offset zone applied to every emitted timestamp.

    Returns
    -------
    list[NormalizedPoint]
        Exactly ``interval.tick_count`` points in chronological order. Ticks
        without an exactly matching sample carry ``value=None``; an empty
        ``samples`` sequence therefore yields an all-gap series.

    """
    alignment = align_to_grid(
        interval.ticks(),
        reversed(samples),
        key=lambda sample: sample.timestamp,
        on_match=lambda _tick, sample: _shifted_point(
            sample.timestamp, offset, sample.value
        ),
        on_gap=lambda tick: _shifted_point(tick, offset, None),
    )
    if alignment.dropped:
        log_debug(
            logger,
            "Dropped %d sample(s) not aligned to the %s grid starting %s",
            alignment.dropped,
            interval.step,
            interval.start.isoformat(),
        )
    return list(alignment.rows)
