"""Value types for monitoring samples and normalized series."""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import datetime as dt

from stackreport.common.time import ensure_utc


@dc.dataclass(frozen=True, slots=True)
class Sample:
    """One aligned point returned by the monitoring API.

    Attributes
    ----------
    timestamp
        Aware instant the aligned bucket closes at.
    value
        Aggregated value, or ``None`` when the API returned no numeric value.

    """

    timestamp: dt.datetime
    value: float | None

    def __post_init__(self) -> None:
        """Normalise the timestamp to UTC."""
        object.__setattr__(
            self, "timestamp", ensure_utc(self.timestamp, field="timestamp")
        )


@dc.dataclass(frozen=True, slots=True)
class Interval:
    """Dense grid requested from the monitoring API.

    Attributes
    ----------
    start
        Start of the grid (inclusive, never itself a tick).
    end
        End of the grid (exclusive of anything after it; the last tick
        lands exactly on ``end``).
    step
        Spacing between consecutive ticks.

    """

    start: dt.datetime
    end: dt.datetime
    step: dt.timedelta

    def __post_init__(self) -> None:
        """Validate bounds and normalise both ends to UTC."""
        start = ensure_utc(self.start, field="start")
        end = ensure_utc(self.end, field="end")
        if self.step <= dt.timedelta(0):
            msg = f"step must be positive, got {self.step}"
            raise ValueError(msg)
        if end < start:
            msg = f"end {end.isoformat()} precedes start {start.isoformat()}"
            raise ValueError(msg)
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", end)

    @property
    def tick_count(self) -> int:
        """Return the number of grid ticks between ``start`` and ``end``."""
        return (self.end - self.start) // self.step

    def ticks(self) -> cabc.Iterator[dt.datetime]:
        """Yield the UTC grid instants ``start + (i + 1) * step`` in order."""
        for index in range(1, self.tick_count + 1):
            yield self.start + index * self.step


@dc.dataclass(frozen=True, slots=True)
class NormalizedPoint:
    """One row of a dense, gap-filled series.

    ``epoch_seconds`` and ``local_datetime`` both describe the grid instant
    shifted by the configured UTC offset.
    """

    epoch_seconds: int
    local_datetime: str
    value: float | None

    @property
    def is_gap(self) -> bool:
        """Return True when no sample landed on this tick."""
        return self.value is None
