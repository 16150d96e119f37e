"""Reporting periods: the window, cadence and labels of one report run.

A ``ReportingPeriod`` ties a ``DataRange`` to the concrete dense grid the run
queries and to the human-readable label used in artifact paths and report
titles.

Usage
-----
Compute the previous full week in UTC+9:

>>> import datetime as dt
>>> from stackreport.common.time import fixed_offset
>>> now = dt.datetime(2018, 11, 7, 3, 0, tzinfo=dt.UTC)
>>> period = ReportingPeriod.previous(DataRange.WEEKLY, now, fixed_offset(9))
>>> period.label
'2018-1028-1104'

"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import enum

from stackreport.series.models import Interval

_ONE_HOUR = dt.timedelta(hours=1)
_ONE_MINUTE = dt.timedelta(minutes=1)
_ONE_DAY = dt.timedelta(days=1)
_ONE_WEEK = dt.timedelta(days=7)
_DAYS_IN_WEEK = 7


class DataRange(enum.StrEnum):
    """Cadence of a report run."""

    WEEKLY = "weekly"
    MONTHLY = "monthly"
    DAILY = "daily"

    @property
    def step(self) -> dt.timedelta:
        """Return the grid step used for this cadence."""
        return _ONE_MINUTE if self is DataRange.DAILY else _ONE_HOUR

    @property
    def alignment_period(self) -> str:
        """Return the monitoring API alignment period for this cadence."""
        return f"{int(self.step.total_seconds())}s"

    @property
    def label_every(self) -> int:
        """Return how many grid points separate two chart tick labels."""
        if self is DataRange.DAILY:
            return int(_ONE_HOUR / self.step)
        return int(_ONE_DAY / self.step)


def _local_midnight(value: dt.datetime) -> dt.datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def _previous_bounds(
    data_range: DataRange, now_local: dt.datetime
) -> tuple[dt.datetime, dt.datetime]:
    today = _local_midnight(now_local)
    match data_range:
        case DataRange.WEEKLY:
            days_since_sunday = (today.weekday() + 1) % _DAYS_IN_WEEK
            end = today - dt.timedelta(days=days_since_sunday)
            return end - _ONE_WEEK, end
        case DataRange.MONTHLY:
            end = today.replace(day=1)
            start = (end - _ONE_DAY).replace(day=1)
            return start, end
        case DataRange.DAILY:
            return today - _ONE_DAY, today


@dc.dataclass(frozen=True, slots=True)
class ReportingPeriod:
    """One reporting window at a given cadence.

    Attributes
    ----------
    data_range
        Cadence of the run.
    interval
        Dense UTC grid queried from the monitoring API.
    offset
        Fixed-offset zone used for labels and emitted timestamps.

    """

    data_range: DataRange
    interval: Interval
    offset: dt.tzinfo

    @classmethod
    def previous(
        cls,
        data_range: DataRange,
        now: dt.datetime,
        offset: dt.tzinfo,
    ) -> ReportingPeriod:
        """Return the last complete period before ``now`` in ``offset``."""
        start, end = _previous_bounds(data_range, now.astimezone(offset))
        return cls.from_bounds(data_range, start, end, offset)

    @classmethod
    def from_bounds(
        cls,
        data_range: DataRange,
        start: dt.datetime,
        end: dt.datetime,
        offset: dt.tzinfo,
    ) -> ReportingPeriod:
        """Rebuild a period from explicit interval bounds."""
        interval = Interval(start=start, end=end, step=data_range.step)
        return cls(data_range=data_range, interval=interval, offset=offset)

    @property
    def local_start(self) -> dt.datetime:
        """Return the period start in the configured zone."""
        return self.interval.start.astimezone(self.offset)

    @property
    def year(self) -> int:
        """Return the year the period starts in, used in artifact folders."""
        return self.local_start.year

    @property
    def label(self) -> str:
        """Return the period label used in artifact paths."""
        start = self.local_start
        match self.data_range:
            case DataRange.WEEKLY:
                end = start + _ONE_WEEK
                return f"{start:%Y-%m%d}-{end:%m%d}"
            case DataRange.MONTHLY:
                return f"{start:%Y-%m}"
            case DataRange.DAILY:
                return f"{start:%Y-%m%d}"

    @property
    def title(self) -> str:
        """Return the report cover title for the period."""
        start = self.local_start
        heading = f"Metrics {self.data_range.value.title()} Report"
        match self.data_range:
            case DataRange.WEEKLY:
                end = start + _ONE_WEEK
                return f"{heading} {start:%Y/%m/%d} - {end:%Y/%m/%d}"
            case DataRange.MONTHLY:
                return f"{heading} {start:%Y/%m}"
            case DataRange.DAILY:
                return f"{heading} {start:%Y/%m/%d}"
