"""In-memory collaborators and builders shared by the unit tests."""

from __future__ import annotations

import dataclasses
import datetime as dt
import functools
import posixpath
import typing as typ

from stackreport.artifacts.charts import render_chart
from stackreport.artifacts.store import ArtifactNotFoundError
from stackreport.common.time import fixed_offset
from stackreport.monitoring.catalogue import MetricFamily
from stackreport.periods import DataRange, ReportingPeriod
from stackreport.series.models import Interval, NormalizedPoint, Sample

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from email.message import EmailMessage

    from stackreport.export.jobs import ExportJob

UTC = dt.UTC
JST = fixed_offset(9)


def weekly_period(offset: dt.tzinfo = JST) -> ReportingPeriod:
    """Return the 2018-10-28 .. 2018-11-04 week in ``offset``."""
    now = dt.datetime(2018, 11, 7, 3, 0, tzinfo=UTC)
    return ReportingPeriod.previous(DataRange.WEEKLY, now, offset)


def day_interval() -> Interval:
    """Return the 24 hourly ticks of 2024-01-01 UTC."""
    return Interval(
        start=dt.datetime(2024, 1, 1, tzinfo=UTC),
        end=dt.datetime(2024, 1, 2, tzinfo=UTC),
        step=dt.timedelta(hours=1),
    )


def latest_first(
    interval: Interval, values: cabc.Mapping[int, float]
) -> list[Sample]:
    """Return samples for tick index -> value, ordered latest first."""
    ticks = list(interval.ticks())
    samples = [
        Sample(timestamp=ticks[index], value=value)
        for index, value in values.items()
    ]
    return sorted(samples, key=lambda sample: sample.timestamp, reverse=True)


class MemoryArtifactStore:
    """Dictionary-backed ``ArtifactStore``."""

    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}
        self.writes: list[str] = []

    async def write_bytes(self, key: str, data: bytes) -> None:
        self.objects[key] = data
        self.writes.append(key)

    async def read_bytes(self, key: str) -> bytes:
        try:
            return self.objects[key]
        except KeyError as exc:
            raise ArtifactNotFoundError(key) from exc

    async def list_keys(self, folder: str) -> list[str]:
        prefix = folder.strip("/")
        return sorted(
            key for key in self.objects if posixpath.dirname(key) == prefix
        )


@dataclasses.dataclass
class FakeMonitoringClient:
    """Scripted monitoring client.

    ``instances`` maps ``(project_id, metric_type)`` to instance names;
    ``samples`` maps a filter string to the samples returned for it.
    """

    instances: dict[tuple[str, str], list[str]] = dataclasses.field(
        default_factory=dict
    )
    samples: dict[str, list[Sample]] = dataclasses.field(default_factory=dict)
    projects: list[str] = dataclasses.field(default_factory=list)
    failing_projects: dict[str, Exception] = dataclasses.field(default_factory=dict)
    fetch_error: Exception | None = None
    fetch_calls: list[dict[str, object]] = dataclasses.field(default_factory=list)
    closed: bool = False

    async def list_instance_names(
        self, project_id: str, metric_type: str, interval: Interval
    ) -> list[str]:
        del interval
        if project_id in self.failing_projects:
            raise self.failing_projects[project_id]
        return list(self.instances.get((project_id, metric_type), []))

    async def fetch_samples(
        self,
        project_id: str,
        *,
        filter_: str,
        aligner: str,
        period: ReportingPeriod,
    ) -> list[Sample]:
        self.fetch_calls.append(
            {
                "project_id": project_id,
                "filter": filter_,
                "aligner": aligner,
                "period": period,
            }
        )
        if self.fetch_error is not None:
            raise self.fetch_error
        return list(self.samples.get(filter_, []))

    async def list_projects(self) -> list[str]:
        return list(self.projects)

    async def aclose(self) -> None:
        self.closed = True


@dataclasses.dataclass
class RecordingDispatcher:
    """``JobDispatcher`` that records jobs and fails for chosen instances."""

    fail_instances: set[str] = dataclasses.field(default_factory=set)
    jobs: list[ExportJob] = dataclasses.field(default_factory=list)

    async def dispatch(self, job: ExportJob) -> None:
        if job.instance_name in self.fail_instances:
            msg = f"queue unavailable for {job.instance_name}"
            raise ConnectionError(msg)
        self.jobs.append(job)


@dataclasses.dataclass
class RecordingTransport:
    """``MailTransport`` that keeps sent messages."""

    messages: list[EmailMessage] = dataclasses.field(default_factory=list)

    async def send(self, message: EmailMessage) -> None:
        self.messages.append(message)


@functools.cache
def chart_png() -> bytes:
    """Return a small real chart PNG for report layout tests."""
    points = [
        NormalizedPoint(
            epoch_seconds=1541289600 + hour * 3600, local_datetime="", value=value
        )
        for hour, value in enumerate((1.0, None, 3.0))
    ]
    return render_chart(points, family=MetricFamily.CPU, data_range=DataRange.WEEKLY)
