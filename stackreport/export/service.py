"""Run one export job: fetch, normalize and write its artifacts."""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import enum
import time
import typing as typ

from stackreport.artifacts.paths import ArtifactKey
from stackreport.export.errors import InvalidJobError
from stackreport.export.observability import ExportEventLogger
from stackreport.monitoring.catalogue import metric_short_name
from stackreport.series import normalize

if typ.TYPE_CHECKING:
    from stackreport.artifacts.writer import ArtifactWriter
    from stackreport.export.jobs import ExportJob
    from stackreport.monitoring.catalogue import MetricCatalogue
    from stackreport.monitoring.client import MonitoringClient


class ExportStatus(enum.StrEnum):
    """Terminal state of an export job."""

    COMPLETED = "completed"
    NO_DATA = "no_data"


@dc.dataclass(frozen=True, slots=True)
class ExportOutcome:
    """Result of :meth:`ExportService.run`.

    Attributes
    ----------
    status
        ``COMPLETED`` when artifacts were written, ``NO_DATA`` when the
        metric had no samples in the interval and nothing was written.
    paths
        Storage paths written, CSV first.
    points, gaps
        Grid size and number of points without a sample.

    """

    status: ExportStatus
    paths: tuple[str, ...] = ()
    points: int = 0
    gaps: int = 0


class ExportService:
    """Execute export jobs against a monitoring client and an artifact writer.

    Parameters
    ----------
    client
        Source of metric samples.
    writer
        Destination of CSV and chart artifacts.
    catalogue
        Metric catalogue; decides the chart family of each job's metric.
    offset
        Fixed-offset zone applied to emitted timestamps and period labels.
    event_logger
        Optional structured event logger.

    """

    def __init__(  # noqa: PLR0913 - explicit collaborators
        self,
        client: MonitoringClient,
        writer: ArtifactWriter,
        *,
        catalogue: MetricCatalogue,
        offset: dt.tzinfo,
        event_logger: ExportEventLogger | None = None,
    ) -> None:
        """Initialise the service with its collaborators."""
        self._client = client
        self._writer = writer
        self._catalogue = catalogue
        self._offset = offset
        self._events = event_logger or ExportEventLogger()

    async def run(self, job: ExportJob) -> ExportOutcome:
        """Export one (project, instance, metric) series.

        Raises
        ------
        InvalidJobError
            If the job's metric is not in the catalogue.
        MonitoringError
            If the monitoring API request fails.

        Upstream and storage errors are logged and re-raised; they never
        leave partial output for other jobs.

        """
        try:
            family = self._catalogue.family_of(job.metric_type)
        except KeyError as exc:
            raise InvalidJobError.unknown_metric(job.metric_type) from exc

        period = job.period(self._offset)
        self._events.log_job_started(job)
        started = time.monotonic()
        try:
            samples = await self._client.fetch_samples(
                job.project_id,
                filter_=job.filter,
                aligner=job.aligner,
                period=period,
            )
            if not samples:
                self._events.log_job_skipped(job)
                return ExportOutcome(status=ExportStatus.NO_DATA)

            points = normalize(samples, period.interval, self._offset)
            key = ArtifactKey(
                project_id=job.project_id,
                period=period,
                instance_name=job.instance_name,
                metric_short_name=metric_short_name(job.metric_type),
            )
            csv_path = await self._writer.write(points, key)
            png_path = await self._writer.write_chart(points, key, family)
        except Exception as exc:
            self._events.log_job_failed(
                job,
                error=exc,
                duration=dt.timedelta(seconds=time.monotonic() - started),
            )
            raise

        outcome = ExportOutcome(
            status=ExportStatus.COMPLETED,
            paths=(csv_path, png_path),
            points=len(points),
            gaps=sum(1 for point in points if point.is_gap),
        )
        self._events.log_job_completed(
            job, points=outcome.points, gaps=outcome.gaps, paths=outcome.paths
        )
        return outcome
