"""Enumerate and dispatch per-instance export jobs for a reporting period.

Fan-out lists the instances of every primary metric in each project and
emits one :class:`~stackreport.export.jobs.ExportJob` per (metric, instance).
Agent metrics reuse the instance list of the first primary metric because
their series are keyed by user labels rather than ``instance_name``.

A failure while listing one project or dispatching one job is recorded and
the run moves on; callers decide whether a partial run is fatal through
:meth:`FanOutSummary.raise_for_failures`.
"""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as typ

from stackreport.export.errors import FanOutError
from stackreport.export.jobs import ExportJob
from stackreport.export.observability import ExportEventLogger
from stackreport.monitoring.filters import (
    make_agent_memory_filter,
    make_instance_filter,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from stackreport.monitoring.catalogue import MetricCatalogue
    from stackreport.monitoring.client import MonitoringClient
    from stackreport.periods import ReportingPeriod


class FanOutStage(enum.StrEnum):
    """Step of the fan-out run a failure happened in."""

    LIST_INSTANCES = "list_instances"
    DISPATCH = "dispatch"


@dc.dataclass(frozen=True, slots=True)
class JobFailure:
    """A listing or dispatch failure recorded during fan-out."""

    project_id: str
    stage: FanOutStage
    error: Exception
    job: ExportJob | None = None


@dc.dataclass(frozen=True, slots=True)
class FanOutSummary:
    """Outcome of one fan-out run."""

    period: ReportingPeriod
    project_ids: tuple[str, ...]
    dispatched: tuple[ExportJob, ...]
    failures: tuple[JobFailure, ...]

    @property
    def ok(self) -> bool:
        """Return whether every project was listed and every job dispatched."""
        return not self.failures

    def raise_for_failures(self) -> None:
        """Raise :class:`FanOutError` when any failure was recorded."""
        if self.failures:
            raise FanOutError(self.failures)


class JobDispatcher(typ.Protocol):
    """Port for handing an export job to a worker."""

    async def dispatch(self, job: ExportJob) -> None:
        """Enqueue ``job``; delivery is at least once."""
        ...


def enumerate_project_jobs(
    project_id: str,
    instance_names: cabc.Mapping[str, cabc.Sequence[str]],
    catalogue: MetricCatalogue,
    period: ReportingPeriod,
) -> list[ExportJob]:
    """Return the export jobs for one project.

    Parameters
    ----------
    project_id
        Project the jobs belong to.
    instance_names
        Instance names keyed by primary metric type. Metrics missing from the
        mapping produce no jobs.
    catalogue
        Metrics to export.
    period
        Reporting period every job covers.

    Returns
    -------
    list[ExportJob]
        Primary-metric jobs in catalogue order, then agent-metric jobs for
        the instances of the first primary metric.

    """
    jobs: list[ExportJob] = []
    for spec in catalogue.primary:
        jobs.extend(
            ExportJob.for_period(
                project_id=project_id,
                metric_type=spec.metric_type,
                aligner=spec.aligner,
                filter_=make_instance_filter(spec.metric_type, name),
                instance_name=name,
                period=period,
            )
            for name in instance_names.get(spec.metric_type, ())
        )

    if not catalogue.primary:
        return jobs
    agent_instances = instance_names.get(catalogue.primary[0].metric_type, ())
    for spec in catalogue.agent:
        jobs.extend(
            ExportJob.for_period(
                project_id=project_id,
                metric_type=spec.metric_type,
                aligner=spec.aligner,
                filter_=make_agent_memory_filter(spec.metric_type, name),
                instance_name=name,
                period=period,
            )
            for name in agent_instances
        )
    return jobs


class JobFanOut:
    """List instances per project and dispatch their export jobs.

    Parameters
    ----------
    client
        Monitoring API used to list instance names.
    dispatcher
        Destination of the enumerated jobs.
    catalogue
        Metrics exported for each instance.
    event_logger
        Optional structured event logger.

    """

    def __init__(
        self,
        client: MonitoringClient,
        dispatcher: JobDispatcher,
        catalogue: MetricCatalogue,
        *,
        event_logger: ExportEventLogger | None = None,
    ) -> None:
        """Initialise the fan-out with its collaborators."""
        self._client = client
        self._dispatcher = dispatcher
        self._catalogue = catalogue
        self._events = event_logger or ExportEventLogger()

    async def _list_instances(
        self, project_id: str, period: ReportingPeriod
    ) -> dict[str, list[str]]:
        return {
            spec.metric_type: await self._client.list_instance_names(
                project_id, spec.metric_type, period.interval
            )
            for spec in self._catalogue.primary
        }

    async def fan_out(
        self, project_ids: cabc.Iterable[str], period: ReportingPeriod
    ) -> FanOutSummary:
        """Dispatch every export job for ``project_ids`` over ``period``.

        Returns
        -------
        FanOutSummary
            Dispatched jobs and the failures recorded along the way.

        """
        projects = tuple(project_ids)
        dispatched: list[ExportJob] = []
        failures: list[JobFailure] = []

        for project_id in projects:
            try:
                instances = await self._list_instances(project_id, period)
            except Exception as exc:  # noqa: BLE001 - recorded in the summary
                self._events.log_dispatch_failed(
                    project_id=project_id,
                    stage=FanOutStage.LIST_INSTANCES,
                    error=exc,
                )
                failures.append(
                    JobFailure(project_id, FanOutStage.LIST_INSTANCES, exc)
                )
                continue

            for job in enumerate_project_jobs(
                project_id, instances, self._catalogue, period
            ):
                try:
                    await self._dispatcher.dispatch(job)
                except Exception as exc:  # noqa: BLE001 - recorded in the summary
                    self._events.log_dispatch_failed(
                        project_id=project_id,
                        stage=FanOutStage.DISPATCH,
                        error=exc,
                    )
                    failures.append(
                        JobFailure(project_id, FanOutStage.DISPATCH, exc, job)
                    )
                else:
                    dispatched.append(job)

        summary = FanOutSummary(
            period=period,
            project_ids=projects,
            dispatched=tuple(dispatched),
            failures=tuple(failures),
        )
        self._events.log_fan_out_completed(summary)
        return summary
