"""Dramatiq actors for the export and report phases.

Usage
-----
Queue one export job (normally done by :class:`DramatiqJobDispatcher`
during fan-out):

>>> export_metrics_job.send(job.to_form())

Queue the report phase for last week:

>>> send_reports_job.send("weekly")

Workers consume from the broker named by ``STACKREPORT_BROKER_URL``::

    STACKREPORT_BROKER_URL=redis://localhost:6379/0 dramatiq stackreport.actors

"""

from __future__ import annotations

import asyncio
import datetime as dt
import threading
import typing as typ

import dramatiq

from stackreport._broker import ensure_broker_configured, install_broker
from stackreport.common.time import utcnow
from stackreport.config import ReporterConfig
from stackreport.export.errors import InvalidJobError
from stackreport.export.jobs import ExportJob
from stackreport.factory import (
    build_export_service,
    build_monitoring_client,
    build_report_service,
    resolve_project_ids,
)
from stackreport.periods import DataRange, ReportingPeriod

if typ.TYPE_CHECKING:
    from stackreport.export.service import ExportOutcome
    from stackreport.report.service import ReportRunSummary

# Config is loaded once per worker process. Monitoring clients are bound to
# the event loop of one asyncio.run and are built per invocation.
_CONFIG_CACHE: dict[str, ReporterConfig] = {}
_CACHE_LOCK = threading.Lock()
_CONFIG_KEY = "default"

install_broker()


def get_reporter_config() -> ReporterConfig:
    """Return the process-wide configuration, loading it on first use.

    Thread-safe: uses a lock to prevent race conditions in Dramatiq workers.
    """
    with _CACHE_LOCK:
        if _CONFIG_KEY not in _CONFIG_CACHE:
            _CONFIG_CACHE[_CONFIG_KEY] = ReporterConfig.from_env()
        return _CONFIG_CACHE[_CONFIG_KEY]


def clear_config_cache() -> None:
    """Forget the cached configuration so the next job reloads it."""
    with _CACHE_LOCK:
        _CONFIG_CACHE.clear()


def _parse_as_of_iso(as_of_iso: str | None) -> dt.datetime:
    """Parse an ISO timestamp that must carry timezone information.

    Raises
    ------
    ValueError
        If the timestamp lacks timezone information.

    """
    if as_of_iso is None:
        return utcnow()

    parsed = dt.datetime.fromisoformat(as_of_iso)
    if parsed.tzinfo is None:
        msg = (
            f"as_of_iso must include timezone information, got naive datetime: "
            f"{as_of_iso!r}. Use ISO format with offset (e.g., '2024-07-14T10:00:00Z' "
            f"or '2024-07-14T10:00:00+00:00')."
        )
        raise ValueError(msg)
    return parsed


async def _run_export_async(
    config: ReporterConfig, job: ExportJob
) -> ExportOutcome:
    client = build_monitoring_client()
    try:
        service = build_export_service(config, client)
        return await service.run(job)
    finally:
        await client.aclose()


class _DiscoveryLister:
    """Project lister building its monitoring client only when consulted."""

    async def list_projects(self) -> list[str]:
        client = build_monitoring_client()
        try:
            return await client.list_projects()
        finally:
            await client.aclose()


async def _run_reports_async(
    config: ReporterConfig, period: ReportingPeriod
) -> ReportRunSummary:
    project_ids = await resolve_project_ids(config, _DiscoveryLister())
    return await build_report_service(config).run(project_ids, period)


@dramatiq.actor(throws=(InvalidJobError,))
def export_metrics_job(fields: dict[str, str]) -> str:
    """Dramatiq actor exporting the CSV and chart of one job.

    Parameters
    ----------
    fields
        The job's form fields, as produced by :meth:`ExportJob.to_form`.

    Returns
    -------
    str
        The outcome status, ``completed`` or ``no_data``.

    Raises
    ------
    InvalidJobError
        If ``fields`` do not describe a valid job. Not retried.

    """
    ensure_broker_configured()
    job = ExportJob.from_form(fields)
    outcome = asyncio.run(_run_export_async(get_reporter_config(), job))
    return outcome.status.value


@dramatiq.actor
def send_reports_job(data_range: str, *, as_of_iso: str | None = None) -> list[str]:
    """Dramatiq actor assembling and mailing the previous period's reports.

    Parameters
    ----------
    data_range
        ``weekly``, ``monthly`` or ``daily``.
    as_of_iso
        Optional ISO timestamp the previous period is computed from. Must
        include timezone information (e.g., '2024-07-14T10:00:00Z').

    Returns
    -------
    list[str]
        Storage paths of the reports that were sent.

    Raises
    ------
    ReportRunError
        If any project failed; the other projects are still processed.

    """
    ensure_broker_configured()
    config = get_reporter_config()
    period = ReportingPeriod.previous(
        DataRange(data_range), _parse_as_of_iso(as_of_iso), config.offset
    )
    summary = asyncio.run(_run_reports_async(config, period))
    summary.raise_for_failures()
    return [report.path for report in summary.sent]


class _SendsMessages(typ.Protocol):
    def send(self, *args: object, **kwargs: object) -> object: ...


class DramatiqJobDispatcher:
    """Dispatch export jobs as ``export_metrics_job`` messages.

    Parameters
    ----------
    actor
        Actor receiving the job's form fields; defaults to
        :func:`export_metrics_job`.

    """

    def __init__(self, actor: _SendsMessages | None = None) -> None:
        """Initialise the dispatcher with its target actor."""
        self._actor: _SendsMessages = actor or export_metrics_job

    async def dispatch(self, job: ExportJob) -> None:
        """Enqueue ``job`` on the broker."""
        ensure_broker_configured()
        await asyncio.to_thread(self._actor.send, job.to_form())
