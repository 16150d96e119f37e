"""Trigger and export resources.

``POST /cron/{data_range}-report`` runs the fan-out phase for the previous
period, ``POST /cron/{data_range}-report/send`` assembles and mails that
period's reports, and ``POST /export`` runs one form-encoded export job.

Usage
-----
Register the resources on the Falcon app::

    app.add_route("/cron/{data_range}-report", FanOutTriggerResource(deps))
    app.add_route("/cron/{data_range}-report/send", ReportTriggerResource(deps))
    app.add_route("/export", ExportResource(deps))

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import falcon

from stackreport.api.errors import InvalidInputError
from stackreport.common.time import utcnow
from stackreport.export.jobs import ExportJob
from stackreport.factory import resolve_project_ids
from stackreport.periods import DataRange, ReportingPeriod

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt

    from falcon.asgi import Request, Response

    from stackreport.config import ReporterConfig
    from stackreport.export.fanout import JobFanOut
    from stackreport.export.service import ExportService
    from stackreport.monitoring.client import ProjectLister
    from stackreport.report.service import ReportService

__all__ = [
    "ExportResource",
    "FanOutTriggerResource",
    "ReportTriggerResource",
    "TriggerDependencies",
]


@dc.dataclass(frozen=True, slots=True)
class TriggerDependencies:
    """Collaborators shared by the trigger and export resources.

    Attributes
    ----------
    config
        Reporter configuration; supplies the offset and explicit projects.
    project_lister
        Discovers projects when the configuration lists none.
    fan_out
        Dispatches export jobs for the fan-out trigger.
    export_service
        Runs single jobs posted to ``/export``.
    report_service
        Assembles and sends reports for the send trigger.
    clock
        Returns the current instant; the previous period is computed from it.
    closers
        Async callables releasing clients these dependencies own; the app
        awaits them at ASGI shutdown.

    """

    config: ReporterConfig
    project_lister: ProjectLister
    fan_out: JobFanOut
    export_service: ExportService
    report_service: ReportService
    clock: cabc.Callable[[], dt.datetime] = utcnow
    closers: tuple[cabc.Callable[[], cabc.Awaitable[None]], ...] = ()


def _parse_data_range(value: str) -> DataRange:
    try:
        return DataRange(value)
    except ValueError as exc:
        choices = ", ".join(member.value for member in DataRange)
        raise InvalidInputError(
            f"unknown data range {value!r}; expected one of {choices}",
            field="data_range",
        ) from exc


def _previous_period(deps: TriggerDependencies, data_range: str) -> ReportingPeriod:
    return ReportingPeriod.previous(
        _parse_data_range(data_range), deps.clock(), deps.config.offset
    )


class FanOutTriggerResource:
    """Dispatch every export job of the previous period."""

    def __init__(self, dependencies: TriggerDependencies) -> None:
        """Configure the resource with its dependencies."""
        self._deps = dependencies

    async def on_post(self, _req: Request, resp: Response, *, data_range: str) -> None:
        """Handle POST /cron/{data_range}-report."""
        period = _previous_period(self._deps, data_range)
        project_ids = await resolve_project_ids(
            self._deps.config, self._deps.project_lister
        )
        summary = await self._deps.fan_out.fan_out(project_ids, period)
        resp.media = {
            "status": "dispatched",
            "label": period.label,
            "projects": len(summary.project_ids),
            "dispatched": len(summary.dispatched),
            "failures": len(summary.failures),
        }
        resp.status = falcon.HTTP_200


class ReportTriggerResource:
    """Assemble and send the previous period's reports."""

    def __init__(self, dependencies: TriggerDependencies) -> None:
        """Configure the resource with its dependencies."""
        self._deps = dependencies

    async def on_post(self, _req: Request, resp: Response, *, data_range: str) -> None:
        """Handle POST /cron/{data_range}-report/send."""
        period = _previous_period(self._deps, data_range)
        project_ids = await resolve_project_ids(
            self._deps.config, self._deps.project_lister
        )
        summary = await self._deps.report_service.run(project_ids, period)
        resp.media = {
            "status": "sent",
            "label": period.label,
            "sent": [report.path for report in summary.sent],
            "skipped": list(summary.skipped),
            "failures": sorted(summary.failures),
        }
        resp.status = falcon.HTTP_200


def _form_fields(media: object) -> dict[str, str]:
    if not isinstance(media, dict):
        msg = "expected a form-encoded body"
        raise InvalidInputError(msg)
    fields: dict[str, str] = {}
    for name, value in typ.cast("dict[str, object]", media).items():
        if not isinstance(value, str):
            raise InvalidInputError("field must be given once", field=name)
        fields[name] = value
    return fields


class ExportResource:
    """Run one export job synchronously."""

    def __init__(self, dependencies: TriggerDependencies) -> None:
        """Configure the resource with its dependencies."""
        self._deps = dependencies

    async def on_post(self, req: Request, resp: Response) -> None:
        """Handle POST /export with form-encoded job fields.

        Responds with the outcome status and the written artifact paths;
        ``no_data`` jobs write nothing.
        """
        media = await req.get_media(default_when_empty=None)
        job = ExportJob.from_form(_form_fields(media))
        outcome = await self._deps.export_service.run(job)
        resp.media = {
            "status": outcome.status.value,
            "paths": list(outcome.paths),
            "points": outcome.points,
            "gaps": outcome.gaps,
        }
        resp.status = falcon.HTTP_200
