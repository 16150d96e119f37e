"""Assemble and send the reports of a period across projects."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from stackreport.report.errors import ReportRunError
from stackreport.report.observability import ReportEventLogger

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from stackreport.periods import ReportingPeriod
    from stackreport.report.assembler import Report, ReportAssembler
    from stackreport.report.mail import ReportMailer


@dc.dataclass(frozen=True, slots=True)
class ReportRunSummary:
    """Outcome of one report run."""

    sent: tuple[Report, ...]
    skipped: tuple[str, ...]
    failures: dict[str, Exception]

    def raise_for_failures(self) -> None:
        """Raise :class:`ReportRunError` when any project failed."""
        if self.failures:
            raise ReportRunError(self.failures)


class ReportService:
    """Run the assemble-and-send phase for every project of a period."""

    def __init__(
        self,
        assembler: ReportAssembler,
        mailer: ReportMailer,
        *,
        event_logger: ReportEventLogger | None = None,
    ) -> None:
        """Initialise the service with its assembler and mailer."""
        self._assembler = assembler
        self._mailer = mailer
        self._events = event_logger or ReportEventLogger()

    async def run(
        self, project_ids: cabc.Iterable[str], period: ReportingPeriod
    ) -> ReportRunSummary:
        """Assemble and send each project's report.

        A failing project is logged and recorded; the remaining projects
        still run.
        """
        sent: list[Report] = []
        skipped: list[str] = []
        failures: dict[str, Exception] = {}
        for project_id in project_ids:
            try:
                report = await self._assembler.assemble(project_id, period)
                delivered = await self._mailer.send(report)
            except Exception as exc:  # noqa: BLE001 - recorded in the summary
                self._events.log_report_failed(
                    project_id=project_id, period=period, error=exc
                )
                failures[project_id] = exc
                continue
            if delivered and report is not None:
                sent.append(report)
            else:
                skipped.append(project_id)
        return ReportRunSummary(
            sent=tuple(sent), skipped=tuple(skipped), failures=failures
        )
