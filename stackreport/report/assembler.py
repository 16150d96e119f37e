"""Assemble the per-period PDF report from stored chart artifacts.

The store is the only record of what the export phase produced, so the
assembler rediscovers charts by listing the period folder and recovers each
chart's instance and metric from its filename. Charts are grouped by
instance; every instance must carry exactly one chart per catalogued metric.
"""

from __future__ import annotations

import asyncio
import collections
import dataclasses as dc
import typing as typ

from stackreport.artifacts.paths import (
    ArtifactKind,
    parse_artifact_name,
    period_folder,
    report_name,
    report_path,
)
from stackreport.report.errors import ReportPairingError
from stackreport.report.observability import ReportEventLogger
from stackreport.report.pdf import ChartImage, ReportPage, render_report_pdf

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from stackreport.artifacts.paths import ArtifactName
    from stackreport.artifacts.store import ArtifactStore
    from stackreport.monitoring.catalogue import MetricCatalogue
    from stackreport.periods import ReportingPeriod

type PdfRenderer = cabc.Callable[[str, cabc.Sequence[ReportPage]], bytes]


@dc.dataclass(frozen=True, slots=True)
class Report:
    """A persisted report document."""

    project_id: str
    period: ReportingPeriod
    name: str
    path: str
    instances: tuple[str, ...]

    @property
    def page_count(self) -> int:
        """Return the cover page plus one page per instance."""
        return 1 + len(self.instances)


def group_charts(
    project_id: str,
    charts: cabc.Iterable[ArtifactName],
    catalogue: MetricCatalogue,
) -> list[tuple[str, list[ArtifactName]]]:
    """Group charts by instance, ordered by instance then catalogue metric.

    Raises
    ------
    ReportPairingError
        If any instance lacks a catalogued metric, has a duplicate, or has a
        chart for a metric outside the catalogue.

    """
    # Catalogue order is the chart order on each page.
    expected = {
        name: position for position, name in enumerate(catalogue.by_short_name())
    }
    by_instance: dict[str, list[ArtifactName]] = collections.defaultdict(list)
    for chart in charts:
        by_instance[chart.instance_name].append(chart)

    grouped: list[tuple[str, list[ArtifactName]]] = []
    mismatches: dict[str, str] = {}
    for instance in sorted(by_instance):
        members = by_instance[instance]
        counts = collections.Counter(chart.metric_short_name for chart in members)
        problems = [f"missing {name}" for name in expected if counts[name] == 0]
        problems.extend(
            f"duplicate {name}" for name in expected if counts[name] > 1
        )
        problems.extend(
            f"unexpected {name}" for name in sorted(counts) if name not in expected
        )
        if problems:
            mismatches[instance] = ", ".join(problems)
            continue
        members.sort(key=lambda chart: expected[chart.metric_short_name])
        grouped.append((instance, members))

    if mismatches:
        raise ReportPairingError(project_id, mismatches)
    return grouped


class ReportAssembler:
    """Build and persist the report for one project and period.

    Parameters
    ----------
    store
        Artifact store holding the charts; the PDF is written back to it.
    catalogue
        Metrics every instance page must show, in display order.
    renderer
        PDF layout function; defaults to :func:`render_report_pdf`.
    event_logger
        Optional structured event logger.

    """

    def __init__(
        self,
        store: ArtifactStore,
        catalogue: MetricCatalogue,
        *,
        renderer: PdfRenderer = render_report_pdf,
        event_logger: ReportEventLogger | None = None,
    ) -> None:
        """Initialise the assembler with its store and catalogue."""
        self._store = store
        self._catalogue = catalogue
        self._renderer = renderer
        self._events = event_logger or ReportEventLogger()

    async def _list_charts(
        self, project_id: str, period: ReportingPeriod
    ) -> list[ArtifactName]:
        keys = await self._store.list_keys(period_folder(project_id, period))
        charts: list[ArtifactName] = []
        for key in keys:
            name = parse_artifact_name(key)
            if (
                name is not None
                and name.kind is ArtifactKind.PNG
                and name.label == period.label
            ):
                charts.append(name)
        return charts

    async def assemble(self, project_id: str, period: ReportingPeriod) -> Report | None:
        """Assemble, persist and return the report, or ``None`` without charts.

        Raises
        ------
        ReportPairingError
            If the stored charts do not pair up per instance.

        """
        charts = await self._list_charts(project_id, period)
        if not charts:
            self._events.log_report_skipped(project_id=project_id, period=period)
            return None

        grouped = group_charts(project_id, charts, self._catalogue)
        pages: list[ReportPage] = []
        for instance, members in grouped:
            images = [
                ChartImage(
                    caption=chart.caption,
                    png=await self._store.read_bytes(chart.path),
                )
                for chart in members
            ]
            pages.append(ReportPage(instance_name=instance, charts=tuple(images)))
        pdf = await asyncio.to_thread(self._renderer, period.title, pages)

        path = report_path(project_id, period)
        await self._store.write_bytes(path, pdf)
        report = Report(
            project_id=project_id,
            period=period,
            name=report_name(project_id, period),
            path=path,
            instances=tuple(instance for instance, _ in grouped),
        )
        self._events.log_report_assembled(report)
        return report
