r"""Deterministic artifact and report paths.

Layout under the destination root::

    {project_id}/
    └── 2018/
        └── weekly/
            └── 2018-1028-1104/
                ├── 2018-1028-1104[instance-1][cpu_usage_time].csv
                ├── 2018-1028-1104[instance-1][cpu_usage_time].png
                ├── 2018-1028-1104[instance-1][memory_bytes_used].csv
                ├── 2018-1028-1104[instance-1][memory_bytes_used].png
                └── 2018-1028-1104-weekly-report-{project_id}.pdf

Every path is a pure function of project, period, instance and metric, so a
retried job overwrites its own artifacts and never anyone else's.
"""

from __future__ import annotations

import dataclasses as dc
import enum
import posixpath
import re
import typing as typ

if typ.TYPE_CHECKING:
    from stackreport.periods import ReportingPeriod

_ARTIFACT_NAME = re.compile(
    r"^(?P<label>[^\[\]/]+)\[(?P<instance>[^\[\]/]+)\]\[(?P<metric>[^\[\]/]+)\]"
    r"\.(?P<suffix>csv|png)$"
)


class ArtifactKind(enum.StrEnum):
    """File type of a per-instance artifact."""

    CSV = "csv"
    PNG = "png"


def period_folder(project_id: str, period: ReportingPeriod) -> str:
    """Return the folder holding every artifact of one project and period."""
    return (
        f"{project_id}/{period.year}/{period.data_range.value}/{period.label}"
    )


def report_name(project_id: str, period: ReportingPeriod) -> str:
    """Return the PDF report filename for one project and period."""
    return f"{period.label}-{period.data_range.value}-report-{project_id}.pdf"


def report_path(project_id: str, period: ReportingPeriod) -> str:
    """Return the full storage path of the PDF report."""
    return posixpath.join(
        period_folder(project_id, period), report_name(project_id, period)
    )


@dc.dataclass(frozen=True, slots=True)
class ArtifactKey:
    """Identity of the artifacts one export job writes."""

    project_id: str
    period: ReportingPeriod
    instance_name: str
    metric_short_name: str

    def filename(self, kind: ArtifactKind) -> str:
        """Return the artifact filename for ``kind``."""
        return (
            f"{self.period.label}[{self.instance_name}]"
            f"[{self.metric_short_name}].{kind.value}"
        )

    def path(self, kind: ArtifactKind) -> str:
        """Return the full storage path for ``kind``."""
        return posixpath.join(
            period_folder(self.project_id, self.period), self.filename(kind)
        )


@dc.dataclass(frozen=True, slots=True)
class ArtifactName:
    """Metadata recovered from an artifact filename."""

    path: str
    label: str
    instance_name: str
    metric_short_name: str
    kind: ArtifactKind

    @property
    def caption(self) -> str:
        """Return the ``[instance][metric]`` caption used on report pages."""
        return f"[{self.instance_name}][{self.metric_short_name}]"


def parse_artifact_name(path: str) -> ArtifactName | None:
    """Parse an artifact path, returning ``None`` for anything else.

    Examples
    --------
    >>> name = parse_artifact_name("p/2018/weekly/L/L[web-1][cpu_usage_time].png")
    >>> (name.instance_name, name.metric_short_name, name.kind.value)
    ('web-1', 'cpu_usage_time', 'png')

    """
    match = _ARTIFACT_NAME.match(posixpath.basename(path))
    if match is None:
        return None
    return ArtifactName(
        path=path,
        label=match["label"],
        instance_name=match["instance"],
        metric_short_name=match["metric"],
        kind=ArtifactKind(match["suffix"]),
    )
