"""Export job payloads exchanged between fan-out, the queue and the HTTP API.

An :class:`ExportJob` travels as a flat mapping of strings: the same fields
the ``POST /export`` endpoint accepts as a form and the ``export_metrics_job``
actor receives as its message argument.

Usage
-----
>>> job = ExportJob.from_form(fields)
>>> period = job.period(config.offset)
>>> job.to_form()["dataRange"]
'weekly'

"""

from __future__ import annotations

import datetime as dt
import typing as typ

import msgspec

from stackreport.common.time import format_rfc3339
from stackreport.export.errors import InvalidJobError
from stackreport.periods import DataRange, ReportingPeriod

if typ.TYPE_CHECKING:
    import collections.abc as cabc

AwareDatetime = typ.Annotated[dt.datetime, msgspec.Meta(tz=True)]


class ExportJob(msgspec.Struct, kw_only=True, frozen=True):
    """One (project, instance, metric) export over a reporting interval."""

    project_id: str = msgspec.field(name="projectID")
    metric_type: str = msgspec.field(name="metric")
    aligner: str
    filter: str
    instance_name: str = msgspec.field(name="instanceName")
    interval_start: AwareDatetime = msgspec.field(name="intervalStartTime")
    interval_end: AwareDatetime = msgspec.field(name="intervalEndTime")
    data_range: DataRange = msgspec.field(name="dataRange")

    @classmethod
    def for_period(
        cls,
        *,
        project_id: str,
        metric_type: str,
        aligner: str,
        filter_: str,
        instance_name: str,
        period: ReportingPeriod,
    ) -> ExportJob:
        """Build a job covering ``period``."""
        return cls(
            project_id=project_id,
            metric_type=metric_type,
            aligner=aligner,
            filter=filter_,
            instance_name=instance_name,
            interval_start=period.interval.start,
            interval_end=period.interval.end,
            data_range=period.data_range,
        )

    @classmethod
    def from_form(cls, fields: cabc.Mapping[str, str]) -> ExportJob:
        """Decode a job from its form fields.

        Raises
        ------
        InvalidJobError
            If a field is missing, malformed, or the interval is empty.

        """
        try:
            job = msgspec.convert(dict(fields), type=cls)
        except msgspec.ValidationError as exc:
            raise InvalidJobError.undecodable(str(exc)) from exc
        if job.interval_end <= job.interval_start:
            raise InvalidJobError.empty_interval()
        return job

    def to_form(self) -> dict[str, str]:
        """Return the job as form fields."""
        return {
            "projectID": self.project_id,
            "metric": self.metric_type,
            "aligner": self.aligner,
            "filter": self.filter,
            "instanceName": self.instance_name,
            "intervalStartTime": format_rfc3339(self.interval_start),
            "intervalEndTime": format_rfc3339(self.interval_end),
            "dataRange": self.data_range.value,
        }

    def period(self, offset: dt.tzinfo) -> ReportingPeriod:
        """Return the reporting period the job's interval describes."""
        return ReportingPeriod.from_bounds(
            self.data_range, self.interval_start, self.interval_end, offset
        )
