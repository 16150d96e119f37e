"""Emit structured observability events for export and fan-out runs.

Usage
-----
>>> event_logger = ExportEventLogger()
>>> event_logger.log_job_started(job)

"""

from __future__ import annotations

import enum
import typing as typ

from stackreport.logging import get_logger, log_error, log_info, log_warning

if typ.TYPE_CHECKING:
    import datetime as dt

    from stackreport.export.fanout import FanOutSummary
    from stackreport.export.jobs import ExportJob

logger = get_logger(__name__)


class ExportEventType(enum.StrEnum):
    """Structured log event types for the export phase."""

    JOB_STARTED = "export.job.started"
    JOB_COMPLETED = "export.job.completed"
    JOB_SKIPPED = "export.job.skipped"
    JOB_FAILED = "export.job.failed"
    FANOUT_COMPLETED = "fanout.run.completed"
    DISPATCH_FAILED = "fanout.dispatch.failed"


class ExportEventLogger:
    """Emit structured export events via femtologging."""

    def log_job_started(self, job: ExportJob) -> None:
        """Log the start of one export job."""
        log_info(
            logger,
            "[%s] project=%s instance=%s metric=%s range=%s start=%s end=%s",
            ExportEventType.JOB_STARTED,
            job.project_id,
            job.instance_name,
            job.metric_type,
            job.data_range,
            job.interval_start.isoformat(),
            job.interval_end.isoformat(),
        )

    def log_job_completed(
        self, job: ExportJob, *, points: int, gaps: int, paths: tuple[str, ...]
    ) -> None:
        """Log a job that wrote its artifacts.

        Parameters
        ----------
        job
            The job that finished.
        points
            Number of grid points written.
        gaps
            Number of points without a sample.
        paths
            Storage paths of the written artifacts.

        """
        log_info(
            logger,
            "[%s] project=%s instance=%s metric=%s points=%d gaps=%d paths=%s",
            ExportEventType.JOB_COMPLETED,
            job.project_id,
            job.instance_name,
            job.metric_type,
            points,
            gaps,
            ",".join(paths),
        )

    def log_job_skipped(self, job: ExportJob) -> None:
        """Log a job that found no samples and wrote nothing."""
        log_warning(
            logger,
            "[%s] project=%s instance=%s metric=%s reason=no_data",
            ExportEventType.JOB_SKIPPED,
            job.project_id,
            job.instance_name,
            job.metric_type,
        )

    def log_job_failed(
        self, job: ExportJob, *, error: BaseException, duration: dt.timedelta
    ) -> None:
        """Log a job that raised before writing its artifacts."""
        log_error(
            logger,
            "[%s] project=%s instance=%s metric=%s duration_seconds=%.3f "
            "error_type=%s error_message=%s",
            ExportEventType.JOB_FAILED,
            job.project_id,
            job.instance_name,
            job.metric_type,
            duration.total_seconds(),
            type(error).__name__,
            str(error),
        )

    def log_dispatch_failed(
        self, *, project_id: str, stage: str, error: BaseException
    ) -> None:
        """Log a listing or dispatch failure that fan-out recorded and skipped."""
        log_error(
            logger,
            "[%s] project=%s stage=%s error_type=%s error_message=%s",
            ExportEventType.DISPATCH_FAILED,
            project_id,
            stage,
            type(error).__name__,
            str(error),
        )

    def log_fan_out_completed(self, summary: FanOutSummary) -> None:
        """Log the totals of a fan-out run."""
        log_info(
            logger,
            "[%s] range=%s label=%s projects=%d dispatched=%d failures=%d",
            ExportEventType.FANOUT_COMPLETED,
            summary.period.data_range,
            summary.period.label,
            len(summary.project_ids),
            len(summary.dispatched),
            len(summary.failures),
        )
