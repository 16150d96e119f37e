"""Emit structured observability events for report assembly and delivery."""

from __future__ import annotations

import enum
import typing as typ

from stackreport.logging import get_logger, log_error, log_info

if typ.TYPE_CHECKING:
    from stackreport.periods import ReportingPeriod
    from stackreport.report.assembler import Report

logger = get_logger(__name__)


class ReportEventType(enum.StrEnum):
    """Structured log event types for the report phase."""

    REPORT_ASSEMBLED = "report.assembled"
    REPORT_SKIPPED = "report.skipped"
    REPORT_SENT = "report.sent"
    REPORT_FAILED = "report.failed"


class ReportEventLogger:
    """Emit structured report events via femtologging."""

    def log_report_assembled(self, report: Report) -> None:
        """Log a persisted report and its page count."""
        log_info(
            logger,
            "[%s] project=%s label=%s pages=%d path=%s",
            ReportEventType.REPORT_ASSEMBLED,
            report.project_id,
            report.period.label,
            report.page_count,
            report.path,
        )

    def log_report_skipped(self, *, project_id: str, period: ReportingPeriod) -> None:
        """Log a period folder without chart artifacts."""
        log_info(
            logger,
            "[%s] project=%s label=%s reason=no_charts",
            ReportEventType.REPORT_SKIPPED,
            project_id,
            period.label,
        )

    def log_report_sent(self, report: Report, *, recipients: int) -> None:
        """Log a delivered report email."""
        log_info(
            logger,
            "[%s] project=%s name=%s recipients=%d",
            ReportEventType.REPORT_SENT,
            report.project_id,
            report.name,
            recipients,
        )

    def log_report_failed(
        self, *, project_id: str, period: ReportingPeriod, error: BaseException
    ) -> None:
        """Log a project whose report could not be assembled or sent."""
        log_error(
            logger,
            "[%s] project=%s label=%s error_type=%s error_message=%s",
            ReportEventType.REPORT_FAILED,
            project_id,
            period.label,
            type(error).__name__,
            str(error),
        )
