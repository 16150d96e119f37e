"""Report phase: assemble per-period PDFs from charts and email them.

Public API
----------
ReportAssembler
    Groups stored charts by instance and persists the PDF report.
ReportMailer
    Reads a report back and sends it through a ``MailTransport``.
ReportService
    Runs assembly and delivery across projects, collecting failures.
"""

from stackreport.report.assembler import Report, ReportAssembler, group_charts
from stackreport.report.errors import (
    ReportDeliveryError,
    ReportingError,
    ReportPairingError,
    ReportRunError,
)
from stackreport.report.mail import (
    MailTransport,
    ReportMailer,
    SmtpMailTransport,
    report_subject,
)
from stackreport.report.pdf import ChartImage, ReportPage, render_report_pdf
from stackreport.report.service import ReportRunSummary, ReportService

__all__ = [
    "ChartImage",
    "MailTransport",
    "Report",
    "ReportAssembler",
    "ReportDeliveryError",
    "ReportMailer",
    "ReportPage",
    "ReportPairingError",
    "ReportRunError",
    "ReportRunSummary",
    "ReportService",
    "ReportingError",
    "SmtpMailTransport",
    "group_charts",
    "render_report_pdf",
    "report_subject",
]
