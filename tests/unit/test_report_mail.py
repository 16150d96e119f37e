"""Unit tests for report email delivery."""

from __future__ import annotations

import typing as typ
from email.message import EmailMessage

import pytest

from stackreport.artifacts import ArtifactNotFoundError, report_name, report_path
from stackreport.report import (
    Report,
    ReportDeliveryError,
    ReportMailer,
    SmtpMailTransport,
    report_subject,
)
from stackreport.report.mail import REPORT_BODY

if typ.TYPE_CHECKING:
    from stackreport.periods import ReportingPeriod
    from tests.helpers.fakes import MemoryArtifactStore, RecordingTransport

_SENDER = "Reporter <noreply@example.test>"


def _report(period: ReportingPeriod) -> Report:
    return Report(
        project_id="proj",
        period=period,
        name=report_name("proj", period),
        path=report_path("proj", period),
        instances=("web-1",),
    )


class TestReportMailer:
    """Tests for ``ReportMailer``."""

    @pytest.mark.asyncio
    async def test_sends_pdf_attachment(
        self,
        store: MemoryArtifactStore,
        transport: RecordingTransport,
        period: ReportingPeriod,
    ) -> None:
        """The stored PDF is attached under the report name."""
        report = _report(period)
        await store.write_bytes(report.path, b"%PDF-1.4 body")
        mailer = ReportMailer(
            store,
            transport,
            sender=_SENDER,
            recipients=("ops@example.test", "dev@example.test"),
        )

        assert await mailer.send(report) is True

        (message,) = transport.messages
        assert message["From"] == _SENDER
        assert message["To"] == "ops@example.test, dev@example.test"
        assert message["Subject"] == "Weekly report: proj"
        body = message.get_body(preferencelist=("plain",))
        assert body is not None
        assert body.get_content().strip() == REPORT_BODY
        (attachment,) = list(message.iter_attachments())
        assert attachment.get_content_type() == "application/pdf"
        assert attachment.get_filename() == "2018-1028-1104-weekly-report-proj.pdf"
        assert attachment.get_content() == b"%PDF-1.4 body"

    @pytest.mark.asyncio
    async def test_none_report_is_a_no_op(
        self, store: MemoryArtifactStore, transport: RecordingTransport
    ) -> None:
        """Nothing is sent when there is no report."""
        mailer = ReportMailer(
            store, transport, sender=_SENDER, recipients=("ops@example.test",)
        )

        assert await mailer.send(None) is False
        assert transport.messages == []

    @pytest.mark.asyncio
    async def test_requires_recipients(
        self,
        store: MemoryArtifactStore,
        transport: RecordingTransport,
        period: ReportingPeriod,
    ) -> None:
        """A report with nowhere to go is a delivery error."""
        mailer = ReportMailer(store, transport, sender=_SENDER, recipients=())

        with pytest.raises(ReportDeliveryError, match="no mail recipients"):
            await mailer.send(_report(period))

    @pytest.mark.asyncio
    async def test_missing_pdf(
        self,
        store: MemoryArtifactStore,
        transport: RecordingTransport,
        period: ReportingPeriod,
    ) -> None:
        """A report whose PDF vanished from the store is not sent."""
        mailer = ReportMailer(
            store, transport, sender=_SENDER, recipients=("ops@example.test",)
        )

        with pytest.raises(ArtifactNotFoundError):
            await mailer.send(_report(period))
        assert transport.messages == []

    def test_subject_names_cadence(self, period: ReportingPeriod) -> None:
        """Subjects carry the cadence and project."""
        assert report_subject(_report(period)) == "Weekly report: proj"


class TestSmtpMailTransport:
    """Tests for ``SmtpMailTransport``."""

    @pytest.mark.asyncio
    async def test_sends_through_smtp(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Messages are handed to an SMTP session at the configured relay."""
        sessions: list[dict[str, object]] = []

        class _FakeSMTP:
            def __init__(self, host: str, port: int, *, timeout: float) -> None:
                self.session: dict[str, object] = {
                    "host": host,
                    "port": port,
                    "timeout": timeout,
                }
                sessions.append(self.session)

            def __enter__(self) -> _FakeSMTP:
                return self

            def __exit__(self, *exc_info: object) -> None:
                self.session["closed"] = True

            def send_message(self, message: EmailMessage) -> None:
                self.session["subject"] = message["Subject"]

        monkeypatch.setattr("stackreport.report.mail.smtplib.SMTP", _FakeSMTP)
        message = EmailMessage()
        message["Subject"] = "Weekly report: proj"

        await SmtpMailTransport(host="relay", port=2525, timeout_s=5.0).send(message)

        assert sessions == [
            {
                "host": "relay",
                "port": 2525,
                "timeout": 5.0,
                "subject": "Weekly report: proj",
                "closed": True,
            }
        ]
