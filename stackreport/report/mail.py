"""Deliver assembled reports by email.

Usage
-----
>>> transport = SmtpMailTransport(host="localhost", port=25)
>>> mailer = ReportMailer(
...     store, transport, sender="r <noreply@x>", recipients=("a@x",)
... )
>>> await mailer.send(report)

"""

from __future__ import annotations

import asyncio
import smtplib
import typing as typ
from email.message import EmailMessage

from stackreport.report.errors import ReportDeliveryError
from stackreport.report.observability import ReportEventLogger

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from stackreport.artifacts.store import ArtifactStore
    from stackreport.report.assembler import Report

REPORT_BODY = "You got report."


def report_subject(report: Report) -> str:
    """Return the email subject, e.g. ``Weekly report: my-project``."""
    return f"{report.period.data_range.value.title()} report: {report.project_id}"


class MailTransport(typ.Protocol):
    """Port for handing a composed message to a mail system."""

    async def send(self, message: EmailMessage) -> None:
        """Deliver ``message`` to its recipients."""
        ...


class SmtpMailTransport:
    """Send messages through an SMTP relay.

    Parameters
    ----------
    host, port
        Address of the relay.
    timeout_s
        Socket timeout for the SMTP session.

    """

    def __init__(self, *, host: str, port: int, timeout_s: float = 30.0) -> None:
        """Initialise the transport with its relay address."""
        self._host = host
        self._port = port
        self._timeout_s = timeout_s

    def _send_sync(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self._host, self._port, timeout=self._timeout_s) as smtp:
            smtp.send_message(message)

    async def send(self, message: EmailMessage) -> None:
        """Deliver ``message`` over SMTP."""
        await asyncio.to_thread(self._send_sync, message)


class ReportMailer:
    """Attach a stored report to an email and send it.

    Parameters
    ----------
    store
        Artifact store the report PDF is read back from.
    transport
        Mail transport used for delivery.
    sender
        ``From`` header value.
    recipients
        Addresses the report goes to.
    event_logger
        Optional structured event logger.

    """

    def __init__(  # noqa: PLR0913 - explicit collaborators
        self,
        store: ArtifactStore,
        transport: MailTransport,
        *,
        sender: str,
        recipients: cabc.Sequence[str],
        event_logger: ReportEventLogger | None = None,
    ) -> None:
        """Initialise the mailer with its store, transport and addresses."""
        self._store = store
        self._transport = transport
        self._sender = sender
        self._recipients = tuple(recipients)
        self._events = event_logger or ReportEventLogger()

    def compose(self, report: Report, pdf: bytes) -> EmailMessage:
        """Build the report email with ``pdf`` attached."""
        message = EmailMessage()
        message["From"] = self._sender
        message["To"] = ", ".join(self._recipients)
        message["Subject"] = report_subject(report)
        message.set_content(REPORT_BODY)
        message.add_attachment(
            pdf, maintype="application", subtype="pdf", filename=report.name
        )
        return message

    async def send(self, report: Report | None) -> bool:
        """Send ``report``; return ``False`` without sending when it is ``None``.

        Raises
        ------
        ReportDeliveryError
            If no recipients are configured.
        ArtifactNotFoundError
            If the report PDF is missing from the store.

        """
        if report is None:
            return False
        if not self._recipients:
            raise ReportDeliveryError.no_recipients()

        pdf = await self._store.read_bytes(report.path)
        await self._transport.send(self.compose(report, pdf))
        self._events.log_report_sent(report, recipients=len(self._recipients))
        return True
