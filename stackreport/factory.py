"""Build the export and report services from configuration.

The HTTP runtime and the Dramatiq actors share these builders so both
surfaces wire the same collaborators.

Usage
-----
>>> config = ReporterConfig.from_env()
>>> client = build_monitoring_client()
>>> service = build_export_service(config, client)

"""

from __future__ import annotations

import typing as typ

from stackreport.artifacts import ArtifactWriter, FilesystemArtifactStore
from stackreport.export.observability import ExportEventLogger
from stackreport.export.service import ExportService
from stackreport.monitoring import HttpMonitoringClient, MonitoringAPIConfig
from stackreport.report import (
    ReportAssembler,
    ReportMailer,
    ReportService,
    SmtpMailTransport,
)
from stackreport.report.observability import ReportEventLogger

if typ.TYPE_CHECKING:
    import httpx

    from stackreport.artifacts import ArtifactStore
    from stackreport.config import ReporterConfig
    from stackreport.monitoring import MonitoringClient, ProjectLister
    from stackreport.report import MailTransport

__all__ = [
    "build_artifact_store",
    "build_export_service",
    "build_monitoring_client",
    "build_report_service",
    "resolve_project_ids",
]


def build_artifact_store(config: ReporterConfig) -> ArtifactStore:
    """Return the artifact store rooted at ``config.destination``."""
    return FilesystemArtifactStore(config.destination_path)


def build_monitoring_client(
    api_config: MonitoringAPIConfig | None = None,
    *,
    auth: httpx.Auth | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> HttpMonitoringClient:
    """Return a monitoring client configured from the environment by default.

    A custom ``auth`` replaces the environment credentials, so none are
    required then.
    """
    resolved = api_config or MonitoringAPIConfig.from_env(
        require_credentials=auth is None
    )
    return HttpMonitoringClient(resolved, auth=auth, http_client=http_client)


def build_export_service(
    config: ReporterConfig,
    client: MonitoringClient,
    *,
    store: ArtifactStore | None = None,
) -> ExportService:
    """Return an export service writing to the configured artifact store."""
    writer = ArtifactWriter(
        store or build_artifact_store(config), font_path=config.font
    )
    return ExportService(
        client,
        writer,
        catalogue=config.metrics,
        offset=config.offset,
        event_logger=ExportEventLogger(),
    )


def build_report_service(
    config: ReporterConfig,
    *,
    store: ArtifactStore | None = None,
    transport: MailTransport | None = None,
) -> ReportService:
    """Return a report service that mails through the configured SMTP relay."""
    resolved_store = store or build_artifact_store(config)
    event_logger = ReportEventLogger()
    assembler = ReportAssembler(
        resolved_store, config.metrics, event_logger=event_logger
    )
    mailer = ReportMailer(
        resolved_store,
        transport or SmtpMailTransport(host=config.smtp_host, port=config.smtp_port),
        sender=config.mail_sender,
        recipients=config.recipients,
        event_logger=event_logger,
    )
    return ReportService(assembler, mailer, event_logger=event_logger)


async def resolve_project_ids(
    config: ReporterConfig, lister: ProjectLister
) -> list[str]:
    """Return the configured projects, discovering them when none are listed."""
    if config.projects:
        return list(config.projects)
    return await lister.list_projects()
