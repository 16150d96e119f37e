"""Build the HTTP trigger dependencies from configuration.

Usage
-----
::

    from stackreport.api.factory import build_trigger_dependencies

    deps = build_trigger_dependencies(ReporterConfig.from_env())

"""

from __future__ import annotations

import typing as typ

from stackreport.api.resources import TriggerDependencies
from stackreport.export.fanout import JobFanOut
from stackreport.export.observability import ExportEventLogger
from stackreport.factory import (
    build_export_service,
    build_monitoring_client,
    build_report_service,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    import httpx

    from stackreport.config import ReporterConfig
    from stackreport.export.fanout import JobDispatcher
    from stackreport.monitoring.client import HttpMonitoringClient

__all__ = ["build_trigger_dependencies"]


def build_trigger_dependencies(
    config: ReporterConfig,
    *,
    client: HttpMonitoringClient | None = None,
    auth: httpx.Auth | None = None,
    dispatcher: JobDispatcher | None = None,
) -> TriggerDependencies:
    """Wire the fan-out, export and report services for the HTTP surface.

    Parameters
    ----------
    config
        Reporter configuration.
    client
        Monitoring client shared by fan-out, export and project discovery.
        When omitted one is built from the environment, owned by the
        returned dependencies and closed at app shutdown.
    auth
        Authentication for the built client, e.g. a refreshing
        ``httpx.Auth``; ignored when ``client`` is given.
    dispatcher
        Job dispatcher; defaults to the Dramatiq dispatcher.

    """
    if dispatcher is None:
        from stackreport.actors import DramatiqJobDispatcher

        dispatcher = DramatiqJobDispatcher()

    closers: tuple[cabc.Callable[[], cabc.Awaitable[None]], ...] = ()
    if client is None:
        client = build_monitoring_client(auth=auth)
        closers = (client.aclose,)
    return TriggerDependencies(
        config=config,
        project_lister=client,
        fan_out=JobFanOut(
            client,
            dispatcher,
            config.metrics,
            event_logger=ExportEventLogger(),
        ),
        export_service=build_export_service(config, client),
        report_service=build_report_service(config),
        closers=closers,
    )
