"""Application factory for the stackreport Falcon ASGI application.

Usage
-----
Create a health-only app::

    app = create_app()

Create a full app with trigger and export endpoints::

    deps = build_trigger_dependencies(config)
    app = create_app(deps)

"""

from __future__ import annotations

import typing as typ

import falcon.asgi

from stackreport.api.errors import (
    InvalidInputError,
    handle_invalid_input,
    handle_invalid_job,
    handle_monitoring_error,
)
from stackreport.api.health.resources import HealthResource, ReadyResource
from stackreport.api.middleware import ShutdownCloser
from stackreport.export.errors import InvalidJobError
from stackreport.monitoring.errors import MonitoringError

if typ.TYPE_CHECKING:
    from stackreport.api.resources import TriggerDependencies

__all__ = ["create_app"]


def create_app(
    dependencies: TriggerDependencies | None = None,
) -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    Parameters
    ----------
    dependencies
        Optional trigger dependencies. When ``None``, only ``/health`` and
        ``/ready`` are registered.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    """
    middleware = [] if dependencies is None else [ShutdownCloser(dependencies.closers)]
    app = falcon.asgi.App(middleware=middleware)

    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource(domain_enabled=dependencies is not None))

    if dependencies is not None:
        from stackreport.api.resources import (
            ExportResource,
            FanOutTriggerResource,
            ReportTriggerResource,
        )

        app.add_route(
            "/cron/{data_range}-report", FanOutTriggerResource(dependencies)
        )
        app.add_route(
            "/cron/{data_range}-report/send", ReportTriggerResource(dependencies)
        )
        app.add_route("/export", ExportResource(dependencies))

    app.add_error_handler(InvalidInputError, handle_invalid_input)
    app.add_error_handler(InvalidJobError, handle_invalid_job)
    app.add_error_handler(MonitoringError, handle_monitoring_error)

    return app
