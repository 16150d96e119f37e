"""Liveness and readiness probes.

The probes touch neither the artifact store nor the monitoring API, so they
are registered even when the app runs without domain dependencies.
"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

__all__ = ["HealthResource", "ReadyResource"]


class HealthResource:
    """Liveness probe returning ``{"status": "ok"}``."""

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /health requests."""
        resp.media = {"status": "ok"}
        resp.status = HTTPStatus.OK


class ReadyResource:
    """Readiness probe returning ``{"status": "ready"}``.

    Parameters
    ----------
    domain_enabled
        Whether the trigger and export routes are registered; reported so
        operators can tell a health-only deployment apart.

    """

    def __init__(self, *, domain_enabled: bool = False) -> None:
        """Record whether domain routes are available."""
        self._domain_enabled = domain_enabled

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /ready requests."""
        resp.media = {"status": "ready", "domain": self._domain_enabled}
        resp.status = HTTPStatus.OK
