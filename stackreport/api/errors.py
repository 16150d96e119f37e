"""Domain exceptions and Falcon error handlers for the API layer.

Usage
-----
Register error handlers on the Falcon app::

    app.add_error_handler(InvalidInputError, handle_invalid_input)
    app.add_error_handler(InvalidJobError, handle_invalid_job)
    app.add_error_handler(MonitoringError, handle_monitoring_error)

"""

from __future__ import annotations

import typing as typ

import falcon

from stackreport.logging import get_logger, log_warning

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from stackreport.export.errors import InvalidJobError
    from stackreport.monitoring.errors import MonitoringError

__all__ = [
    "InvalidInputError",
    "handle_invalid_input",
    "handle_invalid_job",
    "handle_monitoring_error",
]

logger = get_logger(__name__)


class InvalidInputError(Exception):
    """Raised for client validation errors that should map to HTTP 400.

    Attributes
    ----------
    reason
        Human-readable description of the validation failure.
    field
        Optional name of the input field that failed validation.

    """

    def __init__(self, reason: str, *, field: str | None = None) -> None:
        """Initialise with a validation reason and optional field name."""
        self.reason = reason
        self.field = field
        message = f"{field}: {reason}" if field is not None else reason
        super().__init__(message)


async def handle_invalid_input(
    _req: Request,
    resp: Response,
    ex: InvalidInputError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``InvalidInputError`` to an HTTP 400 JSON response."""
    resp.status = falcon.HTTP_400
    media: dict[str, str] = {
        "title": "Invalid input",
        "description": ex.reason,
    }
    if ex.field is not None:
        media["field"] = ex.field
    resp.media = media


async def handle_invalid_job(
    _req: Request,
    resp: Response,
    ex: InvalidJobError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``InvalidJobError`` to an HTTP 400 JSON response."""
    resp.status = falcon.HTTP_400
    resp.media = {"title": "Invalid export job", "description": str(ex)}


async def handle_monitoring_error(
    req: Request,
    resp: Response,
    ex: MonitoringError,
    _params: dict[str, typ.Any],
) -> None:
    """Map upstream monitoring failures to an HTTP 502 JSON response."""
    log_warning(
        logger,
        "Monitoring API failure on %s %s: %s",
        req.method,
        req.path,
        ex,
    )
    resp.status = falcon.HTTP_502
    resp.media = {"title": "Monitoring API error", "description": str(ex)}
