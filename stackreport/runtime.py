"""stackreport runtime entrypoint for container deployments.

This module keeps the ``stackreport.runtime:create_app`` Granian entrypoint
stable and delegates construction to :func:`stackreport.api.app.create_app`.

When ``STACKREPORT_CONFIG_PATH`` is set, the runtime loads the configuration
and wires the trigger and export endpoints. Otherwise it starts in
health-only mode.

Configuration is driven by environment variables:

- ``STACKREPORT_HOST``: Bind address (default ``0.0.0.0``)
- ``STACKREPORT_PORT``: Listen port (default ``8080``)
- ``STACKREPORT_LOG_LEVEL``: Log level (default ``INFO``)
- ``STACKREPORT_CONFIG_PATH``: Reporter configuration file (optional;
  enables domain endpoints when set)
- ``STACKREPORT_GCP_ACCESS_TOKEN``: Bearer token for the Google APIs
  (required with ``STACKREPORT_CONFIG_PATH``)
- ``STACKREPORT_BROKER_URL``: Redis URL the fan-out trigger enqueues export
  jobs on (required for the fan-out trigger outside tests)

Run the service directly with ``python -m stackreport.runtime``.
"""

from __future__ import annotations

import os
import typing as typ

from stackreport.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_info,
    log_warning,
)

if typ.TYPE_CHECKING:
    import falcon.asgi

__all__ = ["create_app", "main"]

logger = get_logger(__name__)

# TCP port number range limits
_MIN_PORT = 1
_MAX_PORT = 65535


def _parse_port(port_str: str) -> int:
    """Parse and validate a port number string.

    Raises
    ------
    SystemExit
        If port_str is not a valid integer in range 1-65535.

    """
    try:
        port = int(port_str)
        if not (_MIN_PORT <= port <= _MAX_PORT):
            msg = f"port {port} outside valid range {_MIN_PORT}-{_MAX_PORT}"
            raise ValueError(msg)  # noqa: TRY301 - unify conversion and range errors
    except ValueError as exc:
        log_error(
            logger,
            "Invalid STACKREPORT_PORT value: %r (must be %d-%d): %s",
            port_str,
            _MIN_PORT,
            _MAX_PORT,
            exc,
        )
        raise SystemExit(1) from exc
    return port


def create_app() -> falcon.asgi.App:
    """Create the Falcon ASGI application from the environment.

    Returns
    -------
    falcon.asgi.App
        Full app when ``STACKREPORT_CONFIG_PATH`` is set, health-only
        otherwise.

    """
    from stackreport.api.app import create_app as _create_api_app

    config_path = os.environ.get("STACKREPORT_CONFIG_PATH", "").strip()
    if not config_path:
        return _create_api_app()

    from stackreport.api.factory import build_trigger_dependencies
    from stackreport.config import load_config

    config = load_config(config_path)
    log_info(
        logger,
        "Loaded configuration from %s (timezone=%+d, projects=%s)",
        config_path,
        config.timezone,
        ",".join(config.projects) or "<discovered>",
    )
    return _create_api_app(build_trigger_dependencies(config))


def main() -> None:
    """Start the stackreport runtime server using Granian.

    Reads ``STACKREPORT_HOST``, ``STACKREPORT_PORT`` and
    ``STACKREPORT_LOG_LEVEL`` from the environment and starts the ASGI
    server.
    """
    from granian import Granian
    from granian.constants import Interfaces

    host = os.environ.get("STACKREPORT_HOST", "0.0.0.0")  # noqa: S104 - bind all interfaces for container
    port = _parse_port(os.environ.get("STACKREPORT_PORT", "8080"))
    log_level_str = os.environ.get("STACKREPORT_LOG_LEVEL", "INFO")

    normalized_level, invalid_level = configure_logging(log_level_str)
    if invalid_level:
        log_warning(
            logger,
            "Invalid STACKREPORT_LOG_LEVEL %r, falling back to %s",
            log_level_str,
            normalized_level,
        )

    log_info(
        logger,
        "Starting stackreport runtime on %s:%d (log_level=%s)",
        host,
        port,
        normalized_level,
    )

    server = Granian(
        "stackreport.runtime:create_app",
        address=host,
        port=port,
        interface=Interfaces.ASGI,
        factory=True,
    )
    server.serve()


if __name__ == "__main__":
    main()
