"""Lifespan middleware releasing shared clients at ASGI shutdown.

Usage
-----
Register the middleware when creating the Falcon app::

    app = falcon.asgi.App(middleware=[ShutdownCloser(deps.closers)])

"""

from __future__ import annotations

import typing as typ

from stackreport.logging import get_logger, log_error

if typ.TYPE_CHECKING:
    import collections.abc as cabc

__all__ = ["ShutdownCloser"]

logger = get_logger(__name__)


class ShutdownCloser:
    """Await each closer once when the ASGI server shuts the app down.

    A failing closer is logged and the remaining closers still run.
    """

    def __init__(
        self, closers: cabc.Iterable[cabc.Callable[[], cabc.Awaitable[None]]]
    ) -> None:
        """Store the closers to run at shutdown."""
        self._closers = tuple(closers)

    async def process_shutdown(
        self, _scope: dict[str, typ.Any], _event: dict[str, typ.Any]
    ) -> None:
        """Run every closer, in registration order."""
        for close in self._closers:
            try:
                await close()
            except Exception as exc:  # noqa: BLE001 - remaining closers must still run
                log_error(logger, "Failed to close %r at shutdown: %s", close, exc)
