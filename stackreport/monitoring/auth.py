"""Bearer-token authentication for the Google REST APIs.

Access tokens expire, so the token is looked up on every request through a
provider callable rather than fixed when the client is built.

Usage
-----
>>> auth = BearerTokenAuth.from_file(Path("/var/run/secrets/gcp/token"))
>>> client = HttpMonitoringClient(config, auth=auth)

"""

from __future__ import annotations

import typing as typ

import httpx

from stackreport.monitoring.errors import MonitoringConfigError

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

__all__ = ["BearerTokenAuth"]


class BearerTokenAuth(httpx.Auth):
    """Set ``Authorization: Bearer <token>`` from ``token_provider``.

    Parameters
    ----------
    token_provider
        Called once per request; returns the current access token.

    """

    def __init__(self, token_provider: cabc.Callable[[], str]) -> None:
        """Store the provider consulted on each request."""
        self._token_provider = token_provider

    @classmethod
    def static(cls, token: str) -> BearerTokenAuth:
        """Return auth that always sends ``token``."""
        if not token.strip():
            raise MonitoringConfigError.missing_token()
        return cls(lambda: token)

    @classmethod
    def from_file(cls, path: Path) -> BearerTokenAuth:
        """Return auth that re-reads the token from ``path`` per request.

        Suits tokens refreshed on disk by a sidecar or credential helper.
        """

        def _read() -> str:
            try:
                token = path.read_text(encoding="utf-8").strip()
            except OSError as exc:
                raise MonitoringConfigError.unreadable_token_file(
                    str(path), str(exc)
                ) from exc
            if not token:
                raise MonitoringConfigError.unreadable_token_file(
                    str(path), "file is empty"
                )
            return token

        return cls(_read)

    def auth_flow(
        self, request: httpx.Request
    ) -> cabc.Generator[httpx.Request, httpx.Response, None]:
        """Attach the current token to ``request``."""
        request.headers["Authorization"] = f"Bearer {self._token_provider()}"
        yield request
