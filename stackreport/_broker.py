"""Broker configuration helpers for Dramatiq actor setup.

Actors are declared at import time and bind to whichever broker is global at
that moment, so :func:`install_broker` runs before the actor definitions.

- ``STACKREPORT_BROKER_URL`` names a Redis (or Valkey) server; the HTTP
  runtime enqueues on it and ``dramatiq stackreport.actors`` workers consume
  from it.
- Test runs, and processes without a broker URL, get a ``StubBroker``.
  :func:`ensure_broker_configured` refuses to enqueue on or run from that
  stub unless ``STACKREPORT_ALLOW_STUB_BROKER`` is set or pytest is running.
"""

from __future__ import annotations

import os
import sys
import threading

import dramatiq
from dramatiq.brokers.stub import StubBroker

BROKER_URL_ENV = "STACKREPORT_BROKER_URL"

_BROKER_LOCK = threading.Lock()
_broker_checked = False


def _is_running_tests() -> bool:
    """Return True when the current process runs under pytest."""
    return "pytest" in sys.modules or any(
        key in os.environ
        for key in ["PYTEST_CURRENT_TEST", "PYTEST_XDIST_WORKER", "PYTEST_ADDOPTS"]
    )


def _should_use_stub_broker() -> bool:
    """Return True when a StubBroker is acceptable for actor execution.

    Either ``STACKREPORT_ALLOW_STUB_BROKER`` is truthy or the process is a
    test run.
    """
    allow_stub = os.environ.get("STACKREPORT_ALLOW_STUB_BROKER", "")
    return allow_stub.lower() in {"1", "true", "yes"} or _is_running_tests()


def broker_url_from_env() -> str | None:
    """Return the configured broker URL, or ``None`` when unset or blank."""
    url = os.environ.get(BROKER_URL_ENV, "").strip()
    return url or None


def build_broker(url: str | None) -> dramatiq.Broker:
    """Return a ``RedisBroker`` for ``url``, or a ``StubBroker`` without one.

    Building the Redis broker does not connect; the first enqueue or worker
    fetch does.
    """
    if url is None:
        return StubBroker()

    from dramatiq.brokers.redis import RedisBroker

    return RedisBroker(url=url)


def install_broker() -> dramatiq.Broker:
    """Build the process broker from the environment and make it global.

    Test runs always get a ``StubBroker`` so a developer's broker URL never
    leaks into them.
    """
    url = None if _is_running_tests() else broker_url_from_env()
    broker = build_broker(url)
    dramatiq.set_broker(broker)
    return broker


def ensure_broker_configured() -> None:
    """Ensure a usable Dramatiq broker before actor execution or dispatch.

    Thread-safe and idempotent: the check runs once per process.

    Raises
    ------
    RuntimeError
        If only a ``StubBroker`` is installed and stub brokers are not
        allowed.

    """
    global _broker_checked

    if _broker_checked:
        return

    with _BROKER_LOCK:
        if _broker_checked:
            return

        try:
            broker = dramatiq.get_broker()
        except (ImportError, LookupError):
            # ImportError: the default RabbitMQ client is not installed
            # LookupError: no broker has been configured yet
            broker = install_broker()
        if isinstance(broker, StubBroker) and not _should_use_stub_broker():
            message = (
                "No Dramatiq broker configured. "
                f"Set {BROKER_URL_ENV} to a Redis URL, or "
                "STACKREPORT_ALLOW_STUB_BROKER=1 for local/test runs."
            )
            raise RuntimeError(message)

        _broker_checked = True
