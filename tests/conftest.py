"""Shared fixtures for the unit tests."""

from __future__ import annotations

import typing as typ

import pytest

from stackreport.monitoring.catalogue import MetricCatalogue
from tests.helpers.fakes import (
    FakeMonitoringClient,
    MemoryArtifactStore,
    RecordingDispatcher,
    RecordingTransport,
    weekly_period,
)

if typ.TYPE_CHECKING:
    from stackreport.periods import ReportingPeriod

_ENV_VARS = (
    "STACKREPORT_CONFIG_PATH",
    "STACKREPORT_GCP_ACCESS_TOKEN",
    "STACKREPORT_GCP_ACCESS_TOKEN_FILE",
    "STACKREPORT_MONITORING_ENDPOINT",
    "STACKREPORT_RESOURCE_MANAGER_ENDPOINT",
    "STACKREPORT_HOST",
    "STACKREPORT_PORT",
    "STACKREPORT_LOG_LEVEL",
    "STACKREPORT_BROKER_URL",
)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer environment variables out of the tests."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def catalogue() -> MetricCatalogue:
    """Return the default CPU + agent memory catalogue."""
    return MetricCatalogue()


@pytest.fixture
def period() -> ReportingPeriod:
    """Return the 2018-1028-1104 weekly period in UTC+9."""
    return weekly_period()


@pytest.fixture
def store() -> MemoryArtifactStore:
    """Return an empty in-memory artifact store."""
    return MemoryArtifactStore()


@pytest.fixture
def monitoring_client() -> FakeMonitoringClient:
    """Return a monitoring client with no scripted data."""
    return FakeMonitoringClient()


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    """Return a dispatcher that records every job."""
    return RecordingDispatcher()


@pytest.fixture
def transport() -> RecordingTransport:
    """Return a mail transport that records messages."""
    return RecordingTransport()
