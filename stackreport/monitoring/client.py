"""HTTP client for the Cloud Monitoring and Resource Manager REST APIs.

Credential acquisition happens outside this module. The client is given an
``httpx.Auth`` (by default :class:`BearerTokenAuth` over a static token or a
token file re-read per request) or a pre-configured ``httpx.AsyncClient``.

Usage
-----
>>> config = MonitoringAPIConfig.from_env()
>>> client = HttpMonitoringClient(config)
>>> names = await client.list_instance_names("my-project", CPU_USAGE_TIME, interval)
>>> samples = await client.fetch_samples(
...     "my-project", filter_=flt, aligner="ALIGN_RATE", period=period
... )
>>> await client.aclose()

"""

from __future__ import annotations

import dataclasses
import json
import os
import typing as typ
from pathlib import Path

import httpx

from stackreport.common.time import format_rfc3339, parse_rfc3339
from stackreport.logging import get_logger, log_debug
from stackreport.monitoring.auth import BearerTokenAuth
from stackreport.monitoring.errors import (
    MonitoringAPIError,
    MonitoringConfigError,
    MonitoringResponseShapeError,
)
from stackreport.monitoring.filters import make_metric_type_filter
from stackreport.series.models import Sample

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from stackreport.periods import ReportingPeriod
    from stackreport.series.models import Interval

logger = get_logger(__name__)

_DEFAULT_MONITORING_ENDPOINT = "https://monitoring.googleapis.com/v3"
_DEFAULT_RESOURCE_MANAGER_ENDPOINT = "https://cloudresourcemanager.googleapis.com/v1"
_DEFAULT_TIMEOUT_S = 30.0
_HTTP_ERROR_STATUS_THRESHOLD = 400
_INSTANCE_NAME_LABEL = "instance_name"
_ACTIVE_STATE = "ACTIVE"


class MonitoringClient(typ.Protocol):
    """Port for querying per-instance metric samples."""

    async def list_instance_names(
        self, project_id: str, metric_type: str, interval: Interval
    ) -> list[str]:
        """Return the instance names observed for a metric in the interval."""
        ...

    async def fetch_samples(
        self,
        project_id: str,
        *,
        filter_: str,
        aligner: str,
        period: ReportingPeriod,
    ) -> list[Sample]:
        """Return aligned samples of the first matching series, latest first."""
        ...


class ProjectLister(typ.Protocol):
    """Port for discovering the projects a run covers."""

    async def list_projects(self) -> list[str]:
        """Return the IDs of all visible projects."""
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class MonitoringAPIConfig:
    """Connection settings for the Google REST APIs."""

    access_token: str = ""
    access_token_file: Path | None = None
    monitoring_endpoint: str = _DEFAULT_MONITORING_ENDPOINT
    resource_manager_endpoint: str = _DEFAULT_RESOURCE_MANAGER_ENDPOINT
    timeout_s: float = _DEFAULT_TIMEOUT_S

    @classmethod
    def from_env(cls, *, require_credentials: bool = True) -> MonitoringAPIConfig:
        """Build configuration from environment variables.

        Reads ``STACKREPORT_GCP_ACCESS_TOKEN`` or
        ``STACKREPORT_GCP_ACCESS_TOKEN_FILE`` (one is required unless
        ``require_credentials`` is false) and the optional
        ``STACKREPORT_MONITORING_ENDPOINT`` and
        ``STACKREPORT_RESOURCE_MANAGER_ENDPOINT`` overrides.

        Raises
        ------
        MonitoringConfigError
            If credentials are required and neither variable is set.

        """
        token = os.environ.get("STACKREPORT_GCP_ACCESS_TOKEN", "").strip()
        token_file = os.environ.get("STACKREPORT_GCP_ACCESS_TOKEN_FILE", "").strip()
        if require_credentials and not (token or token_file):
            raise MonitoringConfigError.missing_token()
        return cls(
            access_token=token,
            access_token_file=Path(token_file) if token_file else None,
            monitoring_endpoint=os.environ.get(
                "STACKREPORT_MONITORING_ENDPOINT", _DEFAULT_MONITORING_ENDPOINT
            ),
            resource_manager_endpoint=os.environ.get(
                "STACKREPORT_RESOURCE_MANAGER_ENDPOINT",
                _DEFAULT_RESOURCE_MANAGER_ENDPOINT,
            ),
        )

    def build_auth(self) -> BearerTokenAuth:
        """Return bearer auth, preferring the refreshable token file."""
        if self.access_token_file is not None:
            return BearerTokenAuth.from_file(self.access_token_file)
        return BearerTokenAuth.static(self.access_token)


def _point_value(value: object) -> float | None:
    if not isinstance(value, dict):
        return None
    value_dict = typ.cast("dict[str, object]", value)
    double_value = value_dict.get("doubleValue")
    if isinstance(double_value, int | float):
        return float(double_value)
    # int64 values are JSON strings in the REST representation.
    int_value = value_dict.get("int64Value")
    if isinstance(int_value, str | int):
        return float(int_value)
    return None


def _parse_point(point: object) -> Sample:
    if not isinstance(point, dict):
        raise MonitoringResponseShapeError.missing("points[]")
    point_dict = typ.cast("dict[str, object]", point)
    interval = point_dict.get("interval")
    if not isinstance(interval, dict):
        raise MonitoringResponseShapeError.missing("points[].interval")
    end_time = typ.cast("dict[str, object]", interval).get("endTime")
    if not isinstance(end_time, str):
        raise MonitoringResponseShapeError.missing("points[].interval.endTime")
    return Sample(
        timestamp=parse_rfc3339(end_time),
        value=_point_value(point_dict.get("value")),
    )


def _series_instance_name(series: object) -> str | None:
    if not isinstance(series, dict):
        return None
    metric = typ.cast("dict[str, object]", series).get("metric")
    if not isinstance(metric, dict):
        return None
    labels = typ.cast("dict[str, object]", metric).get("labels")
    if not isinstance(labels, dict):
        return None
    name = typ.cast("dict[str, object]", labels).get(_INSTANCE_NAME_LABEL)
    return name if isinstance(name, str) and name else None


class HttpMonitoringClient:
    """httpx implementation of ``MonitoringClient`` and ``ProjectLister``.

    Parameters
    ----------
    config
        Endpoint and token configuration.
    auth
        Request authentication; defaults to :meth:`MonitoringAPIConfig.build_auth`.
        Pass any ``httpx.Auth`` to plug in refreshing credentials.
    http_client
        Optional ``httpx.AsyncClient`` for testing. When omitted the
        instance creates and owns its own client.

    """

    def __init__(
        self,
        config: MonitoringAPIConfig,
        *,
        auth: httpx.Auth | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client with configuration."""
        self._config = config
        self._auth = auth or config.build_auth()
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=config.timeout_s)

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def list_projects(self) -> list[str]:
        """Return the IDs of every active project visible to the token."""
        url = f"{self._config.resource_manager_endpoint}/projects"
        project_ids: list[str] = []
        async for page in self._pages(url, {}):
            projects = page.get("projects", [])
            if not isinstance(projects, list):
                raise MonitoringResponseShapeError.missing("projects")
            for project in projects:
                if not isinstance(project, dict):
                    continue
                project_dict = typ.cast("dict[str, object]", project)
                state = project_dict.get("lifecycleState", _ACTIVE_STATE)
                project_id = project_dict.get("projectId")
                if state == _ACTIVE_STATE and isinstance(project_id, str):
                    project_ids.append(project_id)
        return project_ids

    async def list_instance_names(
        self, project_id: str, metric_type: str, interval: Interval
    ) -> list[str]:
        """Return distinct instance names reporting ``metric_type``.

        Names keep the order in which the API first returned them.
        """
        params = {
            "filter": make_metric_type_filter(metric_type),
            "interval.startTime": format_rfc3339(interval.start),
            "interval.endTime": format_rfc3339(interval.end),
            "view": "HEADERS",
        }
        names: dict[str, None] = {}
        async for page in self._pages(self._time_series_url(project_id), params):
            for series in self._time_series(page):
                name = _series_instance_name(series)
                if name is not None:
                    names.setdefault(name, None)
        log_debug(
            logger,
            "Found %d instance(s) for %s in project %s",
            len(names),
            metric_type,
            project_id,
        )
        return list(names)

    async def fetch_samples(
        self,
        project_id: str,
        *,
        filter_: str,
        aligner: str,
        period: ReportingPeriod,
    ) -> list[Sample]:
        """Return the points of the first matching series, latest first.

        An empty list means the query matched no series or no points.
        """
        interval = period.interval
        params = {
            "filter": filter_,
            "interval.startTime": format_rfc3339(interval.start),
            "interval.endTime": format_rfc3339(interval.end),
            "aggregation.alignmentPeriod": period.data_range.alignment_period,
            "aggregation.perSeriesAligner": aligner,
        }
        page = await self._get_json(self._time_series_url(project_id), params)
        series_list = self._time_series(page)
        if not series_list:
            return []

        first = series_list[0]
        if not isinstance(first, dict):
            raise MonitoringResponseShapeError.missing("timeSeries[0]")
        points = typ.cast("dict[str, object]", first).get("points", [])
        if not isinstance(points, list):
            raise MonitoringResponseShapeError.missing("timeSeries[0].points")
        return [_parse_point(point) for point in points]

    def _time_series_url(self, project_id: str) -> str:
        return f"{self._config.monitoring_endpoint}/projects/{project_id}/timeSeries"

    @staticmethod
    def _time_series(page: dict[str, object]) -> list[object]:
        series = page.get("timeSeries", [])
        if not isinstance(series, list):
            raise MonitoringResponseShapeError.missing("timeSeries")
        return typ.cast("list[object]", series)

    async def _pages(
        self, url: str, params: dict[str, str]
    ) -> cabc.AsyncIterator[dict[str, object]]:
        query = dict(params)
        while True:
            page = await self._get_json(url, query)
            yield page
            token = page.get("nextPageToken")
            if not isinstance(token, str) or not token:
                return
            query["pageToken"] = token

    async def _get_json(self, url: str, params: dict[str, str]) -> dict[str, object]:
        try:
            response = await self._client.get(url, params=params, auth=self._auth)
        except httpx.TimeoutException as exc:
            raise MonitoringAPIError.timeout(url) from exc
        except httpx.RequestError as exc:
            raise MonitoringAPIError.network_error(url, str(exc)) from exc

        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise MonitoringAPIError.http_error(url, response.status_code)

        try:
            data = response.json()
        except json.JSONDecodeError as exc:
            raise MonitoringResponseShapeError.invalid_json(url) from exc
        if not isinstance(data, dict):
            raise MonitoringResponseShapeError.invalid_json(url)
        return typ.cast("dict[str, object]", data)
