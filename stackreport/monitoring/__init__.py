"""Cloud Monitoring access: metric catalogue, filters and REST client.

Public API
----------
HttpMonitoringClient
    httpx client implementing ``MonitoringClient`` and ``ProjectLister``.
BearerTokenAuth
    ``httpx.Auth`` fetching the access token per request.
MetricCatalogue
    Explicit set of primary and agent metrics exported per instance.
make_instance_filter / make_agent_memory_filter
    Per-instance filter expression builders.
"""

from stackreport.monitoring.auth import BearerTokenAuth
from stackreport.monitoring.catalogue import (
    AGENT_MEMORY_BYTES_USED,
    ALIGN_MEAN,
    ALIGN_RATE,
    CPU_USAGE_TIME,
    MetricCatalogue,
    MetricFamily,
    MetricSpec,
    metric_short_name,
)
from stackreport.monitoring.client import (
    HttpMonitoringClient,
    MonitoringAPIConfig,
    MonitoringClient,
    ProjectLister,
)
from stackreport.monitoring.errors import (
    MonitoringAPIError,
    MonitoringConfigError,
    MonitoringError,
    MonitoringResponseShapeError,
)
from stackreport.monitoring.filters import (
    make_agent_memory_filter,
    make_instance_filter,
    quote_filter_value,
)

__all__ = [
    "AGENT_MEMORY_BYTES_USED",
    "ALIGN_MEAN",
    "ALIGN_RATE",
    "BearerTokenAuth",
    "CPU_USAGE_TIME",
    "HttpMonitoringClient",
    "MetricCatalogue",
    "MetricFamily",
    "MetricSpec",
    "MonitoringAPIConfig",
    "MonitoringAPIError",
    "MonitoringClient",
    "MonitoringConfigError",
    "MonitoringError",
    "MonitoringResponseShapeError",
    "ProjectLister",
    "make_agent_memory_filter",
    "make_instance_filter",
    "metric_short_name",
    "quote_filter_value",
]
