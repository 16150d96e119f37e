"""Metric catalogue: which metrics a report run exports.

The catalogue is an explicit configuration value handed to the fan-out and
the report assembler. ``primary`` metrics can enumerate instances by their
``instance_name`` label; ``agent`` metrics are reported by the monitoring
agent, are labelled differently, and reuse the instance list discovered for
the first primary metric.
"""

from __future__ import annotations

import enum

import msgspec

ALIGN_RATE = "ALIGN_RATE"
ALIGN_MEAN = "ALIGN_MEAN"

CPU_USAGE_TIME = "compute.googleapis.com/instance/cpu/usage_time"
AGENT_MEMORY_BYTES_USED = "agent.googleapis.com/memory/bytes_used"

_SHORT_NAME_PREFIXES = (
    "compute.googleapis.com/instance/",
    "agent.googleapis.com/",
)


class MetricFamily(enum.StrEnum):
    """Unit family of a metric, used for chart axis formatting."""

    CPU = "cpu"
    MEMORY = "memory"


def metric_short_name(metric_type: str) -> str:
    """Return the path-safe short name of a metric type.

    Examples
    --------
    >>> metric_short_name("compute.googleapis.com/instance/cpu/usage_time")
    'cpu_usage_time'
    >>> metric_short_name("agent.googleapis.com/memory/bytes_used")
    'memory_bytes_used'

    """
    title = metric_type
    for prefix in _SHORT_NAME_PREFIXES:
        title = title.replace(prefix, "")
    return title.replace("/", "_")


class MetricSpec(msgspec.Struct, kw_only=True, frozen=True):
    """One exported metric with the aligner applied by the API."""

    metric_type: str
    aligner: str
    family: MetricFamily

    @property
    def short_name(self) -> str:
        """Return the short name used in artifact filenames."""
        return metric_short_name(self.metric_type)


def _default_primary() -> tuple[MetricSpec, ...]:
    return (
        MetricSpec(
            metric_type=CPU_USAGE_TIME, aligner=ALIGN_RATE, family=MetricFamily.CPU
        ),
    )


def _default_agent() -> tuple[MetricSpec, ...]:
    # Sampled every 60 seconds in buffered/cached/free/used states.
    return (
        MetricSpec(
            metric_type=AGENT_MEMORY_BYTES_USED,
            aligner=ALIGN_MEAN,
            family=MetricFamily.MEMORY,
        ),
    )


class MetricCatalogue(msgspec.Struct, kw_only=True, frozen=True):
    """Primary and agent metrics exported for every instance.

    Attributes
    ----------
    primary
        Metrics whose series expose ``metric.labels.instance_name``.
    agent
        Agent metrics queried per instance using the primary instance list.

    """

    primary: tuple[MetricSpec, ...] = msgspec.field(default_factory=_default_primary)
    agent: tuple[MetricSpec, ...] = msgspec.field(default_factory=_default_agent)

    @property
    def all_metrics(self) -> tuple[MetricSpec, ...]:
        """Return primary then agent metrics, the order charts appear on a page."""
        return (*self.primary, *self.agent)

    def by_short_name(self) -> dict[str, MetricSpec]:
        """Index every metric by its artifact short name."""
        return {spec.short_name: spec for spec in self.all_metrics}

    def family_of(self, metric_type: str) -> MetricFamily:
        """Return the family of a catalogued metric type.

        Raises
        ------
        KeyError
            If ``metric_type`` is not in the catalogue.

        """
        for spec in self.all_metrics:
            if spec.metric_type == metric_type:
                return spec.family
        raise KeyError(metric_type)
