"""Build Cloud Monitoring filter expressions for per-instance queries."""

from __future__ import annotations

USED_MEMORY_STATE = "used"


def quote_filter_value(value: str) -> str:
    """Return ``value`` as a double-quoted filter string literal.

    Backslashes and double quotes are escaped so a label value can never
    terminate the literal early.

    Examples
    --------
    >>> quote_filter_value("web-1")
    '"web-1"'
    >>> quote_filter_value('we"ird')
    '"we\\\\"ird"'

    """
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def make_instance_filter(metric: str, instance_name: str) -> str:
    """Select one metric for the instance whose ``instance_name`` label matches."""
    return (
        f"metric.type={quote_filter_value(metric)} AND "
        f"metric.labels.instance_name={quote_filter_value(instance_name)}"
    )


def make_agent_memory_filter(metric: str, instance_name: str) -> str:
    """Select the agent memory metric in the ``used`` state for one instance.

    The agent reports buffered, cached, free and used memory as separate
    series and labels instances by their user-assigned ``name`` label rather
    than ``instance_name``.
    """
    return (
        f"metric.type={quote_filter_value(metric)} AND "
        f"metadata.user_labels.name={quote_filter_value(instance_name)} AND "
        f"metric.labels.state={quote_filter_value(USED_MEMORY_STATE)}"
    )


def make_metric_type_filter(metric: str) -> str:
    """Select every series of a metric type."""
    return f"metric.type={quote_filter_value(metric)}"
