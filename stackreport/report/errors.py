"""Errors specific to report assembly and delivery."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc


class ReportingError(Exception):
    """Base class for report module errors."""


class ReportPairingError(ReportingError):
    """Raised when an instance does not have exactly one chart per metric.

    Attributes
    ----------
    project_id
        Project whose artifacts failed to pair.
    mismatches
        Instance name mapped to a description of its missing or unexpected
        charts.

    """

    def __init__(self, project_id: str, mismatches: cabc.Mapping[str, str]) -> None:
        """Initialise with the offending instances."""
        self.project_id = project_id
        self.mismatches = dict(mismatches)
        detail = "; ".join(
            f"{instance}: {reason}" for instance, reason in self.mismatches.items()
        )
        super().__init__(
            f"Cannot pair charts for project {project_id}: {detail}"
        )


class ReportDeliveryError(ReportingError):
    """Raised when a report email cannot be delivered."""

    @classmethod
    def no_recipients(cls) -> ReportDeliveryError:
        """Build an error for a report with an empty recipient list."""
        return cls("no mail recipients configured")


class ReportRunError(ReportingError):
    """Raised when assembling or sending failed for one or more projects.

    Parameters
    ----------
    failures
        Project ID mapped to the exception raised for it.

    """

    failures: dict[str, Exception]

    def __init__(self, failures: cabc.Mapping[str, Exception]) -> None:
        """Initialise with the per-project failures."""
        self.failures = dict(failures)
        count = len(self.failures)
        projects = ", ".join(sorted(self.failures))
        super().__init__(
            f"Report run failed: {count} project(s) with errors ({projects})"
        )
