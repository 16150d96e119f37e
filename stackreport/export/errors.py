"""Errors specific to the export phase."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from stackreport.export.fanout import JobFailure


class ExportError(Exception):
    """Base class for export phase errors."""


class InvalidJobError(ExportError):
    """Raised when an export job payload cannot be decoded or is inconsistent."""

    @classmethod
    def undecodable(cls, detail: str) -> InvalidJobError:
        """Build an error for a payload that does not match the job schema."""
        return cls(f"invalid export job: {detail}")

    @classmethod
    def empty_interval(cls) -> InvalidJobError:
        """Build an error for an interval whose end does not follow its start."""
        return cls(
            "invalid export job: intervalEndTime must be after intervalStartTime"
        )

    @classmethod
    def unknown_metric(cls, metric_type: str) -> InvalidJobError:
        """Build an error for a metric that is not in the catalogue."""
        return cls(f"invalid export job: metric {metric_type!r} is not catalogued")


class FanOutError(ExportError):
    """Raised when one or more projects or jobs failed during fan-out.

    Parameters
    ----------
    failures
        Per-project or per-job failures accumulated by the run.

    Attributes
    ----------
    failures
        Immutable tuple of the failures that occurred.

    """

    failures: tuple[JobFailure, ...]

    def __init__(self, failures: cabc.Sequence[JobFailure]) -> None:
        """Initialise with the failures collected during fan-out."""
        self.failures = tuple(failures)
        projects = sorted({failure.project_id for failure in self.failures})
        message = (
            f"Export fan-out failed: {len(self.failures)} error(s) across "
            f"project(s) {', '.join(projects)}"
        )
        super().__init__(message)
