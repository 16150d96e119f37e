"""Export phase: fan out per-instance jobs and execute them.

Public API
----------
ExportJob
    Immutable job payload, encoded as form fields on the wire.
JobFanOut
    Lists instances per project and dispatches their jobs.
ExportService
    Fetches, normalizes and writes one job's artifacts.

The Dramatiq actor and its dispatcher live in :mod:`stackreport.actors`.
"""

from stackreport.export.errors import ExportError, FanOutError, InvalidJobError
from stackreport.export.fanout import (
    FanOutStage,
    FanOutSummary,
    JobDispatcher,
    JobFailure,
    JobFanOut,
    enumerate_project_jobs,
)
from stackreport.export.jobs import ExportJob
from stackreport.export.service import ExportOutcome, ExportService, ExportStatus

__all__ = [
    "ExportError",
    "ExportJob",
    "ExportOutcome",
    "ExportService",
    "ExportStatus",
    "FanOutError",
    "FanOutStage",
    "FanOutSummary",
    "InvalidJobError",
    "JobDispatcher",
    "JobFailure",
    "JobFanOut",
    "enumerate_project_jobs",
]
