"""Per-instance artifacts: paths, rendering and storage.

Public API
----------
ArtifactKey
    Deterministic identity of one job's CSV and PNG artifacts.
ArtifactStore
    Storage port; ``FilesystemArtifactStore`` is the local adapter.
ArtifactWriter
    Renders and persists CSV and chart artifacts.
parse_artifact_name
    Recover instance and metric from an artifact filename.
"""

from stackreport.artifacts.filesystem_store import FilesystemArtifactStore
from stackreport.artifacts.paths import (
    ArtifactKey,
    ArtifactKind,
    ArtifactName,
    parse_artifact_name,
    period_folder,
    report_name,
    report_path,
)
from stackreport.artifacts.store import ArtifactNotFoundError, ArtifactStore
from stackreport.artifacts.tabular import CSV_HEADER, render_csv
from stackreport.artifacts.writer import ArtifactWriter

__all__ = [
    "CSV_HEADER",
    "ArtifactKey",
    "ArtifactKind",
    "ArtifactName",
    "ArtifactNotFoundError",
    "ArtifactStore",
    "ArtifactWriter",
    "FilesystemArtifactStore",
    "parse_artifact_name",
    "period_folder",
    "render_csv",
    "report_name",
    "report_path",
]
