"""Write per-instance CSV and chart artifacts to an ArtifactStore."""

from __future__ import annotations

import asyncio
import typing as typ

from stackreport.artifacts.charts import render_chart
from stackreport.artifacts.paths import ArtifactKind
from stackreport.artifacts.tabular import render_csv

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from stackreport.artifacts.paths import ArtifactKey
    from stackreport.artifacts.store import ArtifactStore
    from stackreport.monitoring.catalogue import MetricFamily
    from stackreport.series.models import NormalizedPoint


class ArtifactWriter:
    """Render normalized series and persist them at deterministic paths.

    Writing is idempotent by path: rewriting the same key with the same
    points produces byte-identical CSV content at the same location.

    Parameters
    ----------
    store
        Storage backend receiving the artifacts.
    font_path
        Optional TrueType font used for chart text.

    """

    def __init__(self, store: ArtifactStore, *, font_path: Path | None = None) -> None:
        """Initialise the writer with its store and chart font."""
        self._store = store
        self._font_path = font_path

    async def write(
        self, points: cabc.Sequence[NormalizedPoint], key: ArtifactKey
    ) -> str:
        """Write the CSV artifact and return its path."""
        path = key.path(ArtifactKind.CSV)
        await self._store.write_bytes(path, render_csv(points).encode("utf-8"))
        return path

    async def write_chart(
        self,
        points: cabc.Sequence[NormalizedPoint],
        key: ArtifactKey,
        family: MetricFamily,
    ) -> str:
        """Render and write the PNG chart artifact and return its path."""
        path = key.path(ArtifactKind.PNG)
        png = await asyncio.to_thread(
            render_chart,
            points,
            family=family,
            data_range=key.period.data_range,
            font_path=self._font_path,
        )
        await self._store.write_bytes(path, png)
        return path
