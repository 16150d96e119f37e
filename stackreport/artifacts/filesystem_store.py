"""Filesystem adapter for the ArtifactStore protocol.

Keys map onto paths below a base directory. Writes go to a temporary
sibling first and are moved into place with ``os.replace`` so readers never
observe a half-written artifact.

Usage
-----
>>> import asyncio
>>> from pathlib import Path
>>> store = FilesystemArtifactStore(Path("/var/lib/stackreport"))
>>> asyncio.run(store.write_bytes("p/2018/weekly/L/L[a][b].csv", b"..."))

"""

from __future__ import annotations

import asyncio
import os
import posixpath
import typing as typ
import uuid

from stackreport.artifacts.store import ArtifactNotFoundError

if typ.TYPE_CHECKING:
    from pathlib import Path


class FilesystemArtifactStore:
    """Store artifacts in a local directory tree.

    Parameters
    ----------
    base_path
        Root directory; keys are resolved relative to it.

    """

    def __init__(self, base_path: Path) -> None:
        """Initialise the store with its root directory."""
        self._base_path = base_path

    def _resolve(self, key: str) -> Path:
        parts = [part for part in key.split("/") if part]
        if not parts or any(part in {".", ".."} for part in parts):
            msg = f"invalid artifact key: {key!r}"
            raise ValueError(msg)
        return self._base_path.joinpath(*parts)

    def _write_sync(self, key: str, data: bytes) -> None:
        target = self._resolve(key)
        target.parent.mkdir(parents=True, exist_ok=True)
        scratch = target.with_name(f".{target.name}.{uuid.uuid4().hex}.tmp")
        try:
            scratch.write_bytes(data)
            os.replace(scratch, target)
        finally:
            scratch.unlink(missing_ok=True)

    def _read_sync(self, key: str) -> bytes:
        try:
            return self._resolve(key).read_bytes()
        except FileNotFoundError as exc:
            raise ArtifactNotFoundError(key) from exc

    def _list_sync(self, folder: str) -> list[str]:
        directory = self._resolve(folder)
        if not directory.is_dir():
            return []
        prefix = folder.strip("/")
        return sorted(
            posixpath.join(prefix, entry.name)
            for entry in directory.iterdir()
            if entry.is_file() and not entry.name.startswith(".")
        )

    async def write_bytes(self, key: str, data: bytes) -> None:
        """Atomically create or overwrite the file for ``key``."""
        await asyncio.to_thread(self._write_sync, key, data)

    async def read_bytes(self, key: str) -> bytes:
        """Return the file contents for ``key``."""
        return await asyncio.to_thread(self._read_sync, key)

    async def list_keys(self, folder: str) -> list[str]:
        """Return sorted keys of regular files directly inside ``folder``."""
        return await asyncio.to_thread(self._list_sync, folder)
