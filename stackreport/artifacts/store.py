"""ArtifactStore protocol for persisting and listing report artifacts.

This module defines the storage port. Adapters implement it for a local
directory tree, a bucket, or anything else that can address objects by a
``/``-separated key.

The protocol is ``runtime_checkable`` so wiring code can assert that an
adapter satisfies it:

>>> from pathlib import Path
>>> from stackreport.artifacts.filesystem_store import FilesystemArtifactStore
>>> isinstance(FilesystemArtifactStore(Path(".")), ArtifactStore)
True

"""

from __future__ import annotations

import typing as typ


class ArtifactNotFoundError(LookupError):
    """Raised when reading a key that does not exist in the store."""

    def __init__(self, key: str) -> None:
        """Initialise with the missing key."""
        self.key = key
        super().__init__(f"artifact not found: {key}")


@typ.runtime_checkable
class ArtifactStore(typ.Protocol):
    """Protocol for artifact storage backends."""

    async def write_bytes(self, key: str, data: bytes) -> None:
        """Create or overwrite the object at ``key``."""
        ...

    async def read_bytes(self, key: str) -> bytes:
        """Return the object at ``key``.

        Raises
        ------
        ArtifactNotFoundError
            If no object exists at ``key``.

        """
        ...

    async def list_keys(self, folder: str) -> list[str]:
        """Return the keys of objects directly inside ``folder``."""
        ...
