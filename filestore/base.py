"""File store base class (abstract).

The record layer depends on this type, so alternative byte stores
(memory/object storage/etc.) can be injected without changing record or
engine logic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional


class FileStoreBase(ABC):
    @abstractmethod
    async def read(self, path: str) -> Optional[bytes]:
        """Read the bytes at `path`; None if nothing exists there."""
        ...

    @abstractmethod
    async def write(self, path: str, data: bytes) -> None:
        """Replace the contents at `path` with `data`."""
        ...

    @abstractmethod
    async def delete(self, path: str) -> None:
        """Remove `path`; succeeds if it is already missing."""
        ...

    @abstractmethod
    async def list_entries(self, directory: str) -> list[str]:
        """List full paths of every entry in `directory`."""
        ...

    @abstractmethod
    async def ensure_directory(self, directory: str) -> None:
        """Create `directory` and its parents; no-op if it exists."""
        ...
