"""Local filesystem implementation of the byte store (async, via aiofiles)."""

from __future__ import annotations

import os
from typing import Optional

import aiofiles
import aiofiles.os

from common.logger import get_logger
from filestore.base import FileStoreBase


class LocalFileStore(FileStoreBase):
    """Plain files on the local disk. Writes go in place, not via rename."""

    async def read(self, path: str) -> Optional[bytes]:
        try:
            async with aiofiles.open(path, "rb") as f:
                return await f.read()
        except FileNotFoundError:
            return None

    async def write(self, path: str, data: bytes) -> None:
        async with aiofiles.open(path, "wb") as f:
            await f.write(data)

    async def delete(self, path: str) -> None:
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            get_logger(__name__).debug("filestore: delete of missing path=%s", path)

    async def list_entries(self, directory: str) -> list[str]:
        names = await aiofiles.os.listdir(directory)
        return [os.path.join(directory, name) for name in names]

    async def ensure_directory(self, directory: str) -> None:
        await aiofiles.os.makedirs(directory, exist_ok=True)
