"""RecordStore: `{key, value}` records, one file per key."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any, Optional

from common.errors import RecordDecodeError
from common.logger import get_logger
from filestore.base import FileStoreBase
from filestore.keys import KeyMapper
from filestore.local import LocalFileStore
from filestore.serializer import JsonSerializer, Serializer
from filestore.types import Record


def _raise_first(results: list) -> list:
    """Re-raise the first failure of a gather(return_exceptions=True)."""
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return results


class RecordStore:
    """Reads and writes records under one base directory.

    Holds only its collaborators; every call goes straight to the file store.
    """

    def __init__(
        self,
        base_dir: str,
        file_store: Optional[FileStoreBase] = None,
        serializer: Optional[Serializer] = None,
        key_mapper: Optional[KeyMapper] = None,
    ):
        self.base_dir = base_dir
        self.file_store = file_store or LocalFileStore()
        self.serializer = serializer or JsonSerializer()
        self.key_mapper = key_mapper or KeyMapper()

    def path_for(self, key: str) -> str:
        return self.key_mapper.location_for(self.base_dir, key)

    def _decode(self, path: str, raw: bytes) -> Record:
        try:
            record = self.serializer.loads(raw)
        except ValueError as e:
            raise RecordDecodeError(path, str(e)) from e
        if not isinstance(record, Mapping) or "value" not in record:
            raise RecordDecodeError(path, "not a {key, value} record")
        return record

    async def _load(self, path: str) -> Optional[Record]:
        raw = await self.file_store.read(path)
        if raw is None:
            return None
        return self._decode(path, raw)

    async def read(self, key: str, default: Any = None) -> Any:
        """Return the stored value for `key`, or `default` if absent."""
        record = await self._load(self.path_for(key))
        if record is None:
            return default
        return record["value"]

    async def write(self, key: str, value: Any) -> None:
        record: Record = {"key": key, "value": value}
        await self.file_store.write(self.path_for(key), self.serializer.dumps(record))

    async def delete(self, key: str) -> None:
        await self.file_store.delete(self.path_for(key))

    async def list_keys(self) -> set[str]:
        """Decode every entry in the directory and collect the original keys."""
        paths = await self.file_store.list_entries(self.base_dir)
        records = _raise_first(
            await asyncio.gather(*(self._load(path) for path in paths), return_exceptions=True)
        )
        keys = set()
        for path, record in zip(paths, records):
            if record is None:
                # removed between listing and reading
                continue
            if "key" not in record:
                raise RecordDecodeError(path, "record has no key")
            keys.add(record["key"])
        return keys

    async def clear(self) -> int:
        """Delete every entry in the directory, including foreign files.

        Returns the number of entries removed.
        """
        paths = await self.file_store.list_entries(self.base_dir)
        _raise_first(
            await asyncio.gather(
                *(self.file_store.delete(path) for path in paths), return_exceptions=True
            )
        )
        get_logger(__name__).debug("records: cleared dir=%s entries=%d", self.base_dir, len(paths))
        return len(paths)
