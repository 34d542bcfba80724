"""StorageEngine: durable key-value store with per-key ordered operations.

Construct the engine, then either `await engine.init()` or just start
calling operations; every operation waits for the persistence directory to
exist first. `await StorageEngine.create(...)` does both in one step.
"""

from __future__ import annotations

import asyncio
import inspect
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Union

from common.config import env_flag, env_str, pick
from common.errors import ClosedError, DirectoryInitError, InvalidEditResult
from common.logger import get_logger
from filestore.base import FileStoreBase
from filestore.keys import KeyMapper
from filestore.local import LocalFileStore
from filestore.records import RecordStore
from filestore.serializer import EncryptedSerializer, JsonSerializer, Serializer
from persist.queue import KeyedQueue

DEFAULT_PERSISTENCE_DIR = ".persist"

EditFunction = Callable[[Any], Union[Any, Awaitable[Any]]]


class EngineState(str, Enum):
    CREATED = "created"
    READY = "ready"
    CLOSED = "closed"


class StorageEngine:
    """One file per key under `persistence_dir`.

    Operations on the same key run one at a time in the order they were
    issued; operations on different keys run concurrently.
    """

    def __init__(
        self,
        persistence_dir: Optional[str] = None,
        *,
        serializer: Optional[Serializer] = None,
        password: Optional[str] = None,
        allow_undefined_edits: Optional[bool] = None,
        allow_reads_after_close: Optional[bool] = None,
        key_mapper: Optional[KeyMapper] = None,
        file_store: Optional[FileStoreBase] = None,
    ):
        """
        :param persistence_dir: directory holding the records
            (env PERSIST_DIR, default ./.persist).
        :param serializer: record codec, JSON by default.
        :param password: encrypt records at rest with this password
            (env PERSIST_PASSWORD). Ignored if `serializer` is given.
        :param allow_undefined_edits: let edit functions return None
            (env PERSIST_ALLOW_UNDEFINED_EDITS). Leaving this off guards
            against wiping data by forgetting to return from an edit function.
        :param allow_reads_after_close: keep get_item/list_keys working after
            close() (env PERSIST_ALLOW_READS_AFTER_CLOSE).
        """
        self.persistence_dir = (
            persistence_dir or env_str("PERSIST_DIR") or DEFAULT_PERSISTENCE_DIR
        )
        if serializer is None:
            password = password or env_str("PERSIST_PASSWORD")
            serializer = EncryptedSerializer(password) if password else JsonSerializer()
        self.allow_undefined_edits = pick(
            allow_undefined_edits, env_flag("PERSIST_ALLOW_UNDEFINED_EDITS")
        )
        self.allow_reads_after_close = pick(
            allow_reads_after_close, env_flag("PERSIST_ALLOW_READS_AFTER_CLOSE")
        )
        self.file_store = file_store or LocalFileStore()
        self.records = RecordStore(
            self.persistence_dir,
            file_store=self.file_store,
            serializer=serializer,
            key_mapper=key_mapper,
        )
        self._queue = KeyedQueue()
        self._ready: Optional[asyncio.Task] = None
        self._closed = False

    @classmethod
    async def create(cls, persistence_dir: Optional[str] = None, **options: Any) -> "StorageEngine":
        """Factory: create an engine and wait for its directory in one step."""
        engine = cls(persistence_dir, **options)
        await engine.init()
        return engine

    @property
    def state(self) -> EngineState:
        if self._closed:
            return EngineState.CLOSED
        ready = self._ready
        if ready is not None and ready.done() and not ready.cancelled() and ready.exception() is None:
            return EngineState.READY
        return EngineState.CREATED

    @property
    def pending_keys(self) -> list[str]:
        """Keys that currently have queued or running operations."""
        return self._queue.keys()

    async def init(self) -> "StorageEngine":
        """Create the persistence directory (once) and wait for it."""
        if self._ready is None:
            self._ready = asyncio.ensure_future(self._make_directory())
        await asyncio.shield(self._ready)
        return self

    async def _make_directory(self) -> None:
        log = get_logger(__name__)
        try:
            await self.file_store.ensure_directory(self.persistence_dir)
        except OSError as e:
            log.error("engine: directory init failed dir=%s error=%s", self.persistence_dir, e)
            raise DirectoryInitError(self.persistence_dir, str(e)) from e
        log.info("engine: ready dir=%s", self.persistence_dir)

    def _verify_not_closed(self, operation: str) -> None:
        if self._closed:
            raise ClosedError(operation)

    def _verify_readable(self, operation: str) -> None:
        if not self.allow_reads_after_close:
            self._verify_not_closed(operation)

    async def _enqueue(self, key: str, action: Callable[[], Awaitable[Any]]) -> Any:
        await self.init()
        return await self._queue.enqueue(key, action)

    async def get_item(self, key: str, default: Any = None) -> Any:
        """Get the value stored for `key`, or `default` if there is none.

        Ordered after every operation on `key` issued before it.
        """
        self._verify_readable("get_item")
        get_logger(__name__).debug("engine: get key=%s", key)
        return await self._enqueue(key, lambda: self.records.read(key, default))

    async def edit_item(self, key: str, edit_function: EditFunction, default: Any = None) -> Any:
        """Read-modify-write the value stored for `key`.

        `edit_function` receives the current value (or `default` if the key
        does not exist) and returns the new value, either directly or as an
        awaitable. The new value is written and returned.
        """
        self._verify_not_closed("edit_item")

        async def action() -> Any:
            current = await self.records.read(key, default)
            new_value = edit_function(current)
            if inspect.isawaitable(new_value):
                new_value = await new_value
            if new_value is None and not self.allow_undefined_edits:
                raise InvalidEditResult(key)
            await self.records.write(key, new_value)
            get_logger(__name__).debug("engine: edit ok key=%s", key)
            return new_value

        return await self._enqueue(key, action)

    async def delete_item(self, key: str) -> None:
        """Delete `key`. Deleting a key that does not exist is not an error."""
        self._verify_not_closed("delete_item")
        get_logger(__name__).debug("engine: delete key=%s", key)
        await self._enqueue(key, lambda: self.records.delete(key))

    async def list_keys(self) -> set[str]:
        """Return every key stored in the directory.

        Not ordered relative to queued per-key operations.
        """
        self._verify_readable("list_keys")
        await self.init()
        return await self.records.list_keys()

    async def clear(self) -> None:
        """Delete the database and start afresh.

        ALL files in the persistence directory are deleted, not only those
        created by this engine. Not ordered relative to per-key operations
        that are queued or running at the same time.
        """
        self._verify_not_closed("clear")
        await self.init()
        removed = await self.records.clear()
        get_logger(__name__).info("engine: cleared dir=%s entries=%d", self.persistence_dir, removed)

    async def close(self) -> None:
        """Refuse new operations and wait for all queued ones to finish.

        Nothing in flight is cancelled: a slow edit function delays the
        return of close() until it completes.
        """
        log = get_logger(__name__)
        self._closed = True
        log.info("engine: closing dir=%s pending_keys=%d", self.persistence_dir, len(self._queue))
        if self._ready is not None:
            # Let operations that were already waiting on the directory enqueue first.
            await asyncio.wait([self._ready])
        await self._queue.drain()
        log.info("engine: closed dir=%s", self.persistence_dir)
