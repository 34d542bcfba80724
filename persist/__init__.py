from common.errors import (
    ClosedError,
    DirectoryInitError,
    InvalidEditResult,
    PersistError,
    RecordDecodeError,
)
from persist.engine import EngineState, StorageEngine
from persist.queue import KeyedQueue

__all__ = [
    "StorageEngine",
    "EngineState",
    "KeyedQueue",
    "PersistError",
    "ClosedError",
    "DirectoryInitError",
    "InvalidEditResult",
    "RecordDecodeError",
]
