"""Exception types raised by the store.

Filesystem failures other than "not found" are not wrapped: the original
OSError reaches the caller of the operation that hit it.
"""

from __future__ import annotations


class PersistError(Exception):
    """Base class for store errors."""


class RecordDecodeError(PersistError, ValueError):
    """Stored bytes could not be decoded into a record."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Could not decode record at {path}: {reason}")
        self.path = path
        self.reason = reason


class InvalidEditResult(PersistError, ValueError):
    """An edit function returned None while that is not allowed."""

    def __init__(self, key: str):
        super().__init__(
            f"Edit function for key {key!r} returned None. Is that a mistake? "
            "To allow it, pass allow_undefined_edits=True (or set "
            "PERSIST_ALLOW_UNDEFINED_EDITS=1). To remove data, use delete_item() instead."
        )
        self.key = key


class ClosedError(PersistError, RuntimeError):
    """The engine was closed and refuses further operations."""

    def __init__(self, operation: str):
        super().__init__(
            f"This storage engine has been closed and cannot accept {operation}()."
        )
        self.operation = operation


class DirectoryInitError(PersistError, OSError):
    """The persistence directory could not be created."""

    def __init__(self, directory: str, reason: str):
        super().__init__(f"Could not create persistence directory {directory}: {reason}")
        self.directory = directory
