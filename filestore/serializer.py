"""Pluggable record serialization."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any, Optional

from filestore.crypto import seal, unseal


class Serializer(ABC):
    """Turns a record mapping into bytes and back.

    `loads` raises ValueError (or a subclass) for data it cannot parse.
    """

    @abstractmethod
    def dumps(self, record: dict[str, Any]) -> bytes:
        ...

    @abstractmethod
    def loads(self, data: bytes) -> Any:
        ...


class JsonSerializer(Serializer):
    """UTF-8 JSON; the default on-disk format."""

    def __init__(self, indent: Optional[int] = None):
        self.indent = indent

    def dumps(self, record: dict[str, Any]) -> bytes:
        # ASCII escapes keep lone surrogates encodable
        return json.dumps(record, indent=self.indent).encode("utf-8")

    def loads(self, data: bytes) -> Any:
        # UnicodeDecodeError and JSONDecodeError are both ValueErrors.
        return json.loads(data.decode("utf-8"))


class EncryptedSerializer(Serializer):
    """Encrypts the output of another serializer with a password."""

    def __init__(self, password: str, inner: Optional[Serializer] = None):
        if not password:
            raise ValueError("EncryptedSerializer requires a non-empty password")
        self.password = password
        self.inner = inner or JsonSerializer()

    def dumps(self, record: dict[str, Any]) -> bytes:
        return seal(self.inner.dumps(record), self.password)

    def loads(self, data: bytes) -> Any:
        return self.inner.loads(unseal(data, self.password))
