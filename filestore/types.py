"""Common types for persisted records."""
from typing import Any, TypedDict


class Record(TypedDict):
    """One stored item: the original key is kept next to its value."""
    key: str
    value: Any
