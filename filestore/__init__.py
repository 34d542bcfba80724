from filestore.base import FileStoreBase
from filestore.keys import KeyMapper
from filestore.local import LocalFileStore
from filestore.records import RecordStore
from filestore.serializer import EncryptedSerializer, JsonSerializer, Serializer
from filestore.types import Record

__all__ = [
    "FileStoreBase",
    "LocalFileStore",
    "KeyMapper",
    "RecordStore",
    "Record",
    "Serializer",
    "JsonSerializer",
    "EncryptedSerializer",
]
