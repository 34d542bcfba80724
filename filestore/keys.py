"""Key -> file location mapping."""

from __future__ import annotations

import hashlib
import os

DEFAULT_ALGORITHM = "md5"


class KeyMapper:
    """Maps arbitrary keys to filesystem-safe names by hashing them.

    Two keys with the same digest share a location; with a cryptographic
    hash this is not expected to happen in practice.
    """

    def __init__(self, algorithm: str = DEFAULT_ALGORITHM):
        if algorithm not in hashlib.algorithms_available:
            raise ValueError(f"Unsupported hash algorithm: {algorithm}")
        self.algorithm = algorithm

    def file_name(self, key: str) -> str:
        # surrogatepass: any str, even one holding lone surrogates, hashes
        return hashlib.new(self.algorithm, key.encode("utf-8", "surrogatepass")).hexdigest()

    def location_for(self, base_dir: str, key: str) -> str:
        return os.path.join(base_dir, self.file_name(key))
