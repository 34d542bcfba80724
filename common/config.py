"""Environment-backed configuration.

A `.env` file in the working directory is loaded on import. Explicit
constructor arguments always take precedence over the values read here.
"""

from __future__ import annotations

import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


def env_str(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value


def env_flag(name: str, default: bool = False) -> bool:
    """Read a boolean flag (1/true/yes/on, case-insensitive)."""
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ValueError(f"Invalid boolean for {name}: {raw!r}")


def pick(explicit, fallback):
    """Return `explicit` unless it is None."""
    return fallback if explicit is None else explicit
