"""Central level-based logger (standard library `logging`).

Env:
- LOG_LEVEL: DEBUG|INFO|WARNING|ERROR|CRITICAL (default: INFO)
- LOG_FORMAT: optional override of the record format
"""

from __future__ import annotations

import logging
import os
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def _level_from_env() -> int:
    raw = (os.getenv("LOG_LEVEL") or "INFO").upper().strip()
    level = getattr(logging, raw, logging.INFO)
    return level if isinstance(level, int) else logging.INFO


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a configured logger.

    The root logger is configured on the first call only (and not at all if
    the host application already attached handlers); later calls leave its
    level alone.
    """
    root = logging.getLogger()
    if not getattr(root, "_persist_configured", False):
        logging.basicConfig(
            level=_level_from_env(),
            format=os.getenv("LOG_FORMAT") or DEFAULT_FORMAT,
        )
        setattr(root, "_persist_configured", True)
    return logging.getLogger(name or "persist")
