"""
Structured logging helpers shared by the ingestion pipeline and HTTP layer.
"""

from __future__ import annotations

import json
import logging
import threading
from typing import Any


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Emit one structured log line as compact JSON.

    Ingestion logs from many worker threads at once, so every line carries
    the emitting thread's name.
    """

    if not logger.isEnabledFor(level):
        return
    payload = {"event": event, "thread": threading.current_thread().name, **fields}
    logger.log(level, json.dumps(payload, default=str, sort_keys=True))
