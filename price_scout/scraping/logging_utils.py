"""
Structured logging helpers for the discovery and pricing pipeline.
"""

from __future__ import annotations

import json
import logging
from typing import Any

MAX_FIELD_CHARS = 500


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Emit one structured log line as compact JSON.

    String fields are clipped so page excerpts never flood the log.
    """

    if not logger.isEnabledFor(level):
        return

    payload: dict[str, Any] = {"event": event}
    for key, value in fields.items():
        if isinstance(value, str) and len(value) > MAX_FIELD_CHARS:
            value = value[:MAX_FIELD_CHARS] + "..."
        payload[key] = value
    logger.log(level, json.dumps(payload, default=str, sort_keys=True))
