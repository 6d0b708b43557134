"""
Structured logging helpers for scraping workflows.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Emit one structured log line as compact JSON.
    """

    payload = {"event": event, **fields}
    logger.log(level, json.dumps(payload, default=str, sort_keys=True))


def format_run_line(message: str, *, now: datetime | None = None) -> str:
    """
    Prefix a run log message with its UTC wall-clock time, e.g. `[14:02:11] ...`.
    """

    moment = now or datetime.now(timezone.utc)
    return f"[{moment.strftime('%H:%M:%S')}] {message}"
