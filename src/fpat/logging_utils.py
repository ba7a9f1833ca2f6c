"""Structured logging helpers."""

from __future__ import annotations

import json
import logging
import os
import sys
from typing import Any


def _json_logs_enabled(json_logs: bool | None) -> bool:
    if json_logs is None:
        return os.getenv("FPAT_JSON_LOGS", "false").lower() == "true"
    return json_logs


def configure_logging(level: str = "WARNING", json_logs: bool | None = None) -> None:
    """Configure global logging on stderr. Respects FPAT_JSON_LOGS env override.

    stdout is reserved for the record stream, so handlers never write there.
    """

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(message)s" if _json_logs_enabled(json_logs) else "%(levelname)s:%(name)s:%(message)s",
        stream=sys.stderr,
    )


def log_event(
    logger: logging.Logger,
    event: str,
    *,
    level: int = logging.INFO,
    json_logs: bool | None = None,
    **fields: Any,
) -> None:
    """Emit a structured log event."""

    payload = {"event": event, **fields}
    if _json_logs_enabled(json_logs):
        logger.log(level, json.dumps(payload, default=str))
    else:
        logger.log(level, payload)
