"""Structured logging helpers for the anomalyzer CLI."""

from __future__ import annotations

import json
import logging
import os
from typing import Any

JSON_LOGS_ENV = "ANOMALYZER_JSON_LOGS"


def json_logs_enabled(json_logs: bool | None = None) -> bool:
    """Explicit flag wins; otherwise read ``ANOMALYZER_JSON_LOGS``."""

    if json_logs is None:
        return os.getenv(JSON_LOGS_ENV, "false").strip().lower() in {"1", "true", "yes"}
    return json_logs


def configure_logging(level: str = "WARNING", json_logs: bool | None = None) -> None:
    """Configure root logging for command-line runs."""

    fmt = "%(message)s" if json_logs_enabled(json_logs) else "%(levelname)s:%(name)s:%(message)s"
    logging.basicConfig(level=getattr(logging, level.upper(), logging.WARNING), format=fmt)


def log_event(
    logger: logging.Logger,
    event: str,
    *,
    level: int = logging.INFO,
    json_logs: bool | None = None,
    **fields: Any,
) -> None:
    """Emit ``{"event": event, **fields}`` at ``level``, as JSON when enabled.

    Nothing is serialized when ``level`` is filtered out, so per-observation
    events stay cheap.
    """

    if not logger.isEnabledFor(level):
        return
    payload = {"event": event, **fields}
    if json_logs_enabled(json_logs):
        logger.log(level, json.dumps(payload, default=str, sort_keys=True))
    else:
        logger.log(level, payload)
