from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, TextIO


def get_logger(name: str = "envrun") -> logging.Logger:
    return logging.getLogger(name)


def configure_logging(
    *,
    level: str = "info",
    format_name: str = "json",
    stream: TextIO | None = None,
    log_dir: Path | None = None,
    filename: str = "envrun.log",
) -> None:
    """Route envrun's records to ``stream`` or ``log_dir``.

    Without either, records are discarded: user-facing output belongs to the
    UI sink, and stderr belongs to the command being run.
    """
    normalized = level.strip().upper()
    level_value = getattr(logging, normalized, logging.INFO)
    if format_name == "json":
        formatter = logging.Formatter("%(message)s")
    else:
        formatter = logging.Formatter("%(levelname)s %(name)s %(message)s")

    logger = get_logger()
    logger.setLevel(level_value)
    logger.propagate = False
    if logger.handlers:
        return

    handler: logging.Handler
    if stream is not None:
        handler = logging.StreamHandler(stream)
    elif log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_dir / filename, encoding="utf-8")
    else:
        handler = logging.NullHandler()
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_event(
    logger: logging.Logger,
    event: str,
    *,
    level: int = logging.INFO,
    **fields: Any,
) -> None:
    payload = {"event": event, **fields}
    logger.log(level, json.dumps(payload, sort_keys=True, default=str))
