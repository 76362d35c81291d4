"""Loguru helpers for the CLI and embedding applications."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

_STDERR_FORMAT = "<dim>{time:HH:mm:ss.SSS}</dim> | <level>{level: <8}</level> | <level>{message}</level>"
_SINK_IDS: dict[str, int] = {}


def configure_logging(level: str = "INFO", log_file: str | Path | None = None) -> None:
    """Route rpcwire logs to stderr (and optionally a rotating file) at ``level``."""
    logger.remove()
    logger.add(sys.stderr, level=level, format=_STDERR_FORMAT)
    _SINK_IDS.clear()
    if log_file:
        ensure_rotating_log_file(Path(log_file), level=level)
    logger.enable("rpcwire")


def ensure_rotating_log_file(path: Path, level: str = "INFO") -> Path:
    """Ensure a rotating log sink for the given file path."""
    path = path.expanduser()
    key = str(path)
    if key in _SINK_IDS:
        return path
    path.parent.mkdir(parents=True, exist_ok=True)
    sink_id = logger.add(
        key,
        level=level,
        rotation="10 MB",
        retention="14 days",
        enqueue=True,
        encoding="utf-8",
        backtrace=False,
        diagnose=False,
    )
    _SINK_IDS[key] = sink_id
    return path
