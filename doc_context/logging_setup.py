"""Logging configuration helpers for the MCP server process."""
from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional

DEFAULT_LOG_DIR = Path(os.getenv("DOC_CONTEXT_LOG_DIR", "logs"))
DEFAULT_LOG_FILE = os.getenv("DOC_CONTEXT_LOG_FILENAME", "latest-run.log")
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"


def _normalise_level(level: Optional[str | int]) -> int:
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        value = level.strip().upper()
        if value.isdigit():
            return int(value)
        mapping = logging.getLevelNamesMapping()
        if value in mapping:
            return mapping[value]
    return logging.INFO


def configure_logging(
    level: Optional[str | int] = None, log_dir: Optional[Path] = None
) -> Path:
    """Configure root logging to stream to stderr and a fresh file.

    Standard output is reserved for protocol frames exchanged with the host,
    so console output always goes to stderr. The log file is truncated on
    every call so that each server run starts with a clean slate.
    """

    log_level = _normalise_level(level)
    log_dir = log_dir or DEFAULT_LOG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / DEFAULT_LOG_FILE

    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)

    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stderr),
            logging.FileHandler(log_path, mode="w", encoding="utf-8"),
        ],
    )
    logging.getLogger(__name__).info("Server logs initialised at %s", log_path)
    return log_path
