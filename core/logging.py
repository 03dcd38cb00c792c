"""Shared logging helpers."""

from __future__ import annotations

import logging
import os
from typing import Optional

_CONFIGURED = False
_DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def _level_from_env(default: int) -> int:
    raw = (os.getenv("LOG_LEVEL") or "").strip().upper()
    if not raw:
        return default
    level = logging.getLevelName(raw)
    return level if isinstance(level, int) else default


def setup_logging(level: int = logging.INFO, *, fmt: Optional[str] = None) -> None:
    """Ensure root logger is configured once."""
    global _CONFIGURED
    if _CONFIGURED:
        return
    logging.basicConfig(level=_level_from_env(level), format=fmt or _DEFAULT_FORMAT)
    _CONFIGURED = True


def get_logger(name: str, *, level: Optional[int] = None) -> logging.Logger:
    """Return configured logger for a module."""
    setup_logging()
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    return logger
