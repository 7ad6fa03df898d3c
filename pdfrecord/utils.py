"""Utilities shared by pdfrecord modules."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator

def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.propagate = False
    return logger

def set_log_level(level: int) -> None:
    """Apply ``level`` to every ``pdfrecord`` logger created so far."""
    for name in list(logging.root.manager.loggerDict):
        if name == "pdfrecord" or name.startswith("pdfrecord."):
            logging.getLogger(name).setLevel(level)


@contextmanager
def time_block(logger: logging.Logger, message: str) -> Iterator[None]:
    """Context manager that logs the execution time of a code block."""
    start = datetime.now(tz=timezone.utc)
    logger.debug("Starting %s", message)
    try:
        yield
    finally:
        end = datetime.now(tz=timezone.utc)
        elapsed = (end - start).total_seconds()
        logger.info("%s completed in %.2fs", message, elapsed)

def decode_pdf_string(value: object | None) -> str | None:
    """Return ``value`` as text, decoding PDF byte strings when needed."""
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray)):
        try:
            return bytes(value).decode("utf-8")
        except UnicodeDecodeError:
            return bytes(value).decode("latin-1")
    return str(value)

def strip_name(value: object) -> str:
    raw = str(value)
    return raw[1:] if raw.startswith("/") else raw
