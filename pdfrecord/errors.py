"""Session error tracking.

The tracker keeps a single buffer of recoverable problems. The reader
flushes it before every page so each page record carries only the errors
raised while that page was processed; whatever is recorded before the first
page (outline build, font pre-scan) ends up in the meta block.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .utils import get_logger

__all__ = ["ErrorKind", "ErrorLevel", "ErrorEntry", "ErrorTracker"]

LOGGER = get_logger("pdfrecord.errors")


class ErrorKind(str, Enum):
    UNHANDLED_LINK_ACTION = "unhandled_link_action"
    OUTLINE_DEPTH_EXCEEDED = "outline_depth_exceeded"
    OUTLINE_CYCLE = "outline_cycle"
    PAGE_PROCESSING = "page_processing"
    FONT_WARNING = "font_warning"
    ANNOTATION = "annotation"


class ErrorLevel(str, Enum):
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class ErrorEntry:
    kind: ErrorKind
    module: str
    message: str
    level: ErrorLevel

    def to_record(self) -> dict[str, str]:
        return {
            "type": self.kind.value,
            "level": self.level.value,
            "module": self.module,
            "msg": self.message,
        }


class ErrorTracker:
    """Accumulates warnings and errors for the current page or session stage."""

    def __init__(self) -> None:
        self._entries: list[ErrorEntry] = []
        self._total = 0

    def log_warn(self, kind: ErrorKind, module: str, message: str) -> ErrorEntry:
        LOGGER.warning("[%s] %s: %s", module, kind.value, message)
        return self._add(ErrorEntry(kind, module, message, ErrorLevel.WARNING))

    def log_error(self, kind: ErrorKind, module: str, message: str) -> ErrorEntry:
        LOGGER.error("[%s] %s: %s", module, kind.value, message)
        return self._add(ErrorEntry(kind, module, message, ErrorLevel.ERROR))

    def _add(self, entry: ErrorEntry) -> ErrorEntry:
        self._entries.append(entry)
        self._total += 1
        return entry

    def flush_errors(self) -> None:
        self._entries.clear()

    def errors_reported(self) -> bool:
        return bool(self._entries)

    @property
    def entries(self) -> tuple[ErrorEntry, ...]:
        return tuple(self._entries)

    @property
    def total_reported(self) -> int:
        """Number of entries recorded over the whole session, flushed or not."""
        return self._total

    def to_record(self) -> list[dict[str, str]]:
        return [entry.to_record() for entry in self._entries]
