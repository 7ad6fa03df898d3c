"""Outline (bookmark tree) extraction."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from .document import OutlineItem
from .errors import ErrorKind, ErrorTracker
from .links import LinkTarget, LinkTargetResolver, UnhandledAction, dest_action, parse_action, target_record
from .options import DEFAULT_MAX_OUTLINE_DEPTH
from .utils import get_logger

__all__ = ["Outline", "OutlineEntry", "OutlineTreeBuilder"]

LOGGER = get_logger("pdfrecord.outline")
MODULE = "outline"


@dataclass(slots=True)
class OutlineEntry:
    """A bookmark with its resolved target and its children, in document order."""

    title: str
    target: LinkTarget | None = None
    entries: list["OutlineEntry"] = field(default_factory=list)

    def to_record(self) -> dict[str, object]:
        record: dict[str, object] = {"title": self.title}
        if self.target is not None:
            record.update(target_record(self.target))
        if self.entries:
            record["entries"] = [entry.to_record() for entry in self.entries]
        return record


@dataclass(slots=True)
class Outline:
    entries: list[OutlineEntry] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)

    def to_record(self) -> list[dict[str, object]]:
        return [entry.to_record() for entry in self.entries]


class OutlineTreeBuilder:
    """Builds :class:`OutlineEntry` trees from engine outline items."""

    def __init__(
        self,
        resolver: LinkTargetResolver,
        tracker: ErrorTracker,
        *,
        max_depth: int = DEFAULT_MAX_OUTLINE_DEPTH,
    ) -> None:
        self.resolver = resolver
        self.tracker = tracker
        self.max_depth = max_depth
        self._seen: set[tuple[int, int]] = set()

    def build(self, items: Sequence[OutlineItem], level: int = 0) -> list[OutlineEntry]:
        if level == 0:
            # each top-level build is a fresh walk
            self._seen = set()
        entries: list[OutlineEntry] = []
        for item in items:
            if item.ref is not None:
                if item.ref in self._seen:
                    self.tracker.log_warn(
                        ErrorKind.OUTLINE_CYCLE,
                        MODULE,
                        "outline item %d %d R visited twice" % item.ref,
                    )
                    continue
                self._seen.add(item.ref)

            entry = OutlineEntry(title=item.title.strip())
            entries.append(entry)

            action = parse_action(item.action) if item.action is not None else dest_action(item.dest)
            if isinstance(action, UnhandledAction):
                self.tracker.log_warn(
                    ErrorKind.UNHANDLED_LINK_ACTION, MODULE, f"link action kind: {action.kind}"
                )
            elif action is not None:
                entry.target = self.resolver.resolve(action)

            if not item.has_kids():
                continue
            if level + 1 >= self.max_depth:
                self.tracker.log_warn(
                    ErrorKind.OUTLINE_DEPTH_EXCEEDED,
                    MODULE,
                    f"children of '{entry.title}' dropped below depth {self.max_depth}",
                )
                continue
            with item.expanded() as kids:
                entry.entries = self.build(kids, level + 1)
        return entries

    def build_outline(self, items: Sequence[OutlineItem]) -> Outline:
        outline = Outline(self.build(items))
        LOGGER.debug("Extracted %d top-level outline entries", len(outline))
        return outline
