"""Streaming JSON writer used to emit the ``{meta, pages}`` record.

Values are encoded with :mod:`json`; structure is written as it is produced
so page records never have to be held in memory together.
"""

from __future__ import annotations

import json
from typing import Any, TextIO

__all__ = ["RecordWriter"]


class RecordWriter:
    """Writes one JSON object incrementally to a text stream."""

    def __init__(self, stream: TextIO, *, indent: int | None = None) -> None:
        self.stream = stream
        self.indent = indent
        # one flag per open container: True once it holds a member
        self._has_members: list[bool] = []

    def _encode(self, value: Any) -> str:
        return json.dumps(value, ensure_ascii=False, indent=self.indent)

    def _separator(self) -> None:
        if not self._has_members:
            raise RuntimeError("No open record or array")
        if self._has_members[-1]:
            self.stream.write(", ")
        self._has_members[-1] = True

    def begin_record(self) -> None:
        self.stream.write("{")
        self._has_members.append(False)

    def end_record(self) -> None:
        self._close("}")

    def write_key(self, key: str) -> None:
        self._separator()
        self.stream.write(f"{self._encode(key)}: ")

    def write_key_value(self, key: str, value: Any) -> None:
        self.write_key(key)
        self.stream.write(self._encode(value))

    def begin_array(self, key: str | None = None) -> None:
        if key is not None:
            self.write_key(key)
        self.stream.write("[")
        self._has_members.append(False)

    def write_array_item(self, value: Any) -> None:
        self._separator()
        self.stream.write(self._encode(value))

    def end_array(self) -> None:
        self._close("]")

    def _close(self, marker: str) -> None:
        if not self._has_members:
            raise RuntimeError("No open record or array")
        self._has_members.pop()
        self.stream.write(marker)
        self.stream.flush()

    @property
    def depth(self) -> int:
        return len(self._has_members)
