"""Indented, aligned key/value reports for the command line."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any


def _byte_length(text: str) -> int:
    return len(text.encode("utf-8"))


class OutputBuilder:
    """Builds a report of a header, right-aligned properties and nested sections."""

    def __init__(self, header: Any = None) -> None:
        self._indent = 0
        self._header = None if header is None else str(header)
        self._properties: list[tuple[str, str]] = []
        self._children: list[str] = []

    def build(self) -> str:
        """Render the report; longer keys come first, all aligned on the colon."""
        width = max((_byte_length(key) for key, _ in self._properties), default=0)
        lines: list[str] = []

        if self._header is not None:
            lines.append(f"{'':{self._indent}}● {self._header}\n")

        pad = " " * (self._indent + 4)
        by_length = sorted(self._properties, key=lambda entry: _byte_length(entry[0]))
        for key, value in reversed(by_length):
            lines.append(f"{pad}{key:>{width}}: {value}\n")

        lines.extend(self._children)
        return "".join(lines)

    def property(self, key: Any, value: Any) -> None:
        """Add a key/value line."""
        self._properties.append((str(key), str(value)))

    def indent(self, width: int) -> None:
        """Indent this builder's output by ``width`` more spaces."""
        self._indent += width

    def section(self, header: Any, builder: Callable[[OutputBuilder], None]) -> None:
        """Add a child section, filled in by ``builder``, at the current indent."""
        child = OutputBuilder(header)
        child._indent = self._indent
        builder(child)
        self._children.append(child.build())