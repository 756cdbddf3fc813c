"""
Output buffers for generated files.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager


class Artifact:
    """
    An append-only, indentation-aware text buffer for one generated file.

    Attributes:
        filename: File name the content is written to
        indent_width: Spaces per indentation level
    """

    def __init__(self, filename: str, indent_width: int = 2):
        self.filename = filename
        self.indent_width = indent_width
        self.level = 0
        self._lines: list[str] = []

    def __repr__(self) -> str:
        return f"Artifact({self.filename!r}, {len(self._lines)} lines)"

    def pad(self) -> str:
        """Indentation for the current level."""
        return " " * (self.indent_width * self.level)

    def line(self, text: str = "") -> None:
        """Append a line at the current indentation; empty lines stay empty."""
        self._lines.append(f"{self.pad()}{text}" if text else "")

    def block(self, text: str) -> None:
        """
        Append pre-rendered text whose first line goes at the current
        indentation and whose later lines are already positioned.
        """
        first, *rest = text.split("\n")
        self.line(first)
        self._lines.extend(rest)

    def extend(self, other: Artifact) -> None:
        """Append another buffer's lines verbatim."""
        self._lines.extend(other._lines)

    @contextmanager
    def indented(self) -> Iterator[None]:
        self.level += 1
        try:
            yield
        finally:
            self.level -= 1

    def getvalue(self) -> str:
        return "\n".join(self._lines) + "\n" if self._lines else ""
