"""Source text representation and offset-to-position mapping for diagnostics."""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Span:
    """A half-open ``[begin, end)`` range of offsets within a source file."""

    file: str
    begin: int
    end: int

    def __str__(self) -> str:
        return f"{self.file}:{self.begin}"


class SourceFile:
    """Source text with line access for diagnostics."""

    def __init__(self, content: str, name: str = "<stdin>") -> None:
        self.name = name
        self.content = content
        # only '\n' breaks lines, matching the line-start table below
        self.lines = [line.removesuffix('\r') for line in content.split('\n')]
        self._line_starts = [0]
        for i, ch in enumerate(content):
            if ch == '\n':
                self._line_starts.append(i + 1)

    @classmethod
    def from_path(cls, path: Path) -> SourceFile:
        return cls(path.read_text(), str(path))

    def location(self, offset: int) -> tuple[int, int]:
        """Return the 1-indexed (line, column) of an offset."""
        offset = max(0, min(offset, len(self.content)))
        line = bisect_right(self._line_starts, offset)
        col = offset - self._line_starts[line - 1] + 1
        return line, col

    def line_at(self, n: int) -> str:
        """Return the 1-indexed line, or empty string if out of range."""
        if 1 <= n <= len(self.lines):
            return self.lines[n - 1]
        return ""

    def span_text(self, span: Span) -> str:
        """Extract the text covered by a span."""
        return self.content[span.begin:span.end]
