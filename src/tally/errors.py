"""Parse error records and Rust-style colored diagnostic rendering."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from tally.source import SourceFile, Span


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"


# ANSI color codes
_COLORS = {
    Severity.ERROR: "\033[1;31m",    # bold red
    Severity.WARNING: "\033[1;33m",  # bold yellow
}
_BOLD = "\033[1m"
_BLUE = "\033[1;34m"
_RESET = "\033[0m"

# Extra guidance shown under a parse error, keyed by error code.
_NOTES = {
    "E201": "a newline ends a statement only after a name, a literal or a closing bracket",
    "E202": "bindings are declared as `var name = value` or `val name = value`",
    "E203": "call arguments that use an operator must be parenthesized: `println((a + b))`",
    "E206": "a statement starts with `var`, `val`, `fun`, a name, a literal or a sign",
}


@dataclass(frozen=True)
class DiagnosticLabel:
    """Points to a specific source location."""

    span: Span
    message: str = ""


@dataclass
class Diagnostic:
    """A single diagnostic message with labels and notes."""

    severity: Severity
    code: str
    message: str
    labels: list[DiagnosticLabel] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ParseError:
    """A syntax error recorded by the parser at a source offset."""

    offset: int
    message: str
    code: str = "E200"

    def to_diagnostic(self, filename: str = "<stdin>") -> Diagnostic:
        note = _NOTES.get(self.code)
        return Diagnostic(
            severity=Severity.ERROR,
            code=self.code,
            message=self.message,
            labels=[DiagnosticLabel(Span(filename, self.offset, self.offset + 1))],
            notes=[note] if note else [],
        )


class DiagnosticRenderer:
    """Renders diagnostics in Rust-style format with colors."""

    def __init__(self, *, color: bool = True) -> None:
        self.color = color
        self._sources: dict[str, SourceFile | None] = {}

    def _c(self, code: str) -> str:
        return code if self.color else ""

    def add_source(self, source: SourceFile) -> None:
        """Register in-memory source text so labels can show it."""
        self._sources[source.name] = source

    def _get_source(self, filename: str) -> SourceFile | None:
        """Load and cache a source file by name; None when it cannot be read."""
        if filename not in self._sources:
            path = Path(filename)
            try:
                source = SourceFile.from_path(path) if path.is_file() else None
            except OSError:
                source = None
            self._sources[filename] = source
        return self._sources[filename]

    def render(self, diag: Diagnostic) -> str:
        color = _COLORS[diag.severity]

        # Header: error[E201]: message
        lines = [
            f"{self._c(color)}{diag.severity.value}[{diag.code}]{self._c(_RESET)}"
            f"{self._c(_BOLD)}: {diag.message}{self._c(_RESET)}"
        ]
        for label in diag.labels:
            lines.extend(self._render_label(label, color))
        for note in diag.notes:
            lines.append(f"  {self._c(_BLUE)}={self._c(_RESET)} note: {note}")
        return "\n".join(lines)

    def _render_label(self, label: DiagnosticLabel, color: str) -> list[str]:
        span = label.span
        arrow = f"  {self._c(_BLUE)}-->{self._c(_RESET)}"
        bar = f"  {self._c(_BLUE)}   |{self._c(_RESET)}"

        source = self._get_source(span.file)
        if source is None:
            return [f"{arrow} {span.file}@{span.begin}"]

        line, col = source.location(span.begin)
        end_line, end_col = source.location(max(span.begin, span.end - 1))
        out = [
            f"{arrow} {span.file}:{line}:{col}",
            bar,
            f"  {self._c(_BLUE)}{line:>4} |{self._c(_RESET)} {source.line_at(line)}",
        ]
        if end_line == line:
            carets = "^" * max(1, end_col - col + 1)
            out.append(f"{bar} {' ' * (col - 1)}{self._c(color)}{carets}{self._c(_RESET)}")
        if label.message:
            out.append(f"{bar}   {self._c(color)}{label.message}{self._c(_RESET)}")
        return out


class CompileError(Exception):
    """Batch error carrying every diagnostic from one parse."""

    def __init__(self, diagnostics: list[Diagnostic]) -> None:
        self.diagnostics = diagnostics
        messages = [d.message for d in diagnostics]
        super().__init__(f"{len(diagnostics)} error(s): {'; '.join(messages)}")
