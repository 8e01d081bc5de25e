"""Tests for source locations and diagnostic rendering."""

from __future__ import annotations

from pathlib import Path

from tally.errors import (
    CompileError,
    Diagnostic,
    DiagnosticLabel,
    DiagnosticRenderer,
    ParseError,
    Severity,
)
from tally.source import SourceFile, Span


class TestSourceFile:
    def test_location_first_line(self):
        src = SourceFile("var x = 1\n")
        assert src.location(0) == (1, 1)
        assert src.location(4) == (1, 5)

    def test_location_after_newline(self):
        src = SourceFile("a\nbc\n")
        assert src.location(2) == (2, 1)
        assert src.location(3) == (2, 2)

    def test_location_is_clamped(self):
        src = SourceFile("ab")
        assert src.location(-5) == (1, 1)
        assert src.location(99) == (1, 3)

    def test_line_at(self):
        src = SourceFile("first\nsecond\n")
        assert src.line_at(2) == "second"
        assert src.line_at(3) == ""

    def test_only_newline_breaks_lines(self):
        src = SourceFile("x\x0by;\nvar ;\n")
        assert src.location(6) == (2, 1)
        assert src.line_at(1) == "x\x0by;"
        assert src.line_at(2) == "var ;"

    def test_crlf_line_text(self):
        src = SourceFile("a;\r\nb;\r\n")
        assert src.location(4) == (2, 1)
        assert src.line_at(2) == "b;"

    def test_span_text(self):
        src = SourceFile("var width = 6")
        assert src.span_text(Span("<stdin>", 4, 9)) == "width"

    def test_from_path(self, tmp_path: Path):
        path = tmp_path / "main.tly"
        path.write_text("println(1)\n")
        src = SourceFile.from_path(path)
        assert src.name == str(path)
        assert src.content == "println(1)\n"


class TestParseError:
    def test_to_diagnostic(self):
        diag = ParseError(4, "expected identifier, found ';'", "E202").to_diagnostic("a.tly")
        assert diag.severity == Severity.ERROR
        assert diag.code == "E202"
        assert diag.labels[0].span == Span("a.tly", 4, 5)


class TestDiagnosticRenderer:
    def test_plain_rendering(self):
        renderer = DiagnosticRenderer(color=False)
        renderer.add_source(SourceFile("var ;\n", "demo.tly"))
        diag = ParseError(4, "expected identifier, found ';'", "E202").to_diagnostic("demo.tly")
        assert renderer.render(diag) == (
            "error[E202]: expected identifier, found ';'\n"
            "  --> demo.tly:1:5\n"
            "     |\n"
            "     1 | var ;\n"
            "     |     ^\n"
            "  = note: bindings are declared as `var name = value` or `val name = value`"
        )

    def test_colored_rendering(self):
        renderer = DiagnosticRenderer(color=True)
        renderer.add_source(SourceFile("1 2;", "demo.tly"))
        out = renderer.render(ParseError(2, "expected ';'", "E201").to_diagnostic("demo.tly"))
        assert "\033[1;31m" in out
        assert "E201" in out

    def test_source_loaded_from_disk(self, tmp_path: Path):
        path = tmp_path / "bad.tly"
        path.write_text("x = 1\n)\n")
        renderer = DiagnosticRenderer(color=False)
        out = renderer.render(ParseError(6, "expected statement", "E206").to_diagnostic(str(path)))
        assert f"{path}:2:1" in out
        assert "   2 | )" in out

    def test_missing_source_falls_back_to_offset(self):
        renderer = DiagnosticRenderer(color=False)
        out = renderer.render(ParseError(7, "oops").to_diagnostic("nowhere.tly"))
        assert out.splitlines() == ["error[E200]: oops", "  --> nowhere.tly@7"]

    def test_label_message_and_warning(self):
        renderer = DiagnosticRenderer(color=False)
        renderer.add_source(SourceFile("var a = 1\n", "w.tly"))
        diag = Diagnostic(
            severity=Severity.WARNING,
            code="W001",
            message="unused binding",
            labels=[DiagnosticLabel(Span("w.tly", 4, 5), "never read")],
            notes=["bindings are global"],
        )
        assert renderer.render(diag).splitlines() == [
            "warning[W001]: unused binding",
            "  --> w.tly:1:5",
            "     |",
            "     1 | var a = 1",
            "     |     ^",
            "     |   never read",
            "  = note: bindings are global",
        ]


class TestCompileError:
    def test_message_counts_errors(self):
        diags = [
            ParseError(0, "first").to_diagnostic(),
            ParseError(3, "second").to_diagnostic(),
        ]
        err = CompileError(diags)
        assert err.diagnostics == diags
        assert str(err) == "2 error(s): first; second"
