"""Shared test helpers for the Tally test suite."""

from __future__ import annotations

import io

from tally.ast_nodes import File
from tally.evaluator import Evaluator
from tally.parser import parse_file


def parse_ok(source: str) -> File:
    """Parse source, asserting no syntax errors. Returns the File."""
    file, errors = parse_file(source, "<test>")
    assert not errors, [f"{e.code}@{e.offset}: {e.message}" for e in errors]
    return file


def run(source: str) -> tuple[float, str]:
    """Parse and evaluate source. Returns (result, printed output)."""
    out = io.StringIO()
    result = Evaluator(out).evaluate(parse_ok(source))
    return result, out.getvalue()


def output_of(source: str) -> str:
    """Parse and evaluate source, returning only what it printed."""
    return run(source)[1]
