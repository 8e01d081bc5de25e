"""Pygments lexer for the Tally scripting language."""

from __future__ import annotations

from pygments import highlight
from pygments.formatters import NullFormatter, TerminalFormatter
from pygments.lexer import RegexLexer, words
from pygments.token import (
    Comment,
    Error,
    Keyword,
    Name,
    Number,
    Operator,
    Punctuation,
    String,
    Text,
)


class TallyLexer(RegexLexer):
    """Pygments lexer for the Tally scripting language."""

    name = "Tally"
    aliases = ["tally"]
    filenames = ["*.tly"]
    mimetypes = ["text/x-tally"]

    tokens = {
        "root": [
            # Whitespace
            (r"\s+", Text),
            # Line comments (// ...)
            (r"//.*$", Comment.Single),
            # Strings
            (r'"', String, "string"),
            # Numbers
            (r"[0-9][0-9_]*\.[0-9._]*", Number.Float),
            (r"[0-9][0-9_]*", Number.Integer),
            # Declaration keywords
            (
                words(("var", "val", "fun"), prefix=r"\b", suffix=r"\b"),
                Keyword.Declaration,
            ),
            (
                words(("import", "return"), prefix=r"\b", suffix=r"\b"),
                Keyword,
            ),
            # Builtins
            (words(("print", "println"), prefix=r"\b", suffix=r"\b"), Name.Builtin),
            # Operators (multi-char before single-char)
            (r"\|\||&&|==|!=|<=|>=", Operator),
            (r"[+\-*/%<>=!]", Operator),
            # Identifiers
            (r"[A-Za-z_][A-Za-z0-9_]*", Name),
            # Punctuation
            (r"[(),;:\[\]{}]", Punctuation),
            # Anything else is illegal
            (r".", Error),
        ],
        # String state; ends at the closing quote or the end of the line
        "string": [
            (r'\\.', String.Escape),
            (r'[^"\\\n]+', String),
            (r'"', String, "#pop"),
            (r"\n", Text, "#pop"),
        ],
    }


def highlight_source(source: str, *, color: bool = True) -> str:
    """Render ``source`` for a terminal, with ANSI colors unless ``color`` is false."""
    formatter = TerminalFormatter() if color else NullFormatter()
    return highlight(source, TallyLexer(), formatter)
