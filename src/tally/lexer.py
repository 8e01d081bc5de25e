"""Lexer for the Tally scripting language.

Produces tokens on demand from source text. Statement terminators are
inserted automatically: a newline (or end of input) that follows a token
which can end a statement is reported as a SEMICOLON.
"""

from __future__ import annotations

from collections.abc import Iterator

from tally.tokens import KEYWORDS, SEMICOLON_INSERTING, Token, TokenKind

_DIGITS = frozenset('0123456789')

_TWO_CHAR_OPERATORS: dict[str, TokenKind] = {
    '||': TokenKind.LOR,
    '&&': TokenKind.LAND,
    '==': TokenKind.EQL,
    '!=': TokenKind.NEQ,
    '<=': TokenKind.LEQ,
    '>=': TokenKind.GEQ,
}

_ONE_CHAR_OPERATORS: dict[str, TokenKind] = {
    '+': TokenKind.PLUS,
    '-': TokenKind.MINUS,
    '*': TokenKind.STAR,
    '/': TokenKind.SLASH,
    '%': TokenKind.PERCENT,
    '=': TokenKind.ASSIGN,
    '<': TokenKind.LSS,
    '>': TokenKind.GTR,
    '(': TokenKind.LPAREN,
    ')': TokenKind.RPAREN,
    '[': TokenKind.LBRACKET,
    ']': TokenKind.RBRACKET,
    '{': TokenKind.LBRACE,
    '}': TokenKind.RBRACE,
    ',': TokenKind.COMMA,
    ';': TokenKind.SEMICOLON,
    ':': TokenKind.COLON,
    '!': TokenKind.BANG,
}

_ESCAPES = {'n': '\n', 'r': '\r', 't': '\t', '\\': '\\', '"': '"', '0': '\0'}


class Lexer:
    """Tokenizes Tally source code one token at a time."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.pos = 0
        self.insert_semi = False

    def __iter__(self) -> Iterator[Token]:
        """Yield tokens until end of input; the EOF token is not yielded."""
        while True:
            tok = self.next_token()
            if tok.kind == TokenKind.EOF:
                return
            yield tok

    def lex_all(self) -> list[Token]:
        """Tokenize the remaining source, excluding EOF."""
        return list(self)

    def next_token(self) -> Token:
        """Scan and return the next token.

        Once the input is exhausted this returns EOF on every call.
        """
        self._skip_whitespace()
        start = self.pos
        ch = self._peek()

        if ch == '':
            if self.insert_semi:
                self.insert_semi = False
                return Token(TokenKind.SEMICOLON, "", start, start)
            return Token(TokenKind.EOF, "", start, start)

        if ch == '\n':
            # Only reachable while insert_semi is set.
            self.pos += 1
            self.insert_semi = False
            return Token(TokenKind.SEMICOLON, "\n", start, self.pos)

        if ch.isalpha() or ch == '_':
            tok = self._lex_identifier()
        elif ch in _DIGITS:
            tok = self._lex_number()
        elif ch == '"':
            tok = self._lex_string()
        else:
            tok = self._lex_operator_or_punct()
            if tok.kind == TokenKind.ILLEGAL:
                return tok

        self.insert_semi = tok.kind in SEMICOLON_INSERTING
        return tok

    # ── Helpers ───────────────────────────────────────────────────

    def _peek(self, offset: int = 0) -> str:
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return ''

    def _skip_whitespace(self) -> None:
        while True:
            ch = self._peek()
            if ch in (' ', '\t', '\r'):
                self.pos += 1
            elif ch == '\n' and not self.insert_semi:
                self.pos += 1
            elif ch == '/' and self._peek(1) == '/':
                self._skip_line_comment()
            else:
                return

    def _skip_line_comment(self) -> None:
        while self.pos < len(self.source) and self.source[self.pos] != '\n':
            self.pos += 1

    # ── Identifiers and Keywords ─────────────────────────────────

    def _lex_identifier(self) -> Token:
        start = self.pos
        while self.pos < len(self.source) and (
            self.source[self.pos].isalnum() or self.source[self.pos] == '_'
        ):
            self.pos += 1
        word = self.source[start:self.pos]
        return Token(KEYWORDS.get(word, TokenKind.IDENT), word, start, self.pos)

    # ── Numbers ──────────────────────────────────────────────────

    def _lex_number(self) -> Token:
        start = self.pos
        while self.pos < len(self.source) and (
            self.source[self.pos] in _DIGITS or self.source[self.pos] in '._'
        ):
            self.pos += 1
        return Token(TokenKind.INT, self.source[start:self.pos], start, self.pos)

    # ── Strings ──────────────────────────────────────────────────

    def _lex_string(self) -> Token:
        start = self.pos
        self.pos += 1  # skip opening "
        text = []
        while self.pos < len(self.source):
            ch = self.source[self.pos]
            if ch == '\n':
                break
            self.pos += 1
            if ch == '"':
                break
            if ch == '\\' and self.pos < len(self.source) and self.source[self.pos] != '\n':
                esc = self.source[self.pos]
                self.pos += 1
                text.append(_ESCAPES.get(esc, esc))
            else:
                text.append(ch)
        return Token(TokenKind.STRING, ''.join(text), start, self.pos)

    # ── Operators and Punctuation ────────────────────────────────

    def _lex_operator_or_punct(self) -> Token:
        start = self.pos
        two = self.source[self.pos:self.pos + 2]
        if two in _TWO_CHAR_OPERATORS:
            self.pos += 2
            return Token(_TWO_CHAR_OPERATORS[two], two, start, self.pos)

        ch = self.source[self.pos]
        self.pos += 1
        kind = _ONE_CHAR_OPERATORS.get(ch, TokenKind.ILLEGAL)
        return Token(kind, ch, start, self.pos)
