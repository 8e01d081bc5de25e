"""Token kinds and token representation for the Tally lexer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class TokenKind(Enum):
    # Special
    EOF = auto()
    ILLEGAL = auto()

    # Identifiers and literals
    IDENT = auto()
    INT = auto()
    STRING = auto()

    # Arithmetic
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()
    PERCENT = auto()

    ASSIGN = auto()

    # Logical and relational
    LOR = auto()
    LAND = auto()
    EQL = auto()
    NEQ = auto()
    LSS = auto()
    LEQ = auto()
    GTR = auto()
    GEQ = auto()

    # Punctuation
    LPAREN = auto()
    RPAREN = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    LBRACE = auto()
    RBRACE = auto()
    COMMA = auto()
    SEMICOLON = auto()
    COLON = auto()
    BANG = auto()

    # Keywords
    FUN = auto()
    VAR = auto()
    VAL = auto()
    IMPORT = auto()
    RETURN = auto()


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: str
    offset: int
    end: int

    @property
    def precedence(self) -> int:
        return PRECEDENCE.get(self.kind, LOWEST_PREC)


KEYWORDS: dict[str, TokenKind] = {
    "fun": TokenKind.FUN,
    "var": TokenKind.VAR,
    "val": TokenKind.VAL,
    "import": TokenKind.IMPORT,
    "return": TokenKind.RETURN,
}

LOWEST_PREC = 0

PRECEDENCE: dict[TokenKind, int] = {
    TokenKind.LOR: 1,
    TokenKind.LAND: 2,
    TokenKind.EQL: 3,
    TokenKind.NEQ: 3,
    TokenKind.LSS: 3,
    TokenKind.LEQ: 3,
    TokenKind.GTR: 3,
    TokenKind.GEQ: 3,
    TokenKind.PLUS: 4,
    TokenKind.MINUS: 4,
    TokenKind.STAR: 5,
    TokenKind.SLASH: 5,
    TokenKind.PERCENT: 5,
}

# A newline or end of input after one of these ends the statement.
SEMICOLON_INSERTING: frozenset[TokenKind] = frozenset({
    TokenKind.IDENT,
    TokenKind.INT,
    TokenKind.STRING,
    TokenKind.RPAREN,
    TokenKind.RBRACKET,
    TokenKind.RBRACE,
    TokenKind.RETURN,
})

OPERATOR_STRINGS: dict[TokenKind, str] = {
    TokenKind.PLUS: '+', TokenKind.MINUS: '-', TokenKind.STAR: '*',
    TokenKind.SLASH: '/', TokenKind.PERCENT: '%', TokenKind.ASSIGN: '=',
    TokenKind.LOR: '||', TokenKind.LAND: '&&',
    TokenKind.EQL: '==', TokenKind.NEQ: '!=',
    TokenKind.LSS: '<', TokenKind.LEQ: '<=',
    TokenKind.GTR: '>', TokenKind.GEQ: '>=',
    TokenKind.LPAREN: '(', TokenKind.RPAREN: ')',
    TokenKind.LBRACKET: '[', TokenKind.RBRACKET: ']',
    TokenKind.LBRACE: '{', TokenKind.RBRACE: '}',
    TokenKind.COMMA: ',', TokenKind.SEMICOLON: ';',
    TokenKind.COLON: ':', TokenKind.BANG: '!',
}
