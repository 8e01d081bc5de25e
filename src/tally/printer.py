"""Debug dumps of token streams and syntax trees."""

from __future__ import annotations

from collections.abc import Iterable

from tally.ast_nodes import (
    BadDecl,
    BadExpr,
    BadStmt,
    BasicLit,
    BinaryExpr,
    BindingDecl,
    Ident,
    Node,
    UnaryExpr,
    iter_children,
)
from tally.tokens import OPERATOR_STRINGS, Token, TokenKind

_INDENT = ".   "

_VALUED_KINDS = frozenset({
    TokenKind.IDENT, TokenKind.INT, TokenKind.STRING, TokenKind.ILLEGAL,
})


def format_token(tok: Token) -> str:
    if tok.kind in _VALUED_KINDS:
        return f"({tok.kind.name}({tok.value!r}), {tok.offset})"
    return f"({tok.kind.name}, {tok.offset})"


def format_tokens(tokens: Iterable[Token]) -> str:
    """One ``(KIND, offset)`` line per token."""
    return "".join(format_token(tok) + "\n" for tok in tokens)


def format_tree(node: Node) -> str:
    """Render ``node`` as an indented, bracket-delimited tree."""
    lines: list[str] = []
    _dump(node, 0, lines)
    return "\n".join(lines) + "\n"


def _label(node: Node) -> str:
    if isinstance(node, BindingDecl):
        return "VarDecl" if node.mutable else "ValDecl"
    return type(node).__name__


def _dump(node: Node, depth: int, lines: list[str]) -> None:
    indent = _INDENT * depth
    match node:
        case Ident(name=name):
            lines.append(f"{indent}Ident {name}")
            return
        case BasicLit(token=tok):
            lines.append(f"{indent}BasicLit {tok.kind.name}({tok.value!r})")
            return
        case BadExpr() | BadStmt() | BadDecl():
            lines.append(f"{indent}{type(node).__name__}")
            return

    lines.append(f"{indent}{_label(node)}<{node.begin}, {node.end}> {{")
    match node:
        case UnaryExpr(op=op, operand=operand):
            lines.append(f"{indent}{_INDENT}{OPERATOR_STRINGS[op]}")
            _dump(operand, depth + 1, lines)
        case BinaryExpr(left=left, op=op, right=right):
            _dump(left, depth + 1, lines)
            lines.append(f"{indent}{_INDENT}{OPERATOR_STRINGS[op]}")
            _dump(right, depth + 1, lines)
        case _:
            for child in iter_children(node):
                _dump(child, depth + 1, lines)
    lines.append(f"{indent}}}")
