"""AST node definitions for the Tally language.

Nodes are grouped into closed unions: ``Expr``, ``Stmt`` and ``Decl``, with
``File`` as the parse root. Every node exposes ``begin`` and ``end``, the
half-open source offset range it covers. Bad variants stand in for input
that failed to parse.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, fields
from typing import Union

from tally.tokens import Token, TokenKind

# ── Expressions ──────────────────────────────────────────────────


@dataclass(frozen=True)
class BadExpr:
    begin: int = 0
    end: int = 0


@dataclass(frozen=True)
class Ident:
    name: str
    pos: int

    @property
    def begin(self) -> int:
        return self.pos

    @property
    def end(self) -> int:
        return self.pos + len(self.name)


@dataclass(frozen=True)
class BasicLit:
    token: Token

    @property
    def pos(self) -> int:
        return self.token.offset

    @property
    def is_float(self) -> bool:
        return self.token.kind == TokenKind.INT and '.' in self.token.value

    @property
    def begin(self) -> int:
        return self.token.offset

    @property
    def end(self) -> int:
        return self.token.end


@dataclass(frozen=True)
class CallExpr:
    func: Expr
    lparen: int
    args: list[Expr]
    rparen: int

    @property
    def begin(self) -> int:
        return self.func.begin

    @property
    def end(self) -> int:
        return self.rparen + 1


@dataclass(frozen=True)
class UnaryExpr:
    op: TokenKind
    op_pos: int
    operand: Expr

    @property
    def begin(self) -> int:
        return self.op_pos

    @property
    def end(self) -> int:
        return self.operand.end


@dataclass(frozen=True)
class BinaryExpr:
    left: Expr
    op: TokenKind
    op_pos: int
    right: Expr

    @property
    def begin(self) -> int:
        return self.left.begin

    @property
    def end(self) -> int:
        return self.right.end


@dataclass(frozen=True)
class ParenExpr:
    lparen: int
    inner: Expr
    rparen: int

    @property
    def begin(self) -> int:
        return self.lparen

    @property
    def end(self) -> int:
        return self.rparen + 1


Expr = Union[BadExpr, Ident, BasicLit, CallExpr, UnaryExpr, BinaryExpr, ParenExpr]


# ── Declarations ─────────────────────────────────────────────────


@dataclass(frozen=True)
class BadDecl:
    begin: int = 0
    end: int = 0


@dataclass(frozen=True)
class BindingDecl:
    """``var name = value`` or ``val name = value``.

    ``mutable`` distinguishes ``var`` from ``val``; the evaluator does not
    enforce it.
    """

    keyword_pos: int
    name: Ident
    assign_pos: int | None
    value: Expr | None
    mutable: bool = True

    @property
    def begin(self) -> int:
        return self.keyword_pos

    @property
    def end(self) -> int:
        if self.value is not None:
            return self.value.end
        return max(self.name.end, self.keyword_pos + 3)


@dataclass(frozen=True)
class FunDecl:
    """Placeholder for ``fun`` declarations; the body is not retained."""

    fun_pos: int
    name: Ident
    end_pos: int

    @property
    def begin(self) -> int:
        return self.fun_pos

    @property
    def end(self) -> int:
        return self.end_pos


Decl = Union[BadDecl, BindingDecl, FunDecl]


# ── Statements ───────────────────────────────────────────────────


@dataclass(frozen=True)
class BadStmt:
    begin: int = 0
    end: int = 0


@dataclass(frozen=True)
class DeclStmt:
    decl: Decl

    @property
    def begin(self) -> int:
        return self.decl.begin

    @property
    def end(self) -> int:
        return self.decl.end


@dataclass(frozen=True)
class ExprStmt:
    expr: Expr

    @property
    def begin(self) -> int:
        return self.expr.begin

    @property
    def end(self) -> int:
        return self.expr.end


@dataclass(frozen=True)
class AssignStmt:
    target: Expr
    op_pos: int
    value: Expr

    @property
    def begin(self) -> int:
        return self.target.begin

    @property
    def end(self) -> int:
        return self.value.end


Stmt = Union[BadStmt, DeclStmt, ExprStmt, AssignStmt]


# ── File ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class File:
    stmts: list[Stmt]

    @property
    def begin(self) -> int:
        return self.stmts[0].begin if self.stmts else 0

    @property
    def end(self) -> int:
        return self.stmts[-1].end if self.stmts else 0


Node = Union[Expr, Stmt, Decl, File]

_NODE_TYPES = (
    BadExpr, Ident, BasicLit, CallExpr, UnaryExpr, BinaryExpr, ParenExpr,
    BadDecl, BindingDecl, FunDecl,
    BadStmt, DeclStmt, ExprStmt, AssignStmt,
    File,
)

_BAD_TYPES = (BadExpr, BadDecl, BadStmt)


def is_node(value: object) -> bool:
    return isinstance(value, _NODE_TYPES)


def is_bad(node: object) -> bool:
    return isinstance(node, _BAD_TYPES)


def iter_children(node: Node) -> Iterator[Node]:
    """Yield the direct child nodes of ``node`` in source order."""
    for f in fields(node):
        value = getattr(node, f.name)
        if isinstance(value, list):
            yield from (item for item in value if is_node(item))
        elif is_node(value):
            yield value


def walk(node: Node) -> Iterator[Node]:
    """Yield ``node`` and all of its descendants, pre-order."""
    yield node
    for child in iter_children(node):
        yield from walk(child)
