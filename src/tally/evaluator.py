"""Tree-walking evaluator for Tally.

Every node evaluates to a float. Anything that cannot produce a value (an
unbound name, a Bad node, an unsupported operator, a call to something other
than a builtin) evaluates to NaN and execution carries on with the next
statement.
"""

from __future__ import annotations

import math
import sys
from typing import TextIO

from tally.ast_nodes import (
    AssignStmt,
    BadDecl,
    BadExpr,
    BadStmt,
    BasicLit,
    BinaryExpr,
    BindingDecl,
    CallExpr,
    Decl,
    DeclStmt,
    Expr,
    ExprStmt,
    File,
    FunDecl,
    Ident,
    ParenExpr,
    Stmt,
    UnaryExpr,
)
from tally.tokens import TokenKind

NAN = math.nan

BUILTINS = ("print", "println")


def format_number(value: float) -> str:
    """Format a value the way ``print`` writes it.

    Every finite integral value prints in full as an integer, however
    large; other values use the shortest round-tripping ``repr``.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    if value.is_integer():
        if value == 0 and math.copysign(1.0, value) < 0:
            return "-0"
        return str(int(value))
    return repr(value)


class Environment:
    """A flat mapping from binding names to values."""

    def __init__(self) -> None:
        self._bindings: dict[str, float] = {}

    def get(self, name: str) -> float | None:
        return self._bindings.get(name)

    def set(self, name: str, value: float) -> None:
        self._bindings[name] = value

    def __contains__(self, name: object) -> bool:
        return name in self._bindings

    def names(self) -> list[str]:
        return list(self._bindings)


class Evaluator:
    """Evaluates a parsed File against its own Environment."""

    def __init__(self, output: TextIO | None = None, env: Environment | None = None) -> None:
        self.output = output
        self.env = env if env is not None else Environment()

    def evaluate(self, file: File) -> float:
        """Run every statement in order; return the value of the last one, or 0.0."""
        result = 0.0
        for stmt in file.stmts:
            result = self.eval_stmt(stmt)
        return result

    # ── Statements ───────────────────────────────────────────────

    def eval_stmt(self, stmt: Stmt) -> float:
        match stmt:
            case DeclStmt(decl=decl):
                return self.eval_decl(decl)
            case ExprStmt(expr=expr):
                return self.eval_expr(expr)
            case AssignStmt():
                return self._eval_assign(stmt)
            case BadStmt():
                return NAN
        return NAN

    def _eval_assign(self, stmt: AssignStmt) -> float:
        if not isinstance(stmt.target, Ident):
            return NAN
        value = self.eval_expr(stmt.value)
        self.env.set(stmt.target.name, value)
        return value

    # ── Declarations ─────────────────────────────────────────────

    def eval_decl(self, decl: Decl) -> float:
        match decl:
            case BindingDecl(name=name, value=value):
                result = self.eval_expr(value) if value is not None else 0.0
                self.env.set(name.name, result)
                return result
            case FunDecl() | BadDecl():
                return NAN
        return NAN

    # ── Expressions ──────────────────────────────────────────────

    def eval_expr(self, expr: Expr) -> float:
        match expr:
            case Ident(name=name):
                value = self.env.get(name)
                return NAN if value is None else value
            case BasicLit():
                return _literal_value(expr)
            case CallExpr():
                return self._eval_call(expr)
            case UnaryExpr(op=op, operand=operand):
                value = self.eval_expr(operand)
                if op == TokenKind.MINUS:
                    return -value
                return value
            case BinaryExpr():
                return self._eval_binary(expr)
            case ParenExpr(inner=inner):
                return self.eval_expr(inner)
            case BadExpr():
                return NAN
        return NAN

    def _eval_binary(self, expr: BinaryExpr) -> float:
        x = self.eval_expr(expr.left)
        y = self.eval_expr(expr.right)
        match expr.op:
            case TokenKind.PLUS:
                return x + y
            case TokenKind.MINUS:
                return x - y
            case TokenKind.STAR:
                return x * y
            case TokenKind.SLASH:
                return _divide(x, y)
            case TokenKind.PERCENT:
                return _remainder(x, y)
        return NAN

    def _eval_call(self, expr: CallExpr) -> float:
        args = [self.eval_expr(arg) for arg in expr.args]
        if isinstance(expr.func, Ident) and expr.func.name in BUILTINS:
            out = self.output if self.output is not None else sys.stdout
            out.write(" ".join(format_number(a) for a in args))
            if expr.func.name == "println":
                out.write("\n")
        return NAN


def _literal_value(lit: BasicLit) -> float:
    if lit.token.kind != TokenKind.INT:
        return NAN
    # float() rounds oversized integer text to inf, same as the decimal form
    try:
        return float(lit.token.value)
    except ValueError:
        return NAN


def _divide(x: float, y: float) -> float:
    if y == 0:
        if math.isnan(x) or x == 0:
            return NAN
        return math.copysign(math.inf, x) * math.copysign(1.0, y)
    return x / y


def _remainder(x: float, y: float) -> float:
    # Truncated remainder, sign follows the dividend.
    if y == 0 or math.isinf(x):
        return NAN
    return math.fmod(x, y)


def evaluate(file: File, output: TextIO | None = None) -> float:
    """Evaluate ``file`` with a fresh Environment."""
    return Evaluator(output).evaluate(file)
