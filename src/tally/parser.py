"""Parser for the Tally scripting language.

Pulls tokens from a Lexer one at a time and builds the AST using recursive
descent for statements and declarations and precedence climbing for
binary expressions.

Syntax errors never stop the parse. Each one is recorded as a ParseError
and a Bad node (or a placeholder) is put in its place, so a single pass
reports every independent error and always yields a complete File.
"""

from __future__ import annotations

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
from tally.errors import CompileError, ParseError
from tally.lexer import Lexer
from tally.tokens import LOWEST_PREC, OPERATOR_STRINGS, Token, TokenKind

_SIMPLE_STMT_START = frozenset({
    TokenKind.IDENT,
    TokenKind.INT,
    TokenKind.STRING,
    TokenKind.PLUS,
    TokenKind.MINUS,
})

_DECL_START = frozenset({TokenKind.VAR, TokenKind.VAL, TokenKind.FUN})

_OPENERS = frozenset({TokenKind.LPAREN, TokenKind.LBRACKET, TokenKind.LBRACE})
_CLOSERS = frozenset({TokenKind.RPAREN, TokenKind.RBRACKET, TokenKind.RBRACE})


def describe(tok: Token) -> str:
    """Human-readable name of a token for error messages."""
    if tok.kind == TokenKind.EOF:
        return "end of input"
    if tok.kind == TokenKind.SEMICOLON and tok.value != ";":
        return "newline" if tok.value else "end of input"
    if tok.kind in OPERATOR_STRINGS:
        return f"'{OPERATOR_STRINGS[tok.kind]}'"
    if tok.kind == TokenKind.IDENT:
        return f"identifier {tok.value!r}"
    if tok.kind in (TokenKind.INT, TokenKind.STRING):
        return f"literal {tok.value!r}"
    if tok.kind == TokenKind.ILLEGAL:
        return f"illegal character {tok.value!r}"
    return f"'{tok.value}'"


class Parser:
    """Parses a Tally token stream into a File."""

    def __init__(self, lexer: Lexer, filename: str = "<stdin>") -> None:
        self.lexer = lexer
        self.filename = filename
        self.errors: list[ParseError] = []
        self.tok: Token = lexer.next_token()

    # ── Token access ─────────────────────────────────────────────

    @property
    def pos(self) -> int:
        return self.tok.offset

    def _at(self, kind: TokenKind) -> bool:
        return self.tok.kind == kind

    def _advance(self) -> Token:
        tok = self.tok
        self.tok = self.lexer.next_token()
        return tok

    def _error(self, pos: int, message: str, code: str) -> None:
        self.errors.append(ParseError(pos, message, code))

    def _expect_semicolon(self) -> None:
        if self._at(TokenKind.SEMICOLON):
            self._advance()
        else:
            self._error(self.pos, f"expected ';', found {describe(self.tok)}", "E201")

    def _expect_paren(self, kind: TokenKind, code: str) -> int:
        """Consume a parenthesis and return its offset, or record an error and return 0."""
        if self._at(kind):
            return self._advance().offset
        self._error(
            self.pos,
            f"expected '{OPERATOR_STRINGS[kind]}', found {describe(self.tok)}",
            code,
        )
        return 0

    # ── Top-level parsing ────────────────────────────────────────

    def parse_file(self) -> tuple[File, list[ParseError]]:
        """Parse the entire input into a File plus the recorded errors."""
        stmts: list[Stmt] = []
        while not self._at(TokenKind.EOF):
            stmts.append(self._parse_stmt())
        return File(stmts), self.errors

    # ── Statements ───────────────────────────────────────────────

    def _parse_stmt(self) -> Stmt:
        if self.tok.kind in _DECL_START:
            return self._parse_decl_stmt()
        if self.tok.kind in _SIMPLE_STMT_START:
            return self._parse_simple_stmt()
        return self._parse_bad_stmt()

    def _parse_bad_stmt(self) -> BadStmt:
        """Skip through the next semicolon, stopping early before a declaration
        keyword; always consumes at least one token."""
        begin = self.pos
        self._error(begin, f"expected statement, found {describe(self.tok)}", "E206")
        tok = self._advance()
        while (tok.kind != TokenKind.SEMICOLON and not self._at(TokenKind.EOF)
               and self.tok.kind not in _DECL_START):
            tok = self._advance()
        return BadStmt(begin, tok.end)

    def _parse_decl_stmt(self) -> DeclStmt:
        decl = self._parse_decl()
        self._expect_semicolon()
        return DeclStmt(decl)

    def _parse_simple_stmt(self) -> Stmt:
        x = self._parse_expr()
        if self._at(TokenKind.ASSIGN):
            op_pos = self._advance().offset
            y = self._parse_expr()
            self._expect_semicolon()
            return AssignStmt(x, op_pos, y)
        self._expect_semicolon()
        return ExprStmt(x)

    # ── Declarations ─────────────────────────────────────────────

    def _parse_decl(self) -> Decl:
        match self.tok.kind:
            case TokenKind.VAR | TokenKind.VAL:
                keyword = self._advance()
                return self._parse_binding_decl(keyword)
            case TokenKind.FUN:
                return self._parse_fun_decl()
            case _:
                begin = self.pos
                self._error(begin, f"expected declaration, found {describe(self.tok)}", "E206")
                return BadDecl(begin, self._advance().end)

    def _parse_binding_decl(self, keyword: Token) -> BindingDecl:
        # the keyword has been consumed
        name = self._parse_ident()
        if not self._at(TokenKind.ASSIGN):
            return BindingDecl(
                keyword.offset, name, None, None,
                mutable=keyword.kind == TokenKind.VAR,
            )
        assign_pos = self._advance().offset
        value = self._parse_expr()
        return BindingDecl(
            keyword.offset, name, assign_pos, value,
            mutable=keyword.kind == TokenKind.VAR,
        )

    def _parse_fun_decl(self) -> FunDecl:
        """Parse ``fun name ...`` as a placeholder, skipping the rest of the declaration."""
        fun_pos = self._advance().offset
        name = self._parse_ident()
        end = name.end
        depth = 0
        while not self._at(TokenKind.EOF):
            if depth == 0 and self._at(TokenKind.SEMICOLON):
                break
            if self.tok.kind in _OPENERS:
                depth += 1
            elif self.tok.kind in _CLOSERS:
                depth = max(0, depth - 1)
            end = self._advance().end
        return FunDecl(fun_pos, name, end)

    def _parse_ident(self) -> Ident:
        if self._at(TokenKind.IDENT):
            tok = self._advance()
            return Ident(tok.value, tok.offset)
        self._error(self.pos, f"expected identifier, found {describe(self.tok)}", "E202")
        return Ident("_", self.pos)

    # ── Expressions ──────────────────────────────────────────────

    def _parse_expr(self) -> Expr:
        return self._parse_binary_expr(LOWEST_PREC + 1)

    def _parse_binary_expr(self, min_prec: int) -> Expr:
        x = self._parse_unary_expr()
        while True:
            prec = self.tok.precedence
            if prec < min_prec:
                return x
            op = self._advance()
            # Operands of an equal-precedence operator are folded by this
            # loop rather than the recursive call, so operators associate left.
            y = self._parse_binary_expr(prec + 1)
            x = BinaryExpr(x, op.kind, op.offset, y)

    def _parse_unary_expr(self) -> Expr:
        if self.tok.kind in (TokenKind.PLUS, TokenKind.MINUS):
            op = self._advance()
            operand = self._parse_unary_expr()
            return UnaryExpr(op.kind, op.offset, operand)
        return self._parse_primary_expr()

    def _parse_primary_expr(self) -> Expr:
        x = self._parse_operand()
        while self._at(TokenKind.LPAREN):
            x = self._parse_call_expr(x)
        return x

    def _parse_operand(self) -> Expr:
        tok = self.tok
        match tok.kind:
            case TokenKind.IDENT:
                self._advance()
                return Ident(tok.value, tok.offset)
            case TokenKind.INT | TokenKind.STRING:
                self._advance()
                return BasicLit(tok)
            case TokenKind.LPAREN:
                lparen = self._advance().offset
                inner = self._parse_expr()
                rparen = self._expect_paren(TokenKind.RPAREN, "E203")
                return ParenExpr(lparen, inner, rparen)
            case _:
                self._error(tok.offset, f"expected operand, found {describe(tok)}", "E205")
                self._advance()
                return BadExpr(tok.offset, tok.end)

    def _parse_call_expr(self, func: Expr) -> CallExpr:
        lparen = self._expect_paren(TokenKind.LPAREN, "E204")
        # Arguments are unary expressions; a binary argument needs parentheses.
        args = [self._parse_unary_expr()]
        while self._at(TokenKind.COMMA):
            self._advance()
            args.append(self._parse_unary_expr())
        rparen = self._expect_paren(TokenKind.RPAREN, "E203")
        return CallExpr(func, lparen, args, rparen)


def parse_file(source: str, filename: str = "<stdin>") -> tuple[File, list[ParseError]]:
    """Lex and parse ``source``; returns the File and the recorded errors."""
    return Parser(Lexer(source), filename).parse_file()


def parse(source: str, filename: str = "<stdin>") -> File:
    """Lex and parse ``source``, raising CompileError if any syntax error was recorded."""
    file, errors = parse_file(source, filename)
    if errors:
        raise CompileError([e.to_diagnostic(filename) for e in errors])
    return file
