"""Tests for the Tally lexer."""

from __future__ import annotations

from tally.lexer import Lexer
from tally.tokens import Token, TokenKind


def lex(source: str) -> list[tuple[TokenKind, str]]:
    """Helper: lex source and return (kind, value) pairs, excluding EOF."""
    return [(t.kind, t.value) for t in Lexer(source)]


def kinds(source: str) -> list[TokenKind]:
    """Helper: lex source and return just the token kinds, excluding EOF."""
    return [t.kind for t in Lexer(source)]


class TestLexerBasic:
    def test_empty_source(self):
        assert Lexer("").lex_all() == []

    def test_eof_is_repeated(self):
        lexer = Lexer("x")
        lexer.next_token()
        lexer.next_token()
        for _ in range(3):
            assert lexer.next_token().kind == TokenKind.EOF

    def test_identifier(self):
        assert lex("hello") == [(TokenKind.IDENT, "hello"), (TokenKind.SEMICOLON, "")]

    def test_underscore_identifier(self):
        assert lex("_tmp_1")[0] == (TokenKind.IDENT, "_tmp_1")

    def test_keywords(self):
        assert kinds("fun") == [TokenKind.FUN]
        assert kinds("var") == [TokenKind.VAR]
        assert kinds("val") == [TokenKind.VAL]
        assert kinds("import") == [TokenKind.IMPORT]

    def test_return_ends_statement(self):
        assert kinds("return\n") == [TokenKind.RETURN, TokenKind.SEMICOLON]

    def test_keyword_prefix_is_identifier(self):
        assert lex("variable")[0] == (TokenKind.IDENT, "variable")

    def test_offsets(self):
        tokens = Lexer("var  abc").lex_all()
        assert [(t.offset, t.end) for t in tokens] == [(0, 3), (5, 8), (8, 8)]


class TestLexerLiterals:
    def test_integer(self):
        assert lex("42")[0] == (TokenKind.INT, "42")

    def test_integer_with_underscores(self):
        assert lex("1_000_000")[0] == (TokenKind.INT, "1_000_000")

    def test_float_shares_integer_kind(self):
        assert lex("3.14")[0] == (TokenKind.INT, "3.14")

    def test_number_run_is_maximal(self):
        assert lex("1..2")[0] == (TokenKind.INT, "1..2")

    def test_string(self):
        assert lex('"hello world"')[0] == (TokenKind.STRING, "hello world")

    def test_string_span_includes_quotes(self):
        tok = Lexer('"hi"').next_token()
        assert (tok.offset, tok.end) == (0, 4)

    def test_string_escaped_quote(self):
        assert lex(r'"a\"b"')[0] == (TokenKind.STRING, 'a"b')

    def test_string_escape_sequences(self):
        assert lex(r'"a\nb\\"')[0] == (TokenKind.STRING, "a\nb\\")

    def test_unterminated_string_stops_at_newline(self):
        assert lex('"abc\nx') == [
            (TokenKind.STRING, "abc"),
            (TokenKind.SEMICOLON, "\n"),
            (TokenKind.IDENT, "x"),
            (TokenKind.SEMICOLON, ""),
        ]

    def test_unterminated_string_at_end_of_input(self):
        assert lex('"abc')[0] == (TokenKind.STRING, "abc")


class TestLexerOperators:
    def test_single_char_tokens(self):
        assert kinds("+ - * / % = ( ) [ ] { } , ; : !") == [
            TokenKind.PLUS, TokenKind.MINUS, TokenKind.STAR, TokenKind.SLASH,
            TokenKind.PERCENT, TokenKind.ASSIGN,
            TokenKind.LPAREN, TokenKind.RPAREN,
            TokenKind.LBRACKET, TokenKind.RBRACKET,
            TokenKind.LBRACE, TokenKind.RBRACE,
            TokenKind.COMMA, TokenKind.SEMICOLON, TokenKind.COLON, TokenKind.BANG,
        ]

    def test_two_char_operators(self):
        assert kinds("|| && == != <= >= < >") == [
            TokenKind.LOR, TokenKind.LAND, TokenKind.EQL, TokenKind.NEQ,
            TokenKind.LEQ, TokenKind.GEQ, TokenKind.LSS, TokenKind.GTR,
        ]

    def test_illegal_character(self):
        assert lex("@") == [(TokenKind.ILLEGAL, "@")]

    def test_illegal_keeps_insertion_flag(self):
        assert kinds("x @\n") == [
            TokenKind.IDENT, TokenKind.ILLEGAL, TokenKind.SEMICOLON,
        ]

    def test_illegal_after_operator_inserts_nothing(self):
        assert kinds("+ @\n") == [TokenKind.PLUS, TokenKind.ILLEGAL]


class TestSemicolonInsertion:
    def test_newline_after_literal(self):
        tokens = Lexer("var x = 1\nprintln(x);").lex_all()
        assert [(t.kind, t.offset) for t in tokens] == [
            (TokenKind.VAR, 0),
            (TokenKind.IDENT, 4),
            (TokenKind.ASSIGN, 6),
            (TokenKind.INT, 8),
            (TokenKind.SEMICOLON, 9),
            (TokenKind.IDENT, 10),
            (TokenKind.LPAREN, 17),
            (TokenKind.IDENT, 18),
            (TokenKind.RPAREN, 19),
            (TokenKind.SEMICOLON, 20),
        ]
        assert tokens[4].value == "\n"
        assert tokens[-1].value == ";"

    def test_newline_after_operator_is_skipped(self):
        assert kinds("1 +\n2") == [
            TokenKind.INT, TokenKind.PLUS, TokenKind.INT, TokenKind.SEMICOLON,
        ]

    def test_newline_after_keyword_is_skipped(self):
        assert kinds("var\nx") == [TokenKind.VAR, TokenKind.IDENT, TokenKind.SEMICOLON]

    def test_blank_lines_collapse(self):
        tokens = Lexer("x\n\n\ny").lex_all()
        assert [(t.kind, t.offset) for t in tokens] == [
            (TokenKind.IDENT, 0),
            (TokenKind.SEMICOLON, 1),
            (TokenKind.IDENT, 4),
            (TokenKind.SEMICOLON, 5),
        ]

    def test_closing_brackets_end_statements(self):
        for closer in (")", "]", "}"):
            assert kinds(f"{closer}\n")[-1] == TokenKind.SEMICOLON

    def test_explicit_semicolon_clears_flag(self):
        assert kinds("x;\n") == [TokenKind.IDENT, TokenKind.SEMICOLON]

    def test_end_of_input_inserts_once(self):
        lexer = Lexer("x")
        assert lexer.next_token().kind == TokenKind.IDENT
        assert lexer.next_token() == Token(TokenKind.SEMICOLON, "", 1, 1)
        assert lexer.next_token().kind == TokenKind.EOF

    def test_carriage_return_is_whitespace(self):
        assert kinds("x\r\ny") == [
            TokenKind.IDENT, TokenKind.SEMICOLON, TokenKind.IDENT, TokenKind.SEMICOLON,
        ]


class TestLexerComments:
    def test_comment_only(self):
        assert lex("// nothing here") == []

    def test_comment_after_value_still_terminates(self):
        tokens = Lexer("x // note\ny").lex_all()
        assert [(t.kind, t.offset) for t in tokens] == [
            (TokenKind.IDENT, 0),
            (TokenKind.SEMICOLON, 9),
            (TokenKind.IDENT, 10),
            (TokenKind.SEMICOLON, 11),
        ]

    def test_single_slash_is_division(self):
        assert kinds("a / b") == [
            TokenKind.IDENT, TokenKind.SLASH, TokenKind.IDENT, TokenKind.SEMICOLON,
        ]


class TestLexerIdempotence:
    def test_rescanning_yields_same_tokens(self):
        source = 'var total = (1 + 2) * 3\nprintln(total, "x")\n'
        assert Lexer(source).lex_all() == Lexer(source).lex_all()
