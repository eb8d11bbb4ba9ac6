"""Tests for the grammar tokenizer."""

from __future__ import annotations

import pytest

from grammardocs.core.errors import GrammarSyntaxError
from grammardocs.core.grammar.tokenizer import TokenKind, tokenize


def kinds(source: str) -> list[TokenKind]:
    return [tok.kind for tok in tokenize(source)]


class TestTokenizer:
    def test_simple_rule(self) -> None:
        tokens = tokenize("A: 'x' B;")
        assert [t.kind for t in tokens] == [
            TokenKind.ID,
            TokenKind.COLON,
            TokenKind.STRING,
            TokenKind.ID,
            TokenKind.SEMICOLON,
            TokenKind.EOF,
        ]
        assert tokens[2].value == "x"

    def test_two_char_operators(self) -> None:
        assert kinds("+= ?= -> => :: ..")[:-1] == [
            TokenKind.PLUS_EQ,
            TokenKind.QUESTION_EQ,
            TokenKind.ARROW,
            TokenKind.FAT_ARROW,
            TokenKind.COLONCOLON,
            TokenKind.DOTDOT,
        ]

    def test_single_char_punctuation(self) -> None:
        assert kinds("| & ( ) [ ] { } ? * + = ! . , @")[:-1] == [
            TokenKind.PIPE,
            TokenKind.AMPERSAND,
            TokenKind.LPAREN,
            TokenKind.RPAREN,
            TokenKind.LBRACKET,
            TokenKind.RBRACKET,
            TokenKind.LBRACE,
            TokenKind.RBRACE,
            TokenKind.QUESTION,
            TokenKind.STAR,
            TokenKind.PLUS,
            TokenKind.EQ,
            TokenKind.BANG,
            TokenKind.DOT,
            TokenKind.COMMA,
            TokenKind.AT,
        ]

    def test_escaped_identifier(self) -> None:
        tokens = tokenize("^grammar")
        assert tokens[0].kind == TokenKind.ID
        assert tokens[0].value == "grammar"

    def test_string_escapes(self) -> None:
        assert tokenize(r"'it\'s'")[0].value == "it's"
        assert tokenize(r"'\n'")[0].value == "\n"
        assert tokenize(r"'\u0041'")[0].value == "A"

    def test_double_quoted_string(self) -> None:
        assert tokenize('"uri"')[0].value == "uri"

    def test_positions(self) -> None:
        tokens = tokenize("A:\n  'x';")
        string = tokens[2]
        assert (string.line, string.column) == (2, 3)


class TestComments:
    def test_line_comment_dropped(self) -> None:
        assert kinds("// nothing here\nA") == [TokenKind.ID, TokenKind.EOF]

    def test_block_comment_dropped(self) -> None:
        assert kinds("/* nothing */ A") == [TokenKind.ID, TokenKind.EOF]

    def test_empty_block_comment_is_not_doc(self) -> None:
        assert kinds("/**/") == [TokenKind.EOF]

    def test_doc_comment_kept(self) -> None:
        tokens = tokenize("/** Rule A */\nA")
        assert tokens[0].kind == TokenKind.DOC_COMMENT
        assert tokens[0].value == "/** Rule A */"
        assert tokens[1].line == 2

    def test_lines_counted_through_comments(self) -> None:
        tokens = tokenize("/**\n * doc\n */\nA")
        assert tokens[1].line == 4
        assert tokens[1].column == 1


class TestTokenizerErrors:
    def test_unterminated_string(self) -> None:
        with pytest.raises(GrammarSyntaxError) as exc_info:
            tokenize("A: 'x;\nB: 'y';")
        assert "Unterminated string" in exc_info.value.message
        assert exc_info.value.context is not None
        assert exc_info.value.context.line == 1

    def test_unterminated_comment(self) -> None:
        with pytest.raises(GrammarSyntaxError, match="Unterminated block comment"):
            tokenize("A /* never closed")

    def test_unexpected_character(self) -> None:
        with pytest.raises(GrammarSyntaxError) as exc_info:
            tokenize("A: 'x' # B;")
        assert "'#'" in exc_info.value.message
        assert exc_info.value.context.column == 8

    def test_superscript_digit(self) -> None:
        with pytest.raises(GrammarSyntaxError, match="Unexpected character"):
            tokenize("A: 'x' \u00b2;")

    def test_error_shows_snippet(self) -> None:
        with pytest.raises(GrammarSyntaxError) as exc_info:
            tokenize("A: 'x' #", file="My.xtext")
        text = str(exc_info.value)
        assert "My.xtext:1:8" in text
        assert "\n" + " " * 14 + "^\n" in text

    def test_token_width(self) -> None:
        tokens = tokenize("A: 'ab' ^B;")
        assert [(t.value, t.length) for t in tokens[2:4]] == [("ab", 4), ("B", 2)]
