"""
Tokenizer for Xtext grammar files.

Converts grammar text into a list of typed tokens with line/column positions.
Line comments and ordinary block comments are dropped; ``/** ... */`` comments
are kept as DOC_COMMENT tokens so the reader can attach them to the following
rule.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from enum import StrEnum, auto
from pathlib import Path

from grammardocs.core.errors import make_syntax_error, source_snippet


class TokenKind(StrEnum):
    """Token types for the grammar language."""

    ID = auto()
    STRING = auto()
    INT = auto()
    DOC_COMMENT = auto()

    # Punctuation and operators
    COLON = auto()
    COLONCOLON = auto()
    SEMICOLON = auto()
    PIPE = auto()
    AMPERSAND = auto()
    LPAREN = auto()
    RPAREN = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    LBRACE = auto()
    RBRACE = auto()
    LT = auto()
    GT = auto()
    COMMA = auto()
    DOT = auto()
    DOTDOT = auto()
    QUESTION = auto()
    STAR = auto()
    PLUS = auto()
    EQ = auto()
    PLUS_EQ = auto()
    QUESTION_EQ = auto()
    ARROW = auto()  # ->
    FAT_ARROW = auto()  # =>
    BANG = auto()
    AT = auto()

    EOF = auto()


class Token:
    """
    A single token from the grammar tokenizer.

    ``length`` is the width of the token in the source, which differs from
    ``len(value)`` for string literals.
    """

    __slots__ = ("kind", "value", "line", "column", "length")

    def __init__(
        self, kind: TokenKind, value: str, line: int, column: int, length: int | None = None
    ) -> None:
        self.kind = kind
        self.value = value
        self.line = line
        self.column = column
        self.length = len(value) if length is None else length

    def __repr__(self) -> str:
        return f"Token({self.kind}, {self.value!r}, {self.line}:{self.column})"


_TWO_CHAR: dict[str, TokenKind] = {
    "::": TokenKind.COLONCOLON,
    "..": TokenKind.DOTDOT,
    "+=": TokenKind.PLUS_EQ,
    "?=": TokenKind.QUESTION_EQ,
    "->": TokenKind.ARROW,
    "=>": TokenKind.FAT_ARROW,
}

_SINGLE_CHAR: dict[str, TokenKind] = {
    ":": TokenKind.COLON,
    ";": TokenKind.SEMICOLON,
    "|": TokenKind.PIPE,
    "&": TokenKind.AMPERSAND,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "[": TokenKind.LBRACKET,
    "]": TokenKind.RBRACKET,
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
    "<": TokenKind.LT,
    ">": TokenKind.GT,
    ",": TokenKind.COMMA,
    ".": TokenKind.DOT,
    "?": TokenKind.QUESTION,
    "*": TokenKind.STAR,
    "+": TokenKind.PLUS,
    "=": TokenKind.EQ,
    "!": TokenKind.BANG,
    "@": TokenKind.AT,
}

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f"}

# Identifier, optionally escaped with ^ to use a keyword as a name
_ID_RE = re.compile(r"\^?[a-zA-Z_][a-zA-Z0-9_]*")
_INT_RE = re.compile(r"\d+")


def tokenize(source: str, file: Path | str = "<grammar>") -> list[Token]:
    """
    Tokenize grammar text.

    Raises:
        GrammarSyntaxError: On an unterminated string/comment or an unknown character
    """
    tokens: list[Token] = []
    path = Path(file)
    i = 0
    n = len(source)
    line = 1
    line_start = 0

    def error(message: str, at: int) -> Exception:
        err_line = source.count("\n", 0, at) + 1
        err_col = at - (source.rfind("\n", 0, at) + 1) + 1
        return make_syntax_error(
            message, path, err_line, err_col, snippet=source_snippet(source, err_line)
        )

    while i < n:
        c = source[i]
        col = i - line_start + 1

        if c == "\n":
            i += 1
            line += 1
            line_start = i
            continue
        if c in " \t\r":
            i += 1
            continue

        # Comments
        if source.startswith("//", i):
            end = source.find("\n", i)
            i = n if end == -1 else end
            continue
        if source.startswith("/*", i):
            end = source.find("*/", i + 2)
            if end == -1:
                raise error("Unterminated block comment", i)
            text = source[i : end + 2]
            # "/**/" is an empty ordinary comment, not a doc comment
            if text.startswith("/**") and text != "/**/":
                tokens.append(Token(TokenKind.DOC_COMMENT, text, line, col))
            newlines = text.count("\n")
            if newlines:
                line += newlines
                line_start = i + text.rfind("\n") + 1
            i = end + 2
            continue

        if c in ("'", '"'):
            end, value = _read_string(source, i, error)
            tokens.append(Token(TokenKind.STRING, value, line, col, length=end - i))
            i = end
            continue

        if c.isdigit():
            m = _INT_RE.match(source, i)
            if m is None:
                raise error(f"Unexpected character {c!r}", i)
            tokens.append(Token(TokenKind.INT, m.group(0), line, col))
            i = m.end()
            continue

        if c.isalpha() or c in "_^":
            m = _ID_RE.match(source, i)
            if m is None:
                raise error(f"Unexpected character {c!r}", i)
            tokens.append(
                Token(TokenKind.ID, m.group(0).lstrip("^"), line, col, length=m.end() - i)
            )
            i = m.end()
            continue

        two = source[i : i + 2]
        if two in _TWO_CHAR:
            tokens.append(Token(_TWO_CHAR[two], two, line, col))
            i += 2
            continue

        if c in _SINGLE_CHAR:
            tokens.append(Token(_SINGLE_CHAR[c], c, line, col))
            i += 1
            continue

        raise error(f"Unexpected character {c!r}", i)

    tokens.append(Token(TokenKind.EOF, "", line, i - line_start + 1))
    return tokens


def _read_string(
    source: str, start: int, error: Callable[[str, int], Exception]
) -> tuple[int, str]:
    """Read a quoted string starting at ``start``; return (end index, decoded value)."""
    quote = source[start]
    i = start + 1
    chars: list[str] = []
    while i < len(source):
        c = source[i]
        if c == "\\" and i + 1 < len(source):
            nxt = source[i + 1]
            if nxt == "u" and i + 5 < len(source):
                try:
                    chars.append(chr(int(source[i + 2 : i + 6], 16)))
                except ValueError:
                    raise error("Invalid unicode escape", i) from None
                i += 6
                continue
            chars.append(_ESCAPES.get(nxt, nxt))
            i += 2
            continue
        if c == quote:
            return i + 1, "".join(chars)
        if c == "\n":
            break
        chars.append(c)
        i += 1
    raise error("Unterminated string literal", start)
