"""Tests for rendering rule definitions back to Xtext text."""

from __future__ import annotations

import pytest

from grammardocs.core.grammar import (
    Group,
    Keyword,
    ParserRule,
    read_grammar,
    serialize_element,
    serialize_rule,
)
from grammardocs.core.grammar.serializer import quote_keyword


def serialized(source: str, name: str) -> str:
    grammar = read_grammar("grammar a.G\n" + source)
    rule = grammar.find_rule(name)
    assert rule is not None
    return serialize_rule(rule)


class TestSerializeRule:
    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("A: 'x' B;\nB: 'y';", "A:\n    'x' B;"),
            ("A: ('a' | 'b')* 'c';", "A:\n    ('a' | 'b')* 'c';"),
            ("A: name=ID ref=[A|ID];", "A:\n    name=ID ref=[A|ID];"),
            ("A: items+=A* flag?='f';", "A:\n    items+=A* flag?='f';"),
            ("A: 'a' & 'b';", "A:\n    'a' & 'b';"),
            ("A: =>'a' A;", "A:\n    =>'a' A;"),
            ("A: ('a'?)*;", "A:\n    ('a'?)*;"),
            ("A: {Plus.left=current} 'p';", "A:\n    {Plus.left=current} 'p';"),
            ("A returns Foo hidden(WS): 'a';", "A returns Foo hidden(WS):\n    'a';"),
        ],
    )
    def test_parser_rules(self, source: str, expected: str) -> None:
        assert serialized(source, "A") == expected

    def test_top_level_alternatives_one_per_line(self) -> None:
        assert serialized("A: 'int' | 'bool' B;\nB: 'b';", "A") == "A:\n    'int'\n    | 'bool' B;"

    def test_fragment(self) -> None:
        assert serialized("fragment F*: name='n';", "F") == "fragment F:\n    name='n';"

    def test_terminal_rules(self) -> None:
        assert serialized("terminal fragment DIGIT: '0'..'9';", "DIGIT") == (
            "terminal fragment DIGIT:\n    '0'..'9';"
        )
        assert serialized("terminal ML: '/*' -> '*/';", "ML") == "terminal ML:\n    '/*' -> '*/';"
        assert serialized("terminal SL: '//' !('\\n'|'\\r')*;", "SL") == (
            "terminal SL:\n    '//' !('\\n' | '\\r')*;"
        )
        assert serialized("terminal ANY: . | EOF;", "ANY") == "terminal ANY:\n    .\n    | EOF;"

    def test_enum_rule(self) -> None:
        assert serialized("enum Color: RED='red' | GREEN;", "Color") == (
            "enum Color:\n    RED='red'\n    | GREEN;"
        )


class TestSerializeElement:
    def test_nested_group_is_parenthesized(self) -> None:
        inner = Group(elements=[Keyword(value="a"), Keyword(value="b")])
        outer = Group(elements=[inner, Keyword(value="c")])
        assert serialize_element(outer) == "('a' 'b') 'c'"

    def test_rule_without_body(self) -> None:
        assert serialize_rule(ParserRule(name="Empty")) == "Empty;"


class TestQuoteKeyword:
    def test_escapes(self) -> None:
        assert quote_keyword("it's") == "'it\\'s'"
        assert quote_keyword("a\\b") == "'a\\\\b'"
        assert quote_keyword("\t") == "'\\t'"
