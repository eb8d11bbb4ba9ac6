"""
Canonical Xtext text for rule definitions.

The output is not the original source: whitespace is normalized, comments
are dropped and only the parentheses the precedence needs are written.
"""

from __future__ import annotations

from grammardocs.core.grammar.model import (
    AbstractElement,
    AbstractRule,
    Action,
    Alternatives,
    Assignment,
    CharacterRange,
    CrossReference,
    EndOfFile,
    EnumLiteralDeclaration,
    EnumRule,
    Group,
    Keyword,
    NegatedToken,
    ParserRule,
    RuleCall,
    TerminalRule,
    UnorderedGroup,
    UntilToken,
    Wildcard,
)

# Binding strength; higher binds tighter
_ALTERNATIVES = 1
_UNORDERED = 2
_GROUP = 3
_ATOM = 4

_INDENT = "    "


def quote_keyword(value: str) -> str:
    """Quote a keyword value with single quotes, escaping as Xtext does."""
    escaped = (
        value.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
    return f"'{escaped}'"


def _precedence(element: AbstractElement) -> int:
    if isinstance(element, Alternatives):
        return _ALTERNATIVES
    if isinstance(element, UnorderedGroup):
        return _UNORDERED
    if isinstance(element, Group):
        return _GROUP
    return _ATOM


def _body(element: AbstractElement) -> str:
    """Text of the element itself, without cardinality or predicate."""
    if isinstance(element, Keyword):
        return quote_keyword(element.value)
    if isinstance(element, RuleCall):
        return element.rule.name if element.rule is not None else "<unlinked>"
    if isinstance(element, Assignment):
        return f"{element.feature}{element.operator}{serialize_element(element.terminal, _ATOM)}"
    if isinstance(element, CrossReference):
        if element.terminal is None:
            return f"[{element.type_name}]"
        return f"[{element.type_name}|{serialize_element(element.terminal, _ATOM)}]"
    if isinstance(element, Action):
        if element.feature is None:
            return f"{{{element.type_name}}}"
        return f"{{{element.type_name}.{element.feature}{element.operator}current}}"
    if isinstance(element, Alternatives):
        return " | ".join(serialize_element(e, _UNORDERED) for e in element.elements)
    if isinstance(element, UnorderedGroup):
        return " & ".join(serialize_element(e, _GROUP) for e in element.elements)
    if isinstance(element, Group):
        return " ".join(serialize_element(e, _ATOM) for e in element.elements)
    if isinstance(element, CharacterRange):
        return f"{quote_keyword(element.left.value)}..{quote_keyword(element.right.value)}"
    if isinstance(element, Wildcard):
        return "."
    if isinstance(element, EndOfFile):
        return "EOF"
    if isinstance(element, NegatedToken):
        return f"!{serialize_element(element.terminal, _ATOM)}"
    if isinstance(element, UntilToken):
        return f"-> {serialize_element(element.terminal, _ATOM)}"
    if isinstance(element, EnumLiteralDeclaration):
        if element.keyword is None:
            return element.literal
        return f"{element.literal}={quote_keyword(element.keyword.value)}"
    raise TypeError(f"Cannot serialize grammar element {type(element).__name__}")


def serialize_element(element: AbstractElement, context: int = _ALTERNATIVES) -> str:
    """
    Render an element as Xtext text.

    Args:
        element: Element to render
        context: Binding strength of the surrounding construct; compound
            elements that bind more loosely are parenthesized
    """
    text = _body(element)
    decorated = element.cardinality is not None or element.predicate is not None
    compound = _precedence(element) < _ATOM
    if compound and (decorated or _precedence(element) < context):
        text = f"({text})"
    elif isinstance(element, UntilToken) and decorated:
        text = f"({text})"
    if element.predicate is not None:
        text = f"{element.predicate}{text}"
    if element.cardinality is not None:
        text = f"{text}{element.cardinality}"
    return text


def rule_header(rule: AbstractRule) -> str:
    """The part of a rule declaration before the colon."""
    parts: list[str] = []
    if isinstance(rule, TerminalRule):
        parts.append("terminal")
        if rule.fragment:
            parts.append("fragment")
    elif isinstance(rule, EnumRule):
        parts.append("enum")
    elif isinstance(rule, ParserRule) and rule.fragment:
        parts.append("fragment")
    parts.append(rule.name)
    if rule.type_name:
        parts.append(f"returns {rule.type_name}")
    if isinstance(rule, ParserRule) and rule.hidden_tokens:
        parts.append(f"hidden({', '.join(rule.hidden_tokens)})")
    return " ".join(parts)


def serialize_rule(rule: AbstractRule) -> str:
    """
    Render a whole rule declaration.

    Top-level alternatives go on separate lines::

        Type:
            'int'
            | 'bool';
    """
    header = rule_header(rule)
    body = rule.alternatives
    if body is None:
        return f"{header};"
    if isinstance(body, Alternatives) and body.cardinality is None and body.predicate is None:
        lines = [serialize_element(e, _UNORDERED) for e in body.elements]
        joined = f"\n{_INDENT}| ".join(lines)
        return f"{header}:\n{_INDENT}{joined};"
    return f"{header}:\n{_INDENT}{serialize_element(body)};"
