"""
Formatter contract and helpers shared by the formatters.

A formatter turns the documentation model into text. Implementations are
independent classes that satisfy the GrammarDocsFormatter protocol; the
driver picks one by name from configuration (see ``grammardocs.formatters``).

Rule-kind specific behaviour lives in the ``match`` statements of this module
and of ``graph.py``; an object outside the RuleDoc union raises
UnsupportedRuleKindError there. Grammar-level rendering catches that error per
rule (see ``render_rules``) so one bad rule never truncates the document.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from grammardocs.core.errors import UnsupportedRuleKindError
from grammardocs.core.grammar.model import AbstractElement, AbstractRule, iter_rule_calls
from grammardocs.core.ruledoc import (
    EnumRuleDoc,
    GrammarDoc,
    ParserRuleDoc,
    RuleDoc,
    RuleDocMapping,
    TerminalRuleDoc,
)

logger = logging.getLogger(__name__)

UNRESOLVED_REFERENCE = "unresolved reference"

GRAPH_DIRECTIONS = ("LR", "TB", "RL", "BT")


@runtime_checkable
class GrammarDocsFormatter(Protocol):
    """
    Transforms grammar documentation into a textual format.

    All operations are pure: they only build and return text.
    """

    def format_grammar(self, grammar_doc: GrammarDoc) -> str:
        """Formatted representation of the grammar, including its rules."""
        ...

    def format_graph(self, grammar_doc: GrammarDoc) -> str:
        """DOT graph of the grammar's rules and the references between them."""
        ...

    def format_rule(self, rule_doc: RuleDoc, mapping: RuleDocMapping) -> str:
        """
        Formatted representation of one rule.

        ``mapping`` links rule handles to their documentation and is only
        read; referenced rules missing from it render as unresolved.
        """
        ...

    def output_file_extension(self) -> str:
        """Extension (without the dot) of the files this formatter produces."""
        ...


@dataclass(frozen=True)
class FormatterOptions:
    """
    Options shared by the built-in formatters.

    Attributes:
        include_syntax: Render each rule's definition
        deduplicate_edges: Collapse repeated edges between the same two rules
        graph_direction: DOT ``rankdir`` value
    """

    include_syntax: bool = True
    deduplicate_edges: bool = False
    graph_direction: str = "LR"

    def __post_init__(self) -> None:
        if self.graph_direction not in GRAPH_DIRECTIONS:
            raise ValueError(
                f"graph_direction must be one of {', '.join(GRAPH_DIRECTIONS)}, "
                f"got {self.graph_direction!r}"
            )


@dataclass(frozen=True)
class ResolvedReference:
    """A rule referenced from another rule, with its documentation if known."""

    rule: AbstractRule
    doc: RuleDoc | None

    @property
    def name(self) -> str:
        return self.rule.name

    @property
    def resolved(self) -> bool:
        return self.doc is not None


# ---------------------------------------------------------------------------
# Rule-kind dispatch
# ---------------------------------------------------------------------------


def rule_definition(rule_doc: RuleDoc) -> AbstractElement | None:
    """The element tree that defines the documented rule."""
    match rule_doc:
        case ParserRuleDoc() | TerminalRuleDoc():
            return rule_doc.alternatives
        case EnumRuleDoc():
            return rule_doc.rule.alternatives
        case _:
            raise UnsupportedRuleKindError(
                f"Cannot document {describe(rule_doc)}: unsupported rule kind "
                f"{type(rule_doc).__name__}"
            )


def rule_kind_label(rule_doc: RuleDoc) -> str:
    """Human-readable kind, e.g. 'parser rule' or 'terminal fragment'."""
    match rule_doc:
        case ParserRuleDoc():
            return "parser fragment" if rule_doc.rule.fragment else "parser rule"
        case TerminalRuleDoc():
            return "terminal fragment" if rule_doc.is_fragment else "terminal rule"
        case EnumRuleDoc():
            return "enum rule"
        case _:
            raise UnsupportedRuleKindError(
                f"Cannot document {describe(rule_doc)}: unsupported rule kind "
                f"{type(rule_doc).__name__}"
            )


def describe(rule_doc: object) -> str:
    """A name for any object in rule position, for messages and placeholders."""
    rule = getattr(rule_doc, "rule", None)
    name = getattr(rule, "name", None)
    return name if name else type(rule_doc).__name__


def iter_references(rule_doc: RuleDoc) -> Iterator[AbstractRule]:
    """Rules called from the documented rule, one per call, in pre-order."""
    for call in iter_rule_calls(rule_definition(rule_doc)):
        if call.rule is not None:
            yield call.rule


def resolve_references(rule_doc: RuleDoc, mapping: RuleDocMapping) -> list[ResolvedReference]:
    """Distinct rules referenced by ``rule_doc``, in order of first reference."""
    seen: set[int] = set()
    result: list[ResolvedReference] = []
    for rule in iter_references(rule_doc):
        if id(rule) in seen:
            continue
        seen.add(id(rule))
        result.append(ResolvedReference(rule=rule, doc=mapping.get(rule)))
    return result


def referencing_docs(rule_doc: RuleDoc, mapping: RuleDocMapping) -> list[RuleDoc]:
    """Documented rules whose definitions reference ``rule_doc``'s rule."""
    target = rule_doc.rule
    result: list[RuleDoc] = []
    for other in mapping.values():
        try:
            if any(rule is target for rule in iter_references(other)):
                result.append(other)
        except UnsupportedRuleKindError:
            # Flagged where that rule itself is rendered
            continue
    return result


# ---------------------------------------------------------------------------
# Grammar-level rendering
# ---------------------------------------------------------------------------


def render_rules(
    grammar_doc: GrammarDoc,
    render: Callable[[RuleDoc, RuleDocMapping], str],
    on_failure: Callable[[object, UnsupportedRuleKindError], str],
) -> list[str]:
    """
    Render every rule of the grammar with one shared mapping.

    A rule whose kind cannot be handled is logged and rendered by
    ``on_failure`` instead; the other rules are unaffected.
    """
    mapping = grammar_doc.rule_mapping()
    parts: list[str] = []
    for rule_doc in grammar_doc.rules:
        try:
            parts.append(render(rule_doc, mapping))
        except UnsupportedRuleKindError as e:
            logger.warning("Grammar %s: %s", grammar_doc.name, e.message)
            parts.append(on_failure(rule_doc, e))
    return parts
