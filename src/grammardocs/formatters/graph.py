"""
Rule dependency graph in DOT.

Each documented rule is a node; each rule call in a rule's definition is an
edge from that rule to the called rule. Counting is per RuleCall node, so
``A: 'x' A?;`` gives one ``A -> A`` edge and ``A: B B;`` gives two ``A -> B``
edges unless deduplication is switched on. Calls to rules outside the
grammar (inherited terminals, unresolved names) become dashed edges to the
called rule's name; they get no node declaration of their own.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from grammardocs.core.errors import UnsupportedRuleKindError
from grammardocs.core.ruledoc import (
    EnumRuleDoc,
    GrammarDoc,
    ParserRuleDoc,
    RuleDoc,
    RuleDocMapping,
    TerminalRuleDoc,
)
from grammardocs.formatters.base import FormatterOptions, describe, iter_references

logger = logging.getLogger(__name__)

_INDENT = "    "


def quote_id(name: str) -> str:
    """Quote a DOT identifier."""
    return '"' + name.replace("\\", "\\\\").replace('"', '\\"') + '"'


@dataclass(frozen=True)
class Edge:
    """A reference from one rule to another."""

    source: str
    target: str
    external: bool = False

    def to_dot(self) -> str:
        statement = f"{quote_id(self.source)} -> {quote_id(self.target)}"
        return f"{statement} [style=dashed];" if self.external else f"{statement};"


def node_shape(rule_doc: RuleDoc) -> str:
    match rule_doc:
        case ParserRuleDoc():
            return "box"
        case TerminalRuleDoc():
            return "ellipse"
        case EnumRuleDoc():
            return "hexagon"
        case _:
            raise UnsupportedRuleKindError(
                f"Cannot draw {describe(rule_doc)}: unsupported rule kind {type(rule_doc).__name__}"
            )


def node_statement(rule_doc: RuleDoc) -> str:
    name = quote_id(rule_doc.name)
    return f"{name} [label={name}, shape={node_shape(rule_doc)}];"


def rule_edges(rule_doc: RuleDoc, mapping: RuleDocMapping) -> list[Edge]:
    """One edge per rule call in the rule's definition, in pre-order."""
    return [
        Edge(source=rule_doc.name, target=rule.name, external=rule not in mapping)
        for rule in iter_references(rule_doc)
    ]


def deduplicate(edges: list[Edge]) -> list[Edge]:
    """Drop repeated source/target pairs, keeping the first occurrence."""
    seen: set[tuple[str, str]] = set()
    result = []
    for edge in edges:
        key = (edge.source, edge.target)
        if key not in seen:
            seen.add(key)
            result.append(edge)
    return result


def unsupported_node_statement(rule_doc: object) -> str:
    name = quote_id(describe(rule_doc))
    return f"{name} [label={name}, color=red];  // unsupported rule kind"


def render_rule_statements(
    rule_doc: RuleDoc, mapping: RuleDocMapping, options: FormatterOptions
) -> list[str]:
    """Node declaration and outgoing edges of one rule."""
    edges = rule_edges(rule_doc, mapping)
    if options.deduplicate_edges:
        edges = deduplicate(edges)
    return [node_statement(rule_doc)] + [edge.to_dot() for edge in edges]


def render_dot(grammar_doc: GrammarDoc, options: FormatterOptions) -> str:
    """
    The whole grammar as a DOT digraph.

    Example for ``A: 'x' B; B: 'y';``::

        digraph "MyDsl" {
            rankdir=LR;
            "A" [label="A", shape=box];
            "B" [label="B", shape=box];
            "A" -> "B";
        }
    """
    mapping = grammar_doc.rule_mapping()
    nodes: list[str] = []
    edges: list[Edge] = []
    for rule_doc in grammar_doc.rules:
        try:
            rule_edge_list = rule_edges(rule_doc, mapping)
            nodes.append(node_statement(rule_doc))
        except UnsupportedRuleKindError as e:
            logger.warning("Grammar %s: %s", grammar_doc.name, e.message)
            nodes.append(unsupported_node_statement(rule_doc))
            continue
        edges.extend(rule_edge_list)
    if options.deduplicate_edges:
        edges = deduplicate(edges)

    lines = [
        f"digraph {quote_id(grammar_doc.simple_name)} {{",
        f"{_INDENT}rankdir={options.graph_direction};",
    ]
    lines.extend(_INDENT + node for node in nodes)
    lines.extend(_INDENT + edge.to_dot() for edge in edges)
    lines.append("}")
    return "\n".join(lines) + "\n"
