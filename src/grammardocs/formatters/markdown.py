"""
Markdown formatter.

Produces one Markdown document per grammar: a header with the grammar's own
documentation, a contents table, and one section per rule with its comment,
definition, tags and cross-links to the rules it references and is
referenced by.
"""

from __future__ import annotations

import re

from grammardocs.core.errors import UnsupportedRuleKindError
from grammardocs.core.grammar.serializer import serialize_rule
from grammardocs.core.ruledoc import GrammarDoc, RuleDoc, RuleDocMapping
from grammardocs.formatters.base import (
    UNRESOLVED_REFERENCE,
    FormatterOptions,
    ResolvedReference,
    describe,
    referencing_docs,
    render_rules,
    resolve_references,
    rule_definition,
    rule_kind_label,
)
from grammardocs.formatters.graph import render_dot

# Tags rendered with a fixed label, in this order; other tags follow as written
_TAG_LABELS = {
    "deprecated": "Deprecated",
    "since": "Since",
    "see": "See also",
}


def anchor(name: str) -> str:
    """GitHub-style heading anchor for a rule name."""
    return re.sub(r"[^a-z0-9_-]", "", name.lower())


# Slugs of the headings every grammar page has ahead of its rule sections
_PAGE_HEADINGS = ("contents", "rules")


def rule_anchors(mapping: RuleDocMapping) -> dict[int, str]:
    """
    Heading anchors of the documented rules, keyed by ``id`` of the RuleDoc.

    Rule names that differ only in case share a slug. As on GitHub, a slug
    already taken gets a ``-N`` suffix, counted in declaration order.
    """
    occurrences = dict.fromkeys(_PAGE_HEADINGS, 0)
    anchors: dict[int, str] = {}
    for rule_doc in mapping.values():
        base = slug = anchor(rule_doc.name)
        while slug in occurrences:
            occurrences[base] += 1
            slug = f"{base}-{occurrences[base]}"
        occurrences[slug] = 0
        anchors[id(rule_doc)] = slug
    return anchors


def _cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")


class MarkdownFormatter:
    """Formats grammar documentation as Markdown."""

    name = "markdown"

    def __init__(self, options: FormatterOptions | None = None) -> None:
        self.options = options or FormatterOptions()

    def output_file_extension(self) -> str:
        return "md"

    def format_graph(self, grammar_doc: GrammarDoc) -> str:
        return render_dot(grammar_doc, self.options)

    def format_grammar(self, grammar_doc: GrammarDoc) -> str:
        failed: set[int] = set()

        def on_failure(rule_doc: object, error: UnsupportedRuleKindError) -> str:
            failed.add(id(rule_doc))
            return self._format_failure(rule_doc, error)

        sections = render_rules(grammar_doc, self.format_rule, on_failure)
        anchors = rule_anchors(grammar_doc.rule_mapping())

        parts: list[str] = []
        parts.append(f"# Grammar `{grammar_doc.name}`\n")
        if not grammar_doc.head_comment.is_empty:
            parts.append(grammar_doc.head_comment.text + "\n")
        if grammar_doc.imports:
            used = ", ".join(f"`{name}`" for name in grammar_doc.imports)
            parts.append(f"**Uses:** {used}\n")
        if grammar_doc.metamodels:
            parts.append("**Metamodels:**\n")
            for declaration in grammar_doc.metamodels:
                parts.append(f"- `{declaration}`")
            parts.append("")

        parts.append("## Contents\n")
        if grammar_doc.rules:
            parts.append("| Rule | Kind | Summary |")
            parts.append("|------|------|---------|")
            for rule_doc in grammar_doc.rules:
                if id(rule_doc) in failed:
                    parts.append(f"| {_cell(describe(rule_doc))} | **unsupported** | |")
                    continue
                link = f"[{rule_doc.name}](#{anchors[id(rule_doc)]})"
                summary = _cell(rule_doc.head_comment.summary)
                parts.append(f"| {link} | {rule_kind_label(rule_doc)} | {summary} |")
        else:
            parts.append("_This grammar defines no rules._")
        parts.append("")

        parts.append("## Rules\n")
        parts.append("\n\n".join(section.rstrip() for section in sections))

        return "\n".join(parts).rstrip() + "\n"

    def format_rule(self, rule_doc: RuleDoc, mapping: RuleDocMapping) -> str:
        kind = rule_kind_label(rule_doc)
        definition = rule_definition(rule_doc)
        comment = rule_doc.head_comment

        parts: list[str] = []
        parts.append(f"### {rule_doc.name}\n")
        meta = f"_{kind.capitalize()}_"
        if rule_doc.rule.type_name:
            meta += f" returning `{rule_doc.rule.type_name}`"
        parts.append(meta + "\n")

        parts.append((comment.text or "_No documentation._") + "\n")

        if self.options.include_syntax and definition is not None:
            parts.append("```xtext")
            parts.append(serialize_rule(rule_doc.rule))
            parts.append("```\n")

        for example in comment.tag_values("example"):
            parts.append("**Example:**\n")
            parts.append("```")
            parts.append(example)
            parts.append("```\n")

        for tag_name, label in _TAG_LABELS.items():
            for value in comment.tag_values(tag_name):
                parts.append(f"**{label}:** {value}\n")
        for tag in comment.tags:
            if tag.name != "example" and tag.name not in _TAG_LABELS:
                parts.append(f"**@{tag.name}:** {tag.value}\n")

        anchors = rule_anchors(mapping)
        references = resolve_references(rule_doc, mapping)
        if references:
            links = ", ".join(self._reference_link(ref, anchors) for ref in references)
            parts.append(f"**References:** {links}\n")

        referrers = referencing_docs(rule_doc, mapping)
        if referrers:
            links = ", ".join(f"[{doc.name}](#{anchors[id(doc)]})" for doc in referrers)
            parts.append(f"**Referenced by:** {links}\n")

        return "\n".join(parts)

    @staticmethod
    def _reference_link(ref: ResolvedReference, anchors: dict[int, str]) -> str:
        if ref.doc is not None:
            return f"[{ref.name}](#{anchors[id(ref.doc)]})"
        return f"`{ref.name}` _({UNRESOLVED_REFERENCE})_"

    @staticmethod
    def _format_failure(rule_doc: object, error: UnsupportedRuleKindError) -> str:
        name = describe(rule_doc)
        return (
            f"### {name}\n\n"
            f"> **Error:** documentation for `{name}` could not be generated: {error.message}\n"
        )
