"""Plain-text formatter, for terminals and text-only documentation sets."""

from __future__ import annotations

import textwrap

from grammardocs.core.errors import UnsupportedRuleKindError
from grammardocs.core.grammar.serializer import serialize_rule
from grammardocs.core.ruledoc import GrammarDoc, RuleDoc, RuleDocMapping
from grammardocs.formatters.base import (
    UNRESOLVED_REFERENCE,
    FormatterOptions,
    describe,
    referencing_docs,
    render_rules,
    resolve_references,
    rule_definition,
    rule_kind_label,
)
from grammardocs.formatters.graph import render_dot

_INDENT = "    "


def heading(title: str, underline: str) -> str:
    return f"{title}\n{underline * len(title)}"


class PlainTextFormatter:
    """Formats grammar documentation as plain text with underlined headings."""

    name = "text"

    def __init__(self, options: FormatterOptions | None = None) -> None:
        self.options = options or FormatterOptions()

    def output_file_extension(self) -> str:
        return "txt"

    def format_graph(self, grammar_doc: GrammarDoc) -> str:
        return render_dot(grammar_doc, self.options)

    def format_grammar(self, grammar_doc: GrammarDoc) -> str:
        parts = [heading(f"Grammar {grammar_doc.name}", "="), ""]
        if not grammar_doc.head_comment.is_empty:
            parts.extend([grammar_doc.head_comment.text, ""])
        if grammar_doc.imports:
            parts.extend([f"Uses: {', '.join(grammar_doc.imports)}", ""])
        if grammar_doc.metamodels:
            parts.append("Metamodels:")
            parts.extend(f"  {declaration}" for declaration in grammar_doc.metamodels)
            parts.append("")

        sections = render_rules(grammar_doc, self.format_rule, self._format_failure)
        if not sections:
            parts.append("(no rules)")
        parts.append("\n\n".join(section.rstrip() for section in sections))
        return "\n".join(parts).rstrip() + "\n"

    def format_rule(self, rule_doc: RuleDoc, mapping: RuleDocMapping) -> str:
        kind = rule_kind_label(rule_doc)
        definition = rule_definition(rule_doc)
        comment = rule_doc.head_comment

        title = f"{rule_doc.name} ({kind}"
        if rule_doc.rule.type_name:
            title += f", returns {rule_doc.rule.type_name}"
        parts = [heading(title + ")", "-")]

        if comment.text:
            parts.append(comment.text)
        if self.options.include_syntax and definition is not None:
            parts.append(textwrap.indent(serialize_rule(rule_doc.rule), _INDENT))
        for tag in comment.tags:
            label = tag.name.capitalize()
            if "\n" in tag.value:
                parts.append(f"{label}:\n{textwrap.indent(tag.value, _INDENT)}")
            else:
                parts.append(f"{label}: {tag.value}")

        references = resolve_references(rule_doc, mapping)
        if references:
            names = ", ".join(
                ref.name if ref.resolved else f"{ref.name} [{UNRESOLVED_REFERENCE}]"
                for ref in references
            )
            parts.append(f"References: {names}")
        referrers = referencing_docs(rule_doc, mapping)
        if referrers:
            parts.append(f"Referenced by: {', '.join(doc.name for doc in referrers)}")

        return "\n\n".join(parts) + "\n"

    @staticmethod
    def _format_failure(rule_doc: object, error: UnsupportedRuleKindError) -> str:
        name = describe(rule_doc)
        return f"{heading(name, '-')}\n\nERROR: {error.message}\n"
