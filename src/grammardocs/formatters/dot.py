"""
DOT formatter.

The whole output is the rule graph, so ``format_grammar`` and
``format_graph`` agree; ``format_rule`` gives the statements one rule
contributes to it.
"""

from __future__ import annotations

from grammardocs.core.ruledoc import GrammarDoc, RuleDoc, RuleDocMapping
from grammardocs.formatters.base import FormatterOptions
from grammardocs.formatters.graph import render_dot, render_rule_statements


class DotFormatter:
    """Formats grammar documentation as a Graphviz digraph."""

    name = "dot"

    def __init__(self, options: FormatterOptions | None = None) -> None:
        self.options = options or FormatterOptions()

    def output_file_extension(self) -> str:
        return "dot"

    def format_grammar(self, grammar_doc: GrammarDoc) -> str:
        return render_dot(grammar_doc, self.options)

    def format_graph(self, grammar_doc: GrammarDoc) -> str:
        return render_dot(grammar_doc, self.options)

    def format_rule(self, rule_doc: RuleDoc, mapping: RuleDocMapping) -> str:
        return "\n".join(render_rule_statements(rule_doc, mapping, self.options)) + "\n"
