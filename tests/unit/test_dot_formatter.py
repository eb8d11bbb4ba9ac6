"""Tests for the DOT formatter."""

from __future__ import annotations

from grammardocs.core.ruledoc import GrammarDoc
from grammardocs.formatters import DotFormatter, FormatterOptions, GrammarDocsFormatter


class TestDotFormatter:
    def test_contract(self) -> None:
        formatter = DotFormatter()
        assert isinstance(formatter, GrammarDocsFormatter)
        assert formatter.output_file_extension() == "dot"

    def test_grammar_is_the_graph(self, expressions_doc: GrammarDoc) -> None:
        formatter = DotFormatter()
        assert formatter.format_grammar(expressions_doc) == formatter.format_graph(
            expressions_doc
        )
        assert formatter.format_grammar(expressions_doc).startswith('digraph "Expressions" {\n')

    def test_rule_statements(self, simple_doc: GrammarDoc) -> None:
        formatter = DotFormatter()
        a_doc = simple_doc.rules[0]
        assert formatter.format_rule(a_doc, simple_doc.rule_mapping()) == (
            '"A" [label="A", shape=box];\n"A" -> "B";\n'
        )

    def test_rule_reference_outside_mapping(self, simple_doc: GrammarDoc) -> None:
        text = DotFormatter().format_rule(simple_doc.rules[0], {})
        assert '"A" -> "B" [style=dashed];' in text

    def test_options(self, expressions_doc: GrammarDoc) -> None:
        formatter = DotFormatter(FormatterOptions(deduplicate_edges=True, graph_direction="BT"))
        dot = formatter.format_graph(expressions_doc)
        assert "rankdir=BT;" in dot
        assert dot.count('"Expression" -> "Primary";') == 1

    def test_duplicate_edges_kept_by_default(self, expressions_doc: GrammarDoc) -> None:
        dot = DotFormatter().format_graph(expressions_doc)
        assert dot.count('"Expression" -> "Primary";') == 2
