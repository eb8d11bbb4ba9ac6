"""Tests for the Markdown formatter."""

from __future__ import annotations

import logging

import pytest

from grammardocs.core.doccomment import DocComment
from grammardocs.core.errors import UnsupportedRuleKindError
from grammardocs.core.grammar import UnresolvedRule, read_grammar
from grammardocs.core.ruledoc import GrammarDoc, ReferenceRuleDoc, build_grammar_doc
from grammardocs.formatters import FormatterOptions, GrammarDocsFormatter, MarkdownFormatter
from grammardocs.formatters.graph import render_dot
from grammardocs.formatters.markdown import anchor, rule_anchors


@pytest.fixture
def formatter() -> MarkdownFormatter:
    return MarkdownFormatter()


class TestFormatterContract:
    def test_is_a_formatter(self, formatter: MarkdownFormatter) -> None:
        assert isinstance(formatter, GrammarDocsFormatter)

    def test_extension_is_stable(self, formatter: MarkdownFormatter) -> None:
        assert formatter.output_file_extension() == "md"
        assert formatter.output_file_extension() == "md"

    def test_graph_is_dot(self, formatter: MarkdownFormatter, simple_doc: GrammarDoc) -> None:
        assert formatter.format_graph(simple_doc) == render_dot(simple_doc, FormatterOptions())


class TestFormatRule:
    def test_rule_with_reference(
        self, formatter: MarkdownFormatter, simple_doc: GrammarDoc
    ) -> None:
        a_doc = simple_doc.rules[0]
        text = formatter.format_rule(a_doc, simple_doc.rule_mapping())
        assert text.startswith("### A\n")
        assert "_Parser rule_" in text
        assert "Rule A" in text
        assert "```xtext\nA:\n    'x' B;\n```" in text
        assert "**References:** [B](#b)" in text
        assert "Referenced by" not in text

    def test_referenced_by(self, formatter: MarkdownFormatter, simple_doc: GrammarDoc) -> None:
        b_doc = simple_doc.rules[1]
        text = formatter.format_rule(b_doc, simple_doc.rule_mapping())
        assert "Rule B" in text
        assert "**Referenced by:** [A](#a)" in text
        assert "**References:**" not in text

    def test_missing_reference_renders_placeholder(
        self, formatter: MarkdownFormatter, simple_doc: GrammarDoc
    ) -> None:
        mapping: dict = {}
        text = formatter.format_rule(simple_doc.rules[0], mapping)
        assert "`B` _(unresolved reference)_" in text
        assert mapping == {}

    def test_self_reference_listed_once(self, formatter: MarkdownFormatter) -> None:
        grammar_doc = build_grammar_doc(read_grammar("grammar a.G\nA: 'x' A?;"))
        text = formatter.format_rule(grammar_doc.rules[0], grammar_doc.rule_mapping())
        assert "**References:** [A](#a)\n" in text
        assert "**Referenced by:** [A](#a)" in text

    def test_without_syntax(self, simple_doc: GrammarDoc) -> None:
        formatter = MarkdownFormatter(FormatterOptions(include_syntax=False))
        text = formatter.format_rule(simple_doc.rules[0], simple_doc.rule_mapping())
        assert "```xtext" not in text

    def test_undocumented_rule(self, formatter: MarkdownFormatter) -> None:
        grammar_doc = build_grammar_doc(read_grammar("grammar a.G\nA: 'a';"))
        text = formatter.format_rule(grammar_doc.rules[0], grammar_doc.rule_mapping())
        assert "_No documentation._" in text

    def test_tags(self, formatter: MarkdownFormatter, expressions_doc: GrammarDoc) -> None:
        mapping = expressions_doc.rule_mapping()
        text = formatter.format_rule(expressions_doc.find("Declaration"), mapping)
        assert "A variable declaration.\n\nThe initial value is optional." in text
        assert "**Example:**\n\n```\nvar x : int := 1;\n```" in text
        assert "**See also:** Expression" in text
        assert "**Since:** 1.2" in text

    def test_deprecated_and_returns(
        self, formatter: MarkdownFormatter, expressions_doc: GrammarDoc
    ) -> None:
        text = formatter.format_rule(
            expressions_doc.find("Primary"), expressions_doc.rule_mapping()
        )
        assert "_Parser rule_ returning `Expression`" in text
        assert "**Deprecated:** Use Expression directly." in text
        assert "`INT` _(unresolved reference)_" in text

    def test_kind_labels(self, formatter: MarkdownFormatter, expressions_doc: GrammarDoc) -> None:
        mapping = expressions_doc.rule_mapping()
        assert "_Terminal fragment_" in formatter.format_rule(expressions_doc.find("DIGIT"), mapping)
        assert "_Terminal rule_" in formatter.format_rule(expressions_doc.find("HEX"), mapping)
        assert "_Enum rule_" in formatter.format_rule(expressions_doc.find("Type"), mapping)

    def test_unsupported_kind_raises(self, formatter: MarkdownFormatter) -> None:
        odd = ReferenceRuleDoc(rule=UnresolvedRule(name="Odd"), head_comment=DocComment())
        with pytest.raises(UnsupportedRuleKindError):
            formatter.format_rule(odd, {})


class TestFormatGrammar:
    def test_structure(self, formatter: MarkdownFormatter, simple_doc: GrammarDoc) -> None:
        text = formatter.format_grammar(simple_doc)
        assert text.startswith("# Grammar `org.example.Simple`\n")
        assert "## Contents" in text
        assert "| [A](#a) | parser rule | Rule A |" in text
        assert "| [B](#b) | parser rule | Rule B |" in text
        assert text.index("### A") < text.index("### B")
        assert text.endswith("\n")

    def test_grammar_header(self, formatter: MarkdownFormatter, expressions_doc: GrammarDoc) -> None:
        text = formatter.format_grammar(expressions_doc)
        assert "A small expression language." in text
        assert "**Uses:** `org.eclipse.xtext.common.Terminals`" in text
        assert '- `generate expressions "http://www.example.org/expressions/Expressions"`' in text

    def test_every_rule_rendered(
        self, formatter: MarkdownFormatter, expressions_doc: GrammarDoc
    ) -> None:
        text = formatter.format_grammar(expressions_doc)
        for rule_doc in expressions_doc.rules:
            assert f"### {rule_doc.name}\n" in text

    def test_empty_grammar(self, formatter: MarkdownFormatter) -> None:
        text = formatter.format_grammar(GrammarDoc(name="a.Empty"))
        assert "_This grammar defines no rules._" in text

    def test_unsupported_rule_is_marked(
        self,
        formatter: MarkdownFormatter,
        simple_doc: GrammarDoc,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        odd = ReferenceRuleDoc(rule=UnresolvedRule(name="Odd"), head_comment=DocComment())
        grammar_doc = GrammarDoc(name="a.Mixed", rules=[*simple_doc.rules, odd])
        with caplog.at_level(logging.WARNING, logger="grammardocs"):
            text = formatter.format_grammar(grammar_doc)
        assert "> **Error:** documentation for `Odd` could not be generated" in text
        assert "| Odd | **unsupported** | |" in text
        assert "### A" in text and "### B" in text
        assert caplog.text.count("unsupported rule kind") == 1


class TestAnchor:
    def test_lowercases(self) -> None:
        assert anchor("QualifiedName") == "qualifiedname"

    def test_keeps_underscores(self) -> None:
        assert anchor("ML_COMMENT") == "ml_comment"

    def test_case_variants_get_distinct_anchors(self, formatter: MarkdownFormatter) -> None:
        grammar_doc = build_grammar_doc(
            read_grammar("grammar a.G\nA: Foo foo;\nFoo: 'F';\nfoo: 'f';")
        )
        text = formatter.format_grammar(grammar_doc)
        assert "| [Foo](#foo) |" in text
        assert "| [foo](#foo-1) |" in text
        assert "**References:** [Foo](#foo), [foo](#foo-1)" in text

    def test_page_headings_are_taken(self) -> None:
        grammar_doc = build_grammar_doc(
            read_grammar("grammar a.G\nRules: Contents;\nContents: 'c';")
        )
        anchors = rule_anchors(grammar_doc.rule_mapping())
        assert [anchors[id(doc)] for doc in grammar_doc.rules] == ["rules-1", "contents-1"]

    def test_rule_links_use_the_same_anchors(self, formatter: MarkdownFormatter) -> None:
        grammar_doc = build_grammar_doc(
            read_grammar("grammar a.G\nFoo: 'F';\nfoo: 'f' A;\nA: 'a';")
        )
        a_doc = grammar_doc.find("A")
        text = formatter.format_rule(a_doc, grammar_doc.rule_mapping())
        assert "**Referenced by:** [foo](#foo-1)" in text
