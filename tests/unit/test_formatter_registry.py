"""Tests for formatter selection by name."""

from __future__ import annotations

import pytest

from grammardocs.core.errors import FormatterError
from grammardocs.core.ruledoc import GrammarDoc, RuleDoc, RuleDocMapping
from grammardocs.formatters import (
    DotFormatter,
    FormatterOptions,
    FormatterRegistry,
    MarkdownFormatter,
    PlainTextFormatter,
    get_formatter,
    list_formatters,
)


class JsonLinesFormatter:
    """One line per rule."""

    def __init__(self, options: FormatterOptions | None = None) -> None:
        self.options = options

    def output_file_extension(self) -> str:
        return "jsonl"

    def format_grammar(self, grammar_doc: GrammarDoc) -> str:
        mapping = grammar_doc.rule_mapping()
        return "".join(self.format_rule(doc, mapping) for doc in grammar_doc.rules)

    def format_graph(self, grammar_doc: GrammarDoc) -> str:
        return ""

    def format_rule(self, rule_doc: RuleDoc, mapping: RuleDocMapping) -> str:
        return f'{{"name": "{rule_doc.name}"}}\n'


class NotAFormatter:
    def format_grammar(self, grammar_doc: GrammarDoc) -> str:
        return ""


class TestGlobalRegistry:
    def test_builtin_formatters(self) -> None:
        assert list_formatters() == ["dot", "markdown", "text"]

    @pytest.mark.parametrize(
        ("name", "formatter_class"),
        [("markdown", MarkdownFormatter), ("text", PlainTextFormatter), ("dot", DotFormatter)],
    )
    def test_get_by_name(self, name: str, formatter_class: type) -> None:
        assert isinstance(get_formatter(name), formatter_class)

    def test_options_passed_through(self) -> None:
        options = FormatterOptions(include_syntax=False)
        assert get_formatter("markdown", options).options is options

    def test_unknown_name(self) -> None:
        with pytest.raises(FormatterError) as exc_info:
            get_formatter("html")
        assert "Formatter 'html' not found" in exc_info.value.message
        assert "dot, markdown, text" in exc_info.value.message


class TestFormatterRegistry:
    def test_register_custom_formatter(self, simple_doc: GrammarDoc) -> None:
        registry = FormatterRegistry()
        registry.register("jsonl", JsonLinesFormatter)
        formatter = registry.get("jsonl")
        assert formatter.output_file_extension() == "jsonl"
        assert formatter.format_grammar(simple_doc) == '{"name": "A"}\n{"name": "B"}\n'

    def test_duplicate_name(self) -> None:
        registry = FormatterRegistry()
        registry.register("jsonl", JsonLinesFormatter)
        with pytest.raises(FormatterError, match="already registered"):
            registry.register("jsonl", JsonLinesFormatter)

    def test_incomplete_class_rejected(self) -> None:
        with pytest.raises(FormatterError, match="must implement"):
            FormatterRegistry().register("bad", NotAFormatter)  # type: ignore[arg-type]

    def test_describe(self) -> None:
        registry = FormatterRegistry()
        registry.register("jsonl", JsonLinesFormatter)
        (info,) = registry.describe()
        assert (info.name, info.extension, info.description) == ("jsonl", "jsonl", "One line per rule.")
