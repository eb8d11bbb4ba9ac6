"""
Documentation generation.

Ties the pieces together: read a grammar file, build its documentation
model, format it with the configured formatter and write the artifacts.
Formatters never touch the filesystem; all I/O happens here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from grammardocs.core.config import DocsConfig
from grammardocs.core.errors import GrammarDocsError
from grammardocs.core.grammar import read_grammar_file
from grammardocs.core.ruledoc import GrammarDoc, build_grammar_doc
from grammardocs.formatters import GrammarDocsFormatter, get_formatter

logger = logging.getLogger(__name__)

GRAPH_EXTENSION = "dot"


@dataclass
class GenerationResult:
    """Outcome of documenting one grammar."""

    grammar_name: str
    rule_count: int
    document: Path
    graph: Path | None = None
    written: list[Path] = field(default_factory=list)


def load_grammar_doc(grammar_path: Path, config: DocsConfig | None = None) -> GrammarDoc:
    """Read a grammar file and build its documentation model."""
    config = config or DocsConfig()
    search_paths = [grammar_path.parent, *config.search_paths]
    grammar = read_grammar_file(grammar_path, search_paths=search_paths)
    return build_grammar_doc(grammar)


def create_formatter(config: DocsConfig) -> GrammarDocsFormatter:
    return get_formatter(config.formatter, config.formatter_options())


def generate_docs(grammar_path: Path, config: DocsConfig | None = None) -> GenerationResult:
    """
    Document one grammar file.

    Writes ``<simple_name>.<ext>`` into ``config.output_dir`` and, when graph
    output is enabled, ``<simple_name>.dot`` next to it. The graph file is
    skipped when the formatter already produces DOT.

    Raises:
        GrammarSyntaxError: If the grammar cannot be parsed
        FormatterError: If the configured formatter does not exist
        GrammarDocsError: If the grammar cannot be read or an artifact cannot be written
    """
    config = config or DocsConfig()
    formatter = create_formatter(config)
    grammar_doc = load_grammar_doc(grammar_path, config)

    output_dir = config.output_dir
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise GrammarDocsError(
            f"Cannot create output directory {output_dir}: {e.strerror or e}"
        ) from e

    extension = formatter.output_file_extension()
    document = output_dir / f"{grammar_doc.simple_name}.{extension}"
    _write(document, formatter.format_grammar(grammar_doc))
    result = GenerationResult(
        grammar_name=grammar_doc.name,
        rule_count=len(grammar_doc.rules),
        document=document,
        written=[document],
    )

    if config.graph.enabled and extension != GRAPH_EXTENSION:
        graph = output_dir / f"{grammar_doc.simple_name}.{GRAPH_EXTENSION}"
        _write(graph, formatter.format_graph(grammar_doc))
        result.graph = graph
        result.written.append(graph)

    logger.info(
        "Documented grammar %s (%d rules) in %s",
        grammar_doc.name,
        result.rule_count,
        output_dir,
    )
    return result


def render_graph(grammar_path: Path, config: DocsConfig | None = None) -> str:
    """DOT graph of one grammar file, without writing anything."""
    config = config or DocsConfig()
    formatter = create_formatter(config)
    return formatter.format_graph(load_grammar_doc(grammar_path, config))


def render_rule(grammar_path: Path, rule_name: str, config: DocsConfig | None = None) -> str:
    """
    Documentation of a single rule.

    Raises:
        GrammarDocsError: If the grammar has no rule with that name
    """
    config = config or DocsConfig()
    formatter = create_formatter(config)
    grammar_doc = load_grammar_doc(grammar_path, config)

    rule_doc = grammar_doc.find(rule_name)
    if rule_doc is None:
        available = ", ".join(doc.name for doc in grammar_doc.rules)
        raise GrammarDocsError(
            f"Grammar {grammar_doc.name} has no rule '{rule_name}'. Available rules: {available}"
        )
    return formatter.format_rule(rule_doc, grammar_doc.rule_mapping())


def _write(path: Path, content: str) -> None:
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise GrammarDocsError(f"Cannot write {path}: {e.strerror or e}") from e
    logger.info("Wrote %s", path)
