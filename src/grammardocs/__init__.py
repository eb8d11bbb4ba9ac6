"""
grammardocs - documentation generator for Xtext grammars.

Reads a grammar, attaches each rule's head comment to it and renders the
result as Markdown, plain text or a Graphviz rule graph.
"""

from __future__ import annotations

from ._version import get_version
from .core import GrammarDoc, build_grammar_doc
from .core.errors import (
    ConfigError,
    FormatterError,
    GrammarDocsError,
    GrammarSyntaxError,
    PreconditionError,
    UnsupportedRuleKindError,
)

__version__ = get_version()

__all__ = [
    "__version__",
    "GrammarDoc",
    "build_grammar_doc",
    "GrammarDocsError",
    "GrammarSyntaxError",
    "PreconditionError",
    "UnsupportedRuleKindError",
    "FormatterError",
    "ConfigError",
]
