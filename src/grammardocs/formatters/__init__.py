"""
Formatter plugin system.

Formatters turn a GrammarDoc into text. The built-in formatters are
registered under ``markdown``, ``text`` and ``dot``; other formatters can be
added with ``register_formatter`` and are then selectable by name from
configuration and the CLI.
"""

from __future__ import annotations

from dataclasses import dataclass

from grammardocs.core.errors import FormatterError
from grammardocs.formatters.base import (
    GRAPH_DIRECTIONS,
    UNRESOLVED_REFERENCE,
    FormatterOptions,
    GrammarDocsFormatter,
)
from grammardocs.formatters.dot import DotFormatter
from grammardocs.formatters.markdown import MarkdownFormatter
from grammardocs.formatters.text import PlainTextFormatter


@dataclass
class FormatterInfo:
    """
    Describes a registered formatter.

    Used for the ``formats`` command.
    """

    name: str
    description: str
    extension: str


class FormatterRegistry:
    """
    Registry of formatter classes.

    A formatter class is instantiated with a FormatterOptions and must
    provide the GrammarDocsFormatter operations.
    """

    def __init__(self) -> None:
        self._formatters: dict[str, type[GrammarDocsFormatter]] = {}

    def register(self, name: str, formatter_class: type[GrammarDocsFormatter]) -> None:
        """
        Register a formatter class.

        Args:
            name: Formatter name (used in config: ``formatter = "<name>"``)
            formatter_class: Class implementing GrammarDocsFormatter

        Raises:
            FormatterError: If name already registered or class invalid
        """
        if name in self._formatters:
            raise FormatterError(
                f"Formatter '{name}' is already registered. "
                f"Cannot register {formatter_class.__name__}."
            )

        if not isinstance(formatter_class, type) or not issubclass(
            formatter_class, GrammarDocsFormatter
        ):
            raise FormatterError(
                f"Formatter class {getattr(formatter_class, '__name__', formatter_class)!r} "
                "must implement format_grammar, format_graph, format_rule "
                "and output_file_extension"
            )

        self._formatters[name] = formatter_class

    def get(self, name: str, options: FormatterOptions | None = None) -> GrammarDocsFormatter:
        """
        Get a formatter instance by name.

        Raises:
            FormatterError: If formatter not found
        """
        if name not in self._formatters:
            available = ", ".join(self.list_formatters())
            raise FormatterError(f"Formatter '{name}' not found. Available formatters: {available}")

        return self._formatters[name](options or FormatterOptions())

    def list_formatters(self) -> list[str]:
        """Registered formatter names, sorted."""
        return sorted(self._formatters)

    def describe(self) -> list[FormatterInfo]:
        infos = []
        for name in self.list_formatters():
            formatter_class = self._formatters[name]
            doc = (formatter_class.__doc__ or "").strip().splitlines()
            infos.append(
                FormatterInfo(
                    name=name,
                    description=doc[0] if doc else "No description provided",
                    extension=formatter_class(FormatterOptions()).output_file_extension(),
                )
            )
        return infos


# Global registry instance
_registry: FormatterRegistry | None = None


def get_registry() -> FormatterRegistry:
    """
    Get the global formatter registry.

    The built-in formatters are registered on first call.
    """
    global _registry
    if _registry is None:
        _registry = FormatterRegistry()
        _registry.register("markdown", MarkdownFormatter)
        _registry.register("text", PlainTextFormatter)
        _registry.register("dot", DotFormatter)
    return _registry


def register_formatter(name: str, formatter_class: type[GrammarDocsFormatter]) -> None:
    """Register a formatter in the global registry."""
    get_registry().register(name, formatter_class)


def get_formatter(name: str, options: FormatterOptions | None = None) -> GrammarDocsFormatter:
    """
    Get a formatter instance by name.

    Raises:
        FormatterError: If formatter not found
    """
    return get_registry().get(name, options)


def list_formatters() -> list[str]:
    return get_registry().list_formatters()


__all__ = [
    "GRAPH_DIRECTIONS",
    "UNRESOLVED_REFERENCE",
    "DotFormatter",
    "FormatterInfo",
    "FormatterOptions",
    "FormatterRegistry",
    "GrammarDocsFormatter",
    "MarkdownFormatter",
    "PlainTextFormatter",
    "get_formatter",
    "get_registry",
    "list_formatters",
    "register_formatter",
]
