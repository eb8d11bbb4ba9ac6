"""
Error types for grammar reading, documentation model construction and formatting.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class GrammarDocsError(Exception):
    """Base exception for all grammardocs errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message


class GrammarSyntaxError(GrammarDocsError):
    """
    Raised when grammar text cannot be tokenized or parsed.

    Examples:
    - Unterminated string or comment
    - Missing ';' at the end of a rule
    - Unexpected token inside a rule body
    """

    pass


class PreconditionError(GrammarDocsError):
    """
    Raised when a documentation node is constructed without a required part.

    Examples:
    - RuleDoc without a rule handle
    - RuleDoc without a head comment
    - Rule handle of the wrong kind for the RuleDoc variant
    - The same rule listed twice in a GrammarDoc
    """

    pass


class UnsupportedRuleKindError(GrammarDocsError):
    """
    Raised when rule-kind dispatch meets a rule or RuleDoc it does not know.

    Grammar-level formatting catches this per rule and marks the failing rule
    in its output; the remaining rules are still rendered.
    """

    pass


class FormatterError(GrammarDocsError):
    """
    Raised when a formatter cannot be selected or registered.

    Examples:
    - Unknown formatter name in configuration
    - Registering a name twice
    """

    pass


class ConfigError(GrammarDocsError):
    """
    Raised when the configuration file cannot be read or is invalid.
    """

    pass


@dataclass
class ErrorContext:
    """
    Context information for an error, including source location.

    Attributes:
        file: Path to the grammar file where error occurred
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        snippet: Optional source lines around the error, starting two lines before it
        grammar: Optional name of the grammar being read
        length: Width of the offending text, underlined in the snippet
    """

    file: Path
    line: int
    column: int
    snippet: str | None = None
    grammar: str | None = None
    length: int = 1

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "MyDsl.xtext:10:5 in grammar org.example.MyDsl"
        """
        location = f"{self.file}:{self.line}:{self.column}"
        if self.grammar:
            location += f" in grammar {self.grammar}"

        if self.snippet:
            return f"{location}\n{self._format_snippet()}"
        return location

    def _format_snippet(self) -> str:
        """Format code snippet with line numbers and error marker."""
        if not self.snippet:
            return ""

        lines = self.snippet.split("\n")
        formatted = []

        start_line = max(1, self.line - 2)

        for i, line in enumerate(lines):
            line_num = start_line + i
            prefix = f"{line_num:4d} | "
            formatted.append(prefix + line)

            if line_num == self.line:
                marker_pos = len(prefix) + self.column - 1
                formatted.append(" " * marker_pos + "^" * max(self.length, 1))

        return "\n".join(formatted)


def source_snippet(source: str, line: int, context: int = 2) -> str:
    """Return the lines around ``line`` in the layout ErrorContext expects."""
    lines = source.splitlines()
    start = max(1, line - context)
    end = min(len(lines), line + context)
    return "\n".join(lines[start - 1 : end])


def make_syntax_error(
    message: str,
    file: Path,
    line: int,
    column: int,
    snippet: str | None = None,
    grammar: str | None = None,
    length: int = 1,
) -> GrammarSyntaxError:
    """
    Helper to create a GrammarSyntaxError with context.

    Args:
        message: Error description
        file: Grammar file path
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        snippet: Optional code snippet
        grammar: Optional grammar name
        length: Width of the offending text

    Returns:
        GrammarSyntaxError with context attached
    """
    context = ErrorContext(
        file=file, line=line, column=column, snippet=snippet, grammar=grammar, length=length
    )
    return GrammarSyntaxError(message, context)
