"""
Head comments of rules and grammars.

A head comment is the ``/** ... */`` block written directly before a rule
(or before the ``grammar`` keyword). Its body is free text followed by
optional block tags, one per line::

    /**
     * A variable declaration.
     *
     * The initial value is optional.
     *
     * @example
     *     var x : INT := 1;
     * @see Expression
     * @since 1.2
     */
"""

from __future__ import annotations

import re
import textwrap

from pydantic import BaseModel, ConfigDict

from grammardocs.core.grammar.model import AbstractRule, Grammar

_TAG_RE = re.compile(r"^@([A-Za-z][\w-]*)\s*(.*)$")
_SENTENCE_RE = re.compile(r"^(.+?[.!?])(?:\s|$)")


class DocTag(BaseModel):
    """A block tag such as ``@see Expression``."""

    name: str
    value: str = ""

    model_config = ConfigDict(frozen=True)


class DocComment(BaseModel):
    """
    Documentation text attached to one rule or grammar.

    Attributes:
        text: Body text without comment delimiters; paragraphs are separated
            by blank lines
        tags: Block tags in source order
    """

    text: str = ""
    tags: tuple[DocTag, ...] = ()

    model_config = ConfigDict(frozen=True)

    @property
    def is_empty(self) -> bool:
        return not self.text and not self.tags

    @property
    def summary(self) -> str:
        """First sentence of the first paragraph."""
        if not self.text:
            return ""
        paragraph = " ".join(self.text.split("\n\n", 1)[0].split())
        match = _SENTENCE_RE.match(paragraph)
        return match.group(1) if match else paragraph

    def tag_values(self, name: str) -> list[str]:
        """Values of every tag with the given name, in order."""
        return [tag.value for tag in self.tags if tag.name == name]


def _strip_delimiters(raw: str) -> list[str]:
    body = raw.strip()
    if body.startswith("/**"):
        body = body[3:]
    elif body.startswith("/*"):
        body = body[2:]
    if body.endswith("*/"):
        body = body[:-2]

    lines: list[str] = []
    for line in body.splitlines():
        stripped = line.lstrip()
        if stripped.startswith("*"):
            stripped = stripped[1:]
            # Keep indentation beyond the single space after the star
            line = stripped[1:] if stripped.startswith(" ") else stripped
        lines.append(line.rstrip())
    return lines


def _join_block(lines: list[str]) -> str:
    return textwrap.dedent("\n".join(lines)).strip("\n").rstrip()


def parse_doc_comment(raw: str | None) -> DocComment:
    """
    Parse a raw comment into a DocComment.

    ``None`` and comments without content give an empty DocComment.
    """
    if raw is None:
        return DocComment()

    text_lines: list[str] = []
    tags: list[tuple[str, str, list[str]]] = []
    for line in _strip_delimiters(raw):
        match = _TAG_RE.match(line.strip())
        if match:
            tags.append((match.group(1), match.group(2).strip(), []))
        elif tags:
            tags[-1][2].append(line)
        else:
            text_lines.append(line)

    doc_tags = []
    for name, first, rest in tags:
        continuation = _join_block(rest)
        value = "\n".join(part for part in (first, continuation) if part)
        doc_tags.append(DocTag(name=name, value=value))

    text = _join_block(text_lines).strip()
    # Collapse runs of blank lines to a single paragraph break
    text = re.sub(r"\n\s*\n+", "\n\n", text)
    return DocComment(text=text, tags=tuple(doc_tags))


def extract_head_comment(element: AbstractRule | Grammar) -> DocComment:
    """Head comment of a rule or grammar, empty when it has none."""
    return parse_doc_comment(element.comment)
