"""
Grammar metamodel.

In-memory representation of an Xtext-style grammar: rules, their definition
trees and the rule calls linking them. Objects are plain mutable dataclasses
with identity equality (``eq=False``), so a rule is hashable and two rules
with the same name and body are still different handles. The documentation
model holds references into this structure and never copies it.

Element tree example for ``A: 'x' name=ID b=B?;``::

    Group
      Keyword('x')
      Assignment(name = RuleCall(ID))
      Assignment(b = RuleCall(B), cardinality='?')
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import StrEnum


class Cardinality(StrEnum):
    """Repetition suffix of a grammar element."""

    OPTIONAL = "?"
    ZERO_OR_MORE = "*"
    ONE_OR_MORE = "+"


class Predicate(StrEnum):
    """Syntactic predicate prefix of a grammar element."""

    SYNTACTIC = "=>"
    FIRST_TOKEN = "->"


# ---------------------------------------------------------------------------
# Elements
# ---------------------------------------------------------------------------


@dataclass(eq=False, kw_only=True)
class AbstractElement:
    """Base of every node in a rule definition tree."""

    cardinality: Cardinality | None = None
    predicate: Predicate | None = None

    def children(self) -> tuple[AbstractElement, ...]:
        """Direct sub-elements in source order."""
        return ()


@dataclass(eq=False, kw_only=True)
class Keyword(AbstractElement):
    """A literal token, e.g. ``'entity'``."""

    value: str


@dataclass(eq=False, kw_only=True)
class RuleCall(AbstractElement):
    """
    A reference to another rule.

    ``rule`` is the handle of the called rule. The reader creates the call
    before all rules are known and links it afterwards, so the field is
    mutable; once a Grammar is returned every RuleCall has a rule.
    """

    rule: AbstractRule | None = None


@dataclass(eq=False, kw_only=True)
class Assignment(AbstractElement):
    """``feature=terminal``, ``feature+=terminal`` or ``feature?=terminal``."""

    feature: str
    operator: str
    terminal: AbstractElement

    def children(self) -> tuple[AbstractElement, ...]:
        return (self.terminal,)


@dataclass(eq=False, kw_only=True)
class CrossReference(AbstractElement):
    """
    ``[Type]`` or ``[Type|Terminal]``.

    ``type_name`` names a metamodel type, not a rule. Only the explicit
    terminal (a rule call) links to a rule.
    """

    type_name: str
    terminal: AbstractElement | None = None

    def children(self) -> tuple[AbstractElement, ...]:
        return (self.terminal,) if self.terminal is not None else ()


@dataclass(eq=False, kw_only=True)
class Action(AbstractElement):
    """``{Type}`` or ``{Type.feature=current}``."""

    type_name: str
    feature: str | None = None
    operator: str | None = None


@dataclass(eq=False, kw_only=True)
class CompoundElement(AbstractElement):
    """Base of elements that hold an ordered list of sub-elements."""

    elements: list[AbstractElement] = field(default_factory=list)

    def children(self) -> tuple[AbstractElement, ...]:
        return tuple(self.elements)


@dataclass(eq=False, kw_only=True)
class Group(CompoundElement):
    """Elements matched in sequence."""


@dataclass(eq=False, kw_only=True)
class Alternatives(CompoundElement):
    """Elements separated by ``|``."""


@dataclass(eq=False, kw_only=True)
class UnorderedGroup(CompoundElement):
    """Elements separated by ``&``, matched in any order."""


@dataclass(eq=False, kw_only=True)
class CharacterRange(AbstractElement):
    """``'a'..'z'`` in terminal rules."""

    left: Keyword
    right: Keyword

    def children(self) -> tuple[AbstractElement, ...]:
        return (self.left, self.right)


@dataclass(eq=False, kw_only=True)
class Wildcard(AbstractElement):
    """``.`` in terminal rules."""


@dataclass(eq=False, kw_only=True)
class EndOfFile(AbstractElement):
    """``EOF`` in terminal rules."""


@dataclass(eq=False, kw_only=True)
class NegatedToken(AbstractElement):
    """``!token`` in terminal rules."""

    terminal: AbstractElement

    def children(self) -> tuple[AbstractElement, ...]:
        return (self.terminal,)


@dataclass(eq=False, kw_only=True)
class UntilToken(AbstractElement):
    """``-> token`` in terminal rules."""

    terminal: AbstractElement

    def children(self) -> tuple[AbstractElement, ...]:
        return (self.terminal,)


@dataclass(eq=False, kw_only=True)
class EnumLiteralDeclaration(AbstractElement):
    """``literal`` or ``literal='keyword'`` in enum rules."""

    literal: str
    keyword: Keyword | None = None

    def children(self) -> tuple[AbstractElement, ...]:
        return (self.keyword,) if self.keyword is not None else ()

    @property
    def text(self) -> str:
        """The concrete syntax of the literal (keyword value or literal name)."""
        return self.keyword.value if self.keyword is not None else self.literal


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


@dataclass(eq=False, kw_only=True)
class AbstractRule:
    """
    A named production.

    Attributes:
        name: Rule name
        alternatives: Definition tree (None only for UnresolvedRule)
        type_name: Declared ``returns`` type, if any
        comment: Raw ``/** ... */`` comment preceding the rule in source
        line: 1-indexed line of the rule name in its grammar file
    """

    name: str
    alternatives: AbstractElement | None = None
    type_name: str | None = None
    comment: str | None = None
    line: int | None = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


@dataclass(eq=False, kw_only=True, repr=False)
class ParserRule(AbstractRule):
    """A parser rule (``Name: ...;``), possibly a fragment."""

    fragment: bool = False
    hidden_tokens: list[str] = field(default_factory=list)


@dataclass(eq=False, kw_only=True, repr=False)
class TerminalRule(AbstractRule):
    """A lexer rule (``terminal NAME: ...;``), possibly a fragment."""

    fragment: bool = False


@dataclass(eq=False, kw_only=True, repr=False)
class EnumRule(AbstractRule):
    """An enumeration rule (``enum Name: a | b='b';``)."""

    @property
    def literals(self) -> list[EnumLiteralDeclaration]:
        if isinstance(self.alternatives, EnumLiteralDeclaration):
            return [self.alternatives]
        return [e for e in iter_elements(self.alternatives) if isinstance(e, EnumLiteralDeclaration)]


@dataclass(eq=False, kw_only=True, repr=False)
class UnresolvedRule(AbstractRule):
    """Stand-in handle for a called name that no known grammar defines."""


# ---------------------------------------------------------------------------
# Grammar
# ---------------------------------------------------------------------------


@dataclass(eq=False, kw_only=True)
class MetamodelDeclaration:
    """``generate name "uri" as alias`` or ``import "uri" as alias``."""

    uri: str
    name: str | None = None
    alias: str | None = None
    generated: bool = False

    def __str__(self) -> str:
        head = f'generate {self.name} "{self.uri}"' if self.generated else f'import "{self.uri}"'
        return f"{head} as {self.alias}" if self.alias else head


@dataclass(eq=False, kw_only=True)
class Grammar:
    """
    A parsed grammar.

    Attributes:
        name: Qualified grammar name (e.g. org.example.MyDsl)
        rules: Rules in declaration order
        used_grammars: Grammars named in the ``with`` clause
        metamodels: ``generate`` / ``import`` declarations
        hidden_tokens: Names from the grammar-level ``hidden(...)`` clause
        comment: Raw ``/** ... */`` comment preceding the ``grammar`` keyword
    """

    name: str
    rules: list[AbstractRule] = field(default_factory=list)
    used_grammars: list[Grammar] = field(default_factory=list)
    metamodels: list[MetamodelDeclaration] = field(default_factory=list)
    hidden_tokens: list[str] = field(default_factory=list)
    comment: str | None = None

    @property
    def simple_name(self) -> str:
        return self.name.rsplit(".", 1)[-1]

    def find_rule(self, name: str) -> AbstractRule | None:
        """Find a rule by name here, then in used grammars (depth first)."""
        for rule in self.rules:
            if rule.name == name:
                return rule
        for used in self.used_grammars:
            found = used.find_rule(name)
            if found is not None:
                return found
        return None


# ---------------------------------------------------------------------------
# Traversal
# ---------------------------------------------------------------------------


def iter_elements(element: AbstractElement | None) -> Iterator[AbstractElement]:
    """Yield ``element`` and all of its descendants in pre-order."""
    if element is None:
        return
    stack = [element]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children()))


def iter_rule_calls(element: AbstractElement | None) -> Iterator[RuleCall]:
    """Yield every RuleCall below ``element`` in pre-order, one per node."""
    for node in iter_elements(element):
        if isinstance(node, RuleCall):
            yield node
