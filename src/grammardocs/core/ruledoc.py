"""
Documentation model for grammars.

Each rule of a grammar is wrapped in one RuleDoc variant holding the rule
handle and its head comment. The variants form a closed union::

    RuleDoc = ParserRuleDoc | TerminalRuleDoc | EnumRuleDoc

Formatters dispatch on the concrete variant with ``match``. RuleDocs hold the
rule by reference: ``doc.rule is rule`` and ``doc.alternatives is
rule.alternatives``. All documentation nodes are frozen and compare by
identity.

A GrammarDoc collects the RuleDocs of one grammar in declaration order.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import ClassVar, TypeAlias

from grammardocs.core.doccomment import DocComment, extract_head_comment
from grammardocs.core.errors import PreconditionError, UnsupportedRuleKindError
from grammardocs.core.grammar.model import (
    AbstractElement,
    AbstractRule,
    EnumLiteralDeclaration,
    EnumRule,
    Grammar,
    ParserRule,
    TerminalRule,
)

logger = logging.getLogger(__name__)


class RuleKind(StrEnum):
    """Variant tag of a RuleDoc."""

    PARSER = "parser"
    TERMINAL = "terminal"
    ENUM = "enum"


def _require(value: object, expected: type, what: str, owner: str) -> None:
    if value is None:
        raise PreconditionError(f"{owner} requires {what}, got None")
    if not isinstance(value, expected):
        raise PreconditionError(
            f"{owner} requires {what} of type {expected.__name__}, got {type(value).__name__}"
        )


@dataclass(frozen=True, eq=False, kw_only=True)
class ReferenceRuleDoc:
    """
    Documentation of a rule that other rules can reference.

    Attributes:
        rule: The documented rule (set by each variant)
        head_comment: Comment written before the rule; empty, never None
    """

    rule: AbstractRule
    head_comment: DocComment

    kind: ClassVar[RuleKind]
    rule_type: ClassVar[type[AbstractRule]] = AbstractRule

    def __post_init__(self) -> None:
        owner = type(self).__name__
        _require(self.rule, self.rule_type, "a rule", owner)
        _require(self.head_comment, DocComment, "a head comment", owner)

    @property
    def name(self) -> str:
        return self.rule.name

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.rule.name!r})"


@dataclass(frozen=True, eq=False, kw_only=True, repr=False)
class ParserRuleDoc(ReferenceRuleDoc):
    """Documentation attached to a parser rule."""

    rule: ParserRule

    kind: ClassVar[RuleKind] = RuleKind.PARSER
    rule_type: ClassVar[type[AbstractRule]] = ParserRule

    @property
    def alternatives(self) -> AbstractElement | None:
        """The rule definition, as the grammar holds it."""
        return self.rule.alternatives


@dataclass(frozen=True, eq=False, kw_only=True, repr=False)
class TerminalRuleDoc(ReferenceRuleDoc):
    """Documentation attached to a terminal (lexer) rule."""

    rule: TerminalRule

    kind: ClassVar[RuleKind] = RuleKind.TERMINAL
    rule_type: ClassVar[type[AbstractRule]] = TerminalRule

    @property
    def alternatives(self) -> AbstractElement | None:
        return self.rule.alternatives

    @property
    def is_fragment(self) -> bool:
        return self.rule.fragment


@dataclass(frozen=True, eq=False, kw_only=True, repr=False)
class EnumRuleDoc(ReferenceRuleDoc):
    """Documentation attached to an enum rule."""

    rule: EnumRule

    kind: ClassVar[RuleKind] = RuleKind.ENUM
    rule_type: ClassVar[type[AbstractRule]] = EnumRule

    @property
    def literals(self) -> list[EnumLiteralDeclaration]:
        return self.rule.literals


RuleDoc: TypeAlias = ParserRuleDoc | TerminalRuleDoc | EnumRuleDoc

# Rule handle -> its documentation; keys compare by identity
RuleDocMapping: TypeAlias = Mapping[AbstractRule, RuleDoc]


def create_rule_doc(rule: AbstractRule, head_comment: DocComment) -> RuleDoc:
    """
    Wrap a rule in the RuleDoc variant for its kind.

    Raises:
        PreconditionError: If rule or head_comment is None
        UnsupportedRuleKindError: If the rule kind has no RuleDoc variant
    """
    match rule:
        case ParserRule():
            return ParserRuleDoc(rule=rule, head_comment=head_comment)
        case TerminalRule():
            return TerminalRuleDoc(rule=rule, head_comment=head_comment)
        case EnumRule():
            return EnumRuleDoc(rule=rule, head_comment=head_comment)
        case None:
            raise PreconditionError("Cannot document a rule that is None")
        case _:
            raise UnsupportedRuleKindError(
                f"Rule {rule.name!r} has unsupported kind {type(rule).__name__}"
            )


@dataclass(frozen=True, eq=False, kw_only=True)
class GrammarDoc:
    """
    Documentation of a whole grammar.

    Attributes:
        name: Qualified grammar name
        rules: Rule documentation in declaration order
        imports: Names of the grammars this one uses (``with`` clause)
        metamodels: ``generate`` / ``import`` declarations as written
        head_comment: Comment written before the ``grammar`` keyword
    """

    name: str
    rules: tuple[RuleDoc, ...] = ()
    imports: tuple[str, ...] = ()
    metamodels: tuple[str, ...] = ()
    head_comment: DocComment = field(default_factory=DocComment)

    def __post_init__(self) -> None:
        if not self.name:
            raise PreconditionError("GrammarDoc requires a grammar name")
        _require(self.head_comment, DocComment, "a head comment", "GrammarDoc")
        # Accept any iterable, store tuples
        object.__setattr__(self, "rules", tuple(self.rules))
        object.__setattr__(self, "imports", tuple(self.imports))
        object.__setattr__(self, "metamodels", tuple(self.metamodels))

        seen: set[int] = set()
        for doc in self.rules:
            if doc is None:
                raise PreconditionError(f"GrammarDoc {self.name} contains a None rule doc")
            rule = getattr(doc, "rule", None)
            if rule is not None:
                if id(rule) in seen:
                    raise PreconditionError(
                        f"Rule {rule.name!r} is documented twice in grammar {self.name}"
                    )
                seen.add(id(rule))

    @property
    def simple_name(self) -> str:
        return self.name.rsplit(".", 1)[-1]

    def rule_mapping(self) -> RuleDocMapping:
        """Read-only mapping from rule handle to its documentation."""
        return MappingProxyType({doc.rule: doc for doc in self.rules if hasattr(doc, "rule")})

    def find(self, name: str) -> RuleDoc | None:
        """The documentation of the rule with the given name, if any."""
        for doc in self.rules:
            if getattr(doc, "name", None) == name:
                return doc
        return None


def build_grammar_doc(grammar: Grammar) -> GrammarDoc:
    """
    Build the documentation model of a grammar.

    Every rule of the grammar gets exactly one RuleDoc; rules inherited from
    used grammars are not documented here. A rule of a kind without a RuleDoc
    variant is logged and kept as a plain ReferenceRuleDoc, which formatters
    render as an unsupported rule.
    """
    rules: list[RuleDoc | ReferenceRuleDoc] = []
    for rule in grammar.rules:
        head_comment = extract_head_comment(rule)
        try:
            rules.append(create_rule_doc(rule, head_comment))
        except UnsupportedRuleKindError as e:
            logger.warning("Grammar %s: %s", grammar.name, e.message)
            rules.append(ReferenceRuleDoc(rule=rule, head_comment=head_comment))
    return GrammarDoc(
        name=grammar.name,
        rules=rules,
        imports=tuple(g.name for g in grammar.used_grammars),
        metamodels=tuple(str(m) for m in grammar.metamodels),
        head_comment=extract_head_comment(grammar),
    )
