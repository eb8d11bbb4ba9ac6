"""
Grammar metamodel, reader and serializer.

Usage:
    from grammardocs.core.grammar import read_grammar_file, serialize_rule

    grammar = read_grammar_file("MyDsl.xtext")
    for rule in grammar.rules:
        print(serialize_rule(rule))
"""

from grammardocs.core.grammar.model import (
    AbstractElement,
    AbstractRule,
    Action,
    Alternatives,
    Assignment,
    Cardinality,
    CharacterRange,
    CrossReference,
    EndOfFile,
    EnumLiteralDeclaration,
    EnumRule,
    Grammar,
    Group,
    Keyword,
    MetamodelDeclaration,
    NegatedToken,
    ParserRule,
    Predicate,
    RuleCall,
    TerminalRule,
    UnorderedGroup,
    UnresolvedRule,
    UntilToken,
    Wildcard,
    iter_elements,
    iter_rule_calls,
)
from grammardocs.core.grammar.reader import GrammarReader, read_grammar, read_grammar_file
from grammardocs.core.grammar.serializer import serialize_element, serialize_rule

__all__ = [
    "AbstractElement",
    "AbstractRule",
    "Action",
    "Alternatives",
    "Assignment",
    "Cardinality",
    "CharacterRange",
    "CrossReference",
    "EndOfFile",
    "EnumLiteralDeclaration",
    "EnumRule",
    "Grammar",
    "GrammarReader",
    "Group",
    "Keyword",
    "MetamodelDeclaration",
    "NegatedToken",
    "ParserRule",
    "Predicate",
    "RuleCall",
    "TerminalRule",
    "UnorderedGroup",
    "UnresolvedRule",
    "UntilToken",
    "Wildcard",
    "iter_elements",
    "iter_rule_calls",
    "read_grammar",
    "read_grammar_file",
    "serialize_element",
    "serialize_rule",
]
