"""Core grammardocs functionality: grammar reading, doc comments, documentation model, errors."""

from .doccomment import DocComment, DocTag, extract_head_comment, parse_doc_comment
from .errors import (
    ConfigError,
    ErrorContext,
    FormatterError,
    GrammarDocsError,
    GrammarSyntaxError,
    PreconditionError,
    UnsupportedRuleKindError,
)
from .ruledoc import (
    EnumRuleDoc,
    GrammarDoc,
    ParserRuleDoc,
    ReferenceRuleDoc,
    RuleDoc,
    RuleDocMapping,
    RuleKind,
    TerminalRuleDoc,
    build_grammar_doc,
    create_rule_doc,
)

__all__ = [
    "DocComment",
    "DocTag",
    "extract_head_comment",
    "parse_doc_comment",
    "GrammarDocsError",
    "GrammarSyntaxError",
    "PreconditionError",
    "UnsupportedRuleKindError",
    "FormatterError",
    "ConfigError",
    "ErrorContext",
    "ReferenceRuleDoc",
    "ParserRuleDoc",
    "TerminalRuleDoc",
    "EnumRuleDoc",
    "RuleDoc",
    "RuleDocMapping",
    "RuleKind",
    "GrammarDoc",
    "build_grammar_doc",
    "create_rule_doc",
]
