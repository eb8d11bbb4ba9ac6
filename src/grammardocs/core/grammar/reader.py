"""
Recursive descent reader for Xtext grammar files.

Grammar of the supported subset:
    grammar_file  → DOC? "grammar" qname ("with" qname ("," qname)*)? hidden? metamodel* rule*
    metamodel     → "generate" ID STRING ("as" ID)? | "import" STRING ("as" ID)?
    rule          → DOC? annotation* (parser_rule | terminal_rule | enum_rule)
    parser_rule   → "fragment"? ID ("returns" type_ref)? hidden? ":" alternatives ";"
    terminal_rule → "terminal" "fragment"? ID ("returns" type_ref)? ":" alternatives ";"
    enum_rule     → "enum" ID ("returns" type_ref)? ":" enum_literal ("|" enum_literal)* ";"
    alternatives  → unordered ("|" unordered)*
    unordered     → group ("&" group)*
    group         → token+
    token         → action | predicate? (assignment | atom) cardinality?
    assignment    → ID ("=" | "+=" | "?=") (STRING | rule_call | cross_ref | "(" alternatives ")")
    cross_ref     → "[" type_ref ("|" (STRING | rule_call))? "]"
    action        → "{" type_ref ("." ID ("=" | "+=") "current")? "}"
    atom          → STRING | rule_call | "(" alternatives ")"
    terminal atom → "!" atom | "->" atom | "EOF" | "." | STRING (".." STRING)? | rule_call | "(" alternatives ")"

Doc comments are not part of the token stream seen by the parser: each one is
remembered against the token that follows it, and only rule and grammar
declarations look it up. A doc comment anywhere else is an ordinary comment.

Rule calls are linked by name once the whole file is read: first to the
grammar's own rules, then to rules of used grammars. The reader does not
validate the grammar beyond what it needs to build the model.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from grammardocs.core.errors import (
    GrammarDocsError,
    GrammarSyntaxError,
    make_syntax_error,
    source_snippet,
)
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
)
from grammardocs.core.grammar.terminals import TERMINALS_GRAMMAR_NAME, TERMINALS_SOURCE
from grammardocs.core.grammar.tokenizer import Token, TokenKind, tokenize

logger = logging.getLogger(__name__)

GRAMMAR_FILE_SUFFIX = ".xtext"

_ASSIGN_OPS = (TokenKind.EQ, TokenKind.PLUS_EQ, TokenKind.QUESTION_EQ)

_CARDINALITIES = {
    TokenKind.QUESTION: Cardinality.OPTIONAL,
    TokenKind.STAR: Cardinality.ZERO_OR_MORE,
    TokenKind.PLUS: Cardinality.ONE_OR_MORE,
}

# Tokens that end a group
_GROUP_END = (
    TokenKind.PIPE,
    TokenKind.AMPERSAND,
    TokenKind.RPAREN,
    TokenKind.SEMICOLON,
    TokenKind.RBRACKET,
    TokenKind.EOF,
)


class _Parser:
    """Recursive descent parser for one grammar file."""

    def __init__(self, tokens: list[Token], source: str, file: Path) -> None:
        self.tokens: list[Token] = []
        # token index -> text of the last doc comment right before that token
        self.doc_comments: dict[int, str] = {}
        for tok in tokens:
            if tok.kind == TokenKind.DOC_COMMENT:
                self.doc_comments[len(self.tokens)] = tok.value
            else:
                self.tokens.append(tok)
        self.source = source
        self.file = file
        self.pos = 0
        self.terminal_mode = False
        self.grammar_name: str | None = None
        # (call, referenced name, token) triples linked after parsing
        self.pending_calls: list[tuple[RuleCall, str, Token]] = []

    @property
    def current(self) -> Token:
        return self.tokens[self.pos]

    def peek(self, offset: int = 0) -> Token:
        idx = self.pos + offset
        if idx < len(self.tokens):
            return self.tokens[idx]
        return self.tokens[-1]  # EOF

    def advance(self) -> Token:
        tok = self.tokens[self.pos]
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        return tok

    def error(self, message: str, tok: Token | None = None) -> GrammarSyntaxError:
        tok = tok or self.current
        return make_syntax_error(
            message,
            self.file,
            tok.line,
            tok.column,
            snippet=source_snippet(self.source, tok.line),
            grammar=self.grammar_name,
            length=tok.length,
        )

    def expect(self, kind: TokenKind, what: str | None = None) -> Token:
        tok = self.current
        if tok.kind != kind:
            found = repr(tok.value) if tok.value else str(tok.kind)
            raise self.error(f"Expected {what or kind}, got {found}")
        return self.advance()

    def match(self, *kinds: TokenKind) -> Token | None:
        if self.current.kind in kinds:
            return self.advance()
        return None

    def at_keyword(self, word: str, offset: int = 0) -> bool:
        tok = self.peek(offset)
        return tok.kind == TokenKind.ID and tok.value == word

    def expect_keyword(self, word: str) -> Token:
        if not self.at_keyword(word):
            raise self.error(f"Expected '{word}'")
        return self.advance()

    # -- Header --

    def parse_grammar(self) -> tuple[Grammar, list[str]]:
        """Parse a whole file; return the grammar and the names of its used grammars."""
        comment = self.head_comment()
        self.expect_keyword("grammar")
        name = self.parse_qualified_name()
        self.grammar_name = name

        used: list[str] = []
        if self.at_keyword("with"):
            self.advance()
            used.append(self.parse_qualified_name())
            while self.match(TokenKind.COMMA):
                used.append(self.parse_qualified_name())

        grammar = Grammar(name=name, comment=comment)
        if self.at_keyword("hidden"):
            grammar.hidden_tokens = self.parse_hidden()

        while True:
            if self.at_keyword("generate") and self.peek(1).kind == TokenKind.ID:
                grammar.metamodels.append(self.parse_generate())
            elif self.at_keyword("import") and self.peek(1).kind == TokenKind.STRING:
                grammar.metamodels.append(self.parse_import())
            else:
                break

        while self.current.kind != TokenKind.EOF:
            rule_comment = self.head_comment()
            while self.current.kind == TokenKind.AT:
                self.advance()
                self.expect(TokenKind.ID, "annotation name")
                rule_comment = self.head_comment() or rule_comment
            if self.current.kind == TokenKind.EOF:
                break
            rule = self.parse_rule()
            rule.comment = rule_comment
            grammar.rules.append(rule)

        return grammar, used

    def head_comment(self) -> str | None:
        """The doc comment written right before the current token, if any."""
        return self.doc_comments.get(self.pos)

    def parse_qualified_name(self) -> str:
        parts = [self.expect(TokenKind.ID, "name").value]
        while self.current.kind == TokenKind.DOT and self.peek(1).kind == TokenKind.ID:
            self.advance()
            parts.append(self.advance().value)
        return ".".join(parts)

    def parse_hidden(self) -> list[str]:
        self.expect_keyword("hidden")
        self.expect(TokenKind.LPAREN, "'('")
        names: list[str] = []
        if self.current.kind != TokenKind.RPAREN:
            names.append(self.parse_rule_name())
            while self.match(TokenKind.COMMA):
                names.append(self.parse_rule_name())
        self.expect(TokenKind.RPAREN, "')'")
        return names

    def parse_generate(self) -> MetamodelDeclaration:
        self.expect_keyword("generate")
        name = self.expect(TokenKind.ID, "metamodel name").value
        uri = self.expect(TokenKind.STRING, "metamodel URI").value
        alias = self.parse_alias()
        return MetamodelDeclaration(uri=uri, name=name, alias=alias, generated=True)

    def parse_import(self) -> MetamodelDeclaration:
        self.expect_keyword("import")
        uri = self.expect(TokenKind.STRING, "metamodel URI").value
        alias = self.parse_alias()
        return MetamodelDeclaration(uri=uri, alias=alias)

    def parse_alias(self) -> str | None:
        if self.at_keyword("as"):
            self.advance()
            return self.expect(TokenKind.ID, "alias").value
        return None

    def parse_type_ref(self) -> str:
        name = self.expect(TokenKind.ID, "type name").value
        if self.match(TokenKind.COLONCOLON):
            name = f"{name}::{self.expect(TokenKind.ID, 'type name').value}"
        return name

    def parse_rule_name(self) -> str:
        name = self.expect(TokenKind.ID, "rule name").value
        if self.match(TokenKind.COLONCOLON):
            name = f"{name}::{self.expect(TokenKind.ID, 'rule name').value}"
        return name

    # -- Rules --

    def parse_rule(self) -> AbstractRule:
        if self.at_keyword("terminal") and self.peek(1).kind == TokenKind.ID:
            return self.parse_terminal_rule()
        if self.at_keyword("enum") and self.peek(1).kind == TokenKind.ID:
            return self.parse_enum_rule()
        return self.parse_parser_rule()

    def parse_parser_rule(self) -> ParserRule:
        fragment = False
        if self.at_keyword("fragment") and self.peek(1).kind == TokenKind.ID:
            self.advance()
            fragment = True
        name_tok = self.expect(TokenKind.ID, "rule name")
        if self.current.kind == TokenKind.LT:
            raise self.error("Parameterized rules are not supported")
        # "fragment Name*:" declares a fragment without a type
        if fragment:
            self.match(TokenKind.STAR)
        type_name = self.parse_returns()
        hidden: list[str] = []
        if self.at_keyword("hidden"):
            hidden = self.parse_hidden()
        self.expect(TokenKind.COLON, "':'")
        self.terminal_mode = False
        body = self.parse_alternatives()
        self.expect(TokenKind.SEMICOLON, "';'")
        return ParserRule(
            name=name_tok.value,
            alternatives=body,
            type_name=type_name,
            line=name_tok.line,
            fragment=fragment,
            hidden_tokens=hidden,
        )

    def parse_terminal_rule(self) -> TerminalRule:
        self.expect_keyword("terminal")
        fragment = False
        if self.at_keyword("fragment") and self.peek(1).kind == TokenKind.ID:
            self.advance()
            fragment = True
        name_tok = self.expect(TokenKind.ID, "rule name")
        type_name = self.parse_returns()
        self.expect(TokenKind.COLON, "':'")
        self.terminal_mode = True
        try:
            body = self.parse_alternatives()
        finally:
            self.terminal_mode = False
        self.expect(TokenKind.SEMICOLON, "';'")
        return TerminalRule(
            name=name_tok.value,
            alternatives=body,
            type_name=type_name,
            line=name_tok.line,
            fragment=fragment,
        )

    def parse_enum_rule(self) -> EnumRule:
        self.expect_keyword("enum")
        name_tok = self.expect(TokenKind.ID, "rule name")
        type_name = self.parse_returns()
        self.expect(TokenKind.COLON, "':'")
        literals = [self.parse_enum_literal()]
        while self.match(TokenKind.PIPE):
            literals.append(self.parse_enum_literal())
        self.expect(TokenKind.SEMICOLON, "';'")
        body: AbstractElement = literals[0] if len(literals) == 1 else Alternatives(elements=literals)
        return EnumRule(name=name_tok.value, alternatives=body, type_name=type_name, line=name_tok.line)

    def parse_enum_literal(self) -> EnumLiteralDeclaration:
        literal = self.expect(TokenKind.ID, "enum literal").value
        keyword = None
        if self.match(TokenKind.EQ):
            keyword = Keyword(value=self.expect(TokenKind.STRING, "keyword").value)
        return EnumLiteralDeclaration(literal=literal, keyword=keyword)

    def parse_returns(self) -> str | None:
        if self.at_keyword("returns"):
            self.advance()
            return self.parse_type_ref()
        return None

    # -- Elements --

    def parse_alternatives(self) -> AbstractElement:
        """unordered ("|" unordered)*"""
        items = [self.parse_unordered_group()]
        while self.match(TokenKind.PIPE):
            items.append(self.parse_unordered_group())
        return items[0] if len(items) == 1 else Alternatives(elements=items)

    def parse_unordered_group(self) -> AbstractElement:
        """group ("&" group)*"""
        items = [self.parse_group()]
        while self.match(TokenKind.AMPERSAND):
            items.append(self.parse_group())
        return items[0] if len(items) == 1 else UnorderedGroup(elements=items)

    def parse_group(self) -> AbstractElement:
        """token+"""
        items: list[AbstractElement] = []
        while self.current.kind not in _GROUP_END:
            items.append(self.parse_token())
        if not items:
            found = repr(self.current.value) if self.current.value else str(self.current.kind)
            raise self.error(f"Expected a grammar element, got {found}")
        return items[0] if len(items) == 1 else Group(elements=items)

    def parse_token(self) -> AbstractElement:
        if self.terminal_mode:
            element = self.parse_terminal_token()
        elif self.current.kind == TokenKind.LBRACE:
            return self.parse_action()
        else:
            predicate = None
            if self.match(TokenKind.FAT_ARROW):
                predicate = Predicate.SYNTACTIC
            elif self.match(TokenKind.ARROW):
                predicate = Predicate.FIRST_TOKEN
            if self.current.kind == TokenKind.ID and self.peek(1).kind in _ASSIGN_OPS:
                element = self.parse_assignment()
            else:
                element = self.parse_atom()
            if predicate is not None:
                element = self._decorate(element, predicate=predicate)
        tok = self.match(*_CARDINALITIES)
        if tok is not None:
            element = self._decorate(element, cardinality=_CARDINALITIES[tok.kind])
        return element

    @staticmethod
    def _decorate(
        element: AbstractElement,
        cardinality: Cardinality | None = None,
        predicate: Predicate | None = None,
    ) -> AbstractElement:
        """Attach a cardinality or predicate, wrapping when the element already has one."""
        if cardinality is not None:
            if element.cardinality is not None:
                element = Group(elements=[element])
            element.cardinality = cardinality
        if predicate is not None:
            if element.predicate is not None or element.cardinality is not None:
                element = Group(elements=[element])
            element.predicate = predicate
        return element

    def parse_atom(self) -> AbstractElement:
        tok = self.current
        if tok.kind == TokenKind.STRING:
            self.advance()
            return Keyword(value=tok.value)
        if tok.kind == TokenKind.ID:
            return self.parse_rule_call()
        if tok.kind == TokenKind.LPAREN:
            self.advance()
            inner = self.parse_alternatives()
            self.expect(TokenKind.RPAREN, "')'")
            return inner
        if tok.kind == TokenKind.LBRACKET:
            raise self.error("Cross references are only allowed in assignments")
        raise self.error(f"Unexpected {tok.value!r}" if tok.value else f"Unexpected {tok.kind}")

    def parse_rule_call(self) -> RuleCall:
        tok = self.current
        name = self.parse_rule_name()
        if self.current.kind == TokenKind.LT:
            raise self.error("Rule call arguments are not supported")
        call = RuleCall()
        self.pending_calls.append((call, name, tok))
        return call

    def parse_assignment(self) -> Assignment:
        feature = self.advance().value
        operator = self.advance().value
        tok = self.current
        terminal: AbstractElement
        if tok.kind == TokenKind.LBRACKET:
            terminal = self.parse_cross_reference()
        elif tok.kind in (TokenKind.STRING, TokenKind.ID, TokenKind.LPAREN):
            terminal = self.parse_atom_or_cross_reference_group()
        else:
            raise self.error(f"Expected assignable element after '{operator}'")
        return Assignment(feature=feature, operator=operator, terminal=terminal)

    def parse_atom_or_cross_reference_group(self) -> AbstractElement:
        """Assignable terminal; parenthesized alternatives may contain cross references."""
        if self.current.kind != TokenKind.LPAREN:
            return self.parse_atom()
        self.advance()
        items = [self.parse_assignable_alternative()]
        while self.match(TokenKind.PIPE):
            items.append(self.parse_assignable_alternative())
        self.expect(TokenKind.RPAREN, "')'")
        return items[0] if len(items) == 1 else Alternatives(elements=items)

    def parse_assignable_alternative(self) -> AbstractElement:
        if self.current.kind == TokenKind.LBRACKET:
            return self.parse_cross_reference()
        return self.parse_atom_or_cross_reference_group()

    def parse_cross_reference(self) -> CrossReference:
        self.expect(TokenKind.LBRACKET, "'['")
        type_name = self.parse_type_ref()
        terminal: AbstractElement | None = None
        if self.match(TokenKind.PIPE):
            if self.current.kind == TokenKind.STRING:
                terminal = Keyword(value=self.advance().value)
            else:
                terminal = self.parse_rule_call()
        self.expect(TokenKind.RBRACKET, "']'")
        return CrossReference(type_name=type_name, terminal=terminal)

    def parse_action(self) -> Action:
        self.expect(TokenKind.LBRACE, "'{'")
        type_name = self.parse_type_ref()
        feature = operator = None
        if self.match(TokenKind.DOT):
            feature = self.expect(TokenKind.ID, "feature name").value
            op = self.match(TokenKind.EQ, TokenKind.PLUS_EQ)
            if op is None:
                raise self.error("Expected '=' or '+=' in action")
            operator = op.value
            self.expect_keyword("current")
        self.expect(TokenKind.RBRACE, "'}'")
        return Action(type_name=type_name, feature=feature, operator=operator)

    def parse_terminal_token(self) -> AbstractElement:
        """Terminal-rule element without its cardinality."""
        tok = self.current
        if tok.kind == TokenKind.BANG:
            self.advance()
            return NegatedToken(terminal=self.parse_terminal_operand())
        if tok.kind == TokenKind.ARROW:
            self.advance()
            return UntilToken(terminal=self.parse_terminal_operand())
        return self.parse_terminal_operand()

    def parse_terminal_operand(self) -> AbstractElement:
        tok = self.current
        if tok.kind == TokenKind.DOT:
            self.advance()
            return Wildcard()
        if self.at_keyword("EOF"):
            self.advance()
            return EndOfFile()
        if tok.kind == TokenKind.STRING:
            self.advance()
            left = Keyword(value=tok.value)
            if self.match(TokenKind.DOTDOT):
                right = Keyword(value=self.expect(TokenKind.STRING, "range end").value)
                return CharacterRange(left=left, right=right)
            return left
        if tok.kind == TokenKind.BANG:
            self.advance()
            return NegatedToken(terminal=self.parse_terminal_operand())
        return self.parse_atom()


class GrammarReader:
    """
    Reads grammar files and the grammars they use.

    Used grammars are loaded once per reader and shared between the grammars
    that name them, so a rule inherited through two paths is the same handle.
    """

    def __init__(self, search_paths: Iterable[Path | str] = ()) -> None:
        self.search_paths = [Path(p) for p in search_paths]
        self._cache: dict[str, Grammar] = {}
        self._loading: set[str] = set()

    def read_file(self, path: Path | str) -> Grammar:
        """
        Read a grammar file.

        Raises:
            GrammarDocsError: If the file cannot be read or is not UTF-8 text
            GrammarSyntaxError: If the grammar cannot be parsed
        """
        path = Path(path)
        try:
            source = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise GrammarDocsError(
                f"Grammar file {path} is not valid UTF-8 (byte {e.start}: {e.reason})"
            ) from e
        except OSError as e:
            raise GrammarDocsError(f"Cannot read grammar file {path}: {e.strerror or e}") from e
        return self.read(source, file=path, base_dir=path.parent)

    def read(
        self,
        source: str,
        file: Path | str = "<grammar>",
        base_dir: Path | None = None,
    ) -> Grammar:
        """Read grammar text and link its rule calls."""
        file = Path(file)
        parser = _Parser(tokenize(source, file), source, file)
        grammar, used_names = parser.parse_grammar()

        self._loading.add(grammar.name)
        try:
            grammar.used_grammars = [self._load_used(name, base_dir) for name in used_names]
        finally:
            self._loading.discard(grammar.name)

        self._link(grammar, parser.pending_calls)
        self._cache.setdefault(grammar.name, grammar)
        logger.debug("Read grammar %s with %d rules", grammar.name, len(grammar.rules))
        return grammar

    def _load_used(self, name: str, base_dir: Path | None) -> Grammar:
        if name in self._cache:
            return self._cache[name]
        if name in self._loading:
            logger.warning("Grammar %s uses itself through a cycle; ignoring the cycle", name)
            return Grammar(name=name)

        if name == TERMINALS_GRAMMAR_NAME:
            return self.read(TERMINALS_SOURCE, file=f"<{TERMINALS_GRAMMAR_NAME}>")

        path = self._find_grammar_file(name, base_dir)
        if path is None:
            logger.warning("Used grammar %s not found; its rules stay unresolved", name)
            grammar = Grammar(name=name)
            self._cache[name] = grammar
            return grammar
        return self.read_file(path)

    def _find_grammar_file(self, name: str, base_dir: Path | None) -> Path | None:
        simple = name.rsplit(".", 1)[-1]
        dirs = ([base_dir] if base_dir is not None else []) + self.search_paths
        for directory in dirs:
            for candidate in (
                directory / (name.replace(".", "/") + GRAMMAR_FILE_SUFFIX),
                directory / (simple + GRAMMAR_FILE_SUFFIX),
            ):
                if candidate.is_file():
                    return candidate
        return None

    @staticmethod
    def _link(grammar: Grammar, pending: list[tuple[RuleCall, str, Token]]) -> None:
        local: dict[str, AbstractRule] = {}
        for rule in grammar.rules:
            if rule.name in local:
                logger.warning(
                    "Grammar %s defines rule %s more than once; calls link to the first",
                    grammar.name,
                    rule.name,
                )
                continue
            local[rule.name] = rule

        unresolved: dict[str, UnresolvedRule] = {}
        for call, name, tok in pending:
            target: AbstractRule | None
            if "::" in name:
                target = _find_in_used(grammar, name.rsplit("::", 1)[-1])
            else:
                target = local.get(name) or _find_in_used(grammar, name)
            if target is None:
                if name not in unresolved:
                    logger.warning(
                        "%s: rule %s not found in grammar %s or the grammars it uses",
                        f"{tok.line}:{tok.column}",
                        name,
                        grammar.name,
                    )
                    unresolved[name] = UnresolvedRule(name=name)
                target = unresolved[name]
            call.rule = target


def _find_in_used(grammar: Grammar, name: str) -> AbstractRule | None:
    for used in grammar.used_grammars:
        rule = used.find_rule(name)
        if rule is not None:
            return rule
    return None


def read_grammar(source: str, search_paths: Iterable[Path | str] = ()) -> Grammar:
    """Read grammar text with a fresh reader."""
    return GrammarReader(search_paths).read(source)


def read_grammar_file(path: Path | str, search_paths: Iterable[Path | str] = ()) -> Grammar:
    """Read a grammar file with a fresh reader."""
    return GrammarReader(search_paths).read_file(path)
