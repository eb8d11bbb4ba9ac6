"""Shared pytest fixtures for grammardocs tests."""

import logging
from pathlib import Path

import pytest

from grammardocs.core.grammar import Grammar, read_grammar, read_grammar_file
from grammardocs.core.ruledoc import GrammarDoc, build_grammar_doc

SIMPLE_GRAMMAR = """
grammar org.example.Simple

/** Rule A */
A: 'x' B;

/** Rule B */
B: 'y';
"""


@pytest.fixture(autouse=True)
def _restore_package_log_level():
    """The CLI sets the package logger level; keep tests independent of it."""
    logger = logging.getLogger("grammardocs")
    level = logger.level
    yield
    logger.setLevel(level)


@pytest.fixture
def fixtures_dir() -> Path:
    """Return path to fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def grammars_dir(fixtures_dir: Path) -> Path:
    """Return path to grammar fixtures directory."""
    return fixtures_dir / "grammars"


@pytest.fixture
def expressions_path(grammars_dir: Path) -> Path:
    """Return path to the Expressions.xtext fixture."""
    return grammars_dir / "Expressions.xtext"


@pytest.fixture
def simple_grammar() -> Grammar:
    """Two parser rules, A calling B, each with a head comment."""
    return read_grammar(SIMPLE_GRAMMAR)


@pytest.fixture
def simple_doc(simple_grammar: Grammar) -> GrammarDoc:
    """Documentation model of the simple grammar."""
    return build_grammar_doc(simple_grammar)


@pytest.fixture
def expressions_doc(expressions_path: Path) -> GrammarDoc:
    """Documentation model of the Expressions.xtext fixture."""
    return build_grammar_doc(read_grammar_file(expressions_path))
