"""Tests for grammar_runner.py - loading grammars and batch generation."""

import random

import pytest

from conftest import create_grammar_file
from grammar_parser import ParseError, RedefinitionError
from grammar_runner import (
    GrammarFileError,
    generate_many,
    generate_one,
    load_grammar,
    parse_grammar,
    run_grammar,
)
from text_generator import MissingEntryRuleError, RecursionLimitError


class TestGrammarFileError:
    """Tests for GrammarFileError exception."""

    def test_grammar_file_error_is_exception(self):
        assert issubclass(GrammarFileError, Exception)

    def test_grammar_file_error_message(self):
        error = GrammarFileError("test message")
        assert str(error) == "test message"


class TestLoadGrammar:
    """Tests for reading grammar files."""

    def test_load_grammar(self, temp_dir, hello_source):
        path = create_grammar_file(temp_dir, hello_source)
        assert load_grammar(path) == hello_source

    def test_load_missing_file(self, temp_dir):
        with pytest.raises(GrammarFileError, match="Cannot read grammar"):
            load_grammar(temp_dir / "missing.txt")

    def test_load_invalid_utf8(self, temp_dir):
        path = temp_dir / "bad.txt"
        path.write_bytes(b"rule main { c 1 \"\xff\"; }")
        with pytest.raises(GrammarFileError):
            load_grammar(path)


class TestParseGrammar:
    """Tests for grammar parsing through the runner."""

    def test_parse_valid_grammar(self, hello_source):
        program = parse_grammar(hello_source)
        assert set(program.rules) == {"main", "name"}

    def test_parse_invalid_grammar(self):
        with pytest.raises(ParseError):
            parse_grammar("rule main {")

    def test_parse_duplicate_rule(self):
        with pytest.raises(RedefinitionError):
            parse_grammar("rule a { } rule a { }")


class TestGenerateOne:
    """Tests for single text generation."""

    def test_generate_simple_text(self):
        program = parse_grammar('rule main { c 1 "hello world"; }')
        assert generate_one(program) == "hello world"

    def test_generate_custom_entry(self, hello_source):
        program = parse_grammar(hello_source)
        assert generate_one(program, entry_rule="name", rng=random.Random(3)) in {"alice", "bob"}


class TestRunGrammar:
    """Tests for batch generation."""

    def test_run_grammar_basic(self):
        results = run_grammar('rule main { c 1 "hello"; }', count=5)
        assert results == ["hello"] * 5

    def test_run_grammar_default_count(self):
        results = run_grammar('rule main { c 1 "x"; }')
        assert results == ["x"]

    def test_run_grammar_with_variation(self, hello_source):
        results = run_grammar(hello_source, count=100, seed=7)
        assert set(results) == {"hello alice", "hello bob"}

    def test_same_seed_same_batch(self, hello_source):
        first = run_grammar(hello_source, count=30, seed=42)
        second = run_grammar(hello_source, count=30, seed=42)
        assert first == second

    def test_run_grammar_custom_entry(self, hello_source):
        results = run_grammar(hello_source, count=10, entry_rule="name", seed=1)
        assert set(results) <= {"alice", "bob"}

    def test_run_grammar_missing_entry(self):
        with pytest.raises(MissingEntryRuleError):
            run_grammar('rule start { c 1 "x"; }', count=1)

    def test_run_grammar_max_depth(self):
        with pytest.raises(RecursionLimitError):
            run_grammar('rule main { c 1 [main]; }', max_depth=20)

    def test_generate_many_matches_run_grammar(self, hello_source):
        program = parse_grammar(hello_source)
        assert generate_many(program, count=20, seed=5) == run_grammar(hello_source, count=20, seed=5)
