"""Tests for grammar_ast.py - AST nodes and canonical rendering."""

import pytest

from grammar_ast import (
    Choice,
    Item,
    Let,
    Literal,
    Program,
    Rule,
    RuleRef,
    Variable,
    VocabRef,
    VocabSet,
    Vocabulary,
    format_expression,
    format_program,
    quote,
)
from grammar_parser import parse


class TestNodes:
    """Tests for AST node construction."""

    def test_item_defaults_to_always_included(self):
        item = Item(Literal("x"))
        assert item.probability == 100
        assert item.always_included

    def test_item_with_probability(self):
        item = Item(RuleRef("r"), probability=40)
        assert not item.always_included

    def test_nodes_are_immutable(self):
        with pytest.raises(AttributeError):
            Literal("x").text = "y"
        with pytest.raises(AttributeError):
            Choice(1).weight = 2

    def test_nodes_compare_by_value(self):
        assert VocabRef("pron", "subj") == VocabRef("pron", "subj")
        assert Variable("a") != RuleRef("a")

    def test_rule_splits_lets_and_choices(self):
        let = Let("a", Literal("x"))
        first = Choice(1, (Item(Variable("a")),))
        second = Choice(2)
        rule = Rule("main", (first, let, second))
        assert rule.lets == [let]
        assert rule.choices == [first, second]

    def test_vocabulary_columns(self):
        vocab = Vocabulary(
            "pron",
            labels={"obj": 1, "subj": 0},
            sets=(VocabSet(1, ("she", "her")),),
        )
        assert vocab.column("subj") == 0
        assert vocab.column("gen") is None
        assert vocab.label_names == ["subj", "obj"]

    def test_empty_program(self):
        program = Program()
        assert program.rules == {}
        assert program.vocabularies == {}


class TestFormatting:
    """Tests for rendering ASTs back into grammar source."""

    def test_quote_escapes(self):
        assert quote('say "hi"\n') == r'"say \"hi\"\n"'
        assert quote("a\\b\tc") == r'"a\\b\tc"'

    @pytest.mark.parametrize("expression,expected", [
        (Literal("x"), '"x"'),
        (Variable("who"), "$who"),
        (RuleRef("name"), "[name]"),
        (VocabRef("pron", "obj"), "(pron obj)"),
    ])
    def test_format_expression(self, expression, expected):
        assert format_expression(expression) == expected

    def test_format_program(self):
        program = parse(
            'rule main{l who [name];c 2 $who ?50% " waves";}'
            'vocab pron(subj obj){set 1 "she" "her";}'
        )
        assert format_program(program) == (
            'vocab pron (subj obj) {\n'
            '    set 1 "she" "her";\n'
            '}\n'
            '\n'
            'rule main {\n'
            '    let who [name];\n'
            '    choice 2 $who ?50% " waves";\n'
            '}\n'
        )

    def test_format_empty_program(self):
        assert format_program(Program()) == ""

    def test_formatted_source_parses_to_same_program(self, pronoun_source):
        source = pronoun_source + 'rule other { c 1 ?10% "a\\n\\"b\\"" ""; c 0; }\n'
        program = parse(source)
        assert parse(format_program(program)) == program
