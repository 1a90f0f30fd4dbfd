"""Recursive-descent parser for prose-rules grammars.

The grammar is LL(1): every decision is made by looking at the next token
only, and the first error aborts the parse.

    program  := (rule | vocab)*
    rule     := "rule" NAME "{" sentence* "}"
    vocab    := "vocab" NAME "(" LABEL* ")" "{" vset* "}"
    vset     := "set" INT literal{labels} ";"
    sentence := ("let" | "l") NAME expr ";"
              | ("choice" | "c") INT item* ";"
    item     := ["?" INT "%"] expr
    expr     := "$" NAME | '"' [STRING] '"' | "[" NAME "]" | "(" NAME NAME ")"
"""

import logging
import re

from grammar_ast import (
    Choice,
    Expression,
    Item,
    Let,
    Literal,
    Program,
    Rule,
    RuleRef,
    Sentence,
    Variable,
    VocabRef,
    VocabSet,
    Vocabulary,
)
from tokenizer import Token, TokenKind, tokenize

logger = logging.getLogger(__name__)

LET_KEYWORDS = ("let", "l")
CHOICE_KEYWORDS = ("choice", "c")
EXPRESSION_STARTS = ("$", '"', "[", "(")

MAX_PROBABILITY = 100
MAX_WEIGHT = 2**32 - 1

_NUMBER_RE = re.compile(r"[0-9]+")


class ParseError(Exception):
    """Raised when grammar source cannot be parsed."""

    def __init__(self, message: str, line: int | None = None, column: int | None = None):
        self.line = line
        self.column = column
        if line:
            message = f"line {line}, column {column}: {message}"
        super().__init__(message)


class UnexpectedEofError(ParseError):
    """Raised when the source ends in the middle of a declaration."""

    def __init__(self):
        super().__init__("unexpected end of file")


class UnexpectedTokenError(ParseError):
    """Raised when the next token is not one the grammar accepts here."""

    def __init__(self, expected: list[str], found: Token):
        self.expected = list(expected)
        self.found = found.value
        super().__init__(
            f"unexpected token: expected one of {self.expected}, found {self.found!r}",
            found.line,
            found.column,
        )


class RedefinitionError(ParseError):
    """Raised when a rule, vocabulary or vocabulary label is declared twice."""

    def __init__(self, kind: str, name: str, token: Token | None = None):
        self.kind = kind
        self.name = name
        super().__init__(
            f"{kind} {name} re-defined.",
            token.line if token else None,
            token.column if token else None,
        )


class InvalidNumberError(ParseError):
    """Raised when a weight or probability is not a valid integer."""

    def __init__(self, text: str, reason: str = "invalid digit", token: Token | None = None):
        self.text = text
        super().__init__(
            f"{reason}: {text!r}",
            token.line if token else None,
            token.column if token else None,
        )


class Parser:
    """Single-token-lookahead parser over a token list."""

    def __init__(self, tokens: list[Token]):
        self.tokens = tokens
        self.pos = 0

    # Token stream helpers

    def at_end(self) -> bool:
        return self.pos >= len(self.tokens)

    def peek(self) -> Token:
        if self.at_end():
            raise UnexpectedEofError()
        return self.tokens[self.pos]

    def advance(self) -> Token:
        token = self.peek()
        self.pos += 1
        return token

    def predict_symbol(self, symbol: str) -> bool:
        return self.peek().is_symbol(symbol)

    def expect_symbol(self, symbol: str) -> Token:
        token = self.advance()
        if not token.is_symbol(symbol):
            raise UnexpectedTokenError([symbol], token)
        return token

    def expect_keyword(self, *keywords: str) -> Token:
        token = self.advance()
        if not token.is_word() or token.value not in keywords:
            raise UnexpectedTokenError(list(keywords), token)
        return token

    def expect_name(self, what: str = "name") -> Token:
        token = self.advance()
        if not token.is_word():
            raise UnexpectedTokenError([f"<{what}>"], token)
        return token

    def expect_number(self, what: str, maximum: int | None = None) -> int:
        token = self.expect_name(what)
        if not _NUMBER_RE.fullmatch(token.value):
            raise InvalidNumberError(token.value, token=token)
        try:
            value = int(token.value)
        except ValueError:
            raise InvalidNumberError(token.value, reason="number too large", token=token)
        if maximum is not None and value > maximum:
            raise InvalidNumberError(
                token.value, reason=f"{what} must be between 0 and {maximum}", token=token
            )
        return value

    # Declarations

    def parse_program(self) -> Program:
        rules: dict[str, Rule] = {}
        vocabularies: dict[str, Vocabulary] = {}

        while not self.at_end():
            keyword = self.expect_keyword("rule", "vocab")
            if keyword.value == "rule":
                name_token, rule = self.parse_rule()
                if rule.name in rules:
                    raise RedefinitionError("rule", rule.name, name_token)
                rules[rule.name] = rule
                logger.debug(f"Parsed rule {rule.name!r} ({len(rule.sentences)} sentences)")
            else:
                name_token, vocab = self.parse_vocab()
                if vocab.name in vocabularies:
                    raise RedefinitionError("vocabulary", vocab.name, name_token)
                vocabularies[vocab.name] = vocab
                logger.debug(f"Parsed vocabulary {vocab.name!r} ({len(vocab.sets)} sets)")

        return Program(rules=rules, vocabularies=vocabularies)

    def parse_rule(self) -> tuple[Token, Rule]:
        name_token = self.expect_name("rule name")
        self.expect_symbol("{")
        sentences = []
        while not self.predict_symbol("}"):
            sentences.append(self.parse_sentence())
        self.expect_symbol("}")
        return name_token, Rule(name=name_token.value, sentences=tuple(sentences))

    def parse_vocab(self) -> tuple[Token, Vocabulary]:
        name_token = self.expect_name("vocabulary name")

        self.expect_symbol("(")
        labels: dict[str, int] = {}
        while not self.predict_symbol(")"):
            label = self.expect_name("label")
            if label.value in labels:
                raise RedefinitionError("label", label.value, label)
            labels[label.value] = len(labels)
        self.expect_symbol(")")

        self.expect_symbol("{")
        sets = []
        while not self.predict_symbol("}"):
            sets.append(self.parse_vocab_set(len(labels)))
        self.expect_symbol("}")

        return name_token, Vocabulary(name=name_token.value, labels=labels, sets=tuple(sets))

    def parse_vocab_set(self, form_count: int) -> VocabSet:
        self.expect_keyword("set")
        weight = self.expect_number("weight", maximum=MAX_WEIGHT)
        forms = []
        for _ in range(form_count):
            self.expect_symbol('"')
            forms.append(self.parse_literal_body())
        self.expect_symbol(";")
        return VocabSet(weight=weight, forms=tuple(forms))

    # Rule bodies

    def parse_sentence(self) -> Sentence:
        keyword = self.expect_keyword(*LET_KEYWORDS, *CHOICE_KEYWORDS)

        if keyword.value in LET_KEYWORDS:
            identifier = self.expect_name("variable name").value
            sentence = Let(identifier=identifier, expression=self.parse_expression())
        else:
            weight = self.expect_number("weight", maximum=MAX_WEIGHT)
            items = []
            while not self.predict_symbol(";"):
                items.append(self.parse_item())
            sentence = Choice(weight=weight, items=tuple(items))

        self.expect_symbol(";")
        return sentence

    def parse_item(self) -> Item:
        if self.predict_symbol("?"):
            self.advance()
            probability = self.expect_number("probability", maximum=MAX_PROBABILITY)
            self.expect_symbol("%")
            return Item(expression=self.parse_expression(), probability=probability)
        return Item(expression=self.parse_expression())

    def parse_expression(self) -> Expression:
        token = self.advance()
        if token.kind is not TokenKind.SYMBOL or token.value not in EXPRESSION_STARTS:
            raise UnexpectedTokenError(list(EXPRESSION_STARTS), token)

        match token.value:
            case "$":
                return Variable(self.expect_name("variable name").value)
            case '"':
                return Literal(self.parse_literal_body())
            case "[":
                name = self.expect_name("rule name").value
                self.expect_symbol("]")
                return RuleRef(name)
            case "(":
                vocabulary = self.expect_name("vocabulary name").value
                label = self.expect_name("label").value
                self.expect_symbol(")")
                return VocabRef(vocabulary, label)
        raise AssertionError(f"internal error: unhandled expression start {token.value!r}")

    def parse_literal_body(self) -> str:
        """Read the rest of a quoted literal after its opening quote."""
        # No body token between the quotes means an empty literal.
        if self.predict_symbol('"'):
            self.advance()
            return ""
        body = self.advance()
        if body.kind is not TokenKind.STRING:
            raise UnexpectedTokenError(['"'], body)
        self.expect_symbol('"')
        return body.value


def parse(source: str | list[Token]) -> Program:
    """
    Parse grammar source text (or an already tokenized stream) into a Program.

    Args:
        source: Grammar source text or tokens from tokenize()

    Returns:
        The parsed Program

    Raises:
        ParseError: On the first lexical, structural or duplicate-name error
    """
    tokens = tokenize(source) if isinstance(source, str) else list(source)
    program = Parser(tokens).parse_program()
    logger.debug(
        f"Parsed {len(program.rules)} rules and {len(program.vocabularies)} vocabularies"
    )
    return program
