"""Abstract syntax tree for prose-rules grammars.

A parsed grammar is a Program: a table of rules and a table of vocabularies.
Every node is an immutable dataclass, so one Program can be expanded any
number of times without being changed by the generator.
"""

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class Literal:
    """Verbatim text."""
    text: str


@dataclass(frozen=True)
class Variable:
    """Reference to a value bound earlier in the same rule with `let`."""
    name: str


@dataclass(frozen=True)
class RuleRef:
    """Reference to another rule, expanded with an empty environment."""
    name: str


@dataclass(frozen=True)
class VocabRef:
    """Reference to one form (label) of a randomly chosen vocabulary set."""
    vocabulary: str
    label: str


Expression = Union[Literal, Variable, RuleRef, VocabRef]


@dataclass(frozen=True)
class Item:
    """An expression included with the given probability (0-100)."""
    expression: Expression
    probability: int = 100

    @property
    def always_included(self) -> bool:
        return self.probability >= 100


@dataclass(frozen=True)
class Let:
    """Binds the value of an expression to a name for the rest of the rule."""
    identifier: str
    expression: Expression


@dataclass(frozen=True)
class Choice:
    """One weighted alternative of a rule."""
    weight: int
    items: tuple[Item, ...] = ()


Sentence = Union[Let, Choice]


@dataclass(frozen=True)
class Rule:
    """A named rule: its let bindings and weighted choices, in declaration order."""
    name: str
    sentences: tuple[Sentence, ...] = ()

    @property
    def lets(self) -> list[Let]:
        return [s for s in self.sentences if isinstance(s, Let)]

    @property
    def choices(self) -> list[Choice]:
        return [s for s in self.sentences if isinstance(s, Choice)]


@dataclass(frozen=True)
class VocabSet:
    """All forms of one word, one per vocabulary label, with a selection weight."""
    weight: int
    forms: tuple[str, ...]


@dataclass(frozen=True)
class Vocabulary:
    """
    A table of word forms.

    Properties:
        name: Vocabulary name used in references like (name label)
        labels: Label name -> column index into each set's forms
        sets: Weighted sets, each with exactly one form per label
    """
    name: str
    labels: dict[str, int] = field(default_factory=dict)
    sets: tuple[VocabSet, ...] = ()

    def column(self, label: str) -> int | None:
        """Column index of a label, or None if the label is not declared."""
        return self.labels.get(label)

    @property
    def label_names(self) -> list[str]:
        return sorted(self.labels, key=self.labels.__getitem__)


@dataclass(frozen=True)
class Program:
    """A parsed grammar. Built once by the parser and read-only afterwards."""
    rules: dict[str, Rule] = field(default_factory=dict)
    vocabularies: dict[str, Vocabulary] = field(default_factory=dict)


def quote(text: str) -> str:
    """Render text as a quoted literal, escaping what the tokenizer would interpret."""
    escaped = (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\t", "\\t")
        .replace("\r", "\\r")
    )
    return f'"{escaped}"'


def format_expression(expression: Expression) -> str:
    """Render an expression in surface syntax."""
    match expression:
        case Literal(text):
            return quote(text)
        case Variable(name):
            return f"${name}"
        case RuleRef(name):
            return f"[{name}]"
        case VocabRef(vocabulary, label):
            return f"({vocabulary} {label})"
    raise TypeError(f"Not an expression: {expression!r}")


def format_item(item: Item) -> str:
    if item.always_included:
        return format_expression(item.expression)
    return f"?{item.probability}% {format_expression(item.expression)}"


def format_sentence(sentence: Sentence) -> str:
    if isinstance(sentence, Let):
        return f"let {sentence.identifier} {format_expression(sentence.expression)};"
    parts = [f"choice {sentence.weight}"]
    parts.extend(format_item(item) for item in sentence.items)
    return " ".join(parts) + ";"


def format_program(program: Program, indent: str = "    ") -> str:
    """
    Render a Program back into canonical grammar source.

    Vocabularies come first, then rules, each in insertion order.
    Parsing the result produces an equal Program.

    Args:
        program: Parsed program
        indent: Indentation used for sentences and sets

    Returns:
        Grammar source text
    """
    blocks = []

    for vocab in program.vocabularies.values():
        lines = [f"vocab {vocab.name} ({' '.join(vocab.label_names)}) {{"]
        for vocab_set in vocab.sets:
            parts = [f"set {vocab_set.weight}"]
            parts.extend(quote(form) for form in vocab_set.forms)
            lines.append(f"{indent}{' '.join(parts)};")
        lines.append("}")
        blocks.append("\n".join(lines))

    for rule in program.rules.values():
        lines = [f"rule {rule.name} {{"]
        lines.extend(f"{indent}{format_sentence(s)}" for s in rule.sentences)
        lines.append("}")
        blocks.append("\n".join(lines))

    return "\n\n".join(blocks) + ("\n" if blocks else "")
