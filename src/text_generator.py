"""Weighted-random expansion of parsed grammars into text."""

import logging
import random
from typing import Protocol, Sequence, TypeVar

from grammar_ast import (
    Choice,
    Expression,
    Literal,
    Program,
    Rule,
    RuleRef,
    Variable,
    VocabRef,
    VocabSet,
)

logger = logging.getLogger(__name__)

DEFAULT_ENTRY_RULE = "main"
DEFAULT_MAX_DEPTH = 200

T = TypeVar("T")


class RandomSource(Protocol):
    """Anything that draws uniform integers from [start, stop), e.g. random.Random."""

    def randrange(self, start: int, stop: int) -> int: ...


class GenerationError(Exception):
    """Raised when a program cannot be expanded."""
    pass


class MissingEntryRuleError(GenerationError):
    """Raised when the program has no rule with the entry rule's name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"entry rule {name!r} is not defined")


class DuplicateVariableError(GenerationError):
    """Raised when a rule binds the same variable twice."""

    def __init__(self, name: str, rule: str):
        self.name = name
        self.rule = rule
        super().__init__(f"variable ${name} is bound twice in rule {rule!r}")


class UndeclaredVariableError(GenerationError):
    def __init__(self, name: str, rule: str):
        self.name = name
        self.rule = rule
        super().__init__(f"variable ${name} is not bound in rule {rule!r}")


class UndeclaredRuleError(GenerationError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"rule {name!r} is not defined")


class UndeclaredVocabularyError(GenerationError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"vocabulary {name!r} is not defined")


class UndeclaredFormError(GenerationError):
    def __init__(self, vocabulary: str, label: str):
        self.vocabulary = vocabulary
        self.label = label
        super().__init__(f"vocabulary {vocabulary!r} has no form {label!r}")


class EmptyChoiceError(GenerationError):
    """Raised when a rule or vocabulary has nothing to choose from."""

    def __init__(self, owner: str):
        self.owner = owner
        super().__init__(f"{owner} has no choice with a positive weight")


class RecursionLimitError(GenerationError):
    def __init__(self, rule: str, max_depth: int):
        self.rule = rule
        self.max_depth = max_depth
        super().__init__(
            f"recursion limit of {max_depth} exceeded while expanding rule {rule!r}"
        )


def choose_weighted(
    candidates: Sequence[T],
    weights: Sequence[int],
    rng: RandomSource,
    owner: str,
) -> T:
    """
    Pick one candidate with probability proportional to its weight.

    Draws a uniform integer in [0, total) and returns the first candidate
    whose running weight sum exceeds the draw.

    Args:
        candidates: Candidates in declaration order
        weights: Non-negative weight of each candidate
        rng: Random source
        owner: Description of what is choosing, for error messages

    Returns:
        The selected candidate

    Raises:
        EmptyChoiceError: If there are no candidates or all weights are zero
    """
    total = sum(weights)
    if total <= 0:
        raise EmptyChoiceError(owner)

    draw = rng.randrange(0, total)
    running = 0
    for candidate, weight in zip(candidates, weights):
        running += weight
        if draw < running:
            return candidate

    raise RuntimeError(
        f"internal error: weighted choice for {owner} fell through (draw={draw}, total={total})"
    )


class Generator:
    """Expands rules of one Program using one random source."""

    def __init__(
        self,
        program: Program,
        rng: RandomSource,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        self.program = program
        self.rng = rng
        self.max_depth = max_depth

    def expand_rule(self, rule: Rule, depth: int = 1) -> str:
        """Expand a rule in a fresh environment."""
        if depth > self.max_depth:
            raise RecursionLimitError(rule.name, self.max_depth)

        env: dict[str, str] = {}
        for let in rule.lets:
            if let.identifier in env:
                raise DuplicateVariableError(let.identifier, rule.name)
            env[let.identifier] = self.evaluate(let.expression, rule, env, depth)

        choices = rule.choices
        choice: Choice = choose_weighted(
            choices, [c.weight for c in choices], self.rng, f"rule {rule.name!r}"
        )

        parts = []
        for item in choice.items:
            if self.rng.randrange(0, 100) < item.probability:
                parts.append(self.evaluate(item.expression, rule, env, depth))
        return "".join(parts)

    def evaluate(self, expression: Expression, rule: Rule, env: dict[str, str], depth: int) -> str:
        match expression:
            case Literal(text):
                return text
            case Variable(name):
                if name not in env:
                    raise UndeclaredVariableError(name, rule.name)
                return env[name]
            case RuleRef(name):
                callee = self.program.rules.get(name)
                if callee is None:
                    raise UndeclaredRuleError(name)
                return self.expand_rule(callee, depth + 1)
            case VocabRef(vocabulary, label):
                return self.pick_form(vocabulary, label)
        raise TypeError(f"Not an expression: {expression!r}")

    def pick_form(self, vocabulary_name: str, label: str) -> str:
        vocab = self.program.vocabularies.get(vocabulary_name)
        if vocab is None:
            raise UndeclaredVocabularyError(vocabulary_name)
        column = vocab.column(label)
        if column is None:
            raise UndeclaredFormError(vocabulary_name, label)

        vocab_set: VocabSet = choose_weighted(
            vocab.sets, [s.weight for s in vocab.sets], self.rng, f"vocabulary {vocabulary_name!r}"
        )
        return vocab_set.forms[column]


def generate(
    program: Program,
    entry_rule: str = DEFAULT_ENTRY_RULE,
    rng: RandomSource | None = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> str:
    """
    Generate one string by expanding the entry rule of a program.

    Args:
        program: Parsed program (not modified)
        entry_rule: Name of the rule to start from (default: "main")
        rng: Random source; a fresh random.Random() when omitted
        max_depth: Maximum number of nested rule expansions

    Returns:
        Generated text

    Raises:
        GenerationError: If the program cannot be expanded
    """
    rule = program.rules.get(entry_rule)
    if rule is None:
        raise MissingEntryRuleError(entry_rule)

    if rng is None:
        rng = random.Random()

    try:
        return Generator(program, rng, max_depth).expand_rule(rule)
    except RecursionError:
        # The interpreter stack ran out before max_depth was reached.
        logger.warning(f"Python recursion limit hit below max_depth={max_depth}")
        raise RecursionLimitError(entry_rule, max_depth) from None
