"""Run prose-rules grammars: load, parse once, generate many times."""

import logging
import random
from pathlib import Path

from grammar_ast import Program
from grammar_parser import parse
from text_generator import DEFAULT_ENTRY_RULE, DEFAULT_MAX_DEPTH, RandomSource, generate

logger = logging.getLogger(__name__)


class GrammarFileError(Exception):
    """Raised when a grammar file cannot be read."""
    pass


def load_grammar(path: Path) -> str:
    """
    Read grammar source text from a file.

    Args:
        path: Path to a UTF-8 grammar file

    Returns:
        Grammar source text

    Raises:
        GrammarFileError: If the file is missing or not valid UTF-8
    """
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise GrammarFileError(f"Cannot read grammar {path}: {e}")


def parse_grammar(source: str) -> Program:
    """
    Parse grammar source text into a Program.

    Raises:
        ParseError: If the source is not a valid grammar
    """
    program = parse(source)
    logger.info(
        f"Loaded grammar with {len(program.rules)} rules, "
        f"{len(program.vocabularies)} vocabularies"
    )
    return program


def generate_one(
    program: Program,
    entry_rule: str = DEFAULT_ENTRY_RULE,
    rng: RandomSource | None = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> str:
    """Generate a single text from a parsed grammar."""
    return generate(program, entry_rule, rng, max_depth)


def run_grammar(
    source: str,
    count: int = 1,
    entry_rule: str = DEFAULT_ENTRY_RULE,
    seed: int | None = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> list[str]:
    """
    Generate multiple texts from grammar source text.

    The grammar is parsed once and every text is drawn from the same
    random.Random, so a given seed reproduces the whole batch.

    Args:
        source: Grammar source text
        count: Number of texts to generate
        entry_rule: The starting rule (default: "main")
        seed: Seed for the random source (default: unseeded)
        max_depth: Maximum number of nested rule expansions

    Returns:
        List of generated texts

    Raises:
        ParseError: If the grammar is invalid
        GenerationError: If a text cannot be generated
    """
    program = parse_grammar(source)
    return generate_many(program, count, entry_rule, seed, max_depth)


def generate_many(
    program: Program,
    count: int = 1,
    entry_rule: str = DEFAULT_ENTRY_RULE,
    seed: int | None = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> list[str]:
    """Generate `count` texts from a parsed grammar with one seeded random source."""
    rng = random.Random(seed)

    logger.debug(f"Generating {count} texts from rule {entry_rule!r} (seed={seed})")
    results = []
    for _ in range(count):
        results.append(generate_one(program, entry_rule, rng, max_depth))

    return results
