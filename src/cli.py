#!/usr/bin/env python3
"""CLI entry point for the prose-rules text generator."""

import logging
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from config import settings
from grammar_ast import Program, format_program
from grammar_parser import ParseError
from grammar_runner import GrammarFileError, generate_many, load_grammar, parse_grammar
from models import GenerateRequest, RunMetadata
from text_generator import GenerationError


def configure_logging(verbose: bool) -> None:
    """Send engine logs to stderr, DEBUG when verbose and WARNING otherwise."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def save_outputs(output: Path, request: GenerateRequest, program: Program,
                 source: str, outputs: list[str]) -> Path:
    """Write generated texts, the grammar and run metadata into a directory.

    Args:
        output: Output directory (created if missing)
        request: The validated request the outputs were generated for
        program: The parsed grammar
        source: Grammar source text
        outputs: Generated texts

    Returns:
        Path to the metadata file
    """
    output.mkdir(parents=True, exist_ok=True)
    prefix = request.prefix

    for i, text in enumerate(outputs):
        (output / f"{prefix}_{i}.txt").write_text(text, encoding="utf-8")

    (output / f"{prefix}_grammar.txt").write_text(source, encoding="utf-8")

    metadata = RunMetadata(
        grammar_path=str(request.grammar_path),
        entry_rule=request.entry_rule,
        count=len(outputs),
        seed=request.seed,
        max_depth=request.max_depth,
        rule_count=len(program.rules),
        vocabulary_count=len(program.vocabularies),
        prefix=prefix,
    )
    metadata_file = output / f"{prefix}_metadata.json"
    metadata_file.write_text(metadata.model_dump_json(indent=2), encoding="utf-8")
    return metadata_file


@click.command()
@click.argument(
    'grammar_file',
    required=False,
    type=click.Path(path_type=Path),
)
@click.option(
    '-n', '--count',
    default=None,
    type=int,
    help='Number of texts to generate (default: 1)'
)
@click.option(
    '-e', '--entry',
    default=None,
    help='Rule to start generation from (default: main)'
)
@click.option(
    '--seed',
    type=int,
    default=None,
    help='Random seed for reproducible output (default: random)'
)
@click.option(
    '--max-depth',
    type=int,
    default=None,
    help='Maximum nesting of rule expansions (default: 200)'
)
@click.option(
    '-o', '--output',
    type=click.Path(path_type=Path),
    help='Also save texts, grammar and metadata into this directory'
)
@click.option(
    '--prefix',
    default=None,
    help='Prefix for saved output files (default: "output")'
)
@click.option(
    '--dry-run',
    is_flag=True,
    help='Parse the grammar and print it back without generating'
)
@click.option(
    '-v', '--verbose',
    is_flag=True,
    help='Log parsing and generation details to stderr'
)
def main(
    grammar_file: Path | None,
    count: int | None,
    entry: str | None,
    seed: int | None,
    max_depth: int | None,
    output: Path | None,
    prefix: str | None,
    dry_run: bool,
    verbose: bool,
):
    """
    Generate random text from a prose-rules grammar file.

    Example:
        prose-rules story.txt -n 10
        prose-rules story.txt --entry title --seed 42
        prose-rules story.txt --dry-run  # Show the parsed grammar

    Saving outputs:
        prose-rules story.txt -n 100 -o generated/story --prefix story
    """
    configure_logging(verbose)

    # Set defaults for optional parameters
    if grammar_file is None:
        grammar_file = Path(settings.run.default_grammar)
    if count is None:
        count = settings.run.default_count
    if entry is None:
        entry = settings.generator.entry_rule
    if max_depth is None:
        max_depth = settings.generator.max_depth
    if prefix is None:
        prefix = settings.run.default_prefix

    try:
        request = GenerateRequest(
            grammar_path=grammar_file,
            count=count,
            entry_rule=entry,
            seed=seed,
            max_depth=max_depth,
            prefix=prefix,
        )
    except ValidationError as e:
        click.echo(f"Error: invalid options: {e}", err=True)
        sys.exit(1)

    try:
        source = load_grammar(request.grammar_path)
    except GrammarFileError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    try:
        program = parse_grammar(source)
    except ParseError as e:
        click.echo(f"Error parsing {request.grammar_path}: {e}", err=True)
        sys.exit(1)

    # Dry run: just show the grammar
    if dry_run:
        click.echo(format_program(program), nl=False)
        return

    try:
        outputs = generate_many(
            program,
            count=request.count,
            entry_rule=request.entry_rule,
            seed=request.seed,
            max_depth=request.max_depth,
        )
    except GenerationError as e:
        click.echo(f"Error generating text: {e}", err=True)
        sys.exit(1)

    for text in outputs:
        click.echo(text)

    if output is not None:
        metadata_file = save_outputs(output, request, program, source, outputs)
        click.echo(f"Saved {len(outputs)} texts in: {output} ({metadata_file.name})", err=True)


if __name__ == '__main__':
    main()
