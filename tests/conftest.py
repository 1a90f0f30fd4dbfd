"""Shared test fixtures for all test modules."""

import sys
import tempfile
from pathlib import Path

import pytest

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


class ScriptedRandom:
    """Random source that returns pre-arranged draws and records every call.

    Each draw must fall inside the requested range, so a test fails loudly if
    the generator asks for a different range than the test expects.
    """

    def __init__(self, draws):
        self.draws = list(draws)
        self.calls = []

    def randrange(self, start, stop):
        self.calls.append((start, stop))
        if not self.draws:
            raise AssertionError(f"Unexpected draw from [{start}, {stop})")
        value = self.draws.pop(0)
        assert start <= value < stop, f"Scripted draw {value} outside [{start}, {stop})"
        return value


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def hello_source():
    """Two-rule grammar producing "hello alice" or "hello bob"."""
    return (
        'rule main { choice 1 "hello " [name]; }\n'
        'rule name { choice 1 "alice"; choice 1 "bob"; }\n'
    )


@pytest.fixture
def pronoun_source():
    """Grammar using a vocabulary with two labels."""
    return (
        'vocab pron (subj obj) {\n'
        '    set 1 "she" "her";\n'
        '    set 1 "he" "him";\n'
        '}\n'
        'rule main { choice 1 (pron subj) " saw " (pron obj); }\n'
    )


def create_grammar_file(directory: Path, source: str, name: str = "index.txt") -> Path:
    """Helper to write grammar source into a file.

    Args:
        directory: Directory to create the file in
        source: Grammar source text
        name: File name

    Returns:
        Path to the grammar file
    """
    path = directory / name
    path.write_text(source, encoding="utf-8")
    return path
