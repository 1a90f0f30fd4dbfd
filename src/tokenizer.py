"""Tokenizer for prose-rules grammar source text."""

from dataclasses import dataclass
from enum import Enum


class TokenKind(str, Enum):
    """Kinds of tokens produced by the tokenizer."""
    WORD = "word"
    SYMBOL = "symbol"
    STRING = "string"


# Single-character structural symbols. Each one is always a token of its own.
DELIMITERS = frozenset('{}[]()?%$";')

WHITESPACE = frozenset(" \t\n\r")

# Escapes translated inside quoted strings; any other escaped char is literal.
ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
}


@dataclass(frozen=True)
class Token:
    """A single token with the 1-based position of its first character."""
    kind: TokenKind
    value: str
    line: int = 0
    column: int = 0

    def is_symbol(self, symbol: str) -> bool:
        return self.kind is TokenKind.SYMBOL and self.value == symbol

    def is_word(self, word: str | None = None) -> bool:
        if self.kind is not TokenKind.WORD:
            return False
        return word is None or self.value == word


def tokenize(source: str) -> list[Token]:
    """
    Split grammar source text into tokens.

    A quoted literal always appears as the symbol '"', an optional STRING
    token holding the unescaped body, and a closing '"' symbol. An empty
    literal has no body token.

    Args:
        source: Grammar source text

    Returns:
        List of tokens in source order
    """
    tokens: list[Token] = []
    buffer: list[str] = []
    start = (1, 1)
    in_string = False
    escaped = False

    line, column = 1, 1

    def flush(kind: TokenKind) -> None:
        if buffer:
            tokens.append(Token(kind, "".join(buffer), *start))
            buffer.clear()

    for ch in source:
        if in_string:
            if escaped:
                buffer.append(ESCAPES.get(ch, ch))
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                flush(TokenKind.STRING)
                tokens.append(Token(TokenKind.SYMBOL, ch, line, column))
                in_string = False
            else:
                buffer.append(ch)
        else:
            assert not escaped, "internal error: char is escaped outside a string"
            if ch in WHITESPACE:
                flush(TokenKind.WORD)
            elif ch in DELIMITERS:
                flush(TokenKind.WORD)
                tokens.append(Token(TokenKind.SYMBOL, ch, line, column))
                if ch == '"':
                    in_string = True
                    start = (line, column + 1)
            else:
                if not buffer:
                    start = (line, column)
                buffer.append(ch)

        if ch == "\n":
            line += 1
            column = 1
        else:
            column += 1

    # An unterminated string keeps its body; the parser reports the missing quote.
    flush(TokenKind.STRING if in_string else TokenKind.WORD)

    return tokens
