"""Lexer/tokenizer for type specs.

Converts a spec string such as ``"range(1-10) | word | optional"`` into a
stream of tokens for the parser.

Token types:
- NAME: type name (letters, digits, underscore)
- ARGS: parenthesised argument block, inner text kept verbatim
- PIPE: clause separator
"""

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator


class TokenType(Enum):
    """Types of tokens in a type spec."""

    NAME = auto()
    ARGS = auto()        # (...)
    PIPE = auto()        # |

    # End of input
    EOF = auto()


@dataclass(frozen=True)
class Token:
    """A single token from the lexer.

    Attributes:
        type: The token type
        value: Name text, argument text (without parentheses), or None
        position: Character position in the source string
    """

    type: TokenType
    value: str | None
    position: int

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, pos={self.position})"


class LexerError(Exception):
    """Error during lexical analysis."""

    def __init__(self, message: str, position: int):
        self.position = position
        super().__init__(f"{message} at position {position}")


# Token patterns (first match wins)
TOKEN_PATTERNS = [
    # Whitespace (skip)
    (r"\s+", None),
    (r"\|", TokenType.PIPE),
    (r"\(([^()|]*)\)", TokenType.ARGS),
    (r"\w+", TokenType.NAME),
]


class Lexer:
    """Tokenizer for type specs.

    Usage:
        lexer = Lexer("range(22-23) | optional")
        for token in lexer:
            print(token)
    """

    _compiled_patterns = [
        (re.compile(pattern), token_type) for pattern, token_type in TOKEN_PATTERNS
    ]

    def __init__(self, source: str):
        self.source = source
        self.position = 0

    def __iter__(self) -> Iterator[Token]:
        """Iterate over all tokens in the source."""
        while True:
            token = self.next_token()
            yield token
            if token.type == TokenType.EOF:
                break

    def next_token(self) -> Token:
        """Get the next token from the source."""
        while self.position < len(self.source):
            for pattern, token_type in self._compiled_patterns:
                match = pattern.match(self.source, self.position)
                if match:
                    break
            else:
                raise LexerError(
                    f"Unexpected character '{self.source[self.position]}'",
                    self.position,
                )

            start = self.position
            self.position = match.end()

            if token_type is None:
                continue
            if token_type == TokenType.ARGS:
                return Token(token_type, match.group(1), start)
            return Token(token_type, match.group(), start)

        return Token(TokenType.EOF, None, self.position)

    def tokenize(self) -> list[Token]:
        """Tokenize the entire source and return list of tokens."""
        return list(self)
