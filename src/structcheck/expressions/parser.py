"""Parser for type specs.

Grammar:
    expr   := clause ('|' clause)*
    clause := NAME [ARGS]

The parser only checks shape. Name resolution (including the ``no``
prefix and the reserved ``optional`` token) happens in the compiler.
"""

from dataclasses import dataclass

from structcheck.expressions.lexer import Lexer, Token, TokenType


@dataclass(frozen=True)
class ClauseNode:
    """One parsed clause: a name with an optional raw argument block."""

    name: str
    raw_args: str | None = None


class ParseError(Exception):
    """Error during parsing."""

    def __init__(self, message: str, token: Token):
        self.token = token
        super().__init__(f"{message} at position {token.position}")


class Parser:
    """Recursive descent parser for type specs.

    Usage:
        parser = Parser("int | optional")
        clauses = parser.parse()
    """

    def __init__(self, source: str):
        self.source = source
        self.tokens = Lexer(source).tokenize()
        self.position = 0

    def parse(self) -> list[ClauseNode]:
        """Parse the spec and return its clauses in source order."""
        if self._is_at_end():
            raise ParseError("Empty type spec", self._current())

        clauses = [self._parse_clause()]
        while self._match(TokenType.PIPE):
            self._advance()
            clauses.append(self._parse_clause())

        if not self._is_at_end():
            token = self._current()
            raise ParseError(f"Unexpected token '{token.value}'", token)

        return clauses

    # -------------------------------------------------------------------------
    # Helper methods
    # -------------------------------------------------------------------------

    def _current(self) -> Token:
        if self.position >= len(self.tokens):
            return Token(TokenType.EOF, None, len(self.source))
        return self.tokens[self.position]

    def _is_at_end(self) -> bool:
        return self._current().type == TokenType.EOF

    def _advance(self) -> Token:
        token = self._current()
        self.position += 1
        return token

    def _match(self, *types: TokenType) -> bool:
        return self._current().type in types

    def _consume(self, token_type: TokenType, message: str) -> Token:
        if self._current().type == token_type:
            return self._advance()
        raise ParseError(message, self._current())

    # -------------------------------------------------------------------------
    # Clauses
    # -------------------------------------------------------------------------

    def _parse_clause(self) -> ClauseNode:
        name = self._consume(TokenType.NAME, "Expected type name")
        raw_args = None
        if self._match(TokenType.ARGS):
            raw_args = self._advance().value
        return ClauseNode(name=str(name.value), raw_args=raw_args)


def parse(source: str) -> list[ClauseNode]:
    """Parse a type spec string into clauses."""
    return Parser(source).parse()
