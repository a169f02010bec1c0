"""Type spec language for structcheck.

This module provides:
- Lexer: Tokenizes type spec strings
- Parser: Produces clause nodes from tokens
- Compiler: Resolves clauses against a TypeRegistry
- Evaluator: Checks a value against a compiled spec
"""

from structcheck.expressions.compiler import (
    OPTIONAL,
    Clause,
    CompiledExpression,
    SchemaError,
    compile_spec,
    split_args,
)
from structcheck.expressions.evaluator import evaluate, match_clause
from structcheck.expressions.lexer import Lexer, LexerError, Token, TokenType
from structcheck.expressions.parser import ClauseNode, ParseError, Parser, parse

__all__ = [
    # Compiler
    "OPTIONAL",
    "Clause",
    "CompiledExpression",
    "SchemaError",
    "compile_spec",
    "split_args",
    # Evaluator
    "evaluate",
    "match_clause",
    # Lexer
    "Lexer",
    "LexerError",
    "Token",
    "TokenType",
    # Parser
    "ClauseNode",
    "ParseError",
    "Parser",
    "parse",
]
