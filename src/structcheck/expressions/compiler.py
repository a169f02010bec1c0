"""Compiler for type specs.

Turns a spec string into a CompiledExpression: the ordered clauses to try
plus the allows-missing flag. Compilation never raises for bad specs; the
failure is recorded on the expression as a SchemaError and the expression
always fails when evaluated.

Argument blocks are split on both ``,`` and ``-``, so ``range(1-10)`` and
``range(1,10)`` are the same. Negative numbers cannot be written as
arguments: ``range(-5--1)`` splits into ``["", "5", "", "1"]``.
"""

import re
from dataclasses import dataclass, field

from structcheck.expressions.lexer import LexerError
from structcheck.expressions.parser import ParseError, parse
from structcheck.matchers import Matcher
from structcheck.registry import TypeRegistry

OPTIONAL = "optional"

_ARG_SEPARATORS = re.compile(r"[,-]")


class SchemaError(Exception):
    """A type spec that cannot be compiled (unknown type or bad syntax)."""

    def __init__(self, message: str, spec: str):
        self.spec = spec
        super().__init__(message)


@dataclass(frozen=True)
class Clause:
    """One compiled clause of a type spec.

    Attributes:
        name: Resolved type name (the base name for negated clauses)
        negated: True if the clause was written as no<name>
        raw_args: Text inside the parentheses, or None
        parsed_args: raw_args split on ',' and '-'
        matcher: The matcher to apply, already inverted for negated clauses
    """

    name: str
    negated: bool
    raw_args: str | None
    parsed_args: tuple[str, ...]
    matcher: Matcher = field(compare=False, repr=False)

    @property
    def label(self) -> str:
        text = f"no{self.name}" if self.negated else self.name
        if self.raw_args is not None:
            text += f"({self.raw_args})"
        return text


@dataclass(frozen=True)
class CompiledExpression:
    """An executable type spec.

    Attributes:
        spec: The original spec string
        clauses: Clauses in source order (evaluation order)
        allows_missing: True iff the token 'optional' appeared
        schema_error: Set when the spec could not be compiled
    """

    spec: str
    clauses: tuple[Clause, ...] = ()
    allows_missing: bool = False
    schema_error: SchemaError | None = None

    @property
    def is_valid(self) -> bool:
        return self.schema_error is None


def split_args(raw_args: str | None) -> tuple[str, ...]:
    """Split an argument block on ',' and '-'."""
    if raw_args is None:
        return ()
    return tuple(part.strip() for part in _ARG_SEPARATORS.split(raw_args))


def compile_spec(spec: str, registry: TypeRegistry) -> CompiledExpression:
    """Compile a type spec against a registry.

    Args:
        spec: Type spec, e.g. "range(1-10) | word | optional"
        registry: Registry used to resolve type names

    Returns:
        The compiled expression; check `schema_error` for failures
    """
    try:
        nodes = parse(spec)
    except (LexerError, ParseError) as e:
        return CompiledExpression(
            spec=spec,
            schema_error=SchemaError(f"Invalid type spec '{spec}': {e}", spec),
        )

    clauses: list[Clause] = []
    allows_missing = False

    for node in nodes:
        if node.name == OPTIONAL and node.raw_args is None:
            allows_missing = True
            continue

        resolved = registry.resolve(node.name)
        if resolved is None:
            return CompiledExpression(
                spec=spec,
                allows_missing=allows_missing,
                schema_error=SchemaError(f"Unknown type '{node.name}'", spec),
            )

        name, matcher, negated = resolved
        clauses.append(
            Clause(
                name=name,
                negated=negated,
                raw_args=node.raw_args,
                parsed_args=split_args(node.raw_args),
                matcher=matcher,
            )
        )

    return CompiledExpression(
        spec=spec,
        clauses=tuple(clauses),
        allows_missing=allows_missing,
    )
