"""Leaf evaluation of compiled type specs.

A value passes when any clause accepts it (short-circuit OR in source
order). Clauses after the first success are never invoked, which matters
for predicates with side effects.
"""

import logging
from typing import Callable

from structcheck.expressions.compiler import Clause, CompiledExpression
from structcheck.types import MISSING

logger = logging.getLogger(__name__)

# trace(clause, matcher kind, result)
TraceFn = Callable[[Clause, str, bool], None]


def match_clause(clause: Clause, value: str) -> bool:
    """Evaluate one clause against a value.

    A matcher that raises counts as a non-match, negated or not.
    """
    try:
        result = clause.matcher.matches(value, clause.raw_args, clause.parsed_args)
    except Exception as e:
        logger.warning(
            "Type '%s' failed while checking %r, treating as no match: %s",
            clause.name,
            value,
            e,
        )
        return False
    return bool(result)


def evaluate(
    value: "str | object",
    expression: CompiledExpression,
    trace: TraceFn | None = None,
) -> bool:
    """Evaluate a value against a compiled expression.

    Args:
        value: The value text, or MISSING if the key is absent
        expression: Compiled type spec
        trace: Optional callback invoked once per attempted clause

    Returns:
        True if the value is accepted
    """
    if expression.schema_error is not None:
        return False

    if value is MISSING:
        return expression.allows_missing

    for clause in expression.clauses:
        result = match_clause(clause, value)  # type: ignore[arg-type]
        if trace is not None:
            trace(clause, clause.matcher.kind, result)
        if result:
            return True

    return False
