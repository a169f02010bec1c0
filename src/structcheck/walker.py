"""Structural walker: recurses schema and data trees in lockstep.

The schema tree is built once from a nested mapping of type specs. Leaves
compile lazily against a TypeRegistry and keep the result until the
registry gains an instance type.

Failures never stop the walk. Each one is appended to the call's
ValidationContext and the walk continues with the next sibling.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from structcheck.expressions import (
    Clause,
    CompiledExpression,
    SchemaError,
    compile_spec,
    evaluate,
)
from structcheck.registry import TypeRegistry
from structcheck.types import (
    MAPPING_TEXT,
    MISSING,
    MISSING_TEXT,
    SEQUENCE_TEXT,
    ErrorKind,
    ValidationError,
    render_path,
    to_text,
)

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Schema nodes
# -----------------------------------------------------------------------------


class SchemaNode:
    """Base class for schema tree nodes."""


class LeafNode(SchemaNode):
    """A schema leaf holding a type spec.

    The spec compiles on first use and is memoised per registry version,
    so names registered later resolve on the next validation.
    """

    def __init__(self, spec: str, error: SchemaError | None = None):
        self.spec = spec
        self._error = error
        self._compiled: CompiledExpression | None = None
        self._compiled_key: tuple[int, int] | None = None

    def compiled(self, registry: TypeRegistry) -> CompiledExpression:
        key = (id(registry), registry.version)
        if self._compiled is None or self._compiled_key != key:
            self._compiled_key = key
            if self._error is not None:
                self._compiled = CompiledExpression(spec=self.spec, schema_error=self._error)
            else:
                self._compiled = compile_spec(self.spec, registry)
            if self._compiled.schema_error is not None:
                logger.warning("%s, leaf will always fail", self._compiled.schema_error)
        return self._compiled

    def __repr__(self) -> str:
        return f"LeafNode({self.spec!r})"


class BranchNode(SchemaNode):
    """A schema branch: a mapping of keys to further schema nodes."""

    def __init__(self, children: dict[str, SchemaNode]):
        self.children = children

    def __repr__(self) -> str:
        return f"BranchNode({self.children!r})"


def build_schema(schema: Mapping[Any, Any]) -> BranchNode:
    """Build a schema tree from a nested mapping of type specs.

    Mappings become branches; strings become leaves. Other scalars are
    rendered to text and compiled like any spec. Sequences cannot be
    validated and become always-failing leaves.
    """
    children: dict[str, SchemaNode] = {}
    for key, value in schema.items():
        name = to_text(key)
        if isinstance(value, Mapping):
            children[name] = build_schema(value)
        elif isinstance(value, Sequence) and not isinstance(value, str):
            children[name] = LeafNode(
                SEQUENCE_TEXT,
                SchemaError("Sequences are not supported in schemas", SEQUENCE_TEXT),
            )
        else:
            children[name] = LeafNode(to_text(value))
    return BranchNode(children)


# -----------------------------------------------------------------------------
# Walk
# -----------------------------------------------------------------------------


@dataclass
class ValidationContext:
    """State of a single validate() call.

    Attributes:
        registry: Registry the leaves compile against
        debug: Emit a trace of every node and clause to the logger
        errors: Errors collected so far, in traversal order
    """

    registry: TypeRegistry
    debug: bool = False
    errors: list[ValidationError] = field(default_factory=list)

    def add_error(
        self,
        kind: ErrorKind,
        path: tuple[str, ...],
        spec: str,
        value: str,
        detail: str = "",
    ) -> None:
        error = ValidationError(kind=kind, path=path, spec=spec, value=value, detail=detail)
        self.errors.append(error)
        if self.debug:
            logger.debug("FAIL %s", error)


def _describe_value(value: Any) -> str:
    if value is MISSING:
        return MISSING_TEXT
    if isinstance(value, Mapping):
        return MAPPING_TEXT
    if isinstance(value, Sequence) and not isinstance(value, str):
        return SEQUENCE_TEXT
    return to_text(value)


def _text_keys(data: Mapping[Any, Any], path: tuple[str, ...]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    originals: dict[str, Any] = {}
    for key, value in data.items():
        text = to_text(key)
        if text in result:
            logger.warning(
                "Keys %r and %r both render as %r at %s, keeping the last",
                originals[text],
                key,
                text,
                render_path(path),
            )
        result[text] = value
        originals[text] = key
    return result


def _is_scalar(value: Any) -> bool:
    if isinstance(value, str):
        return True
    return not isinstance(value, (Mapping, Sequence))


def visit(
    node: SchemaNode,
    data: Any,
    path: tuple[str, ...],
    ctx: ValidationContext,
) -> None:
    """Validate `data` against `node`, appending failures to `ctx`."""
    if data is None:
        data = MISSING

    if isinstance(node, BranchNode):
        _visit_branch(node, data, path, ctx)
    else:
        _visit_leaf(node, data, path, ctx)  # type: ignore[arg-type]


def _visit_branch(
    node: BranchNode,
    data: Any,
    path: tuple[str, ...],
    ctx: ValidationContext,
) -> None:
    if not isinstance(data, Mapping):
        ctx.add_error(ErrorKind.STRUCTURE, path, MAPPING_TEXT, _describe_value(data))
        return

    if ctx.debug:
        logger.debug("Descending into %s", render_path(path))

    # schema keys are text; YAML may load keys like 80 or true as non-strings
    if not all(isinstance(key, str) for key in data):
        data = _text_keys(data, path)

    for key, child in node.children.items():
        visit(child, data.get(key, MISSING), path + (key,), ctx)


def _visit_leaf(
    node: LeafNode,
    data: Any,
    path: tuple[str, ...],
    ctx: ValidationContext,
) -> None:
    expression = node.compiled(ctx.registry)

    if expression.schema_error is not None:
        ctx.add_error(
            ErrorKind.SCHEMA,
            path,
            node.spec,
            _describe_value(data),
            str(expression.schema_error),
        )
        return

    if data is not MISSING and not _is_scalar(data):
        ctx.add_error(ErrorKind.STRUCTURE, path, node.spec, _describe_value(data))
        return

    value = data if data is MISSING else to_text(data)
    trace = None
    if ctx.debug:

        def trace(clause: Clause, kind: str, result: bool) -> None:
            logger.debug(
                "%s: %r against %s (%s) -> %s",
                render_path(path),
                value,
                clause.label,
                kind,
                "pass" if result else "fail",
            )

    if not evaluate(value, expression, trace):
        ctx.add_error(ErrorKind.LEAF, path, node.spec, _describe_value(data))
