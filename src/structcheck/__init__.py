"""structcheck: validate nested mappings against a tree of type specs.

A schema mirrors the data it validates. Every leaf holds a type spec, a
pipe-separated list of types where any one may match:

    {"server": {"host": "hostname | ipv4", "port": "port | optional"}}

Usage:
    from structcheck import StructValidator, register_global_type

    # At application startup
    register_global_type("color", r"\\A#[0-9a-fA-F]{6}\\Z")

    validator = StructValidator(schema)
    if not validator.validate(data):
        for error in validator.errors():
            print(error)
"""

from structcheck.builtins import BUILTIN_TYPES, SystemProbes, build_builtin_types
from structcheck.config import ValidatorConfig
from structcheck.expressions import (
    Clause,
    CompiledExpression,
    SchemaError,
    compile_spec,
    evaluate,
)
from structcheck.matchers import (
    Matcher,
    NegatedMatcher,
    PatternMatcher,
    PredicateMatcher,
    as_matcher,
)
from structcheck.registry import TypeRegistry, matcher, register_global_type
from structcheck.types import MISSING, ErrorKind, ValidationError
from structcheck.validator import StructValidator

__all__ = [
    # Types
    "MISSING",
    "ErrorKind",
    "ValidationError",
    # Matchers
    "Matcher",
    "NegatedMatcher",
    "PatternMatcher",
    "PredicateMatcher",
    "as_matcher",
    # Registry
    "BUILTIN_TYPES",
    "SystemProbes",
    "TypeRegistry",
    "build_builtin_types",
    "matcher",
    "register_global_type",
    # Expressions
    "Clause",
    "CompiledExpression",
    "SchemaError",
    "compile_spec",
    "evaluate",
    # Validator
    "StructValidator",
    "ValidatorConfig",
]
