"""Public validator facade."""

import logging
from collections.abc import Mapping
from typing import Any

from structcheck.config import ValidatorConfig
from structcheck.matchers import Matcher
from structcheck.registry import TypeRegistry
from structcheck.types import ValidationError
from structcheck.walker import BranchNode, ValidationContext, build_schema, visit

logger = logging.getLogger(__name__)


class StructValidator:
    """Validates nested mappings against a schema of type specs.

    The schema is a nested mapping whose leaves are type specs such as
    ``"int"``, ``"range(1-10) | optional"`` or ``"noword"``. The tree is
    built once; leaf specs compile on first use.

    Global types registered after construction are not visible to this
    validator (the global tier is snapshotted here). Instance types can
    be added at any time with `register_type`.

    Example:
        validator = StructValidator({"user": "word", "uid": "int"})
        if not validator.validate({"user": "Hans Dampf", "uid": 92}):
            print(validator.errstr())
    """

    def __init__(
        self,
        schema: Mapping[Any, Any],
        config: ValidatorConfig | None = None,
        builtins: Mapping[str, Matcher] | None = None,
    ):
        if not isinstance(schema, Mapping):
            raise TypeError(
                f"Schema must be a mapping, got {type(schema).__name__}"
            )
        config = config or ValidatorConfig.from_env()
        self.schema: BranchNode = build_schema(schema)
        self.registry = TypeRegistry(builtins)
        self.debug = config.debug
        self._errors: list[ValidationError] = []

    def register_type(self, name: str, matcher: Any, description: str = "") -> None:
        """Register a type for this validator only.

        Args:
            name: Type name used in specs (case-sensitive)
            matcher: Matcher, regex (compiled or string) or predicate callable
                taking (value, raw_args, parsed_args)
            description: One-line description for type listings
        """
        self.registry.register(name, matcher, description)

    def set_debug(self, enabled: bool = True) -> None:
        """Enable or disable the debug trace (logged at DEBUG level)."""
        self.debug = enabled

    def validate(self, data: Any) -> bool:
        """Validate a data tree.

        Never raises for bad data or bad specs; failures are collected and
        available from `errors()` and `errstr()` afterwards.

        Returns:
            True if no errors were found
        """
        ctx = ValidationContext(registry=self.registry, debug=self.debug)
        visit(self.schema, data, (), ctx)
        self._errors = ctx.errors

        if self.debug:
            logger.debug("Validation finished with %d error(s)", len(ctx.errors))

        return not ctx.errors

    def errors(self) -> list[ValidationError]:
        """Errors from the most recent validate() call, in traversal order."""
        return list(self._errors)

    def errstr(self) -> str:
        """Message of the last error from the most recent call, or ""."""
        if not self._errors:
            return ""
        return str(self._errors[-1])
