"""Core types for the structcheck validation engine.

This module defines the records shared by the compiler, the leaf matcher
and the structural walker:
- ErrorKind: classification of a collected validation error
- ValidationError: one path-qualified failure
- MISSING: marker for a key absent from the data tree
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class _Missing:
    """Sentinel for a value that is not present in the data tree."""

    _instance: "_Missing | None" = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "<missing>"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()

MISSING_TEXT = "<missing>"
MAPPING_TEXT = "<mapping>"
SEQUENCE_TEXT = "<sequence>"
ROOT_TEXT = "<root>"


class ErrorKind(Enum):
    """What went wrong at a schema node.

    SCHEMA: the type spec itself could not be compiled
    STRUCTURE: the data tree has a different shape than the schema tree
    LEAF: the value failed every clause of its type spec
    """

    SCHEMA = "schema"
    STRUCTURE = "structure"
    LEAF = "leaf"


def render_path(path: tuple[str, ...]) -> str:
    """Render a key path for messages."""
    if not path:
        return ROOT_TEXT
    return ".".join(path)


@dataclass(frozen=True)
class ValidationError:
    """A single validation failure.

    Attributes:
        kind: SCHEMA, STRUCTURE or LEAF
        path: Keys leading from the root to the failing node
        spec: The type spec that was applied (or "<mapping>" for branches)
        value: Text form of the offending value, "<missing>" if absent
        detail: Extra explanation (unknown type name, parser message)
    """

    kind: ErrorKind
    path: tuple[str, ...]
    spec: str
    value: str
    detail: str = ""

    @property
    def message(self) -> str:
        return f"{self.value} doesn't match {self.spec} at {render_path(self.path)}"

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "path": list(self.path),
            "spec": self.spec,
            "value": self.value,
            "detail": self.detail,
            "message": str(self),
        }


def to_text(value: Any) -> str:
    """Render a scalar data value to the text form all matchers compare.

    Booleans become "true"/"false", floats keep their repr so 92.0 and 92
    stay distinguishable, everything else goes through str().
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return repr(value)
    return str(value)
