"""Type registry for structcheck.

Provides registration and lookup for matchers in three tiers:
- builtin: shipped with the package, read-only
- global: process-wide, registered by the application at startup
- instance: per-validator, shadows the global tier for that validator only

Lookup order is instance, global, builtin. A type name that is not found
directly may still resolve as the negated form of another type: ``nofoo``
resolves to ``foo`` inverted. An exact match always wins over the negated
reading, so a custom type named ``nope`` is never taken as ``no`` + ``pe``.

Global tier policy: copy-on-write. Registration swaps in a new dict under a
lock; a registry captures the current dict when it is created and never
sees later global registrations.
"""

import threading
from types import MappingProxyType
from typing import Any, Callable, Mapping

from structcheck.builtins import BUILTIN_TYPES
from structcheck.matchers import Matcher, NegatedMatcher, as_matcher

NEGATION_PREFIX = "no"


class TypeRegistry:
    """Registry of type names to matchers.

    The global tier lives on the class; everything else is per instance.

    Example:
        # Process-wide, before validators are built
        TypeRegistry.register_global("color", r"\\A#[0-9a-f]{6}\\Z")

        # Per validator
        registry = TypeRegistry()
        registry.register("address", r"\\A\\w+\\s+\\d+\\Z")
        registry.lookup("address")
    """

    _global: Mapping[str, Matcher] = MappingProxyType({})
    _global_lock = threading.Lock()

    def __init__(self, builtins: Mapping[str, Matcher] | None = None):
        self._builtin = builtins if builtins is not None else BUILTIN_TYPES
        self._global_snapshot = type(self)._global
        self._instance: dict[str, Matcher] = {}
        # bumped on every instance registration; compiled leaves key on it
        self.version = 0

    # -------------------------------------------------------------------------
    # Global tier
    # -------------------------------------------------------------------------

    @classmethod
    def register_global(cls, name: str, matcher: Any, description: str = "") -> None:
        """Register a type for every registry created from now on.

        Overwrites any earlier global registration of the same name.

        Args:
            name: Type name as used in type specs (case-sensitive)
            matcher: Matcher, regex (compiled or string) or predicate callable
            description: One-line description for type listings
        """
        resolved = as_matcher(matcher, description)
        with cls._global_lock:
            updated = dict(cls._global)
            updated[name] = resolved
            cls._global = MappingProxyType(updated)

    @classmethod
    def global_types(cls) -> Mapping[str, Matcher]:
        """Current global tier (read-only view)."""
        return cls._global

    @classmethod
    def clear_global(cls) -> None:
        """Clear all global registrations. Primarily for testing."""
        with cls._global_lock:
            cls._global = MappingProxyType({})

    # -------------------------------------------------------------------------
    # Instance tier
    # -------------------------------------------------------------------------

    def register(self, name: str, matcher: Any, description: str = "") -> None:
        """Register a type for this registry only.

        Overwrites any earlier instance registration of the same name and
        shadows global and builtin types with that name.
        """
        self._instance[name] = as_matcher(matcher, description)
        self.version += 1

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def lookup(self, name: str) -> Matcher | None:
        """Find a matcher by exact name, or None."""
        for tier in (self._instance, self._global_snapshot, self._builtin):
            if name in tier:
                return tier[name]
        return None

    def lookup_negated(self, name: str) -> tuple[str, NegatedMatcher] | None:
        """Resolve ``no<base>`` to the inverted matcher for ``<base>``.

        Returns:
            (base name, inverted matcher), or None if name has no prefix or
            the base does not resolve
        """
        if not name.startswith(NEGATION_PREFIX):
            return None
        base = name[len(NEGATION_PREFIX):]
        if not base:
            return None
        matcher = self.lookup(base)
        if matcher is None:
            return None
        return base, NegatedMatcher(matcher)

    def resolve(self, token: str) -> tuple[str, Matcher, bool] | None:
        """Resolve a clause name: exact match first, then negated prefix.

        Returns:
            (resolved name, matcher to apply, negated), or None. For a
            negated result the name is the base name and the matcher is
            already inverted.
        """
        matcher = self.lookup(token)
        if matcher is not None:
            return token, matcher, False
        negated = self.lookup_negated(token)
        if negated is not None:
            base, inverted = negated
            return base, inverted, True
        return None

    def is_registered(self, name: str) -> bool:
        return self.resolve(name) is not None

    def list_registered(self) -> list[str]:
        """List all type names visible to this registry (without negations)."""
        return sorted(set(self._builtin) | set(self._global_snapshot) | set(self._instance))

    def describe(self) -> dict[str, dict[str, str]]:
        """Export visible types for documentation or CLI listings.

        Returns:
            Dict keyed by type name with kind, tier and description
        """
        tiers = (
            ("instance", self._instance),
            ("global", self._global_snapshot),
            ("builtin", self._builtin),
        )
        result: dict[str, dict[str, str]] = {}
        for name in self.list_registered():
            for tier_name, tier in tiers:
                if name in tier:
                    matcher = tier[name]
                    result[name] = {
                        "kind": matcher.kind,
                        "tier": tier_name,
                        "description": matcher.description,
                    }
                    break
        return result


def register_global_type(name: str, matcher: Any, description: str = "") -> None:
    """Register a process-wide type. See TypeRegistry.register_global."""
    TypeRegistry.register_global(name, matcher, description)


def matcher(name: str, description: str = "") -> Callable[[Callable], Callable]:
    """Decorator registering a predicate function as a global type.

    Example:
        @matcher("even")
        def even(value, raw_args, parsed_args):
            return value.isdigit() and int(value) % 2 == 0
    """

    def decorator(func: Callable) -> Callable:
        TypeRegistry.register_global(name, func, description)
        return func

    return decorator
