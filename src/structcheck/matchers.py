"""Matchers: the atomic unit of type checking.

A matcher is either pattern based (a compiled regular expression searched
against the value text) or predicate based (a callable that receives the
value plus the clause arguments). The two variants are explicit classes so
the engine never has to inspect a bare regex-or-callable at match time.
"""

import re
from typing import Any, Callable


# Predicate signature: (value, raw_args, parsed_args) -> truthy
PredicateFn = Callable[[str, str | None, tuple[str, ...]], Any]


class Matcher:
    """Base class for matchers.

    Subclasses implement `matches`.
    """

    kind = "matcher"

    def __init__(self, description: str = ""):
        self.description = description

    def matches(
        self,
        value: str,
        raw_args: str | None = None,
        parsed_args: tuple[str, ...] = (),
    ) -> bool:
        raise NotImplementedError("Subclasses must implement matches()")


class PatternMatcher(Matcher):
    """Matches when the pattern is found in the value text.

    No anchoring is added; patterns that must describe the whole value
    anchor themselves.
    """

    kind = "pattern"

    def __init__(self, pattern: re.Pattern[str], description: str = ""):
        super().__init__(description)
        self.pattern = pattern

    def matches(
        self,
        value: str,
        raw_args: str | None = None,
        parsed_args: tuple[str, ...] = (),
    ) -> bool:
        return self.pattern.search(value) is not None

    def __repr__(self) -> str:
        return f"PatternMatcher({self.pattern.pattern!r})"


class PredicateMatcher(Matcher):
    """Matches when the predicate returns a truthy value.

    Predicates may have side effects (DNS, filesystem, account lookups).
    Exceptions propagate to the caller; the leaf evaluator turns them into
    a non-match.
    """

    kind = "predicate"

    def __init__(self, func: PredicateFn, description: str = ""):
        super().__init__(description or (func.__doc__ or "").strip().split("\n")[0])
        self.func = func

    def matches(
        self,
        value: str,
        raw_args: str | None = None,
        parsed_args: tuple[str, ...] = (),
    ) -> bool:
        return bool(self.func(value, raw_args, parsed_args))

    def __repr__(self) -> str:
        name = getattr(self.func, "__name__", repr(self.func))
        return f"PredicateMatcher({name})"


class NegatedMatcher(Matcher):
    """Inverts the result of another matcher (the implicit `no` form)."""

    def __init__(self, inner: Matcher):
        super().__init__(f"not: {inner.description}" if inner.description else "")
        self.inner = inner
        self.kind = f"no-{inner.kind}"

    def matches(
        self,
        value: str,
        raw_args: str | None = None,
        parsed_args: tuple[str, ...] = (),
    ) -> bool:
        return not self.inner.matches(value, raw_args, parsed_args)

    def __repr__(self) -> str:
        return f"NegatedMatcher({self.inner!r})"


def as_matcher(obj: Any, description: str = "") -> Matcher:
    """Convert a registration argument into a Matcher.

    Accepts a Matcher (kept as is), a compiled pattern, a pattern string
    (compiled here) or a predicate callable.

    Raises:
        TypeError: If obj is none of the above
        re.error: If a pattern string does not compile
    """
    if isinstance(obj, Matcher):
        return obj
    if isinstance(obj, re.Pattern):
        return PatternMatcher(obj, description)
    if isinstance(obj, str):
        return PatternMatcher(re.compile(obj), description)
    if callable(obj):
        return PredicateMatcher(obj, description)
    raise TypeError(
        f"Cannot use {type(obj).__name__} as a matcher. "
        "Expected a Matcher, a regular expression or a predicate callable."
    )
