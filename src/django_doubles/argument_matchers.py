"""Argument constraints for expectations.

An expectation with no ``with_args`` qualifier accepts any call. An explicit
argument list matches positionally: each expected value must be the received
value, compare equal to it, or be an :class:`ArgumentMatcher` that accepts it.
"""

from __future__ import annotations

import logging
from typing import Any

from .utils import format_args

logger = logging.getLogger(__name__)


class ArgumentMatcher:
    """Base class for values that match received arguments by predicate instead of equality."""

    description = "matcher"

    def matches(self, actual: Any) -> bool:
        raise NotImplementedError

    def __repr__(self) -> str:
        return self.description


class _Anything(ArgumentMatcher):
    description = "anything"

    def matches(self, actual: Any) -> bool:
        return True


class _AnyArgs(ArgumentMatcher):
    """Placeholder accepted only as the sole argument of ``with_args``."""

    description = "*(any args)"

    def matches(self, actual: Any) -> bool:
        return True


class _NoArgs(ArgumentMatcher):
    """Placeholder accepted only as the sole argument of ``with_args``."""

    description = "no args"

    def matches(self, actual: Any) -> bool:
        return False


class InstanceOf(ArgumentMatcher):
    def __init__(self, klass: type) -> None:
        self.klass = klass
        self.description = f"an_instance_of({klass.__name__})"

    def matches(self, actual: Any) -> bool:
        return type(actual) is self.klass


class KindOf(ArgumentMatcher):
    def __init__(self, klass: type) -> None:
        self.klass = klass
        self.description = f"kind_of({klass.__name__})"

    def matches(self, actual: Any) -> bool:
        return isinstance(actual, self.klass)


ANYTHING = _Anything()
ANY_ARGS = _AnyArgs()
NO_ARGS = _NoArgs()


def anything() -> ArgumentMatcher:
    return ANYTHING


def any_args() -> ArgumentMatcher:
    return ANY_ARGS


def no_args() -> ArgumentMatcher:
    return NO_ARGS


def instance_of(klass: type) -> ArgumentMatcher:
    return InstanceOf(klass)


def kind_of(klass: type) -> ArgumentMatcher:
    return KindOf(klass)


def values_match(expected: Any, actual: Any) -> bool:
    """Return True when a single received value satisfies an expected value."""
    if isinstance(expected, ArgumentMatcher):
        return expected.matches(actual)
    if expected is actual:
        return True
    try:
        return bool(expected == actual)
    except Exception:
        logger.debug("Comparing %r with %r raised; treating it as a mismatch", expected, actual, exc_info=True)
        return False


def _contains(values: tuple, placeholder: ArgumentMatcher) -> bool:
    return any(value is placeholder for value in values)


def _only(values: tuple, placeholder: ArgumentMatcher) -> bool:
    return len(values) == 1 and values[0] is placeholder


class ArgumentListMatcher:
    """Matches the full (args, kwargs) of a received call."""

    def __init__(self, *expected_args: Any, **expected_kwargs: Any) -> None:
        if _contains(expected_args, ANY_ARGS) and (len(expected_args) > 1 or expected_kwargs):
            raise ValueError("any_args() must be the only argument of with_args()")
        if _contains(expected_args, NO_ARGS) and (len(expected_args) > 1 or expected_kwargs):
            raise ValueError("no_args() must be the only argument of with_args()")
        self.expected_args = expected_args
        self.expected_kwargs = expected_kwargs

    @property
    def is_any_args(self) -> bool:
        return _only(self.expected_args, ANY_ARGS)

    @property
    def is_explicit(self) -> bool:
        """Whether this matcher constrains arguments (used to rank candidate expectations)."""
        return not self.is_any_args

    def args_match(self, args: tuple, kwargs: dict) -> bool:
        if self.is_any_args:
            return True
        if _only(self.expected_args, NO_ARGS):
            return not args and not kwargs
        if len(args) != len(self.expected_args) or kwargs.keys() != self.expected_kwargs.keys():
            return False
        if not all(values_match(expected, actual) for expected, actual in zip(self.expected_args, args)):
            return False
        return all(values_match(value, kwargs[key]) for key, value in self.expected_kwargs.items())

    def describe(self) -> str:
        if self.is_any_args:
            return "(*(any args))"
        if _only(self.expected_args, NO_ARGS):
            return "(no args)"
        return format_args(self.expected_args, self.expected_kwargs)

    def __repr__(self) -> str:
        return f"<ArgumentListMatcher {self.describe()}>"


MATCH_ALL = ArgumentListMatcher(ANY_ARGS)
