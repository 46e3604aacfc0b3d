"""Qualifier sequencing for expectations.

Every configurable expectation (a live ``MessageExpectation``, a recorded
any-instance chain, a ``receive()`` matcher) moves through the same states.
A qualifier called from a state that does not allow it raises
``MissingCapabilityError`` instead of silently succeeding.
"""

from __future__ import annotations

import logging
from typing import Any

from .exceptions import MissingCapabilityError

logger = logging.getLogger(__name__)

FRESH = "fresh"
CONSTRAINED = "constrained"
COUNTED = "counted"
YIELDING = "yielding"
TERMINAL = "terminal"

_CONFIGURING = frozenset({FRESH, CONSTRAINED, COUNTED})
_OPEN = frozenset({FRESH, CONSTRAINED, COUNTED, YIELDING})

CARDINALITY_QUALIFIERS = (
    "once",
    "twice",
    "thrice",
    "exactly",
    "at_least",
    "at_most",
    "never",
    "any_number_of_times",
)
TERMINAL_QUALIFIERS = ("and_return", "and_raise", "and_throw", "and_call_original", "and_invoke")

# qualifier -> (allowed source states, target state); None keeps the current state
TRANSITIONS: dict[str, tuple[frozenset[str], str | None]] = {
    "with_args": (frozenset({FRESH}), CONSTRAINED),
    "ordered": (_CONFIGURING, None),
    "and_yield": (_OPEN, YIELDING),
    **{name: (_CONFIGURING, COUNTED) for name in CARDINALITY_QUALIFIERS},
    **{name: (_OPEN, TERMINAL) for name in TERMINAL_QUALIFIERS},
}

QUALIFIERS = tuple(TRANSITIONS)


class FluentState:
    """Mixin tracking the qualifier state of one expectation."""

    fluent_state: str = FRESH

    def _fluent_owner(self) -> str:
        return type(self).__name__

    def transition(self, qualifier: str) -> None:
        """Move to the state ``qualifier`` leads to, or raise when it is not allowed here."""
        allowed, target = TRANSITIONS[qualifier]
        if self.fluent_state not in allowed:
            raise MissingCapabilityError(
                self._fluent_owner(),
                qualifier,
                message=f"'%(owner)s' has no capability '%(name)s' after it has been {self.fluent_state}",
            )
        if target is not None:
            self.fluent_state = target


class RecordedCall:
    """One qualifier call captured for later playback."""

    __slots__ = ("name", "args", "kwargs")

    def __init__(self, name: str, args: tuple, kwargs: dict) -> None:
        self.name = name
        self.args = args
        self.kwargs = kwargs

    def apply(self, target: Any) -> Any:
        return getattr(target, self.name)(*self.args, **self.kwargs)

    def __repr__(self) -> str:
        return f"<RecordedCall {self.name}>"


def _recorder(qualifier: str):
    def record(self, *args, **kwargs):
        self.transition(qualifier)
        self.recorded_calls.append(RecordedCall(qualifier, args, kwargs))
        return self._after_record()

    record.__name__ = qualifier
    record.__doc__ = f"Record ``{qualifier}`` for playback."
    return record


class RecordedChain(FluentState):
    """Records qualifier calls, validating their order, and replays them onto a real expectation."""

    def __init__(self) -> None:
        self.recorded_calls: list[RecordedCall] = []

    def _after_record(self) -> Any:
        return None if self.fluent_state == TERMINAL else self

    def playback(self, expectation: Any) -> Any:
        """Replay recorded qualifiers onto ``expectation`` and return it."""
        target = expectation
        for call in self.recorded_calls:
            result = call.apply(target)
            if result is not None:
                target = result
        return expectation

    def constrains_arguments(self) -> bool:
        return any(call.name == "with_args" for call in self.recorded_calls)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {[call.name for call in self.recorded_calls]}>"


for _qualifier in QUALIFIERS:
    setattr(RecordedChain, _qualifier, _recorder(_qualifier))
del _qualifier
