from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from .argument_matchers import MATCH_ALL, ArgumentListMatcher
from .exceptions import (
    DoubleNegationError,
    ExpectationNotSatisfiedError,
    MockExpectationError,
    ThrownSymbol,
)
from .fluent import FluentState
from .utils import format_args, pluralize

if TYPE_CHECKING:
    from .space import OrderGroup

logger = logging.getLogger(__name__)

EXACTLY = "exactly"
AT_LEAST = "at_least"
AT_MOST = "at_most"
ANY_NUMBER = "any"

Action = Callable[[tuple, dict], Any]


class MessageExpectation(FluentState):
    """A single configured stub or expectation for one method name.

    Holds the argument constraint, the ordered queue of actions run on each
    received call, the cardinality constraint and the received count. Stubs
    (``is_stub=True``) share the same machinery but are never verified.
    """

    # intermediate double returned when this stub is a link of a stub_chain
    chain_link: Any = None

    def __init__(
        self,
        target_description: str,
        message: str,
        *,
        implementation: Callable | None = None,
        is_stub: bool = False,
        expected_from: str | None = None,
        message_text: str | None = None,
        origin: Any = None,
        original: Callable[[tuple, dict], Any] | None = None,
        order_group: OrderGroup | None = None,
        expected_received_count: int = 1,
    ) -> None:
        self.target_description = target_description
        self.message = message
        self.is_stub = is_stub
        self.expected_from = expected_from
        self.message_text = message_text
        self.origin = origin
        self.argument_list_matcher: ArgumentListMatcher = MATCH_ALL
        self.implementation = implementation
        self.expected_received_count = expected_received_count
        self.count_kind = ANY_NUMBER if is_stub else EXACTLY
        self.actual_received_count = 0
        self._original = original
        self._order_group = order_group
        self._ordered = False
        self._actions: list[Action] = []
        self._yield_args: list[tuple] = []
        self._calls_handled = 0
        self._count_set = False

    # -- argument constraint --------------------------------------------------

    def with_args(self, *args: Any, **kwargs: Any) -> MessageExpectation:
        """Constrain the arguments this expectation accepts."""
        self.transition("with_args")
        self.argument_list_matcher = ArgumentListMatcher(*args, **kwargs)
        return self

    def matches(self, message: str, args: tuple, kwargs: dict) -> bool:
        return message == self.message and self.argument_list_matcher.args_match(args, kwargs)

    def matches_name_but_not_args(self, message: str, args: tuple, kwargs: dict) -> bool:
        return message == self.message and not self.argument_list_matcher.args_match(args, kwargs)

    @property
    def constrains_arguments(self) -> bool:
        return self.argument_list_matcher.is_explicit

    # -- cardinality ------------------------------------------------------------

    def _set_count(self, kind: str, count: int) -> MessageExpectation:
        if count < 0:
            raise ValueError(f"Expected a non-negative count, got {count}")
        self.count_kind = kind
        self.expected_received_count = count
        self._count_set = True
        return self

    def exactly(self, count: int) -> MessageExpectation:
        self.transition("exactly")
        return self._set_count(EXACTLY, count)

    def at_least(self, count: int) -> MessageExpectation:
        self.transition("at_least")
        return self._set_count(AT_LEAST, count)

    def at_most(self, count: int) -> MessageExpectation:
        self.transition("at_most")
        return self._set_count(AT_MOST, count)

    def once(self) -> MessageExpectation:
        self.transition("once")
        return self._set_count(EXACTLY, 1)

    def twice(self) -> MessageExpectation:
        self.transition("twice")
        return self._set_count(EXACTLY, 2)

    def thrice(self) -> MessageExpectation:
        self.transition("thrice")
        return self._set_count(EXACTLY, 3)

    def never(self) -> MessageExpectation:
        if self.negative():
            raise DoubleNegationError(self.message)
        self.transition("never")
        return self._set_count(EXACTLY, 0)

    def any_number_of_times(self) -> MessageExpectation:
        self.transition("any_number_of_times")
        self.count_kind = ANY_NUMBER
        return self

    def negative(self) -> bool:
        return self.count_kind == EXACTLY and self.expected_received_count == 0

    def ordered(self) -> MessageExpectation:
        """Require this expectation to be received after the previously ordered ones."""
        self.transition("ordered")
        if self._order_group is None:
            raise MockExpectationError("ordered() needs an active space")
        self._ordered = True
        self._order_group.register(self)
        return self

    # -- actions ----------------------------------------------------------------

    def and_return(self, *values: Any) -> None:
        """Return ``values`` in order on consecutive calls, repeating the last one."""
        self.transition("and_return")
        if self.negative():
            raise MockExpectationError(f"and_return() is not supported with negative expectations of '{self.message}'")
        if not values:
            values = (None,)
        self._actions.extend(_returning(value) for value in values)
        if self.count_kind == EXACTLY and self.expected_received_count < len(values) and not self.is_stub:
            self.expected_received_count = len(values)

    def and_raise(self, exception: Any = Exception, message: str | None = None) -> None:
        self.transition("and_raise")
        self._actions.append(_raising(exception, message))

    def and_throw(self, symbol: str, value: Any = None) -> None:
        self.transition("and_throw")

        def throw(args: tuple, kwargs: dict) -> Any:
            raise ThrownSymbol(symbol, value)

        self._actions.append(throw)

    def and_invoke(self, *callables: Callable) -> None:
        """Call ``callables`` in order on consecutive calls with the received arguments."""
        self.transition("and_invoke")
        for func in callables:
            if not callable(func):
                raise TypeError(f"and_invoke() expects callables, got {type(func).__name__}")
            self._actions.append(lambda args, kwargs, func=func: func(*args, **kwargs))

    def and_call_original(self) -> None:
        self.transition("and_call_original")
        if self._original is None:
            raise MockExpectationError(
                f"{self.target_description} is a pure double; and_call_original() is only "
                "available on real objects and classes"
            )
        self._actions.append(self._original)

    def and_yield(self, *args: Any) -> MessageExpectation:
        """Call the block (last positional callable argument) with ``args`` when invoked."""
        self.transition("and_yield")
        self._yield_args.append(args)
        return self

    # -- invocation -------------------------------------------------------------

    def called_max_times(self) -> bool:
        """True once a positive expectation has used up its allowed calls; never for negative ones."""
        return self.expected_received_count > 0 and self._at_limit()

    def _at_limit(self) -> bool:
        return self.count_kind in (EXACTLY, AT_MOST) and self.actual_received_count >= self.expected_received_count

    def actual_received_count_matters(self) -> bool:
        return not self.is_stub and self._count_set and self.count_kind != ANY_NUMBER

    def increase_actual_received_count(self) -> None:
        self.actual_received_count += 1

    def expected_messages_received(self) -> bool:
        if self.count_kind == EXACTLY:
            return self.actual_received_count == self.expected_received_count
        if self.count_kind == AT_LEAST:
            return self.actual_received_count >= self.expected_received_count
        if self.count_kind == AT_MOST:
            return self.actual_received_count <= self.expected_received_count
        return True

    def invoke(self, args: tuple, kwargs: dict) -> Any:
        """Record one received call and run the next configured action."""
        if not self.is_stub and self._at_limit():
            self.actual_received_count += 1
            raise self._count_error()
        self.actual_received_count += 1
        if self._ordered and self._order_group is not None:
            self._order_group.handle_order_constraint(self)
        result = None
        if self._yield_args:
            result = self._yield_to_block(args)
        if self._actions or self.implementation is not None or not self._yield_args:
            result = self._run_action(args, kwargs)
        self._calls_handled += 1
        return result

    def _run_action(self, args: tuple, kwargs: dict) -> Any:
        if self._actions:
            action = self._actions[min(self._calls_handled, len(self._actions) - 1)]
            return action(args, kwargs)
        if self.implementation is not None:
            return self.implementation(*args, **kwargs)
        return None

    def _yield_to_block(self, args: tuple) -> Any:
        block = args[-1] if args and callable(args[-1]) else None
        if block is None:
            raise MockExpectationError(
                f"{self.target_description} asked to yield |{format_args(self._yield_args[0])}| "
                f"from '{self.message}' but no block was passed"
            )
        result = None
        for yield_args in self._yield_args:
            result = block(*yield_args)
        return result

    # -- verification -------------------------------------------------------------

    def describe_count(self) -> str:
        if self.count_kind == AT_LEAST:
            return f"at least {pluralize(self.expected_received_count)}"
        if self.count_kind == AT_MOST:
            return f"at most {pluralize(self.expected_received_count)}"
        if self.count_kind == ANY_NUMBER:
            return "any number of times"
        return pluralize(self.expected_received_count)

    def failure_message(self) -> str:
        if self.message_text:
            return self.message_text
        return (
            f"({self.target_description}).{self.message}{self.argument_list_matcher.describe()}\n"
            f"    expected: {self.describe_count()}\n"
            f"    received: {pluralize(self.actual_received_count)}"
        )

    def _count_error(self) -> ExpectationNotSatisfiedError:
        return ExpectationNotSatisfiedError(self.failure_message(), expected_from=self.expected_from)

    def verify(self) -> None:
        """Raise ``ExpectationNotSatisfiedError`` when the received count misses the cardinality."""
        if self.is_stub or self.expected_messages_received():
            return
        logger.debug("Expectation %r not satisfied", self)
        raise self._count_error()

    def __repr__(self) -> str:
        kind = "stub" if self.is_stub else "expectation"
        return f"<MessageExpectation {kind} {self.message}{self.argument_list_matcher.describe()}>"


def _returning(value: Any) -> Action:
    return lambda args, kwargs: value


def _raising(exception: Any, message: str | None) -> Action:
    def raise_exception(args: tuple, kwargs: dict) -> Any:
        if isinstance(exception, str):
            raise RuntimeError(exception)
        if isinstance(exception, type) and issubclass(exception, BaseException):
            raise exception(message) if message is not None else exception()
        if isinstance(exception, BaseException):
            raise exception
        raise TypeError(f"and_raise() expects an exception class, instance or message, got {exception!r}")

    return raise_exception
