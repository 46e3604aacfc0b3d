from __future__ import annotations

import functools
import logging
from collections.abc import Callable, Iterable
from inspect import isclass
from typing import TYPE_CHECKING, Any

from .exceptions import NotStubbedError, UnexpectedArgumentsError
from .message_expectation import MessageExpectation
from .registry import UNDEFINED
from .signals import expectation_added
from .utils import describe_target, format_args

if TYPE_CHECKING:
    from .space import Space

logger = logging.getLogger(__name__)


def _rank(candidates: Iterable[MessageExpectation]) -> list[MessageExpectation]:
    """Order candidates: explicit argument constraints first, most recently added first."""
    return sorted(reversed(list(candidates)), key=lambda expectation: not expectation.constrains_arguments)


class ClassInterception:
    """Class ``__dict__`` entry routing class-level access of a name to a dispatcher.

    Instances keep resolving the name as if the class were not intercepted,
    except for classmethods and staticmethods, which never receive the instance.
    """

    def __init__(self, method_double: MethodDouble, dispatcher: Callable) -> None:
        self.method_double = method_double
        self.dispatcher = dispatcher
        registry = method_double.proxy.space.method_registry
        self.original = registry.unpatched_class_entry(method_double.target, method_double.name)

    def __repr__(self) -> str:
        return f"<ClassInterception {self.method_double.proxy.description}.{self.method_double.name}>"

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None or isinstance(self.original, (classmethod, staticmethod)):
            return self.dispatcher
        return self.method_double.instance_attribute(instance, owner)


class MethodDouble:
    """Interception of one method name on one target, with its stubs and expectations."""

    def __init__(self, proxy: Proxy, name: str) -> None:
        self.proxy = proxy
        self.name = name
        self.stubs: list[MessageExpectation] = []
        self.expectations: list[MessageExpectation] = []
        self._installed = False

    @property
    def target(self) -> Any:
        return self.proxy.target

    def is_empty(self) -> bool:
        return not self.stubs and not self.expectations

    def configure_method(self) -> None:
        """Route calls of ``name`` on the target through :meth:`dispatch`."""
        if self._installed:
            return
        method_double = self

        def intercepted(*args: Any, **kwargs: Any) -> Any:
            return method_double.dispatch(args, kwargs)

        original = self.proxy.space.method_registry.unpatched_attribute(self.target, self.name)
        if callable(original):
            functools.update_wrapper(intercepted, original, updated=())
        intercepted.__name__ = self.name
        value: Any = ClassInterception(self, intercepted) if isclass(self.target) else intercepted
        self.proxy.space.method_registry.install(self.target, self.name, value, holder=self)
        self._installed = True
        logger.debug("Intercepting %s.%s", self.proxy.description, self.name)

    def restore_original_method(self) -> None:
        if not self._installed:
            return
        self.proxy.space.method_registry.release(self.target, self.name, holder=self)
        self._installed = False
        logger.debug("Restored %s.%s", self.proxy.description, self.name)

    def instance_attribute(self, instance: Any, owner: type | None = None) -> Any:
        """Resolve ``instance.name`` below this class-level interception."""
        below = self.proxy.space.method_registry.value_below(self.target, self.name, holder=self)
        if below is UNDEFINED:
            return getattr(super(self.target, instance), self.name)
        if hasattr(type(below), "__get__"):
            return below.__get__(instance, owner if owner is not None else type(instance))
        return below

    def call_original(self, args: tuple, kwargs: dict) -> Any:
        original = self.proxy.space.method_registry.unpatched_attribute(self.target, self.name)
        if original is UNDEFINED:
            raise AttributeError(f"{self.proxy.description} has no original method '{self.name}' to call")
        return original(*args, **kwargs)

    def build_expectation(self, is_stub: bool, implementation: Callable | None, **options: Any) -> MessageExpectation:
        return MessageExpectation(
            self.proxy.description,
            self.name,
            implementation=implementation,
            is_stub=is_stub,
            expected_from=options.get("expected_from"),
            message_text=options.get("message"),
            origin=options.get("origin"),
            original=None if self.proxy.is_pure_double else self.call_original,
            order_group=self.proxy.space.order_group,
        )

    def add_stub(self, implementation: Callable | None = None, **options: Any) -> MessageExpectation:
        self.configure_method()
        stub = self.build_expectation(True, implementation, **options)
        self.stubs.append(stub)
        return stub

    def add_expectation(self, implementation: Callable | None = None, **options: Any) -> MessageExpectation:
        self.configure_method()
        expectation = self.build_expectation(False, implementation, **options)
        self.expectations.append(expectation)
        return expectation

    def remove_stubs(self, origin: Any = None, any_origin: bool = True) -> int:
        """Drop stubs (all of them, or only those played back from ``origin``); return how many."""
        before = len(self.stubs)
        self.stubs = [stub for stub in self.stubs if not (any_origin or stub.origin is origin)]
        return before - len(self.stubs)

    def has_negative_expectation(self) -> bool:
        return any(expectation.negative() for expectation in self.expectations)

    def dispatch(self, args: tuple, kwargs: dict) -> Any:
        """Resolve a received call to the best matching expectation or stub and run it."""
        expectation = self._find_matching_expectation(args, kwargs)
        stub = next((s for s in _rank(self.stubs) if s.matches(self.name, args, kwargs)), None)

        if expectation is not None and (stub is None or not expectation.called_max_times()):
            return expectation.invoke(args, kwargs)
        if stub is not None:
            if expectation is not None and expectation.actual_received_count_matters():
                expectation.increase_actual_received_count()
            return stub.invoke(args, kwargs)

        if any(e.matches_name_but_not_args(self.name, args, kwargs) for e in self.expectations):
            if self.has_negative_expectation():
                return None
            raise UnexpectedArgumentsError(
                self.proxy.description,
                self.name,
                expected=self._describe_expected(self.expectations),
                got=format_args(args, kwargs),
            )
        raise UnexpectedArgumentsError(
            self.proxy.description,
            self.name,
            expected=self._describe_expected(self.stubs),
            got=format_args(args, kwargs),
            stubs_only=True,
        )

    def _find_matching_expectation(self, args: tuple, kwargs: dict) -> MessageExpectation | None:
        matching = [e for e in _rank(self.expectations) if e.matches(self.name, args, kwargs)]
        for expectation in matching:
            if not expectation.called_max_times():
                return expectation
        return matching[0] if matching else None

    @staticmethod
    def _describe_expected(candidates: list[MessageExpectation]) -> str:
        return " or ".join(c.argument_list_matcher.describe() for c in candidates) or "(nothing)"

    def verify(self) -> None:
        for expectation in self.expectations:
            expectation.verify()

    def reset(self) -> None:
        self.restore_original_method()
        self.stubs.clear()
        self.expectations.clear()


class Proxy:
    """Owns the stubs and expectations of one target object or class.

    The first stub or expectation for a method name intercepts that name on the
    target only; :meth:`reset` restores every intercepted name.
    """

    def __init__(self, target: Any, space: Space) -> None:
        self.target = target
        self.space = space
        self.description = describe_target(target)
        self.is_pure_double = bool(getattr(type(target), "_doubles_is_double", False))
        self._method_doubles: dict[str, MethodDouble] = {}

    def __repr__(self) -> str:
        return f"<Proxy for {self.description}>"

    def method_double_if_exists(self, name: str) -> MethodDouble | None:
        return self._method_doubles.get(name)

    def method_double_for(self, name: str) -> MethodDouble:
        method_double = self._method_doubles.get(name)
        if method_double is not None:
            return method_double
        method_double = MethodDouble(self, name)
        self._method_doubles[name] = method_double
        if not self.is_pure_double and not isclass(self.target):
            # Compose with class-wide stubs before direct ones so direct ones win by recency
            recorder = self.space.any_instance_recorder_observing(type(self.target), name)
            if recorder is not None:
                recorder.playback(self.target, name, proxy=self)
        return method_double

    @property
    def intercepted_names(self) -> list[str]:
        return list(self._method_doubles)

    def add_stub(self, name: str, implementation: Callable | None = None, **options: Any) -> MessageExpectation:
        """Add an unverified stub for ``name``; newer stubs take precedence for new calls."""
        stub = self.method_double_for(name).add_stub(implementation, **options)
        expectation_added.send(sender=Proxy, proxy=self, expectation=stub)
        return stub

    def add_message_expectation(
        self, name: str, implementation: Callable | None = None, **options: Any
    ) -> MessageExpectation:
        """Add an expectation for ``name`` that is verified at teardown (once by default)."""
        expectation = self.method_double_for(name).add_expectation(implementation, **options)
        expectation_added.send(sender=Proxy, proxy=self, expectation=expectation)
        return expectation

    def add_negative_message_expectation(
        self, name: str, implementation: Callable | None = None, **options: Any
    ) -> MessageExpectation:
        expectation = self.add_message_expectation(name, implementation, **options)
        expectation.expected_received_count = 0
        return expectation

    def remove_stub(self, name: str) -> None:
        """Remove every stub for ``name``; expectations for the same name stay."""
        method_double = self._method_doubles.get(name)
        if method_double is None or not method_double.stubs:
            raise NotStubbedError(name)
        method_double.remove_stubs()
        self._discard_if_empty(method_double)

    def remove_any_instance_entries(self, name: str, recorder: Any) -> int:
        """Remove the stubs for ``name`` that were played back from ``recorder``."""
        method_double = self._method_doubles.get(name)
        if method_double is None:
            return 0
        removed = method_double.remove_stubs(origin=recorder, any_origin=False)
        self._discard_if_empty(method_double)
        return removed

    def _discard_if_empty(self, method_double: MethodDouble) -> None:
        if method_double.is_empty():
            method_double.reset()
            del self._method_doubles[method_double.name]

    def has_negative_expectation(self, name: str) -> bool:
        method_double = self._method_doubles.get(name)
        return method_double is not None and method_double.has_negative_expectation()

    def verify(self) -> None:
        for method_double in list(self._method_doubles.values()):
            method_double.verify()

    def reset(self) -> None:
        for method_double in reversed(list(self._method_doubles.values())):
            method_double.reset()
        self._method_doubles.clear()
