"""Stubs and expectations that apply to every instance of a class.

A recorder observes a method name by placing an :class:`AnyInstanceMethod`
descriptor in the class ``__dict__``. Instances (including subclass instances
and instances created later) reach it through normal attribute lookup. The
first call on a given instance plays the recorded chains back onto that
instance's own :class:`~django_doubles.proxy.Proxy`, which then intercepts the
name in the instance ``__dict__`` and handles every later call on it, so
per-instance call counts stay independent. Instances never called never get a
proxy.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from .chain import parse_chain, stub_chain
from .exceptions import (
    AnyInstanceError,
    DoubleNegationError,
    ExpectationNotSatisfiedError,
    MissingCapabilityError,
    NotStubbedError,
)
from .fluent import QUALIFIERS, TERMINAL, RecordedCall, RecordedChain
from .registry import UNDEFINED
from .utils import describe_target, get_fully_qualified_name, normalize_name, stringify

if TYPE_CHECKING:
    from .message_expectation import MessageExpectation
    from .proxy import Proxy
    from .space import Space

logger = logging.getLogger(__name__)

STUB = "stub"
EXPECTATION = "expectation"
NEGATIVE = "negative"
CHAIN = "chain"


class RecordedMessageChain(RecordedChain):
    """A stub, expectation or stub chain recorded on a class, replayed per instance."""

    def __init__(
        self,
        recorder: AnyInstanceRecorder,
        kind: str,
        name: str,
        implementation: Callable | None = None,
        options: dict[str, Any] | None = None,
        chain_args: tuple[tuple, dict] | None = None,
    ) -> None:
        super().__init__()
        self.recorder = recorder
        self.kind = kind
        self.name = name
        self.implementation = implementation
        self.options = options or {}
        self.chain_args = chain_args
        self.played_by: Any = None
        self._negated = kind == NEGATIVE

    def _fluent_owner(self) -> str:
        return f"any_instance({self.recorder.klass.__name__}).{self.kind}('{self.name}')"

    def never(self) -> RecordedMessageChain:
        if self._negated:
            raise DoubleNegationError(self.name)
        self.transition("never")
        self._negated = True
        self.recorded_calls.append(RecordedCall("never", (), {}))
        return self

    @property
    def is_stub(self) -> bool:
        return self.kind in (STUB, CHAIN)

    @property
    def expects_one_instance(self) -> bool:
        return self.kind == EXPECTATION and not self._negated

    def play_onto(self, proxy: Proxy, instance: Any) -> MessageExpectation | None:
        """Create the real stub or expectation on ``instance``'s proxy and replay the qualifiers."""
        options = dict(self.options, origin=self.recorder)
        if self.kind == STUB:
            expectation = proxy.add_stub(self.name, self.implementation, **options)
        elif self.kind == EXPECTATION:
            expectation = proxy.add_message_expectation(self.name, self.implementation, **options)
        elif self.kind == NEGATIVE:
            expectation = proxy.add_negative_message_expectation(self.name, self.implementation, **options)
        else:
            names, final = self.chain_args or ((), {})
            expectation = stub_chain(proxy.space, instance, *names, origin=self.recorder, **final)
            if expectation is None:
                return None
        return self.playback(expectation)


class AnyInstanceMethod:
    """Non-data descriptor that routes an observed method through its recorder.

    Being a non-data descriptor, it yields to an interception stored in the
    instance ``__dict__`` once the instance has its own proxy.
    """

    def __init__(self, recorder: AnyInstanceRecorder, name: str, original: Any) -> None:
        self.recorder = recorder
        self.name = name
        self.original = original

    def __repr__(self) -> str:
        return f"<AnyInstanceMethod {get_fully_qualified_name(self.recorder.klass)}.{self.name}>"

    def _wrap(self, function: Callable) -> Callable:
        if callable(self.original):
            functools.update_wrapper(function, self.original, updated=())
        function.__name__ = self.name
        return function

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        recorder, name = self.recorder, self.name
        if instance is None:

            def unbound(receiver: Any, *args: Any, **kwargs: Any) -> Any:
                return recorder.dispatch(receiver, name, args, kwargs)

            return self._wrap(unbound)

        def bound(*args: Any, **kwargs: Any) -> Any:
            return recorder.dispatch(instance, name, args, kwargs)

        return self._wrap(bound)


class AnyInstanceRecorder:
    """Class-wide stubs and expectations for one class and its subclasses."""

    def __init__(self, klass: type, space: Space) -> None:
        self.klass = klass
        self.space = space
        self.chains: list[RecordedMessageChain] = []
        self.observed_methods: list[str] = []
        self._played: dict[int, tuple[Any, list[RecordedMessageChain]]] = {}

    def __repr__(self) -> str:
        return f"<AnyInstanceRecorder for {get_fully_qualified_name(self.klass)}>"

    def __getattr__(self, name: str) -> Any:
        if name in QUALIFIERS:
            raise MissingCapabilityError(
                f"any_instance({self.klass.__name__})",
                name,
                message="'%(owner)s' has no capability '%(name)s'; call stub() or should_receive() first",
            )
        raise AttributeError(name)

    # -- configuration ----------------------------------------------------------

    def _record(self, kind: str, name: Any, implementation: Callable | None, options: dict[str, Any]):
        chain = RecordedMessageChain(self, kind, normalize_name(name), implementation, options)
        self.chains.append(chain)
        self.observe(chain.name)
        return chain

    def stub(self, name: Any, implementation: Callable | None = None, **options: Any) -> RecordedMessageChain:
        return self._record(STUB, name, implementation, options)

    def should_receive(
        self, name: Any, implementation: Callable | None = None, **options: Any
    ) -> RecordedMessageChain:
        return self._record(EXPECTATION, name, implementation, options)

    def should_not_receive(
        self, name: Any, implementation: Callable | None = None, **options: Any
    ) -> RecordedMessageChain:
        return self._record(NEGATIVE, name, implementation, options)

    def stub_chain(self, *names: Any, **final: Any) -> RecordedMessageChain | None:
        """Stub a chain of messages on every instance; only the first name is observed."""
        parts, _ = parse_chain(names, dict(final))
        chain = RecordedMessageChain(self, CHAIN, parts[0], chain_args=(names, final))
        self.chains.append(chain)
        self.observe(chain.name)
        if final or (names and isinstance(names[-1], dict)):
            chain.fluent_state = TERMINAL
            return None
        return chain

    def unstub(self, name: Any) -> None:
        """Remove the class-wide stubs for ``name`` and the instance stubs played back from them."""
        name = normalize_name(name)
        if name not in self.observed_methods:
            raise NotStubbedError(name)
        self.chains = [chain for chain in self.chains if not (chain.name == name and chain.is_stub)]
        for _, played in self._played.values():
            played[:] = [chain for chain in played if any(chain is kept for kept in self.chains)]
        for proxy in self.space.proxies_of(self.klass):
            proxy.remove_any_instance_entries(name, self)
        if not any(chain.name == name for chain in self.chains):
            self.stop_observing(name)
        logger.debug("Unstubbed %s on any instance of %s", name, self.klass.__name__)

    # -- interception -----------------------------------------------------------

    def observe(self, name: str) -> None:
        if name in self.observed_methods:
            return
        original = self.space.method_registry.unpatched_attribute(self.klass, name)
        descriptor = AnyInstanceMethod(self, name, None if original is UNDEFINED else original)
        self.space.method_registry.install(self.klass, name, descriptor, holder=self)
        self.observed_methods.append(name)
        logger.debug("Observing %s on any instance of %s", name, self.klass.__name__)

    def stop_observing(self, name: str) -> None:
        """Stop intercepting ``name`` here and on ancestor recorders observing it."""
        if name in self.observed_methods:
            self.space.method_registry.release(self.klass, name, holder=self)
            self.observed_methods.remove(name)
        for ancestor in self.space.any_instance_recorders_for_ancestors(self.klass):
            if name in ancestor.observed_methods:
                ancestor.stop_observing(name)

    def is_observing(self, name: str) -> bool:
        return name in self.observed_methods

    def playback(self, instance: Any, name: str, proxy: Proxy | None = None) -> None:
        """Play the chains for ``name`` that ``instance`` has not received yet onto its proxy."""
        if proxy is None:
            proxy = self.space.proxy_for(instance)
        _, played = self._played.setdefault(id(instance), (instance, []))
        for chain in list(self.chains):
            if chain.name != name or any(chain is done for done in played):
                continue
            if chain.expects_one_instance and chain.played_by is not None and chain.played_by is not instance:
                raise AnyInstanceError(
                    f"The message '{name}' was received by {describe_target(instance)} "
                    f"but has already been received by {describe_target(chain.played_by)}"
                )
            played.append(chain)
            if chain.expects_one_instance:
                chain.played_by = instance
            logger.debug("Playing back %r onto %s", chain, describe_target(instance))
            chain.play_onto(proxy, instance)

    def dispatch(self, instance: Any, name: str, args: tuple, kwargs: dict) -> Any:
        """Handle a call reaching the class-level descriptor for ``instance``."""
        proxy = self.space.proxy_for(instance)
        method_double = proxy.method_double_for(name)
        self.playback(instance, name, proxy)
        if method_double.is_empty():
            proxy.remove_any_instance_entries(name, self)
            original = self.space.method_registry.unpatched_attribute(instance, name)
            if original is UNDEFINED:
                raise AttributeError(f"{describe_target(instance)} has no attribute '{name}'")
            return original(*args, **kwargs)
        return method_double.dispatch(args, kwargs)

    # -- lifecycle ----------------------------------------------------------------

    def verify(self) -> None:
        unplayed = [chain for chain in self.chains if chain.expects_one_instance and chain.played_by is None]
        if not unplayed:
            return
        custom = next((chain.options.get("message") for chain in unplayed if chain.options.get("message")), None)
        expected_from = next(
            (chain.options.get("expected_from") for chain in unplayed if chain.options.get("expected_from")), None
        )
        raise ExpectationNotSatisfiedError(
            custom
            or "Exactly one instance should have received the following message(s) but didn't: "
            + stringify([chain.name for chain in unplayed]),
            expected_from=expected_from,
        )

    def reset(self) -> None:
        for name in list(self.observed_methods):
            self.space.method_registry.release(self.klass, name, holder=self)
        self.observed_methods.clear()
        self.chains.clear()
        self._played.clear()
