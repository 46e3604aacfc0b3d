"""The ``expect`` syntax: ``allow(obj).to(receive("name").and_return(1))``.

Targets wrap what is being configured (an object or every instance of a
class); matchers record the qualifiers and apply them to a real stub or
expectation when handed to ``to()`` or ``not_to()``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from .chain import stub_chain
from .configuration import get_configuration
from .exceptions import MissingCapabilityError
from .fluent import RecordedChain
from .space import get_space, proxy_for
from .utils import describe_target, normalize_name

logger = logging.getLogger(__name__)


def _check_expect(capability: str) -> None:
    if not get_configuration().expect_enabled():
        raise MissingCapabilityError(
            "expect syntax",
            capability,
            message="'%(name)s' is part of the %(owner)s, which is disabled; enable it in DJANGO_DOUBLES['SYNTAX']",
        )


class Matcher:
    """Base matcher; subclasses implement the setups they support."""

    name = "matcher"

    def _unsupported(self, setup: str) -> Any:
        raise MissingCapabilityError(self.name, setup, message="'%(owner)s' does not support '%(name)s'")

    def setup_allowance(self, target: Any) -> Any:
        return self._unsupported("allow")

    def setup_expectation(self, target: Any) -> Any:
        return self._unsupported("expect")

    def setup_negative_expectation(self, target: Any) -> Any:
        return self._unsupported("expect(...).not_to")

    def setup_any_instance_allowance(self, klass: type) -> Any:
        return self._unsupported("allow_any_instance_of")

    def setup_any_instance_expectation(self, klass: type) -> Any:
        return self._unsupported("expect_any_instance_of")

    def setup_any_instance_negative_expectation(self, klass: type) -> Any:
        return self._unsupported("expect_any_instance_of(...).not_to")


class Receive(RecordedChain, Matcher):
    """Matcher for one message; qualifiers are recorded and replayed on ``to()``.

    Unlike a live expectation, an ``and_*`` action returns the matcher so the
    whole chain can be passed to ``to()``.
    """

    def __init__(self, message: Any, implementation: Callable | None = None, **options: Any) -> None:
        super().__init__()
        self.message = normalize_name(message)
        self.name = f"receive('{self.message}')"
        self.implementation = implementation
        self.options = options

    def _fluent_owner(self) -> str:
        return self.name

    def _after_record(self) -> Receive:
        return self

    def setup_allowance(self, target: Any) -> Any:
        return self.playback(proxy_for(target).add_stub(self.message, self.implementation, **self.options))

    def setup_expectation(self, target: Any) -> Any:
        return self.playback(
            proxy_for(target).add_message_expectation(self.message, self.implementation, **self.options)
        )

    def setup_negative_expectation(self, target: Any) -> Any:
        return self.playback(
            proxy_for(target).add_negative_message_expectation(self.message, self.implementation, **self.options)
        )

    def setup_any_instance_allowance(self, klass: type) -> Any:
        recorder = get_space().any_instance_recorder_for(klass)
        return self.playback(recorder.stub(self.message, self.implementation, **self.options))

    def setup_any_instance_expectation(self, klass: type) -> Any:
        recorder = get_space().any_instance_recorder_for(klass)
        return self.playback(recorder.should_receive(self.message, self.implementation, **self.options))

    def setup_any_instance_negative_expectation(self, klass: type) -> Any:
        recorder = get_space().any_instance_recorder_for(klass)
        return self.playback(recorder.should_not_receive(self.message, self.implementation, **self.options))


class ReceiveMessages(Matcher):
    """Matcher stubbing (or expecting) several messages with fixed return values."""

    name = "receive_messages"

    def __init__(self, returns: dict[str, Any]) -> None:
        if not returns:
            raise ValueError("receive_messages() needs at least one message=value pair")
        self.returns = returns

    def setup_allowance(self, target: Any) -> None:
        proxy = proxy_for(target)
        for message, value in self.returns.items():
            proxy.add_stub(message).and_return(value)

    def setup_expectation(self, target: Any) -> None:
        proxy = proxy_for(target)
        for message, value in self.returns.items():
            proxy.add_message_expectation(message).and_return(value)

    def setup_any_instance_allowance(self, klass: type) -> None:
        recorder = get_space().any_instance_recorder_for(klass)
        for message, value in self.returns.items():
            recorder.stub(message).and_return(value)

    def setup_any_instance_expectation(self, klass: type) -> None:
        recorder = get_space().any_instance_recorder_for(klass)
        for message, value in self.returns.items():
            recorder.should_receive(message).and_return(value)


class ReceiveMessageChain(RecordedChain, Matcher):
    """Matcher stubbing ``a().b().c()``; qualifiers apply to the last message."""

    def __init__(self, *names: Any, **final: Any) -> None:
        super().__init__()
        self.names = names
        self.final = final
        self.name = f"receive_message_chain({', '.join(repr(name) for name in names)})"

    def _fluent_owner(self) -> str:
        return self.name

    def _after_record(self) -> ReceiveMessageChain:
        return self

    def setup_allowance(self, target: Any) -> Any:
        proxy_for(target)
        last = stub_chain(get_space(), target, *self.names, **self.final)
        return None if last is None else self.playback(last)

    def setup_any_instance_allowance(self, klass: type) -> Any:
        chain = get_space().any_instance_recorder_for(klass).stub_chain(*self.names, **self.final)
        return None if chain is None else self.playback(chain)


class Target:
    """Something ``to()`` and ``not_to()`` can configure through a matcher."""

    syntax = "expect"

    def __init__(self, target: Any) -> None:
        self.target = target

    def __repr__(self) -> str:
        return f"{self.syntax}({describe_target(self.target)})"

    def _check_matcher(self, matcher: Any) -> None:
        if not isinstance(matcher, Matcher):
            raise TypeError(
                f"{self!r} only accepts receive(), receive_messages() or receive_message_chain(), got {matcher!r}"
            )

    def to(self, matcher: Matcher) -> Any:
        self._check_matcher(matcher)
        return self._setup(matcher)

    def not_to(self, matcher: Matcher) -> Any:
        self._check_matcher(matcher)
        return self._setup_negative(matcher)

    to_not = not_to

    def _setup(self, matcher: Matcher) -> Any:
        raise NotImplementedError

    def _setup_negative(self, matcher: Matcher) -> Any:
        raise NotImplementedError


class AllowanceTarget(Target):
    syntax = "allow"

    def _setup(self, matcher: Matcher) -> Any:
        return matcher.setup_allowance(self.target)

    def _setup_negative(self, matcher: Matcher) -> Any:
        raise MissingCapabilityError(
            "allow(...)",
            "not_to",
            message="`%(owner)s.%(name)s(receive(...))` is not supported since it doesn't really make sense",
        )


class ExpectationTarget(Target):
    def _setup(self, matcher: Matcher) -> Any:
        return matcher.setup_expectation(self.target)

    def _setup_negative(self, matcher: Matcher) -> Any:
        return matcher.setup_negative_expectation(self.target)


class AnyInstanceAllowanceTarget(AllowanceTarget):
    syntax = "allow_any_instance_of"

    def _setup(self, matcher: Matcher) -> Any:
        return matcher.setup_any_instance_allowance(self.target)


class AnyInstanceExpectationTarget(Target):
    syntax = "expect_any_instance_of"

    def _setup(self, matcher: Matcher) -> Any:
        return matcher.setup_any_instance_expectation(self.target)

    def _setup_negative(self, matcher: Matcher) -> Any:
        return matcher.setup_any_instance_negative_expectation(self.target)


def allow(target: Any) -> AllowanceTarget:
    _check_expect("allow")
    return AllowanceTarget(target)


def expect(target: Any) -> ExpectationTarget:
    _check_expect("expect")
    return ExpectationTarget(target)


def allow_any_instance_of(klass: type) -> AnyInstanceAllowanceTarget:
    _check_expect("allow_any_instance_of")
    return AnyInstanceAllowanceTarget(klass)


def expect_any_instance_of(klass: type) -> AnyInstanceExpectationTarget:
    _check_expect("expect_any_instance_of")
    return AnyInstanceExpectationTarget(klass)


def receive(message: Any, implementation: Callable | None = None, **options: Any) -> Receive:
    _check_expect("receive")
    return Receive(message, implementation, **options)


def receive_messages(**returns: Any) -> ReceiveMessages:
    _check_expect("receive_messages")
    return ReceiveMessages(returns)


def receive_message_chain(*names: Any, **final: Any) -> ReceiveMessageChain:
    _check_expect("receive_message_chain")
    return ReceiveMessageChain(*names, **final)
