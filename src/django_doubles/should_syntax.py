"""The legacy ``should`` syntax.

Every capability is available as a free function taking the target first
(``stub(obj, "name")``) and, once :func:`enable_should` has run for a host
class, as methods of that host's instances (``double.stub("name")``) plus an
``any_instance`` class attribute. ``Double`` is a host by default.

Using the syntax without enabling it explicitly (see
:class:`~django_doubles.configuration.Configuration`) reports a deprecation
once per test.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from . import deprecation
from .any_instance import AnyInstanceRecorder
from .chain import stub_chain as build_stub_chain
from .configuration import get_configuration
from .double import Double
from .exceptions import MissingCapabilityError, NotStubbedError
from .message_expectation import MessageExpectation
from .space import get_space, proxy_for
from .utils import normalize_name

logger = logging.getLogger(__name__)

HOST_METHODS = ("stub", "unstub", "should_receive", "should_not_receive", "stub_chain")

_ENABLED_MARKER = "_doubles_should_enabled"


def _check_should(capability: str) -> None:
    configuration = get_configuration()
    if not configuration.should_enabled():
        raise MissingCapabilityError(
            "should syntax",
            capability,
            message="'%(name)s' is part of the %(owner)s, which is disabled; enable it in DJANGO_DOUBLES['SYNTAX']",
        )
    if not configuration.should_explicitly_enabled:
        replacement = deprecation.UNSTUB_REPLACEMENT if capability == "unstub" else deprecation.SHOULD_REPLACEMENT
        deprecation.report(capability, replacement)


def stub(obj: Any, name: Any, implementation: Callable | None = None, **options: Any) -> MessageExpectation | None:
    """Stub ``name`` on ``obj``; a ``{name: return_value}`` dict stubs several names at once."""
    _check_should("stub")
    proxy = proxy_for(obj)
    if isinstance(name, dict):
        for message, value in name.items():
            proxy.add_stub(normalize_name(message), **options).and_return(value)
        return None
    return proxy.add_stub(normalize_name(name), implementation, **options)


def unstub(obj: Any, name: Any) -> None:
    """Remove the stubs of ``name`` on ``obj``, restoring the original method."""
    _check_should("unstub")
    name = normalize_name(name)
    proxy = get_space().proxies.get(id(obj))
    if proxy is None or proxy.target is not obj:
        raise NotStubbedError(name)
    proxy.remove_stub(name)


def should_receive(obj: Any, name: Any, implementation: Callable | None = None, **options: Any) -> MessageExpectation:
    _check_should("should_receive")
    return proxy_for(obj).add_message_expectation(normalize_name(name), implementation, **options)


def should_not_receive(
    obj: Any, name: Any, implementation: Callable | None = None, **options: Any
) -> MessageExpectation:
    _check_should("should_not_receive")
    return proxy_for(obj).add_negative_message_expectation(normalize_name(name), implementation, **options)


def stub_chain(obj: Any, *names: Any, **final: Any) -> MessageExpectation | None:
    """Stub ``obj.a().b().c()``; see :func:`django_doubles.chain.stub_chain` for the accepted forms."""
    _check_should("stub_chain")
    proxy_for(obj)
    return build_stub_chain(get_space(), obj, *names, **final)


def any_instance(klass: type) -> AnyInstanceRecorder:
    """Return the recorder configuring every instance of ``klass`` for the current test."""
    _check_should("any_instance")
    return get_space().any_instance_recorder_for(klass)


class AnyInstanceAccessor:
    """Class attribute giving ``Host.any_instance`` for a host and its subclasses."""

    def __get__(self, instance: Any, owner: type | None = None) -> AnyInstanceRecorder:
        if owner is None:
            owner = type(instance)
        return any_instance(owner)


def _host_method(function: Callable) -> Callable:
    def method(self, *args: Any, **kwargs: Any) -> Any:
        return function(self, *args, **kwargs)

    method.__name__ = function.__name__
    method.__qualname__ = function.__qualname__
    method.__doc__ = function.__doc__
    return method


def enable_should(host: type = Double) -> None:
    """Install the ``should`` methods on ``host``; calling it again is a no-op."""
    if should_enabled(host):
        return
    for name in HOST_METHODS:
        setattr(host, name, _host_method(globals()[name]))
    host.any_instance = AnyInstanceAccessor()
    setattr(host, _ENABLED_MARKER, True)
    logger.debug("Enabled the should syntax on %s", host.__name__)


def disable_should(host: type = Double) -> None:
    """Remove what :func:`enable_should` installed on ``host``."""
    if not should_enabled(host):
        return
    for name in (*HOST_METHODS, "any_instance", _ENABLED_MARKER):
        if name in host.__dict__:
            delattr(host, name)
    logger.debug("Disabled the should syntax on %s", host.__name__)


def should_enabled(host: type = Double) -> bool:
    return bool(host.__dict__.get(_ENABLED_MARKER, False))


enable_should(Double)
