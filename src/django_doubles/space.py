"""The per-test registry of proxies, any-instance recorders and doubles.

One :class:`Space` lives for one test. It is the only place that creates
proxies and recorders, and its :meth:`Space.teardown` is the single entry
point that verifies expectations and then restores every patched method, even
when verification fails.
"""

from __future__ import annotations

import logging
from inspect import isclass
from typing import TYPE_CHECKING, Any

from .any_instance import AnyInstanceMethod, AnyInstanceRecorder
from .exceptions import MockExpectationError, OutOfOrderError
from .proxy import Proxy
from .registry import UNDEFINED, MethodRegistry
from .signals import space_reset, space_verified
from .utils import describe_target

if TYPE_CHECKING:
    from .double import Double
    from .message_expectation import MessageExpectation

logger = logging.getLogger(__name__)


class OrderGroup:
    """Tracks expectations marked ``ordered()`` and enforces their sequence."""

    def __init__(self) -> None:
        self._expectations: list[MessageExpectation] = []
        self._index = 0

    def register(self, expectation: MessageExpectation) -> None:
        self._expectations.append(expectation)

    def handle_order_constraint(self, expectation: MessageExpectation) -> None:
        for position in range(self._index, len(self._expectations)):
            candidate = self._expectations[position]
            if candidate is expectation:
                self._index = position
                return
            if not candidate.expected_messages_received():
                break
        raise OutOfOrderError(expectation.target_description, expectation.message)

    def clear(self) -> None:
        self._expectations.clear()
        self._index = 0


class Space:
    """Owns every proxy, recorder and double created during one test."""

    def __init__(self) -> None:
        self.method_registry = MethodRegistry()
        self.order_group = OrderGroup()
        self.proxies: dict[int, Proxy] = {}
        self.any_instance_recorders: dict[type, AnyInstanceRecorder] = {}
        self.doubles: list[Double] = []
        self.reported_deprecations: set[str] = set()
        self._entities: list[Proxy | AnyInstanceRecorder] = []

    def __repr__(self) -> str:
        return f"<Space proxies={len(self.proxies)} recorders={len(self.any_instance_recorders)}>"

    def is_empty(self) -> bool:
        return not self._entities and not self.doubles

    def register(self, entity: Any) -> None:
        """Track a proxy, recorder or double for this test only."""
        if getattr(type(entity), "_doubles_is_double", False):
            self.register_double(entity)
            return
        if any(existing is entity for existing in self._entities):
            logger.warning("%r is already registered in %r", entity, self)
            return
        self._entities.append(entity)

    def register_double(self, double: Double) -> None:
        if not any(existing is double for existing in self.doubles):
            self.doubles.append(double)

    def ensure_registered(self, double: Double) -> Proxy:
        """Register a double created outside this space and return its proxy."""
        self.register_double(double)
        return self.proxy_for(double)

    def proxy_for(self, target: Any) -> Proxy:
        """Return the proxy of ``target``, creating it on first use."""
        proxy = self.proxies.get(id(target))
        if proxy is None or proxy.target is not target:
            proxy = Proxy(target, self)
            self.proxies[id(target)] = proxy
            self.register(proxy)
            logger.debug("Created proxy for %s", proxy.description)
        return proxy

    def proxies_of(self, klass: type) -> list[Proxy]:
        """Return the proxies of every instance of ``klass`` (subclasses included)."""
        return [proxy for proxy in self.proxies.values() if isinstance(proxy.target, klass)]

    def any_instance_recorder_for(self, klass: type) -> AnyInstanceRecorder:
        """Return the single recorder of ``klass`` for this test, creating it on first use."""
        if not isclass(klass):
            raise TypeError(f"any_instance expects a class, got {describe_target(klass)}")
        recorder = self.any_instance_recorders.get(klass)
        if recorder is None:
            recorder = AnyInstanceRecorder(klass, self)
            self.any_instance_recorders[klass] = recorder
            self.register(recorder)
            logger.debug("Created any-instance recorder for %s", klass.__name__)
        return recorder

    def any_instance_recorders_for_ancestors(self, klass: type) -> list[AnyInstanceRecorder]:
        return [self.any_instance_recorders[base] for base in klass.__mro__[1:] if base in self.any_instance_recorders]

    def any_instance_recorder_observing(self, klass: type, name: str) -> AnyInstanceRecorder | None:
        """Return the recorder whose descriptor instances of ``klass`` currently resolve ``name`` to."""
        for base in klass.__mro__:
            value = base.__dict__.get(name, UNDEFINED)
            if value is UNDEFINED:
                continue
            if isinstance(value, AnyInstanceMethod) and value.recorder.space is self:
                return value.recorder
            return None
        return None

    def verify_all(self) -> None:
        """Verify every proxy and recorder, raising the first failure once all were checked."""
        failures: list[MockExpectationError] = []
        for entity in list(self._entities):
            try:
                entity.verify()
            except MockExpectationError as exc:
                failures.append(exc)
        space_verified.send(sender=Space, space=self, failures=failures)
        if failures:
            first = failures[0]
            for other in failures[1:]:
                first.add_note(f"also failed: {other}")
            logger.info("Space verification failed with %d error(s)", len(failures))
            raise first

    def reset_all(self) -> None:
        """Restore every patched method, newest entity first; safe to call repeatedly."""
        errors: list[Exception] = []
        for entity in reversed(self._entities):
            try:
                entity.reset()
            except Exception as exc:
                logger.exception("Failed to reset %r", entity)
                errors.append(exc)
        if len(self.method_registry):
            self.method_registry.restore_all()
        self._entities.clear()
        self.proxies.clear()
        self.any_instance_recorders.clear()
        self.doubles.clear()
        self.order_group.clear()
        self.reported_deprecations.clear()
        space_reset.send(sender=Space, space=self)
        if errors:
            raise errors[0]

    def teardown(self, verify: bool = True) -> None:
        """Verify (optionally) and always reset."""
        try:
            if verify:
                self.verify_all()
        finally:
            self.reset_all()


_current_space: Space | None = None


def get_space() -> Space:
    """Return the current space, creating one when none is active."""
    global _current_space
    if _current_space is None:
        _current_space = Space()
    return _current_space


def setup() -> Space:
    """Start a fresh space, resetting any space a previous test left behind."""
    global _current_space
    if _current_space is not None:
        if not _current_space.is_empty():
            logger.warning("Discarding a space that was not torn down")
        _current_space.reset_all()
    _current_space = Space()
    return _current_space


def proxy_for(target: Any) -> Proxy:
    """Return the current space's proxy of ``target``, adopting doubles created in another space."""
    space = get_space()
    if getattr(type(target), "_doubles_is_double", False):
        return space.ensure_registered(target)
    return space.proxy_for(target)


def verify() -> None:
    get_space().verify_all()


def teardown(verify: bool = True) -> None:
    """Tear down the current space; the next use starts a new one."""
    global _current_space
    space, _current_space = _current_space, None
    if space is not None:
        space.teardown(verify=verify)
