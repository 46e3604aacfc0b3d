"""Tests for Space and the module-level helpers."""

from __future__ import annotations

import logging

import pytest

from django_doubles import space as space_module
from django_doubles.double import Double
from django_doubles.exceptions import ExpectationNotSatisfiedError
from django_doubles.signals import space_reset, space_verified
from django_doubles.space import Space


class Greeter:
    def greet(self):
        return "hello"

    def wave(self):
        return "wave"


class TestRegistration:
    """Tests for registering proxies, recorders and doubles."""

    def test_proxy_for_is_idempotent(self):
        space = Space()
        obj = Greeter()
        assert space.proxy_for(obj) is space.proxy_for(obj)
        assert len(space.proxies) == 1

    def test_proxies_of(self):
        space = Space()
        sub = type("LoudGreeter", (Greeter,), {})
        first, second = Greeter(), sub()
        space.proxy_for(first)
        space.proxy_for(second)
        space.proxy_for(Greeter)
        assert {id(proxy.target) for proxy in space.proxies_of(Greeter)} == {id(first), id(second)}
        assert [proxy.target for proxy in space.proxies_of(sub)] == [second]

    def test_ensure_registered(self):
        space, other = Space(), Space()
        dbl = Double("elsewhere", space=other)
        proxy = space.ensure_registered(dbl)
        assert proxy.target is dbl
        assert dbl in space.doubles

    def test_duplicate_registration_warns(self, caplog):
        space = Space()
        proxy = space.proxy_for(Greeter())
        with caplog.at_level(logging.WARNING, logger="django_doubles.space"):
            space.register(proxy)
        assert "already registered" in caplog.text

    def test_is_empty(self):
        space = Space()
        assert space.is_empty()
        space.proxy_for(Greeter())
        assert not space.is_empty()

    def test_ancestor_recorders(self):
        space = Space()
        sub = type("LoudGreeter", (Greeter,), {})
        parent = space.any_instance_recorder_for(Greeter)
        space.any_instance_recorder_for(sub)
        assert space.any_instance_recorders_for_ancestors(sub) == [parent]
        assert space.any_instance_recorders_for_ancestors(Greeter) == []


class TestVerifyAll:
    """Tests for verify_all."""

    def test_raises_first_failure_with_others_as_notes(self):
        space = Space()
        first, second = Greeter(), Greeter()
        space.proxy_for(first).add_message_expectation("greet", message="first failure")
        space.proxy_for(second).add_message_expectation("greet", message="second failure")
        with pytest.raises(ExpectationNotSatisfiedError) as excinfo:
            space.verify_all()
        assert str(excinfo.value) == "first failure"
        assert "also failed: second failure" in excinfo.value.__notes__
        space.reset_all()

    def test_sends_signal(self):
        space = Space()
        received = []

        def handler(sender, space, failures, **kwargs):
            received.append(failures)

        space_verified.connect(handler)
        try:
            space.verify_all()
        finally:
            space_verified.disconnect(handler)
        assert received == [[]]


class TestResetAll:
    """Tests for reset_all and teardown."""

    def test_restores_everything(self):
        space = Space()
        obj = Greeter()
        space.proxy_for(obj).add_stub("greet").and_return("stubbed")
        space.proxy_for(Greeter).add_stub("wave").and_return("stubbed")
        space.any_instance_recorder_for(Greeter).stub("greet").and_return("any")
        space.reset_all()
        assert obj.greet() == "hello"
        assert Greeter().wave() == "wave"
        assert Greeter().greet() == "hello"
        assert len(space.method_registry) == 0
        assert space.is_empty()

    def test_is_repeatable(self):
        space = Space()
        space.proxy_for(Greeter()).add_stub("greet")
        space.reset_all()
        space.reset_all()

    def test_sends_signal(self):
        space = Space()
        received = []

        def handler(sender, space, **kwargs):
            received.append(space)

        space_reset.connect(handler)
        try:
            space.reset_all()
        finally:
            space_reset.disconnect(handler)
        assert received == [space]

    def test_teardown_resets_even_when_verification_fails(self):
        space = Space()
        obj = Greeter()
        space.proxy_for(obj).add_message_expectation("greet")
        with pytest.raises(ExpectationNotSatisfiedError):
            space.teardown()
        assert obj.greet() == "hello"

    def test_teardown_without_verification(self):
        space = Space()
        obj = Greeter()
        space.proxy_for(obj).add_message_expectation("greet")
        space.teardown(verify=False)
        assert obj.greet() == "hello"

    def test_resets_newest_first(self):
        """Test a class stub and an instance stub on the same name unwind cleanly."""
        space = Space()
        obj = Greeter()
        space.any_instance_recorder_for(Greeter).stub("greet").and_return("any")
        space.proxy_for(obj).add_stub("greet").and_return("direct")
        assert obj.greet() == "direct"
        space.reset_all()
        assert obj.greet() == "hello"
        assert "greet" not in vars(obj)


class TestModuleHelpers:
    """Tests for get_space, setup, verify and teardown."""

    def test_get_space_returns_current(self, space):
        assert space_module.get_space() is space

    def test_setup_replaces_leftover_space(self, space, caplog):
        obj = Greeter()
        space.proxy_for(obj).add_stub("greet").and_return("stubbed")
        with caplog.at_level(logging.WARNING, logger="django_doubles.space"):
            fresh = space_module.setup()
        assert fresh is not space
        assert obj.greet() == "hello"
        assert "not torn down" in caplog.text

    def test_teardown_forgets_space(self, space):
        space_module.teardown()
        assert space_module.get_space() is not space

    def test_verify(self, space):
        space.proxy_for(Greeter()).add_message_expectation("greet")
        with pytest.raises(ExpectationNotSatisfiedError):
            space_module.verify()
