"""Tests for MethodRegistry."""

from __future__ import annotations

import pytest

from django_doubles.exceptions import CannotStubError
from django_doubles.registry import UNDEFINED, MethodRegistry


class Base:
    def greet(self):
        return "base"

    @classmethod
    def build(cls):
        return cls.__name__


class Child(Base):
    pass


class Slotted:
    __slots__ = ("value",)

    def greet(self):
        return "slotted"


@pytest.fixture
def registry():
    registry = MethodRegistry()
    yield registry
    registry.restore_all()


class TestInstallRelease:
    """Tests for installing and releasing interceptions."""

    def test_instance_entry_and_restore(self, registry):
        obj = Base()
        holder = object()
        registry.install(obj, "greet", lambda: "patched", holder)
        assert obj.greet() == "patched"
        assert (obj, "greet") in registry
        assert registry.release(obj, "greet", holder)
        assert "greet" not in vars(obj)
        assert obj.greet() == "base"
        assert len(registry) == 0

    def test_class_entry_is_restored_to_undefined(self, registry):
        holder = object()
        registry.install(Child, "greet", lambda self: "child", holder)
        assert Child().greet() == "child"
        registry.release(Child, "greet", holder)
        assert "greet" not in Child.__dict__
        assert Child().greet() == "base"

    def test_class_entry_is_restored_to_original(self, registry):
        holder = object()
        original = Base.__dict__["greet"]
        registry.install(Base, "greet", lambda self: "patched", holder)
        registry.release(Base, "greet", holder)
        assert Base.__dict__["greet"] is original

    def test_release_out_of_order(self, registry):
        """Test releasing the older holder keeps the newer patch in place."""
        obj = Base()
        first, second = object(), object()
        registry.install(obj, "greet", lambda: "first", first)
        registry.install(obj, "greet", lambda: "second", second)
        registry.release(obj, "greet", first)
        assert obj.greet() == "second"
        registry.release(obj, "greet", second)
        assert obj.greet() == "base"

    def test_release_newest_reinstalls_previous(self, registry):
        obj = Base()
        first, second = object(), object()
        registry.install(obj, "greet", lambda: "first", first)
        registry.install(obj, "greet", lambda: "second", second)
        registry.release(obj, "greet", second)
        assert obj.greet() == "first"
        assert registry.holds(obj, "greet", first)
        assert not registry.holds(obj, "greet", second)

    def test_release_unknown_holder(self, registry):
        assert registry.release(Base(), "greet", object()) is False

    def test_slots_cannot_be_stubbed(self, registry):
        with pytest.raises(CannotStubError):
            registry.install(Slotted(), "greet", lambda: "x", object())

    def test_restore_all(self, registry):
        obj = Base()
        registry.install(obj, "greet", lambda: "patched", object())
        registry.install(Child, "greet", lambda self: "child", object())
        registry.restore_all()
        assert obj.greet() == "base"
        assert "greet" not in Child.__dict__
        assert len(registry) == 0


class TestUnpatchedAttribute:
    """Tests for resolving attributes as if nothing were patched."""

    def test_bound_method_of_instance(self, registry):
        obj = Base()
        registry.install(obj, "greet", lambda: "patched", object())
        original = registry.unpatched_attribute(obj, "greet")
        assert original() == "base"

    def test_reads_saved_class_original(self, registry):
        obj = Child()
        registry.install(Base, "greet", lambda self: "patched", object())
        assert registry.unpatched_attribute(obj, "greet")() == "base"

    def test_classmethod_on_class(self, registry):
        registry.install(Child, "build", staticmethod(lambda: "patched"), object())
        assert Child.build() == "patched"
        assert registry.unpatched_attribute(Child, "build")() == "Child"

    def test_missing(self, registry):
        assert registry.unpatched_attribute(Base(), "missing") is UNDEFINED
        assert not UNDEFINED

    def test_original(self, registry):
        obj = Base()
        registry.install(obj, "greet", lambda: "patched", object())
        assert registry.original(obj, "greet") is UNDEFINED

    def test_unpatched_class_entry_is_raw(self, registry):
        registry.install(Base, "build", staticmethod(lambda: "patched"), object())
        assert isinstance(registry.unpatched_class_entry(Child, "build"), classmethod)
        assert registry.unpatched_class_entry(Child, "missing") is UNDEFINED


class TestValueBelow:
    """Tests for reading the entry underneath a holder."""

    def test_without_entry(self, registry):
        assert registry.value_below(Base, "greet", object()) is Base.__dict__["greet"]
        assert registry.value_below(Child, "greet", object()) is UNDEFINED

    def test_stacked_holders(self, registry):
        original = Base.__dict__["greet"]
        first, second = object(), object()
        first_value, second_value = (lambda self: "first"), (lambda self: "second")
        registry.install(Base, "greet", first_value, first)
        registry.install(Base, "greet", second_value, second)
        assert registry.value_below(Base, "greet", first) is original
        assert registry.value_below(Base, "greet", second) is first_value
