"""Tests for the expect syntax."""

from __future__ import annotations

import pytest

from django_doubles import (
    allow,
    allow_any_instance_of,
    double,
    expect,
    expect_any_instance_of,
    receive,
    receive_message_chain,
    receive_messages,
)
from django_doubles.configuration import get_configuration
from django_doubles.exceptions import (
    AnyInstanceError,
    ExpectationNotSatisfiedError,
    MissingCapabilityError,
)
from django_doubles.expect_syntax import Receive


class Invoice:
    def total(self):
        return 100

    def tax(self, rate):
        return self.total() * rate

    @classmethod
    def lookup(cls, number):
        return cls()


class TestReceive:
    """Tests for the receive() matcher."""

    def test_qualifiers_return_the_matcher(self):
        matcher = receive("total")
        assert matcher.with_args(1) is matcher
        assert matcher.once() is matcher
        assert matcher.and_return(1) is matcher

    def test_illegal_sequence(self):
        with pytest.raises(MissingCapabilityError) as excinfo:
            receive("total").and_return(1).with_args(2)
        assert "receive('total')" in str(excinfo.value)

    def test_accepts_functions_as_names(self):
        assert receive(Invoice.total).message == "total"


class TestAllow:
    """Tests for allow(...)."""

    def test_to_receive(self):
        invoice = Invoice()
        allow(invoice).to(receive("total").and_return(5))
        assert invoice.total() == 5

    def test_with_args(self):
        invoice = Invoice()
        allow(invoice).to(receive("tax").with_args(2).and_return("double"))
        assert invoice.tax(2) == "double"

    def test_implementation(self):
        invoice = Invoice()
        allow(invoice).to(receive("tax", lambda rate: rate * 10))
        assert invoice.tax(3) == 30

    def test_and_call_original(self):
        invoice = Invoice()
        allow(invoice).to(receive("total").and_return(10))
        allow(invoice).to(receive("tax").and_call_original())
        assert invoice.tax(2) == 20

    def test_class_method(self):
        allow(Invoice).to(receive("lookup").and_return("found"))
        assert Invoice.lookup(1) == "found"

    def test_class_stub_leaves_instance_methods_alone(self):
        allow(Invoice).to(receive("tax").and_call_original())
        assert Invoice().tax(2) == 200
        assert Invoice.tax(Invoice(), 3) == 300

    def test_returns_the_stub(self):
        invoice = Invoice()
        stub = allow(invoice).to(receive("total"))
        assert stub.is_stub

    def test_not_to_is_not_supported(self):
        with pytest.raises(MissingCapabilityError, match="doesn't really make sense"):
            allow(Invoice()).not_to(receive("total"))
        with pytest.raises(MissingCapabilityError):
            allow(Invoice()).to_not(receive("total"))

    def test_requires_a_matcher(self):
        with pytest.raises(TypeError):
            allow(Invoice()).to("total")

    def test_receive_messages(self):
        invoice = Invoice()
        allow(invoice).to(receive_messages(total=1, tax=2))
        assert invoice.total() == 1
        assert invoice.tax(0) == 2

    def test_receive_message_chain(self):
        invoice = Invoice()
        allow(invoice).to(receive_message_chain("customer", "address", "city").and_return("Lisbon"))
        assert invoice.customer().address().city() == "Lisbon"

    def test_receive_message_chain_with_mapping(self):
        invoice = Invoice()
        allow(invoice).to(receive_message_chain("customer", name="Ada"))
        assert invoice.customer().name() == "Ada"

    def test_on_a_double(self):
        dbl = double("mailer")
        allow(dbl).to(receive("send").and_return(True))
        assert dbl.send() is True


class TestExpect:
    """Tests for expect(...)."""

    def test_to_receive(self, space):
        invoice = Invoice()
        expect(invoice).to(receive("total").and_return(5))
        assert invoice.total() == 5
        space.verify_all()

    def test_unmet(self, space):
        expect(Invoice()).to(receive("total").twice())
        with pytest.raises(ExpectationNotSatisfiedError, match="expected: 2 times"):
            space.verify_all()

    def test_not_to(self):
        invoice = Invoice()
        expect(invoice).not_to(receive("total"))
        with pytest.raises(ExpectationNotSatisfiedError):
            invoice.total()

    def test_to_not_alias(self, space):
        expect(Invoice()).to_not(receive("total"))
        space.verify_all()

    def test_receive_messages(self, space):
        invoice = Invoice()
        expect(invoice).to(receive_messages(total=1))
        with pytest.raises(ExpectationNotSatisfiedError):
            space.verify_all()

    def test_receive_messages_cannot_be_negated(self):
        with pytest.raises(MissingCapabilityError):
            expect(Invoice()).not_to(receive_messages(total=1))

    def test_receive_message_chain_is_allow_only(self):
        with pytest.raises(MissingCapabilityError):
            expect(Invoice()).to(receive_message_chain("a", "b"))


class TestAnyInstanceOf:
    """Tests for allow_any_instance_of and expect_any_instance_of."""

    def test_allow(self):
        allow_any_instance_of(Invoice).to(receive("total").and_return(7))
        assert Invoice().total() == 7
        assert Invoice().tax(2) == 14

    def test_allow_receive_messages(self):
        allow_any_instance_of(Invoice).to(receive_messages(total=3))
        assert Invoice().total() == 3

    def test_allow_message_chain(self):
        allow_any_instance_of(Invoice).to(receive_message_chain("customer", "name").and_return("Ada"))
        assert Invoice().customer().name() == "Ada"

    def test_allow_not_to(self):
        with pytest.raises(MissingCapabilityError):
            allow_any_instance_of(Invoice).not_to(receive("total"))

    def test_expect(self, space):
        expect_any_instance_of(Invoice).to(receive("total").and_return(1))
        assert Invoice().total() == 1
        space.verify_all()

    def test_expect_second_instance(self):
        expect_any_instance_of(Invoice).to(receive("total"))
        Invoice().total()
        with pytest.raises(AnyInstanceError):
            Invoice().total()

    def test_expect_not_to(self):
        expect_any_instance_of(Invoice).not_to(receive("total"))
        with pytest.raises(ExpectationNotSatisfiedError):
            Invoice().total()


class TestConfiguration:
    """Tests for disabling the syntax."""

    def test_disabled(self):
        get_configuration().syntax = "should"
        with pytest.raises(MissingCapabilityError):
            allow(Invoice())
        with pytest.raises(MissingCapabilityError):
            receive("total")

    def test_receive_is_a_recorded_chain(self):
        assert isinstance(receive("total"), Receive)
