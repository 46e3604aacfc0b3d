from django_doubles.any_instance import AnyInstanceRecorder
from django_doubles.argument_matchers import (
    ANY_ARGS,
    ANYTHING,
    NO_ARGS,
    ArgumentListMatcher,
    ArgumentMatcher,
    any_args,
    anything,
    instance_of,
    kind_of,
    no_args,
)
from django_doubles.configuration import Configuration, get_configuration
from django_doubles.deprecation import DoublesDeprecationWarning
from django_doubles.double import Double, double
from django_doubles.exceptions import (
    AnyInstanceError,
    CannotStubError,
    DoubleNegationError,
    ExpectationNotSatisfiedError,
    MissingCapabilityError,
    MockExpectationError,
    NotStubbedError,
    OutOfOrderError,
    ThrownSymbol,
    UnexpectedArgumentsError,
    UnexpectedMessageError,
)
from django_doubles.expect_syntax import (
    allow,
    allow_any_instance_of,
    expect,
    expect_any_instance_of,
    receive,
    receive_message_chain,
    receive_messages,
)
from django_doubles.message_expectation import MessageExpectation
from django_doubles.proxy import Proxy
from django_doubles.should_syntax import (
    any_instance,
    disable_should,
    enable_should,
    should_enabled,
    should_not_receive,
    should_receive,
    stub,
    stub_chain,
    unstub,
)
from django_doubles.space import Space, get_space, setup, teardown, verify

__all__ = [
    # Doubles and spaces
    "Double",
    "double",
    "Space",
    "get_space",
    "setup",
    "verify",
    "teardown",
    # Core objects
    "Proxy",
    "MessageExpectation",
    "AnyInstanceRecorder",
    # Argument matchers
    "ArgumentMatcher",
    "ArgumentListMatcher",
    "ANYTHING",
    "ANY_ARGS",
    "NO_ARGS",
    "anything",
    "any_args",
    "no_args",
    "instance_of",
    "kind_of",
    # should syntax
    "stub",
    "unstub",
    "should_receive",
    "should_not_receive",
    "stub_chain",
    "any_instance",
    "enable_should",
    "disable_should",
    "should_enabled",
    # expect syntax
    "allow",
    "expect",
    "allow_any_instance_of",
    "expect_any_instance_of",
    "receive",
    "receive_messages",
    "receive_message_chain",
    # Configuration
    "Configuration",
    "get_configuration",
    "DoublesDeprecationWarning",
    # Exceptions
    "MockExpectationError",
    "ExpectationNotSatisfiedError",
    "UnexpectedMessageError",
    "UnexpectedArgumentsError",
    "NotStubbedError",
    "DoubleNegationError",
    "OutOfOrderError",
    "AnyInstanceError",
    "MissingCapabilityError",
    "CannotStubError",
    "ThrownSymbol",
]
