class MockExpectationError(AssertionError):
    """Base class for failures raised by doubles, proxies and expectations."""


class ExpectationNotSatisfiedError(MockExpectationError):
    """Raised at verification when an expectation's received count is not met."""

    def __init__(self, message: str, expected_from: str | None = None) -> None:
        self.expected_from = expected_from
        super().__init__(message)
        if expected_from:
            self.add_note(f"expected from {expected_from}")


class UnexpectedMessageError(MockExpectationError):
    """Raised when a double receives a message nothing was configured for."""

    default_message = "%(target)s received unexpected message '%(name)s' with %(args)s"

    def __init__(self, target: str, name: str, args: str, message: str | None = None) -> None:
        self.target = target
        self.name = name
        self.args_description = args
        self.message = message or self.default_message
        super().__init__(self.message % {"target": target, "name": name, "args": args})


class UnexpectedArgumentsError(MockExpectationError):
    """Raised when an intercepted method is called with arguments no expectation or stub accepts."""

    default_message = "%(target)s received '%(name)s' with unexpected arguments\n  expected: %(expected)s\n       got: %(got)s"
    stub_hint = "\n Please stub a default value first if message might be received with other args as well."

    def __init__(self, target: str, name: str, expected: str, got: str, stubs_only: bool = False) -> None:
        self.target = target
        self.name = name
        message = self.default_message % {"target": target, "name": name, "expected": expected, "got": got}
        if stubs_only:
            message += self.stub_hint
        super().__init__(message)


class NotStubbedError(MockExpectationError):
    """Raised when unstubbing a method that has no stub."""

    default_message = "The method `%s` was not stubbed or was already unstubbed"

    def __init__(self, name: str, message: str | None = None) -> None:
        self.name = str(name)
        self.message = message or self.default_message
        super().__init__(self.message % self.name)

    def __repr__(self) -> str:
        return self.message % self.name


class DoubleNegationError(MockExpectationError):
    """Raised when `never` is applied to an expectation that is already negative."""

    default_message = (
        "Isn't life confusing enough? You've already set a negative message expectation "
        "and now you are trying to negate it again with `never`. "
        "What does an expression like `should_not_receive('%s').never()` even mean?"
    )

    def __init__(self, name: str) -> None:
        self.name = str(name)
        super().__init__(self.default_message % self.name)


class OutOfOrderError(MockExpectationError):
    """Raised when ordered expectations are received out of order."""

    default_message = "%(target)s received '%(name)s' out of order"

    def __init__(self, target: str, name: str) -> None:
        self.target = target
        self.name = name
        super().__init__(self.default_message % {"target": target, "name": name})


class AnyInstanceError(MockExpectationError):
    """Raised when an any-instance expectation is not received by exactly one instance."""


class MissingCapabilityError(AttributeError):
    """Raised when a qualifier or syntax is used where it is not available."""

    default_message = "'%(owner)s' has no capability '%(name)s'"

    def __init__(self, owner: str, name: str, message: str | None = None) -> None:
        self.owner = owner
        self.message = message or self.default_message
        super().__init__(self.message % {"owner": owner, "name": name})
        # AttributeError.__init__() overwrites name
        self.name = name

    def __repr__(self) -> str:
        return self.message % {"owner": self.owner, "name": self.name}


class CannotStubError(TypeError):
    """Raised when a target cannot hold an interception (no writable __dict__)."""

    default_message = "Cannot stub '%(name)s' on %(target)s: it has no writable __dict__"

    def __init__(self, target: str, name: str) -> None:
        self.target = target
        self.name = name
        super().__init__(self.default_message % {"target": target, "name": name})


class ThrownSymbol(Exception):
    """Raised by the `and_throw` action, carrying the thrown symbol and its value."""

    def __init__(self, symbol: str, value: object = None) -> None:
        self.symbol = symbol
        self.value = value
        super().__init__(f"uncaught throw {symbol!r}")
