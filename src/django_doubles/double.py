from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .exceptions import UnexpectedMessageError

if TYPE_CHECKING:
    from .space import Space

logger = logging.getLogger(__name__)


class Double:
    """A stand-in object whose whole behavior is the stubs and expectations configured on it.

    Reading any other public attribute fails with ``UnexpectedMessageError``
    unless the double was turned into a null object.
    """

    _doubles_is_double = True

    def __init__(self, name: str | None = None, stubs: dict[str, Any] | None = None, *, space: Space | None = None):
        if space is None:
            from .space import get_space

            space = get_space()
        self._doubles_name = name
        self._doubles_null = False
        self._doubles_space = space
        space.register_double(self)
        for message, value in (stubs or {}).items():
            space.proxy_for(self).add_stub(message).and_return(value)

    @classmethod
    def _doubles_description(cls, instance: Double) -> str:
        name = instance.__dict__.get("_doubles_name")
        return f'{cls.__name__} "{name}"' if name else f"{cls.__name__} (anonymous)"

    def __repr__(self) -> str:
        return f"<{self._doubles_description(self)}>"

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        if self.__dict__.get("_doubles_null"):
            return lambda *args, **kwargs: self
        raise UnexpectedMessageError(self._doubles_description(self), name, "(no stub configured)")

    def as_null_object(self) -> Double:
        """Answer every unconfigured message with the double itself."""
        self._doubles_null = True
        return self

    def is_null_object(self) -> bool:
        return self._doubles_null


def double(name: str | None = None, **stubs: Any) -> Double:
    """Create a double, optionally stubbing ``message=return_value`` pairs."""
    return Double(name, stubs)
