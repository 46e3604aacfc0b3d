"""Stubbing of message chains (``obj.one().two().three()``) through intermediate doubles."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .double import Double
from .message_expectation import MessageExpectation
from .utils import normalize_name

if TYPE_CHECKING:
    from .space import Space

logger = logging.getLogger(__name__)

_NO_VALUE = object()


def parse_chain(names: tuple[Any, ...], final: dict[str, Any]) -> tuple[list[str], Any]:
    """Split chain arguments into method names and the optional return value of the last one.

    Names may be given separately or as one dotted string; a trailing dict (or
    keyword arguments) maps the last name to its return value.
    """
    names_list = list(names)
    trailing: dict[str, Any] = {}
    if names_list and isinstance(names_list[-1], dict):
        trailing.update(names_list.pop())
    trailing.update(final)

    parts: list[str] = []
    for name in names_list:
        parts.extend(normalize_name(name).split("."))

    value: Any = _NO_VALUE
    if trailing:
        if len(trailing) != 1:
            raise ValueError("stub_chain() accepts a single {last_name: return_value} mapping")
        ((last, value),) = trailing.items()
        parts.extend(normalize_name(last).split("."))

    if not parts or not all(parts):
        raise ValueError("stub_chain() requires at least one method name")
    return parts, value


def _existing_link(space: Space, target: Any, name: str) -> Any:
    proxy = space.proxies.get(id(target))
    method_double = proxy.method_double_if_exists(name) if proxy is not None else None
    if method_double is None:
        return None
    for stub in reversed(method_double.stubs):
        link = stub.chain_link
        if link is not None:
            return link
    return None


def stub_chain(space: Space, target: Any, *names: Any, origin: Any = None, **final: Any) -> MessageExpectation | None:
    """Stub ``names`` as a chain on ``target``; return the last link's stub for further configuration.

    When the return value was given as a mapping it is applied here and
    ``None`` is returned, like any other terminal action.
    """
    parts, value = parse_chain(names, final)
    current, link_origin = target, origin
    for index, name in enumerate(parts[:-1]):
        link = _existing_link(space, current, name)
        if link is None:
            link = Double(".".join(parts[: index + 1]), space=space)
            stub = space.proxy_for(current).add_stub(name, origin=link_origin)
            stub.chain_link = link
            stub.and_return(link)
            logger.debug("Created chain link %r for %s", link, name)
        current, link_origin = link, None

    last = space.proxy_for(current).add_stub(parts[-1], origin=link_origin)
    if value is _NO_VALUE:
        return last
    last.and_return(value)
    return None
