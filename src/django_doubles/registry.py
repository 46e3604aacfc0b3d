"""Saved originals for every patched ``(owner, name)`` dispatch entry.

The registry is the only code that writes to an owner's ``__dict__``. Each
entry remembers the value that was there before the first patch (or that there
was none) and the stack of interceptors currently holding the entry. Releasing
any holder rewrites the entry to the value installed by the holder now on top,
or restores the original once the stack is empty, so interceptors can be
released in any order without leaving the entry half patched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from inspect import isclass
from typing import Any

from .exceptions import CannotStubError
from .utils import describe_target

logger = logging.getLogger(__name__)


class _Undefined:
    """Marker for 'the owner had no entry of its own for this name'."""

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False


UNDEFINED = _Undefined()


@dataclass
class RegistryEntry:
    """Saved original plus the interceptors holding one ``(owner, name)`` entry."""

    owner: Any
    name: str
    original: Any
    holders: list[tuple[object, Any]] = field(default_factory=list)

    def top(self) -> tuple[object, Any] | None:
        return self.holders[-1] if self.holders else None


def _own_value(owner: Any, name: str) -> Any:
    if isclass(owner):
        return owner.__dict__.get(name, UNDEFINED)
    try:
        return vars(owner).get(name, UNDEFINED)
    except TypeError:
        raise CannotStubError(describe_target(owner), name)


def _write(owner: Any, name: str, value: Any) -> None:
    if isclass(owner):
        if value is UNDEFINED:
            if name in owner.__dict__:
                type.__delattr__(owner, name)
        else:
            type.__setattr__(owner, name, value)
        return
    namespace = vars(owner)
    if value is UNDEFINED:
        namespace.pop(name, None)
    else:
        namespace[name] = value


class MethodRegistry:
    """Per-space store of original dispatch entries."""

    def __init__(self) -> None:
        self._entries: dict[tuple[int, str], RegistryEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: tuple[Any, str]) -> bool:
        owner, name = key
        return (id(owner), name) in self._entries

    def install(self, owner: Any, name: str, value: Any, holder: object) -> None:
        """Write ``value`` as ``owner``'s own ``name`` entry on behalf of ``holder``."""
        key = (id(owner), name)
        entry = self._entries.get(key)
        if entry is None:
            entry = RegistryEntry(owner=owner, name=name, original=_own_value(owner, name))
            self._entries[key] = entry
            logger.debug("Saved original %r for %s.%s", entry.original, describe_target(owner), name)
        entry.holders = [(h, v) for h, v in entry.holders if h is not holder]
        entry.holders.append((holder, value))
        _write(owner, name, value)

    def release(self, owner: Any, name: str, holder: object) -> bool:
        """Drop ``holder``'s patch; return False when it held nothing."""
        key = (id(owner), name)
        entry = self._entries.get(key)
        if entry is None or not any(h is holder for h, _ in entry.holders):
            return False
        entry.holders = [(h, v) for h, v in entry.holders if h is not holder]
        top = entry.top()
        if top is None:
            _write(owner, name, entry.original)
            del self._entries[key]
            logger.debug("Restored original %r for %s.%s", entry.original, describe_target(owner), name)
        else:
            _write(owner, name, top[1])
        return True

    def holds(self, owner: Any, name: str, holder: object) -> bool:
        entry = self._entries.get((id(owner), name))
        return entry is not None and any(h is holder for h, _ in entry.holders)

    def original(self, owner: Any, name: str) -> Any:
        """Return ``owner``'s own pre-patch entry for ``name`` (``UNDEFINED`` if it had none)."""
        entry = self._entries.get((id(owner), name))
        if entry is not None:
            return entry.original
        return _own_value(owner, name)

    def value_below(self, owner: Any, name: str, holder: object) -> Any:
        """Return what ``owner``'s ``name`` entry would hold if ``holder`` and later holders released it."""
        entry = self._entries.get((id(owner), name))
        if entry is None:
            return _own_value(owner, name)
        below = entry.original
        for current, value in entry.holders:
            if current is holder:
                break
            below = value
        return below

    def unpatched_class_entry(self, cls: type, name: str) -> Any:
        """Return the raw, unbound ``__dict__`` value ``cls`` resolves ``name`` to without patches."""
        for mro_cls in cls.__mro__:
            value = self.original(mro_cls, name)
            if value is not UNDEFINED:
                return value
        return UNDEFINED

    def unpatched_attribute(self, obj: Any, name: str) -> Any:
        """Resolve ``obj.name`` as it would resolve with every patch removed.

        Walks the instance, then the class MRO, reading saved originals in place
        of patched entries, and binds descriptors to ``obj``. Returns
        ``UNDEFINED`` when nothing defines ``name``.
        """
        if isclass(obj):
            cls, instance = obj, None
        else:
            cls, instance = type(obj), obj
            own = self.original(obj, name)
            if own is not UNDEFINED:
                return own
        for mro_cls in cls.__mro__:
            value = self.original(mro_cls, name)
            if value is UNDEFINED:
                continue
            if hasattr(type(value), "__get__"):
                return value.__get__(instance, cls)
            return value
        return UNDEFINED

    def restore_all(self) -> None:
        """Restore every saved entry; used as a last resort at teardown."""
        for entry in list(self._entries.values()):
            _write(entry.owner, entry.name, entry.original)
            logger.warning("Force-restored %s.%s", describe_target(entry.owner), entry.name)
        self._entries.clear()
