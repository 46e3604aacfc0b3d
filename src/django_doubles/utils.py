from __future__ import annotations

import logging
import os
import sys
import types
from collections.abc import Sequence
from inspect import isclass
from typing import Any

logger = logging.getLogger(__name__)

PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))


def normalize_name(name: Any) -> str:
    """Return a method name as a string, accepting strings or anything with ``__name__``."""
    if isinstance(name, str):
        if not name:
            raise ValueError("Method name must be a non-empty string")
        return name
    method_name = getattr(name, "__name__", None)
    if isinstance(method_name, str):
        return method_name
    raise TypeError(f"Expected a method name, got {type(name).__name__}")


def get_fully_qualified_name(obj: Any) -> str:
    """Returns the fully qualified class name of an object or a class."""
    if isinstance(obj, str):
        return obj
    parts = [getattr(obj, "__module__", None) or type(obj).__module__]
    if isclass(obj) or isinstance(obj, types.FunctionType):
        parts.append(obj.__qualname__)
    else:
        parts.append(type(obj).__qualname__)
    return ".".join(parts)


def describe_target(target: Any) -> str:
    """Describe a stubbing target for error messages."""
    describe = getattr(type(target), "_doubles_description", None)
    if describe is not None:
        return describe(target)
    if isclass(target):
        return get_fully_qualified_name(target)
    return f"<{get_fully_qualified_name(target)} object at {id(target):#x}>"


def format_args(args: Sequence[Any], kwargs: dict[str, Any] | None = None) -> str:
    """Render call arguments the way they appear in failure messages."""
    parts = [repr(arg) for arg in args]
    parts.extend(f"{key}={value!r}" for key, value in (kwargs or {}).items())
    if not parts:
        return "(no args)"
    return f"({', '.join(parts)})"


def pluralize(count: int, word: str = "time") -> str:
    """Return '1 time' / '2 times'."""
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def caller_location() -> str | None:
    """Return 'file:line' of the first frame outside this package."""
    frame = sys._getframe(1)
    while frame is not None:
        filename = os.path.abspath(frame.f_code.co_filename)
        if not filename.startswith(PACKAGE_DIR):
            return f"{frame.f_code.co_filename}:{frame.f_lineno}"
        frame = frame.f_back
    return None


def stringify(values: Sequence[Any]) -> str:
    """Convert a sequence of method names to a comma-separated string."""
    return ", ".join(sorted(normalize_name(value) for value in values))
