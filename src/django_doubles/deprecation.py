from __future__ import annotations

import logging
import warnings

from .signals import deprecation_reported
from .space import get_space
from .utils import caller_location

logger = logging.getLogger(__name__)

SHOULD_REPLACEMENT = "the new `expect` syntax or explicitly enable `should`"
UNSTUB_REPLACEMENT = "`allow(...).to(receive(...).and_call_original())` or explicitly enable `should`"


class DoublesDeprecationWarning(DeprecationWarning):
    """Warns about use of the old ``should`` syntax without enabling it explicitly."""


def deprecation_message(deprecated: str, replacement: str) -> str:
    return (
        f"Using `{deprecated}` from the old `should` syntax without explicitly enabling "
        f"the syntax is deprecated. Use {replacement} instead."
    )


def report(deprecated: str, replacement: str = SHOULD_REPLACEMENT, call_site: str | None = None) -> bool:
    """Report the deprecated use of ``deprecated`` once per space; return whether it was reported now."""
    space = get_space()
    if deprecated in space.reported_deprecations:
        return False
    space.reported_deprecations.add(deprecated)

    if call_site is None:
        call_site = caller_location()
    message = deprecation_message(deprecated, replacement)
    if call_site:
        message = f"{message} Called from {call_site}."

    logger.info("Deprecated use of %s from %s", deprecated, call_site or "an unknown location")
    warnings.warn(message, DoublesDeprecationWarning, stacklevel=3)
    deprecation_reported.send(sender=None, message=message, replacement=replacement, call_site=call_site)
    return True
