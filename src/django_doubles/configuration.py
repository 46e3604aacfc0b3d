"""Which stubbing syntaxes are enabled for the current process."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from . import app_settings

logger = logging.getLogger(__name__)

SHOULD = "should"
EXPECT = "expect"
KNOWN_SYNTAXES = (SHOULD, EXPECT)


class Configuration:
    """Syntax flags consulted by the ``should`` and ``expect`` adapters.

    Defaults come from ``settings.DJANGO_DOUBLES["SYNTAX"]``. Listing
    ``"should"`` there, or assigning :attr:`syntax` at runtime, counts as
    enabling it explicitly and silences its deprecation notices.
    """

    def __init__(self) -> None:
        self._syntax: tuple[str, ...] = ()
        self.should_explicitly_enabled = False
        self.load_settings()

    def __repr__(self) -> str:
        return f"<Configuration syntax={list(self._syntax)} explicit_should={self.should_explicitly_enabled}>"

    def load_settings(self) -> None:
        """Read the syntaxes from Django settings, falling back to both syntaxes."""
        self._syntax = self._validate(app_settings.get_syntax())
        self.should_explicitly_enabled = app_settings.get_syntax_explicitly_configured() and SHOULD in self._syntax

    @staticmethod
    def _validate(values: str | Iterable[str]) -> tuple[str, ...]:
        if isinstance(values, str):
            values = [values]
        syntax = tuple(dict.fromkeys(values))
        unknown = [value for value in syntax if value not in KNOWN_SYNTAXES]
        if unknown:
            raise ValueError(f"Unknown syntax {unknown!r}; expected any of {list(KNOWN_SYNTAXES)}")
        return syntax

    @property
    def syntax(self) -> list[str]:
        return list(self._syntax)

    @syntax.setter
    def syntax(self, values: str | Iterable[str]) -> None:
        self._syntax = self._validate(values)
        self.should_explicitly_enabled = SHOULD in self._syntax
        logger.debug("Enabled syntaxes: %s", ", ".join(self._syntax) or "(none)")

    def reset_syntaxes_to_default(self) -> None:
        """Enable both syntaxes, with ``should`` not explicitly enabled."""
        self._syntax = KNOWN_SYNTAXES
        self.should_explicitly_enabled = False

    def should_enabled(self) -> bool:
        return SHOULD in self._syntax

    def expect_enabled(self) -> bool:
        return EXPECT in self._syntax


_configuration: Configuration | None = None


def get_configuration() -> Configuration:
    """Return the process-wide configuration, reading settings on first use."""
    global _configuration
    if _configuration is None:
        _configuration = Configuration()
    return _configuration


def reset_configuration() -> None:
    """Forget the current configuration so the next use reads settings again."""
    global _configuration
    _configuration = None
