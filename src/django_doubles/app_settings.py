"""Settings for the django-doubles package."""

import logging

from django.conf import settings

logger = logging.getLogger(__name__)

DEFAULT_SYNTAX = ("should", "expect")


def _doubles_settings() -> dict:
    """Return the DJANGO_DOUBLES settings dict, or an empty dict outside a configured Django project."""
    if not settings.configured:
        return {}
    return getattr(settings, "DJANGO_DOUBLES", {})


def get_syntax() -> list[str]:
    """Return the enabled syntaxes, reading from settings at call time."""
    syntax = _doubles_settings().get("SYNTAX", DEFAULT_SYNTAX)
    if isinstance(syntax, str):
        return [syntax]
    return list(syntax)


def get_syntax_explicitly_configured() -> bool:
    """Return whether the project chose its syntaxes explicitly in settings."""
    return "SYNTAX" in _doubles_settings()


def get_verify_on_teardown() -> bool:
    """Return whether test integrations verify expectations before resetting the space."""
    return _doubles_settings().get("VERIFY_ON_TEARDOWN", True)
