import logging

from django.core.checks import Error, Warning, register

from .app_settings import _doubles_settings
from .configuration import KNOWN_SYNTAXES

logger = logging.getLogger(__name__)


@register("django_doubles")
def check_settings(app_configs, **kwargs):
    """Validate the DJANGO_DOUBLES setting."""
    errors = []
    doubles_settings = _doubles_settings()

    if not isinstance(doubles_settings, dict):
        return [
            Error(
                f"DJANGO_DOUBLES must be a dict, got {type(doubles_settings).__name__}.",
                hint="Set DJANGO_DOUBLES = {'SYNTAX': ['expect']} or remove the setting.",
                id="django_doubles.E002",
            )
        ]

    if "SYNTAX" not in doubles_settings:
        return errors

    syntax = doubles_settings["SYNTAX"]
    if isinstance(syntax, str):
        syntax = [syntax]

    for name in syntax:
        if name not in KNOWN_SYNTAXES:
            errors.append(
                Error(
                    f"DJANGO_DOUBLES['SYNTAX'] contains unknown syntax {name!r}.",
                    hint=f"Use any of {', '.join(KNOWN_SYNTAXES)}.",
                    id="django_doubles.E001",
                )
            )

    if not syntax:
        errors.append(
            Warning(
                "DJANGO_DOUBLES['SYNTAX'] is empty, so neither `should` nor `expect` can be used.",
                hint="Enable at least one syntax, for example ['expect'].",
                id="django_doubles.W001",
            )
        )

    return errors
