from __future__ import annotations

from typing import Any

ALLOWED_HOSTS: list[str] = []

DATABASES: dict[str, dict[str, Any]] = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    },
}

INSTALLED_APPS = [
    "django_doubles",
    "django.contrib.contenttypes",
]

SECRET_KEY = "NOTASECRET"

USE_TZ = True

DJANGO_DOUBLES = {
    "SYNTAX": ["should", "expect"],
    "VERIFY_ON_TEARDOWN": True,
}
