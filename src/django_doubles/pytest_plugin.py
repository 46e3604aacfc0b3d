"""Pytest fixture giving a test its own space; registered through the ``pytest11`` entry point."""

from __future__ import annotations

import pytest

from . import space
from .app_settings import get_verify_on_teardown


@pytest.fixture
def doubles_space():
    """Yield a fresh space, then verify its expectations and restore every patched method."""
    current = space.setup()
    yield current
    space.teardown(verify=get_verify_on_teardown())
