"""Test case integration for unittest-style Django tests."""

from __future__ import annotations

import logging

from django import test

from . import space
from .app_settings import get_verify_on_teardown

logger = logging.getLogger(__name__)


class DoublesTestCaseMixin:
    """Give each test a fresh space, verified and reset when the test finishes.

    The cleanup is registered with ``addCleanup`` so it runs even when
    ``setUp`` of a later mixin or the test itself fails.
    """

    def setUp(self) -> None:
        super().setUp()
        self.doubles_space = space.setup()
        self.addCleanup(self._teardown_doubles)

    def _teardown_doubles(self) -> None:
        space.teardown(verify=get_verify_on_teardown())


class SimpleTestCase(DoublesTestCaseMixin, test.SimpleTestCase):
    pass
