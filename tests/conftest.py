"""Pytest configuration for django_doubles tests."""

import os

import pytest

pytest_plugins = ["pytester"]


def pytest_configure(config):
    """Configure pytest to use test settings."""
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "tests.settings")


@pytest.fixture(autouse=True)
def space():
    """Give every test a fresh space; tests verify explicitly, teardown only restores."""
    from django_doubles import space as space_module

    current = space_module.setup()
    yield current
    space_module.teardown(verify=False)


@pytest.fixture(autouse=True)
def _restore_configuration():
    """Forget syntax changes made by a test."""
    from django_doubles.configuration import reset_configuration

    reset_configuration()
    yield
    reset_configuration()


@pytest.fixture
def default_syntax():
    """Both syntaxes enabled, with `should` not explicitly enabled, so deprecations are reported."""
    from django_doubles.configuration import get_configuration

    configuration = get_configuration()
    configuration.reset_syntaxes_to_default()
    return configuration


@pytest.fixture
def klass():
    class Widget:
        def existing_method(self):
            return "existing_method_return_value"

        def existing_method_with_arguments(self, arg_one, arg_two=None):
            return "existing_method_with_arguments_return_value"

        def another_existing_method(self):
            return None

        def _private_method(self):
            return "private_method_return_value"

    return Widget
