"""Tests for django_doubles system checks."""

from __future__ import annotations

from django.test import override_settings

from django_doubles.checks import check_settings


class TestCheckSettings:
    """Tests for the check_settings system check."""

    def test_valid_config_no_errors(self):
        """Test that the test settings produce no errors."""
        assert check_settings(app_configs=None) == []

    @override_settings(DJANGO_DOUBLES={})
    def test_missing_syntax_no_errors(self):
        """Test that leaving SYNTAX out uses the defaults silently."""
        assert check_settings(app_configs=None) == []

    @override_settings(DJANGO_DOUBLES={"SYNTAX": ["expect", "shuold"]})
    def test_e001_unknown_syntax(self):
        """Test E001 fires for an unknown syntax name."""
        errors = check_settings(app_configs=None)
        assert [error.id for error in errors] == ["django_doubles.E001"]
        assert "'shuold'" in errors[0].msg

    @override_settings(DJANGO_DOUBLES={"SYNTAX": "expect"})
    def test_single_string_syntax(self):
        """Test a single syntax name may be given as a string."""
        assert check_settings(app_configs=None) == []

    @override_settings(DJANGO_DOUBLES={"SYNTAX": []})
    def test_w001_empty_syntax(self):
        """Test W001 fires when no syntax is enabled."""
        errors = check_settings(app_configs=None)
        assert [error.id for error in errors] == ["django_doubles.W001"]

    @override_settings(DJANGO_DOUBLES=["expect"])
    def test_e002_not_a_dict(self):
        """Test E002 fires when the setting is not a dict."""
        errors = check_settings(app_configs=None)
        assert [error.id for error in errors] == ["django_doubles.E002"]
