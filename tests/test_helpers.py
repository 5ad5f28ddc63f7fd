"""
Tests for key normalisation and severity mapping.
"""

import logging

import pytest

from sentrylog.adaptor.helpers import MAX_KEY_LENGTH, normalise_key
from sentrylog.core.severity import SentrySeverity, process_severity


# =============================================================================
# Key Normalisation Tests
# =============================================================================

class TestNormaliseKey:
    """Tests for normalise_key."""

    def test_spaces_become_underscores(self):
        """Test a readable name is turned into a tag key."""
        assert normalise_key("Release Name") == "release_name"

    def test_lowercases(self):
        """Test keys are lower-cased."""
        assert normalise_key("HTTP-Method") == "http-method"

    def test_allowed_punctuation_is_kept(self):
        """Test dots, colons and dashes survive."""
        assert normalise_key("os.name:short-form") == "os.name:short-form"

    def test_runs_of_unsupported_characters_collapse(self):
        """Test several unsupported characters produce a single underscore."""
        assert normalise_key("user  /  id") == "user_id"

    def test_outer_underscores_are_stripped(self):
        """Test leading and trailing separators are removed."""
        assert normalise_key("  (request id)  ") == "request_id"

    def test_truncated_to_max_length(self):
        """Test long keys are cut to Sentry's limit."""
        key = normalise_key("a" * 100)
        assert len(key) == MAX_KEY_LENGTH

    def test_non_string_keys(self):
        """Test integer keys are stringified."""
        assert normalise_key(42) == "42"

    @pytest.mark.parametrize(
        "key",
        [
            "Release Name",
            "already_normal",
            "  Mixed CASE & symbols!! ",
            "x" * 31 + " trailing",
            "Überprüfung",
            "a" * 31 + "_b",
            "___",
            "",
        ],
    )
    def test_idempotent(self, key):
        """Test normalising twice equals normalising once."""
        once = normalise_key(key)
        assert normalise_key(once) == once


# =============================================================================
# Severity Mapping Tests
# =============================================================================

class TestProcessSeverity:
    """Tests for process_severity."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("debug", "debug"),
            ("INFO", "info"),
            ("warn", "warning"),
            (" Warning ", "warning"),
            ("err", "error"),
            ("exception", "error"),
            ("critical", "fatal"),
            ("emergency", "fatal"),
            ("notice", "info"),
        ],
    )
    def test_names_and_aliases(self, value, expected):
        """Test level names and aliases map onto Sentry levels."""
        assert process_severity(value) == expected

    @pytest.mark.parametrize(
        "value,expected",
        [
            (logging.DEBUG, "debug"),
            (logging.INFO, "info"),
            (logging.WARNING, "warning"),
            (logging.ERROR, "error"),
            (logging.CRITICAL, "fatal"),
            (35, "warning"),
            (0, "debug"),
            ("40", "error"),
        ],
    )
    def test_stdlib_levels(self, value, expected):
        """Test stdlib numeric levels round down to the nearest level."""
        assert process_severity(value) == expected

    def test_enum_member(self):
        """Test SentrySeverity members pass through."""
        assert process_severity(SentrySeverity.FATAL) == "fatal"

    @pytest.mark.parametrize("value", ["bogus", None, 3.5, True, object()])
    def test_unrecognised_defaults_to_info(self, value):
        """Test unknown input maps to the default level."""
        assert process_severity(value) == "info"
