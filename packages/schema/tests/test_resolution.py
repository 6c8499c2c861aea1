"""Tests for message resolution and global configuration."""

import logging

import pytest

from dataknobs_schema import (
    MISSING,
    DefinitionError,
    configure,
    get_config,
    object_,
    reset_config,
    string,
    union,
)


class TestPrecedence:
    """Test the order in which message providers are consulted."""

    def test_fallback_message(self):
        """Test the message used when no provider answers."""
        assert string().safe_parse(1).issues[0].message == "Invalid input"

    def test_schema_error_wins(self):
        """Test that the node's own error beats every other provider."""
        configure(custom_error="global", locale="en")
        result = string(error="schema").safe_parse(1, error="call")

        assert result.issues[0].message == "schema"

    def test_call_error_beats_configuration(self):
        """Test that the per-call error beats the configured providers."""
        configure(custom_error="global", locale="en")

        assert string().safe_parse(1, error="call").issues[0].message == "call"

    def test_custom_error_beats_locale(self):
        """Test that the configured custom error beats the locale."""
        configure(custom_error="global", locale="en")

        assert string().safe_parse(1).issues[0].message == "global"

    def test_locale(self):
        """Test the locale as the last provider."""
        configure(locale="en")

        assert string().safe_parse(1).issues[0].message == "Invalid input: expected string, received number"

    def test_declining_provider_falls_through(self):
        """Test that a provider returning None passes to the next one."""
        configure(custom_error=lambda issue: None, locale="en")
        message = string().min(3).safe_parse("a", error=lambda issue: None).issues[0].message

        assert message == "Too small: expected string to have >=3 characters"

    def test_callable_provider_receives_raw_issue(self):
        """Test that providers see the raw issue and may return a mapping."""
        def provider(issue):
            if issue.code == "too_small":
                return {"message": f"At least {issue.minimum}"}
            return None

        assert string().min(3).safe_parse("a", error=provider).issues[0].message == "At least 3"

    def test_check_error(self):
        """Test that a check's error words the issues it raises."""
        result = string().min(3, error="Too short").max(1).safe_parse("ab", error="call")

        assert [issue.message for issue in result.issues] == ["Too short", "call"]

    def test_with_error(self):
        """Test replacing a node's message provider."""
        schema = string().with_error(lambda issue: f"Expected {issue.expected}")

        assert schema.safe_parse(1).issues[0].message == "Expected string"

    def test_nested_issues_finalized(self):
        """Test that union branch issues receive messages too."""
        configure(locale="en")
        issue = union([string(), string().min(2)]).safe_parse(1).issues[0]

        assert issue.message == "Invalid input"
        assert issue.errors[1][0].message == "Invalid input: expected string, received number"
        assert issue.errors[1][0].source is None


class TestReportInput:
    """Test the report_input option."""

    def test_input_dropped_by_default(self):
        """Test that finalized issues do not carry the input."""
        issue = object_({"a": string()}).safe_parse({"a": 1}).issues[0]

        assert issue.input is MISSING
        assert "input" not in issue.to_dict()

    def test_input_reported(self):
        """Test that report_input keeps the offending value."""
        issue = object_({"a": string()}).safe_parse({"a": 1}, report_input=True).issues[0]

        assert issue.input == 1
        assert issue.to_dict()["input"] == 1


class TestConfiguration:
    """Test configure, get_config and reset_config."""

    def test_configure_is_last_writer_wins(self):
        """Test that later calls replace earlier values."""
        configure(custom_error="first")
        configure(custom_error="second")

        assert get_config().custom_error == "second"

    def test_unchanged_fields_kept(self):
        """Test that configuring one field keeps the others."""
        configure(custom_error="x")
        configure(locale="en")

        assert get_config().custom_error == "x"
        assert callable(get_config().locale_error)

    def test_clear_with_none(self):
        """Test clearing a provider."""
        configure(locale="en")
        configure(locale=None)

        assert get_config().locale_error is None

    def test_reset(self):
        """Test dropping every provider."""
        configure(custom_error="x", locale="en")
        config = reset_config()

        assert config.custom_error is None
        assert config.locale_error is None

    def test_unknown_locale(self):
        """Test that an unknown locale name is rejected."""
        with pytest.raises(DefinitionError) as exc_info:
            configure(locale="xx")
        assert "en" in exc_info.value.context["available"]

    def test_invalid_locale(self):
        """Test that a locale must be callable."""
        with pytest.raises(DefinitionError):
            configure(locale=42)

    def test_configure_logs(self, caplog):
        """Test that configuration changes are logged."""
        with caplog.at_level(logging.INFO, logger="dataknobs_schema.config"):
            configure(custom_error="x")

        assert "Schema configuration updated" in caplog.text
