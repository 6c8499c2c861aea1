"""Tests for named string formats and the integer format."""

import pytest

from dataknobs_schema import (
    DefinitionError,
    base64,
    cidrv4,
    cidrv6,
    email,
    hex_,
    hostname,
    integer,
    ipv4,
    ipv6,
    iso_date,
    iso_datetime,
    iso_time,
    number,
    string,
    url,
    uuid,
)
from dataknobs_schema.formats import STRING_FORMATS


@pytest.mark.parametrize("builder, valid, invalid", [
    (email, "ada@example.com", "ada@"),
    (email, "first.last+tag@mail.example.org", "a..b@example.com"),
    (url, "https://example.com/path?q=1", "example.com"),
    (uuid, "123e4567-e89b-12d3-a456-426614174000", "123e4567"),
    (ipv4, "192.168.0.1", "256.1.1.1"),
    (ipv4, "10.0.0.1", "10.0.0.0/8"),
    (ipv6, "::1", "1::1::1"),
    (cidrv4, "10.0.0.0/8", "10.0.0.0"),
    (cidrv6, "2001:db8::/32", "2001:db8::"),
    (iso_date, "2024-02-29", "2023-02-29"),
    (iso_datetime, "2024-01-02T10:30:00Z", "2024-13-02T10:30"),
    (iso_datetime, "2024-01-02T10:30:00.123+02:00", "2024-01-02 10:30"),
    (iso_time, "23:59:59", "24:00"),
    (base64, "aGVsbG8=", "abc"),
    (hex_, "deadBEEF", "xyz"),
    (hostname, "example.com", "-bad.com"),
])
def test_string_formats(builder, valid, invalid):
    """Test a valid and an invalid value for each format."""
    schema = builder()

    assert schema.parse(valid) == valid
    issue = schema.safe_parse(invalid).issues[0]
    assert issue.code == "invalid_format"
    assert issue.format == schema.format


class TestFormatNodes:
    """Test nodes that are both schemas and checks."""

    def test_is_a_string_schema(self):
        """Test that a format node type-checks first."""
        result = email().safe_parse(5)

        assert [issue.code for issue in result.issues] == ["invalid_type"]

    def test_has_no_separate_checks(self):
        """Test that the format is the node itself, not an attached check."""
        node = email()

        assert node.checks == ()
        assert node.all_checks == (node,)

    def test_definition_carries_both_tags(self):
        """Test the definition of a format node."""
        data = email().to_dict()

        assert data["type"] == "string"
        assert data["check"] == "string_format"
        assert data["format"] == "email"

    def test_regex_formats_report_pattern(self):
        """Test that regex formats expose their pattern."""
        issue = uuid().safe_parse("x").issues[0]

        assert issue.pattern is not None

    def test_attached_as_check(self):
        """Test that a format node can be attached to another string schema."""
        schema = string().min(5).add_check(email())

        assert schema.parse("ada@example.com") == "ada@example.com"
        assert [issue.code for issue in schema.safe_parse("a@b").issues] == ["too_small", "invalid_format"]

    def test_with_format(self):
        """Test attaching a format by name."""
        schema = string().with_format("ipv4", error="Bad address")

        assert schema.parse("1.2.3.4") == "1.2.3.4"
        assert schema.safe_parse("x").issues[0].message == "Bad address"

    def test_unknown_format(self):
        """Test that an unknown format name is a definition error."""
        with pytest.raises(DefinitionError) as exc_info:
            string().with_format("isbn")
        assert "email" in exc_info.value.context["available"]

    def test_format_table(self):
        """Test that every format builder is registered by name."""
        assert set(STRING_FORMATS) == {
            "email", "url", "uuid", "ipv4", "ipv6", "cidrv4", "cidrv6",
            "iso_datetime", "iso_date", "iso_time", "base64", "hex", "hostname",
        }


class TestInteger:
    """Test the integer format."""

    def test_integer(self):
        """Test ints pass and floats fail."""
        assert integer().parse(3) == 3

        issue = integer().safe_parse(2.5).issues[0]
        assert issue.code == "invalid_type"
        assert issue.expected == "int"

    def test_rejects_booleans_as_numbers(self):
        """Test that booleans fail the number type test."""
        assert integer().safe_parse(True).issues[0].expected == "number"

    def test_integral_float_rejected(self):
        """Test that 2.0 is not an int."""
        assert not integer().safe_parse(2.0).success

    def test_integer_check(self):
        """Test the integer format as a check on a number schema."""
        schema = number().integer().gte(0)

        assert schema.parse(4) == 4
        assert [issue.expected for issue in schema.safe_parse(2.5).issues] == ["int"]

    def test_coerce(self):
        """Test integer coercion from strings."""
        assert integer(coerce=True).parse("4") == 4
        assert not integer(coerce=True).safe_parse("4.5").success

    def test_definition(self):
        """Test the integer definition."""
        data = integer().to_dict()

        assert data["type"] == "number"
        assert data["check"] == "number_format"
        assert data["format"] == "int"
