"""Tests for issue records and the aggregate validation error."""

import dataclasses
import json

import pytest

from dataknobs_schema import (
    DefinitionError,
    InvalidTypeIssue,
    Issue,
    IssueCode,
    SchemaError,
    SchemaValidationError,
    number,
    object_,
    string,
    union,
)


class TestIssue:
    """Test issue records."""

    def test_wire_shape(self):
        """Test the dictionary form of a finalized issue."""
        issue = object_({"a": string()}).safe_parse({"a": 1}).issues[0]

        assert issue.to_dict() == {
            "code": "invalid_type",
            "path": ["a"],
            "message": "Invalid input",
            "expected": "string",
            "received": "number",
        }

    def test_nested_wire_shape(self):
        """Test that union branches render as lists of issue dicts."""
        data = union([string(), number()]).safe_parse(None).issues[0].to_dict()

        assert data["code"] == "invalid_union"
        assert [[branch_issue["expected"] for branch_issue in branch] for branch in data["errors"]] == [
            ["string"], ["number"],
        ]

    def test_frozen(self):
        """Test that issues cannot be modified."""
        issue = InvalidTypeIssue(expected="string", received="number")

        with pytest.raises(dataclasses.FrozenInstanceError):
            issue.message = "changed"

    def test_with_prefix(self):
        """Test prefixing paths."""
        issue = InvalidTypeIssue(path=("b",))

        assert issue.with_prefix("a", 0).path == ("a", 0, "b")
        assert issue.with_prefix() is issue

    def test_codes(self):
        """Test the issue code values."""
        assert IssueCode.INVALID_TYPE == "invalid_type"
        assert InvalidTypeIssue.code == IssueCode.INVALID_TYPE.value
        assert len(IssueCode) == 11

    def test_unknown_code_issue(self):
        """Test that issues of a new code still render."""
        @dataclasses.dataclass(frozen=True)
        class OddIssue(Issue):
            code = "odd"
            parity: str = "odd"

        assert OddIssue(message="m").to_dict() == {"code": "odd", "path": [], "message": "m", "parity": "odd"}


class TestSchemaValidationError:
    """Test the aggregate error."""

    def test_aggregate(self):
        """Test length, iteration and wire shape."""
        error = object_({"a": string(), "b": string()}).safe_parse({}).error

        assert len(error) == 2
        assert [issue.path for issue in error] == [("a",), ("b",)]
        assert error.to_list()[1]["path"] == ["b"]
        assert error.context == {"issue_count": 2}

    def test_message_is_json(self):
        """Test that the exception text lists the issues as JSON."""
        with pytest.raises(SchemaValidationError) as exc_info:
            string().parse(1)

        assert json.loads(str(exc_info.value))[0]["code"] == "invalid_type"

    def test_message_with_unencodable_input(self):
        """Test that reported inputs JSON cannot encode still render."""
        marker = object()
        result = string().safe_parse({(1, 2): "x", "obj": marker}, report_input=True)

        assert not result.success
        rendered = json.loads(str(result.error))
        assert rendered[0]["input"] == {"(1, 2)": "x", "obj": repr(marker)}
        assert result.error.issues[0].input == {(1, 2): "x", "obj": marker}

    def test_summary_argument(self):
        """Test that the exception argument is a short summary."""
        error = object_({"a": string(), "b": string()}).safe_parse({}).error

        assert error.args == ("2 validation issue(s)",)

    def test_hierarchy(self):
        """Test the exception hierarchy."""
        assert issubclass(SchemaValidationError, SchemaError)
        assert issubclass(DefinitionError, SchemaError)
        assert issubclass(SchemaError, Exception)
