"""Tests for modifiers, pipelines, lazy and custom nodes."""

from pathlib import Path
from types import MappingProxyType

import pytest

from dataknobs_schema import (
    MISSING,
    DefinitionError,
    array,
    custom,
    instance_of,
    lazy,
    number,
    object_,
    pipe,
    string,
    transform,
)
from dataknobs_schema.issues import CustomIssue


class TestOptionalAndNullable:
    """Test absence and null handling."""

    def test_optional(self):
        """Test that optional accepts an absent value but not None."""
        schema = string().optional()

        assert schema.parse(MISSING) is MISSING
        assert schema.parse("a") == "a"
        assert schema.safe_parse(None).issues[0].received == "null"

    def test_nullable(self):
        """Test that nullable accepts None but not an absent value."""
        schema = string().nullable()

        assert schema.parse(None) is None
        assert schema.safe_parse(MISSING).issues[0].received == "missing"

    def test_nullish(self):
        """Test nullable and optional combined."""
        schema = string().nullish()

        assert schema.parse(None) is None
        assert schema.parse(MISSING) is MISSING

    def test_nullable_key_is_still_required(self):
        """Test that a nullable object key must be present."""
        schema = object_({"a": string().nullable()})

        assert schema.parse({"a": None}) == {"a": None}
        assert not schema.safe_parse({}).success

    def test_unwrap(self):
        """Test access to the wrapped schema."""
        inner = string()

        assert inner.optional().unwrap() is inner


class TestDefaults:
    """Test default, prefault and catch."""

    def test_default_replaces_absent_value(self):
        """Test that the default is used only for an absent value."""
        schema = number().default(3)

        assert schema.parse(MISSING) == 3
        assert schema.parse(4) == 4
        assert not schema.safe_parse(None).success

    def test_default_is_not_parsed(self):
        """Test that the default value skips the inner schema."""
        assert string().default(5).parse(MISSING) == 5

    def test_callable_default(self):
        """Test that a callable default runs for every substitution."""
        counter = iter(range(10))
        schema = number().default(lambda: next(counter))

        assert schema.parse(MISSING) == 0
        assert schema.parse(MISSING) == 1

    def test_mutable_default_is_copied(self):
        """Test that outputs do not share a mutable default."""
        schema = array(number()).default([])
        first = schema.parse(MISSING)
        first.append(1)

        assert schema.parse(MISSING) == []

    def test_prefault_is_parsed(self):
        """Test that a prefault value goes through the inner schema."""
        assert string().trim().prefault("  a ").parse(MISSING) == "a"
        assert string().min(3).prefault("ab").safe_parse(MISSING).issues[0].code == "too_small"

    def test_catch(self):
        """Test that catch replaces a failure."""
        schema = number().catch(0)

        assert schema.parse("x") == 0
        assert schema.parse(5) == 5

    def test_callable_catch(self):
        """Test that a callable catch receives the input and the error."""
        seen = []

        def fallback(value, error):
            seen.append((value, [issue.code for issue in error.issues]))
            return -1

        assert number().catch(fallback).parse("x") == -1
        assert seen == [("x", ["invalid_type"])]


class TestReadonly:
    """Test frozen outputs."""

    def test_object_output(self):
        """Test that objects become read-only mappings."""
        value = object_({"a": number()}).readonly().parse({"a": 1})

        assert isinstance(value, MappingProxyType)
        with pytest.raises(TypeError):
            value["a"] = 2

    def test_array_output(self):
        """Test that arrays become tuples."""
        assert array(number()).readonly().parse([1, 2]) == (1, 2)


class TestTransformAndPipe:
    """Test transforms and pipelines."""

    def test_transform(self):
        """Test that a transform maps the output value."""
        assert string().transform(lambda v: len(v)).parse("abc") == 3

    def test_transform_skipped_after_failure(self):
        """Test that a transform never sees an invalid value."""
        calls = []
        schema = string().transform(lambda v: calls.append(v))

        assert not schema.safe_parse(1).success
        assert calls == []

    def test_transform_reports_issues(self):
        """Test that a two-argument transform can report issues."""
        def to_int(value, ctx):
            if not value.isdigit():
                ctx.add_issue(message="Not a number")
                return value
            return int(value)

        schema = string().transform(to_int)

        assert schema.parse("42") == 42
        issue = schema.safe_parse("4x").issues[0]
        assert isinstance(issue, CustomIssue)
        assert issue.message == "Not a number"

    def test_standalone_transform(self):
        """Test a transform node without a source schema."""
        assert transform(lambda v: [v]).parse(1) == [1]

    def test_transform_requires_callable(self):
        """Test that a transform needs a function."""
        with pytest.raises(DefinitionError):
            transform("upper")

    def test_pipe(self):
        """Test that the target validates the source output."""
        schema = pipe(string().transform(lambda v: v.strip()), string().min(1))

        assert schema.parse(" a ") == "a"
        assert schema.safe_parse("   ").issues[0].code == "too_small"

    def test_pipe_stops_on_source_failure(self):
        """Test that the target does not run after the source failed."""
        result = string().pipe(number()).safe_parse(1)

        assert [issue.expected for issue in result.issues] == ["string"]


class TestLazy:
    """Test lazy and recursive schemas."""

    def test_recursive_tree(self):
        """Test a self-referencing schema three levels deep."""
        calls = []

        def get_node():
            calls.append(1)
            return node

        node = object_({"label": string(), "children": array(lazy(get_node))})
        tree = {
            "label": "root",
            "children": [{"label": "a", "children": [{"label": "b", "children": []}]}],
        }

        assert node.parse(tree) == tree
        result = node.safe_parse({
            "label": "root",
            "children": [{"label": "a", "children": [{"label": 3, "children": []}]}],
        })
        assert result.issues[0].path == ("children", 0, "children", 0, "label")
        assert calls == [1]

    def test_getter_must_return_schema(self):
        """Test that a lazy getter returning a non-schema fails."""
        with pytest.raises(DefinitionError):
            lazy(lambda: "nope").parse(1)

    def test_getter_not_called_until_needed(self):
        """Test that construction does not call the getter."""
        calls = []
        lazy(lambda: calls.append(1) or string())

        assert calls == []


class TestCustom:
    """Test custom predicate nodes and refinements."""

    def test_custom(self):
        """Test a custom predicate node."""
        schema = custom(lambda v: isinstance(v, str) and v.startswith("x"), error="Needs an x")

        assert schema.parse("xy") == "xy"
        issue = schema.safe_parse("ab").issues[0]
        assert issue.code == "custom"
        assert issue.message == "Needs an x"

    def test_custom_without_predicate(self):
        """Test that a bare custom node accepts anything."""
        assert custom().parse(object) is object

    def test_instance_of(self):
        """Test class checks."""
        schema = instance_of(Path)

        assert schema.parse(Path("a")) == Path("a")
        assert schema.safe_parse("a").issues[0].params == {"class": "Path"}

    def test_refine_path_and_params(self):
        """Test that a refinement reports at its declared path."""
        schema = object_({"password": string(), "confirm": string()}).refine(
            lambda d: d["password"] == d["confirm"],
            error="Passwords differ",
            path=["confirm"],
            params={"rule": "match"},
        )

        issue = schema.safe_parse({"password": "a", "confirm": "b"}).issues[0]
        assert issue.path == ("confirm",)
        assert issue.params == {"rule": "match"}
        assert issue.message == "Passwords differ"

    def test_refine_skipped_after_structural_failure(self):
        """Test that refinements only see structurally valid values."""
        calls = []
        schema = object_({"a": string()}).refine(lambda d: calls.append(d) or True)

        assert not schema.safe_parse({"a": 1}).success
        assert calls == []

    def test_super_refine(self):
        """Test reporting several issues from one callback."""
        def check_range(value, ctx):
            if value["low"] > value["high"]:
                ctx.add_issue(message="low above high", path=["low"])
                ctx.add_issue(path=["high"], bound=value["low"])

        schema = object_({"low": number(), "high": number()}).super_refine(check_range)
        issues = schema.safe_parse({"low": 5, "high": 1}).issues

        assert [issue.path for issue in issues] == [("low",), ("high",)]
        assert issues[0].message == "low above high"
        assert issues[1].params == {"bound": 5}
