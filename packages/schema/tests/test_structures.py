"""Tests for structural schema kinds."""

import pytest

from dataknobs_schema import (
    DefinitionError,
    array,
    enum_,
    literal,
    mapping,
    number,
    object_,
    record,
    set_,
    strict_object,
    string,
    tuple_,
)
from dataknobs_schema.issues import InvalidElementIssue, InvalidKeyIssue, UnrecognizedKeysIssue
from dataknobs_schema.wrappers import OptionalSchema


@pytest.fixture
def user():
    return object_({
        "name": string().min(1),
        "age": number().min(0),
    })


class TestObject:
    """Test the object kind."""

    def test_valid_input(self, user):
        """Test a matching object parses to an equal dict."""
        assert user.parse({"name": "Ada", "age": 36}) == {"name": "Ada", "age": 36}

    def test_every_field_reported(self, user):
        """Test that two failing fields give two issues with their paths."""
        result = user.safe_parse({"name": "", "age": -5})

        assert len(result.issues) == 2
        assert [issue.path for issue in result.issues] == [("name",), ("age",)]

    def test_missing_key(self, user):
        """Test that an absent required key is an invalid_type issue."""
        issue = user.safe_parse({"name": "Ada"}).issues[0]

        assert issue.path == ("age",)
        assert issue.code == "invalid_type"
        assert issue.received == "missing"

    def test_not_a_mapping(self, user):
        """Test the object type test."""
        issue = user.safe_parse(["Ada"]).issues[0]

        assert issue.expected == "object"
        assert issue.received == "array"

    def test_unknown_keys_stripped_by_default(self, user):
        """Test the default strip policy."""
        assert user.parse({"name": "Ada", "age": 1, "x": 2}) == {"name": "Ada", "age": 1}

    def test_passthrough(self, user):
        """Test that passthrough keeps unknown keys."""
        assert user.passthrough().parse({"name": "Ada", "age": 1, "x": 2})["x"] == 2

    def test_strict_reports_all_unknown_keys_once(self, user):
        """Test that strict mode gathers every unknown key into one issue."""
        result = user.strict().safe_parse({"name": "Ada", "age": 1, "x": 2, "y": 3})

        assert len(result.issues) == 1
        issue = result.issues[0]
        assert isinstance(issue, UnrecognizedKeysIssue)
        assert issue.keys == ("x", "y")
        assert strict_object({"a": string()}).unknown_keys == "strict"

    def test_catchall(self):
        """Test that a catchall validates unknown keys."""
        schema = object_({"a": string()}, catchall=number())

        assert schema.parse({"a": "x", "b": 1}) == {"a": "x", "b": 1}
        assert schema.safe_parse({"a": "x", "b": "y"}).issues[0].path == ("b",)

    def test_optional_keys_stay_absent(self):
        """Test that absent optional keys are not added to the output."""
        schema = object_({"a": string(), "b": string().optional()})

        assert schema.parse({"a": "x"}) == {"a": "x"}

    def test_default_fills_absent_key(self):
        """Test that defaults fill absent keys."""
        schema = object_({"n": number().default(3)})

        assert schema.parse({}) == {"n": 3}
        assert schema.parse({"n": 4}) == {"n": 4}

    def test_nested_paths(self):
        """Test that nested issue paths are prefixed at every level."""
        schema = object_({"users": array(object_({"email": string().min(3)}))})
        result = schema.safe_parse({"users": [{"email": "abc"}, {"email": "a"}]})

        assert result.issues[0].path == ("users", 1, "email")

    def test_shape_helpers(self, user):
        """Test extend, pick, omit and keyof."""
        extended = user.extend({"email": string()})
        assert list(extended.shape) == ["name", "age", "email"]
        assert list(user.pick("name").shape) == ["name"]
        assert list(user.omit("name").shape) == ["age"]
        assert user.keyof().values == ("name", "age")

        with pytest.raises(DefinitionError):
            user.pick("missing")

    def test_partial_and_required(self, user):
        """Test making keys optional and required again."""
        partial = user.partial()
        assert partial.parse({}) == {}
        assert isinstance(partial.shape["name"], OptionalSchema)

        only_age = user.partial("age")
        assert not only_age.safe_parse({}).success

        required = partial.required()
        assert required.shape["name"] is user.shape["name"]

    def test_merge(self, user):
        """Test merging two object schemas."""
        merged = user.merge(strict_object({"email": string()}))

        assert merged.unknown_keys == "strict"
        assert list(merged.shape) == ["name", "age", "email"]

    def test_receiver_not_modified(self, user):
        """Test that helpers return new nodes."""
        user.strict()
        user.extend({"x": string()})

        assert user.unknown_keys == "strip"
        assert list(user.shape) == ["name", "age"]

    def test_policy_helpers_keep_checks(self):
        """Test that changing the unknown-key policy keeps attached checks."""
        ordered = object_({"a": number(), "b": number()}).refine(lambda v: v["a"] < v["b"])

        for schema in (ordered.strict(), ordered.passthrough(), ordered.strip(), ordered.with_catchall(number())):
            result = schema.safe_parse({"a": 5, "b": 1})
            assert [issue.code for issue in result.issues] == ["custom"]

        assert ordered.strict().unknown_keys == "strict"
        assert len(ordered.strict().checks) == 1

    def test_key_helpers_reject_checked_objects(self, user):
        """Test that changing the keys of a refined object is refused."""
        refined = user.refine(lambda v: v["age"] < 150)

        for derive in (
            lambda: refined.extend({"email": string()}),
            lambda: refined.merge(object_({"email": string()})),
            lambda: refined.pick("name"),
            lambda: refined.omit("age"),
            lambda: refined.partial(),
            lambda: refined.required(),
        ):
            with pytest.raises(DefinitionError) as exc_info:
                derive()
            assert exc_info.value.context["checks"] == ["custom"]

    def test_invalid_policy(self):
        """Test that an unknown policy is a definition error."""
        from dataknobs_schema.structures import ObjectSchema

        with pytest.raises(DefinitionError):
            ObjectSchema({}, unknown_keys="loose")

    def test_shape_requires_schemas(self):
        """Test that a non-schema field value is a definition error."""
        with pytest.raises(DefinitionError):
            object_({"a": str})


class TestArray:
    """Test the array kind."""

    def test_one_bad_element(self):
        """Test a single wrong element yields one issue at its index."""
        result = array(string()).safe_parse(["a", 2, "c"])

        assert len(result.issues) == 1
        assert result.issues[0].path == (1,)
        assert result.issues[0].code == "invalid_type"

    def test_outputs_list(self):
        """Test that tuples are accepted and lists returned."""
        assert array(number()).parse((1, 2)) == [1, 2]

    def test_size_checks(self):
        """Test min, max, length and nonempty."""
        issue = array(string()).min(2).safe_parse(["a"]).issues[0]
        assert (issue.code, issue.origin, issue.minimum) == ("too_small", "array", 2)

        assert not array(string()).max(1).safe_parse(["a", "b"]).success
        assert not array(string()).length(1).safe_parse([]).success
        assert not array(string()).nonempty().safe_parse([]).success

    def test_array_method(self):
        """Test the element schema's array() shortcut."""
        assert string().array().parse(["x"]) == ["x"]


class TestTuple:
    """Test the tuple kind."""

    def test_positions(self):
        """Test positional validation and tuple output."""
        schema = tuple_([string(), number()])

        assert schema.parse(["a", 1]) == ("a", 1)
        assert schema.safe_parse(["a", "b"]).issues[0].path == (1,)

    def test_length_mismatch(self):
        """Test too short and too long inputs."""
        schema = tuple_([string(), number()])

        assert schema.safe_parse(["a"]).issues[0].code == "too_small"
        assert schema.safe_parse(["a", 1, 2]).issues[0].code == "too_big"

    def test_rest(self):
        """Test that a rest schema validates trailing items."""
        schema = tuple_([string()], number())

        assert schema.parse(["a", 1, 2]) == ("a", 1, 2)
        assert schema.safe_parse(["a", 1, "x"]).issues[0].path == (2,)

    def test_optional_trailing_items(self):
        """Test that optional trailing positions may be omitted."""
        schema = tuple_([string(), number().optional()])

        assert schema.parse(["a"]) == ("a",)
        assert schema.parse(["a", 1]) == ("a", 1)


class TestRecord:
    """Test the record kind."""

    def test_values(self):
        """Test value validation with key paths."""
        schema = record(string(), number())

        assert schema.parse({"a": 1}) == {"a": 1}
        assert schema.safe_parse({"a": 1, "b": "x"}).issues[0].path == ("b",)

    def test_invalid_key(self):
        """Test that key failures are wrapped in invalid_key."""
        issue = record(string().min(2), number()).safe_parse({"a": 1}).issues[0]

        assert isinstance(issue, InvalidKeyIssue)
        assert issue.path == ("a",)
        assert issue.origin == "record"
        assert issue.issues[0].code == "too_small"

    def test_exhaustive_keys(self):
        """Test that an enumerated key schema requires every key."""
        schema = record(enum_(["a", "b"]), number())

        assert schema.parse({"a": 1, "b": 2}) == {"a": 1, "b": 2}

        missing = schema.safe_parse({"a": 1}).issues[0]
        assert missing.path == ("b",)
        assert missing.code == "invalid_type"

        extra = schema.safe_parse({"a": 1, "b": 2, "c": 3}).issues[0]
        assert extra.code == "unrecognized_keys"
        assert extra.keys == ("c",)

    def test_literal_keys(self):
        """Test exhaustive records over literal keys."""
        schema = record(literal("x", "y"), string())

        assert not schema.safe_parse({"x": "1"}).success


class TestMapAndSet:
    """Test the map and set kinds."""

    def test_map_element_issue(self):
        """Test that value failures are wrapped in invalid_element."""
        issue = mapping(string(), number()).safe_parse({"a": "x"}).issues[0]

        assert isinstance(issue, InvalidElementIssue)
        assert issue.key == "a"
        assert issue.path == ("a",)
        assert issue.issues[0].code == "invalid_type"

    def test_map_key_issue(self):
        """Test that key failures are wrapped in invalid_key."""
        issue = mapping(string(), number()).safe_parse({1: 1}).issues[0]

        assert issue.code == "invalid_key"
        assert issue.origin == "map"

    def test_map_size(self):
        """Test map size checks."""
        assert mapping(string(), number()).min(1).safe_parse({}).issues[0].origin == "map"

    def test_set(self):
        """Test set validation and output."""
        assert set_(number()).parse({1, 2}) == {1, 2}
        assert set_(number()).parse(frozenset({1})) == {1}

        result = set_(number()).safe_parse({1, "a"})
        assert len(result.issues) == 1
        assert result.issues[0].path == ()

    def test_set_rejects_list(self):
        """Test the set type test."""
        assert set_(number()).safe_parse([1]).issues[0].expected == "set"

    def test_set_size(self):
        """Test set size checks."""
        issue = set_(number()).min(2).safe_parse({1}).issues[0]

        assert (issue.code, issue.origin) == ("too_small", "set")
        assert not set_(number()).nonempty().safe_parse(set()).success
