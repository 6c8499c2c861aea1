"""Structural schema kinds: objects, arrays, tuples, records, maps, sets.

Structural nodes evaluate every child position, even after one failed, and
prefix child issue paths with the child's key or index. Only
``abort_early`` parse calls stop at the first failing position.
"""

from __future__ import annotations

from collections.abc import Mapping, Set
from typing import Any

from .checks import LengthEquals, MaxLength, MaxSize, MinLength, MinSize, SizeEquals
from .engine import evaluate_items, then
from .exceptions import DefinitionError
from .issues import (
    InvalidElementIssue,
    InvalidKeyIssue,
    InvalidTypeIssue,
    TooBigIssue,
    TooSmallIssue,
    UnrecognizedKeysIssue,
)
from .result import ParseContext, ParseResult
from .schema import Schema
from .utils import MISSING, parsed_type

UNKNOWN_KEY_POLICIES = ("strip", "passthrough", "strict")


def _invalid_type(node: Schema, payload: ParseResult, expected: str) -> ParseResult:
    return payload.add_issue(InvalidTypeIssue(
        expected=expected, received=parsed_type(payload.value), input=payload.value, source=node,
    ))


def _require_schema(value: Any, where: str) -> Schema:
    if not isinstance(value, Schema):
        raise DefinitionError(
            f"{where} must be a schema, got {type(value).__name__}",
            context={"where": where},
        )
    return value


class _Sized:
    """Length helpers shared by arrays."""

    def min(self, length: int, *, error: Any = None) -> Schema:
        return self.add_check(MinLength(length, error=error))

    def max(self, length: int, *, error: Any = None) -> Schema:
        return self.add_check(MaxLength(length, error=error))

    def length(self, length: int, *, error: Any = None) -> Schema:
        return self.add_check(LengthEquals(length, error=error))

    def nonempty(self, *, error: Any = None) -> Schema:
        return self.min(1, error=error)


class ObjectSchema(Schema, kind="object"):
    """Mapping with a fixed set of keys.

    Unknown keys are handled by ``unknown_keys``:

    - ``"strip"`` (default): dropped from the output
    - ``"passthrough"``: copied to the output unvalidated
    - ``"strict"``: reported together in one ``unrecognized_keys`` issue

    A ``catchall`` schema, when set, validates every unknown key instead.
    Output is always a new ``dict``; absent optional keys stay absent.
    """

    def __init__(
        self,
        shape: Mapping[str, Schema],
        *,
        unknown_keys: str = "strip",
        catchall: Schema | None = None,
        checks: tuple = (),
        error: Any = None,
    ):
        if unknown_keys not in UNKNOWN_KEY_POLICIES:
            raise DefinitionError(
                f"Invalid unknown_keys policy: {unknown_keys}",
                context={"unknown_keys": unknown_keys, "allowed": list(UNKNOWN_KEY_POLICIES)},
            )
        for key, child in shape.items():
            _require_schema(child, f"shape[{key!r}]")
        if catchall is not None:
            _require_schema(catchall, "catchall")
        super().__init__(
            shape=dict(shape),
            unknown_keys=unknown_keys,
            catchall=catchall,
            checks=checks,
            error=error,
        )

    @property
    def shape(self) -> Mapping[str, Schema]:
        return self._def["shape"]

    @property
    def unknown_keys(self) -> str:
        return self._def["unknown_keys"]

    @property
    def catchall(self) -> Schema | None:
        return self._def["catchall"]

    def _parse(self, payload: ParseResult, ctx: ParseContext) -> Any:
        data = payload.value
        if not isinstance(data, Mapping):
            return _invalid_type(self, payload, "object")

        shape = self.shape
        keys = list(shape)
        items = [(shape[key], data.get(key, MISSING)) for key in keys]
        extra = [key for key in data if key not in shape]
        catchall = self.catchall
        if catchall is not None:
            keys.extend(extra)
            items.extend((catchall, data[key]) for key in extra)

        def assemble(results: list[ParseResult]) -> ParseResult:
            output: dict[Any, Any] = {}
            for key, result in zip(keys, results):
                if result.issues:
                    payload.absorb(result, key)
                elif result.value is not MISSING:
                    output[key] = result.value
            if ctx.abort_early and payload.issues:
                return payload
            if catchall is None and extra:
                if self.unknown_keys == "passthrough":
                    for key in extra:
                        output[key] = data[key]
                elif self.unknown_keys == "strict":
                    payload.add_issue(UnrecognizedKeysIssue(keys=tuple(extra), input=data, source=self))
            payload.value = output
            return payload

        return then(evaluate_items(items, ctx), assemble)

    def _derive(self, shape: Mapping[str, Schema] | None = None, **changes: Any) -> ObjectSchema:
        if shape is None:
            # Same keys: attached checks still apply.
            return self._clone(**changes)
        if self.checks:
            raise DefinitionError(
                "Cannot change the keys of an object schema that has checks attached",
                context={"keys": list(self.shape), "checks": [check.check_kind for check in self.checks]},
            )
        options = {
            "unknown_keys": self.unknown_keys,
            "catchall": self.catchall,
            "error": self.error,
        }
        options.update(changes)
        return ObjectSchema(shape, **options)

    def strict(self) -> ObjectSchema:
        return self._derive(unknown_keys="strict", catchall=None)

    def passthrough(self) -> ObjectSchema:
        return self._derive(unknown_keys="passthrough", catchall=None)

    def strip(self) -> ObjectSchema:
        return self._derive(unknown_keys="strip", catchall=None)

    def with_catchall(self, schema: Schema) -> ObjectSchema:
        return self._derive(catchall=_require_schema(schema, "catchall"))

    def extend(self, shape: Mapping[str, Schema]) -> ObjectSchema:
        """New object with ``shape`` added to (or overriding) this shape."""
        return self._derive({**self.shape, **shape})

    def merge(self, other: ObjectSchema) -> ObjectSchema:
        """New object with the other object's shape and unknown-key policy."""
        return self._derive(
            {**self.shape, **other.shape},
            unknown_keys=other.unknown_keys,
            catchall=other.catchall,
        )

    def pick(self, *keys: str) -> ObjectSchema:
        self._require_keys(keys)
        return self._derive({key: self.shape[key] for key in keys})

    def omit(self, *keys: str) -> ObjectSchema:
        self._require_keys(keys)
        return self._derive({key: child for key, child in self.shape.items() if key not in keys})

    def partial(self, *keys: str) -> ObjectSchema:
        """Make the named keys (default: all) optional."""
        self._require_keys(keys)
        targets = keys or tuple(self.shape)
        return self._derive({
            key: child.optional() if key in targets and not child.optional_in else child
            for key, child in self.shape.items()
        })

    def required(self, *keys: str) -> ObjectSchema:
        """Unwrap optional modifiers on the named keys (default: all)."""
        from .wrappers import OptionalSchema

        self._require_keys(keys)
        targets = keys or tuple(self.shape)
        shape = {}
        for key, child in self.shape.items():
            while key in targets and isinstance(child, OptionalSchema):
                child = child.inner
            shape[key] = child
        return self._derive(shape)

    def keyof(self) -> Schema:
        """Enum schema of this object's keys."""
        from .primitives import EnumSchema

        return EnumSchema(list(self.shape))

    def _require_keys(self, keys: tuple[str, ...]) -> None:
        unknown = [key for key in keys if key not in self.shape]
        if unknown:
            raise DefinitionError(
                f"Unknown keys: {unknown}",
                context={"keys": unknown, "available_keys": list(self.shape)},
            )


class ArraySchema(_Sized, Schema, kind="array"):
    """List (or tuple) whose elements all match ``element``; outputs a list."""

    def __init__(self, element: Schema, *, checks: tuple = (), error: Any = None):
        super().__init__(element=_require_schema(element, "element"), checks=checks, error=error)

    @property
    def element(self) -> Schema:
        return self._def["element"]

    def _parse(self, payload: ParseResult, ctx: ParseContext) -> Any:
        data = payload.value
        if not isinstance(data, (list, tuple)):
            return _invalid_type(self, payload, "array")

        element = self.element

        def assemble(results: list[ParseResult]) -> ParseResult:
            output = []
            for index, result in enumerate(results):
                if result.issues:
                    payload.absorb(result, index)
                output.append(result.value)
            payload.value = output
            return payload

        return then(evaluate_items([(element, item) for item in data], ctx), assemble)


class TupleSchema(Schema, kind="tuple"):
    """Fixed-position sequence with an optional ``rest`` schema; outputs a tuple.

    Trailing positions whose schema accepts an absent value may be omitted
    from the input.
    """

    def __init__(
        self,
        items: list[Schema] | tuple[Schema, ...],
        rest: Schema | None = None,
        *,
        checks: tuple = (),
        error: Any = None,
    ):
        for index, item in enumerate(items):
            _require_schema(item, f"items[{index}]")
        if rest is not None:
            _require_schema(rest, "rest")
        super().__init__(items=tuple(items), rest=rest, checks=checks, error=error)

    @property
    def items(self) -> tuple[Schema, ...]:
        return self._def["items"]

    @property
    def rest(self) -> Schema | None:
        return self._def["rest"]

    def _parse(self, payload: ParseResult, ctx: ParseContext) -> Any:
        data = payload.value
        if not isinstance(data, (list, tuple)):
            return _invalid_type(self, payload, "tuple")

        items = self.items
        rest = self.rest
        required = len(items)
        while required and items[required - 1].optional_in:
            required -= 1
        if len(data) < required:
            return payload.add_issue(TooSmallIssue(
                origin="array", minimum=required, inclusive=True, exact=required == len(items),
                input=data, source=self,
            ))
        if rest is None and len(data) > len(items):
            return payload.add_issue(TooBigIssue(
                origin="array", maximum=len(items), inclusive=True, exact=required == len(items),
                input=data, source=self,
            ))

        jobs = [(item, data[index] if index < len(data) else MISSING) for index, item in enumerate(items)]
        if rest is not None:
            jobs.extend((rest, value) for value in data[len(items):])
        present = len(data)

        def assemble(results: list[ParseResult]) -> ParseResult:
            output = []
            for index, result in enumerate(results):
                if result.issues:
                    payload.absorb(result, index)
                elif index < present or result.value is not MISSING:
                    output.append(result.value)
            payload.value = tuple(output)
            return payload

        return then(evaluate_items(jobs, ctx), assemble)


class RecordSchema(Schema, kind="record"):
    """Mapping whose keys match ``key_type`` and values match ``value_type``.

    When ``key_type`` enumerates its values (a literal or enum schema), the
    record is exhaustive: every listed key is evaluated, present or not, and
    any other key is unrecognized.
    """

    def __init__(self, key_type: Schema, value_type: Schema, *, checks: tuple = (), error: Any = None):
        super().__init__(
            key_type=_require_schema(key_type, "key_type"),
            value_type=_require_schema(value_type, "value_type"),
            checks=checks,
            error=error,
        )

    @property
    def key_type(self) -> Schema:
        return self._def["key_type"]

    @property
    def value_type(self) -> Schema:
        return self._def["value_type"]

    def _parse(self, payload: ParseResult, ctx: ParseContext) -> Any:
        data = payload.value
        if not isinstance(data, Mapping):
            return _invalid_type(self, payload, "record")

        enumerated = getattr(self.key_type, "values", None)
        if isinstance(enumerated, tuple):
            return self._parse_exhaustive(payload, data, enumerated, ctx)

        keys = list(data)
        jobs = []
        for key in keys:
            jobs.append((self.key_type, key))
            jobs.append((self.value_type, data[key]))

        def assemble(results: list[ParseResult]) -> ParseResult:
            output: dict[Any, Any] = {}
            for index, key in enumerate(keys):
                key_result = results[2 * index] if 2 * index < len(results) else None
                value_result = results[2 * index + 1] if 2 * index + 1 < len(results) else None
                if key_result is None:
                    break
                if key_result.issues:
                    payload.add_issue(InvalidKeyIssue(
                        origin="record", issues=tuple(key_result.issues), path=(key,), input=key, source=self,
                    ))
                if value_result is None:
                    break
                if value_result.issues:
                    payload.absorb(value_result, key)
                if not key_result.issues and not value_result.issues:
                    output[key_result.value] = value_result.value
            payload.value = output
            return payload

        return then(evaluate_items(jobs, ctx), assemble)

    def _parse_exhaustive(
        self, payload: ParseResult, data: Mapping[Any, Any], allowed: tuple[Any, ...], ctx: ParseContext,
    ) -> Any:
        keys = list(allowed)
        jobs = [(self.value_type, data.get(key, MISSING)) for key in keys]
        extra = [key for key in data if key not in allowed]

        def assemble(results: list[ParseResult]) -> ParseResult:
            output: dict[Any, Any] = {}
            for key, result in zip(keys, results):
                if result.issues:
                    payload.absorb(result, key)
                elif result.value is not MISSING:
                    output[key] = result.value
            if extra and not (ctx.abort_early and payload.issues):
                payload.add_issue(UnrecognizedKeysIssue(keys=tuple(extra), input=data, source=self))
            payload.value = output
            return payload

        return then(evaluate_items(jobs, ctx), assemble)


class MapSchema(Schema, kind="map"):
    """Mapping with arbitrary hashable keys; outputs a dict.

    Key failures are reported as ``invalid_key`` and value failures as
    ``invalid_element``, both carrying the nested issues.
    """

    def __init__(self, key_type: Schema, value_type: Schema, *, checks: tuple = (), error: Any = None):
        super().__init__(
            key_type=_require_schema(key_type, "key_type"),
            value_type=_require_schema(value_type, "value_type"),
            checks=checks,
            error=error,
        )

    @property
    def key_type(self) -> Schema:
        return self._def["key_type"]

    @property
    def value_type(self) -> Schema:
        return self._def["value_type"]

    def min(self, size: int, *, error: Any = None) -> Schema:
        return self.add_check(MinSize(size, error=error))

    def max(self, size: int, *, error: Any = None) -> Schema:
        return self.add_check(MaxSize(size, error=error))

    def size(self, size: int, *, error: Any = None) -> Schema:
        return self.add_check(SizeEquals(size, error=error))

    def _parse(self, payload: ParseResult, ctx: ParseContext) -> Any:
        data = payload.value
        if not isinstance(data, Mapping):
            return _invalid_type(self, payload, "map")

        entries = list(data.items())
        jobs = []
        for key, value in entries:
            jobs.append((self.key_type, key))
            jobs.append((self.value_type, value))

        def assemble(results: list[ParseResult]) -> ParseResult:
            output: dict[Any, Any] = {}
            for index, (key, _) in enumerate(entries):
                if 2 * index >= len(results):
                    break
                key_result = results[2 * index]
                if key_result.issues:
                    payload.add_issue(InvalidKeyIssue(
                        origin="map", issues=tuple(key_result.issues), path=(key,), input=key, source=self,
                    ))
                if 2 * index + 1 >= len(results):
                    break
                value_result = results[2 * index + 1]
                if value_result.issues:
                    payload.add_issue(InvalidElementIssue(
                        origin="map", key=key, issues=tuple(value_result.issues), path=(key,),
                        input=value_result.value, source=self,
                    ))
                if not key_result.issues and not value_result.issues:
                    output[key_result.value] = value_result.value
            payload.value = output
            return payload

        return then(evaluate_items(jobs, ctx), assemble)


class SetSchema(Schema, kind="set"):
    """Set (or frozenset) whose members all match ``element``; outputs a set."""

    def __init__(self, element: Schema, *, checks: tuple = (), error: Any = None):
        super().__init__(element=_require_schema(element, "element"), checks=checks, error=error)

    @property
    def element(self) -> Schema:
        return self._def["element"]

    def min(self, size: int, *, error: Any = None) -> Schema:
        return self.add_check(MinSize(size, error=error))

    def max(self, size: int, *, error: Any = None) -> Schema:
        return self.add_check(MaxSize(size, error=error))

    def size(self, size: int, *, error: Any = None) -> Schema:
        return self.add_check(SizeEquals(size, error=error))

    def nonempty(self, *, error: Any = None) -> Schema:
        return self.min(1, error=error)

    def _parse(self, payload: ParseResult, ctx: ParseContext) -> Any:
        data = payload.value
        if not isinstance(data, Set):
            return _invalid_type(self, payload, "set")

        members = list(data)
        element = self.element

        def assemble(results: list[ParseResult]) -> ParseResult:
            output = set()
            for result in results:
                if result.issues:
                    payload.absorb(result)
                else:
                    output.add(result.value)
            payload.value = output
            return payload

        return then(evaluate_items([(element, member) for member in members], ctx), assemble)
