"""Scalar schema kinds.

Scalars run a type or identity test and report a single issue on mismatch;
their checks only run against a value of the right type.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from datetime import date, datetime
from re import Pattern as RegexPattern
from typing import Any

from .checks import (
    EndsWith,
    GreaterThan,
    Includes,
    LengthEquals,
    LessThan,
    LowerCase,
    MaxLength,
    MinLength,
    MultipleOf,
    Overwrite,
    Regex,
    StartsWith,
    UpperCase,
)
from .exceptions import DefinitionError
from .issues import InvalidTypeIssue, InvalidValueIssue
from .result import ParseContext, ParseResult
from .schema import Schema
from .utils import MISSING, is_number, parsed_type, same_value


def _invalid_type(node: Schema, payload: ParseResult, expected: str) -> ParseResult:
    return payload.add_issue(InvalidTypeIssue(
        expected=expected,
        received=parsed_type(payload.value),
        input=payload.value,
        source=node,
    ))


class StringSchema(Schema, kind="string"):
    """Accepts ``str`` values.

    With ``coerce``, any other present value goes through ``str()``. ``None``
    is not coerced and still fails with ``invalid_type``; wrap the schema in
    ``nullable()`` to accept it.
    """

    def __init__(self, *, coerce: bool = False, checks: tuple = (), error: Any = None, **fields: Any):
        super().__init__(coerce=coerce or None, checks=checks, error=error, **fields)

    def _parse(self, payload: ParseResult, ctx: ParseContext) -> ParseResult:
        if self._def.get("coerce") and payload.value is not MISSING and payload.value is not None:
            payload.value = str(payload.value)
        if not isinstance(payload.value, str):
            return _invalid_type(self, payload, "string")
        return payload

    def min(self, length: int, *, error: Any = None) -> Schema:
        return self.add_check(MinLength(length, error=error))

    def max(self, length: int, *, error: Any = None) -> Schema:
        return self.add_check(MaxLength(length, error=error))

    def length(self, length: int, *, error: Any = None) -> Schema:
        return self.add_check(LengthEquals(length, error=error))

    def nonempty(self, *, error: Any = None) -> Schema:
        return self.min(1, error=error)

    def regex(self, pattern: str | RegexPattern, *, error: Any = None) -> Schema:
        return self.add_check(Regex(pattern, error=error))

    def starts_with(self, prefix: str, *, error: Any = None) -> Schema:
        return self.add_check(StartsWith(prefix, error=error))

    def ends_with(self, suffix: str, *, error: Any = None) -> Schema:
        return self.add_check(EndsWith(suffix, error=error))

    def includes(self, text: str, *, error: Any = None) -> Schema:
        return self.add_check(Includes(text, error=error))

    def lowercase(self, *, error: Any = None) -> Schema:
        return self.add_check(LowerCase(error=error))

    def uppercase(self, *, error: Any = None) -> Schema:
        return self.add_check(UpperCase(error=error))

    def with_format(self, name: str, *, error: Any = None) -> Schema:
        """Attach a named string format (``email``, ``uuid``, ``ipv4``...)."""
        from .formats import string_format

        return self.add_check(string_format(name, error=error))

    def trim(self) -> Schema:
        return self.add_check(Overwrite("trim"))

    def to_lower(self) -> Schema:
        return self.add_check(Overwrite("to_lower"))

    def to_upper(self) -> Schema:
        return self.add_check(Overwrite("to_upper"))


class _Bounded:
    """Comparison helpers shared by numbers and dates."""

    def gt(self, value: Any, *, error: Any = None) -> Schema:
        return self.add_check(GreaterThan(value, inclusive=False, error=error))

    def gte(self, value: Any, *, error: Any = None) -> Schema:
        return self.add_check(GreaterThan(value, inclusive=True, error=error))

    def lt(self, value: Any, *, error: Any = None) -> Schema:
        return self.add_check(LessThan(value, inclusive=False, error=error))

    def lte(self, value: Any, *, error: Any = None) -> Schema:
        return self.add_check(LessThan(value, inclusive=True, error=error))

    min = gte
    max = lte


class NumberSchema(_Bounded, Schema, kind="number"):
    """Accepts finite ``int`` and ``float`` values; ``bool`` is rejected."""

    def __init__(self, *, coerce: bool = False, checks: tuple = (), error: Any = None, **fields: Any):
        super().__init__(coerce=coerce or None, checks=checks, error=error, **fields)

    def _parse(self, payload: ParseResult, ctx: ParseContext) -> ParseResult:
        value = payload.value
        if self._def.get("coerce") and isinstance(value, (str, bool)):
            try:
                payload.value = float(value) if isinstance(value, str) else int(value)
            except ValueError:
                return _invalid_type(self, payload, "number")
            if isinstance(payload.value, float) and payload.value.is_integer() and "." not in str(value):
                payload.value = int(payload.value)
        if not is_number(payload.value):
            return _invalid_type(self, payload, "number")
        return payload

    def positive(self, *, error: Any = None) -> Schema:
        return self.gt(0, error=error)

    def nonnegative(self, *, error: Any = None) -> Schema:
        return self.gte(0, error=error)

    def negative(self, *, error: Any = None) -> Schema:
        return self.lt(0, error=error)

    def nonpositive(self, *, error: Any = None) -> Schema:
        return self.lte(0, error=error)

    def multiple_of(self, value: int | float, *, error: Any = None) -> Schema:
        return self.add_check(MultipleOf(value, error=error))

    def integer(self, *, error: Any = None) -> Schema:
        from .formats import IntegerFormat

        return self.add_check(IntegerFormat(error=error))


class BooleanSchema(Schema, kind="boolean"):
    def __init__(self, *, coerce: bool = False, checks: tuple = (), error: Any = None):
        super().__init__(coerce=coerce or None, checks=checks, error=error)

    def _parse(self, payload: ParseResult, ctx: ParseContext) -> ParseResult:
        if self._def.get("coerce") and payload.value is not MISSING:
            payload.value = bool(payload.value)
        if not isinstance(payload.value, bool):
            return _invalid_type(self, payload, "boolean")
        return payload


class DateSchema(_Bounded, Schema, kind="date"):
    """Accepts ``datetime.date`` and ``datetime.datetime`` values.

    With ``coerce``, ISO 8601 strings are converted (a string with a time
    part becomes a ``datetime``).
    """

    def __init__(self, *, coerce: bool = False, checks: tuple = (), error: Any = None):
        super().__init__(coerce=coerce or None, checks=checks, error=error)

    def _parse(self, payload: ParseResult, ctx: ParseContext) -> ParseResult:
        value = payload.value
        if self._def.get("coerce") and isinstance(value, str):
            try:
                payload.value = datetime.fromisoformat(value) if "T" in value or " " in value else date.fromisoformat(value)
            except ValueError:
                return _invalid_type(self, payload, "date")
        if not isinstance(payload.value, date):
            return _invalid_type(self, payload, "date")
        return payload


class NoneSchema(Schema, kind="null"):
    """Accepts only ``None``."""

    def _parse(self, payload: ParseResult, ctx: ParseContext) -> ParseResult:
        if payload.value is not None:
            return _invalid_type(self, payload, "null")
        return payload


class AnySchema(Schema, kind="any"):
    def _parse(self, payload: ParseResult, ctx: ParseContext) -> ParseResult:
        return payload


class UnknownSchema(Schema, kind="unknown"):
    def _parse(self, payload: ParseResult, ctx: ParseContext) -> ParseResult:
        return payload


class NeverSchema(Schema, kind="never"):
    def _parse(self, payload: ParseResult, ctx: ParseContext) -> ParseResult:
        return _invalid_type(self, payload, "never")


class LiteralSchema(Schema, kind="literal"):
    """Accepts one of a fixed set of literal values.

    ``True`` and ``1`` are different literals.
    """

    def __init__(self, values: Any, *, checks: tuple = (), error: Any = None):
        if not isinstance(values, (list, tuple)):
            values = (values,)
        if not values:
            raise DefinitionError("Literal schema requires at least one value", context={"type": "literal"})
        super().__init__(values=tuple(values), checks=checks, error=error)

    @property
    def values(self) -> tuple[Any, ...]:
        return self._def["values"]

    def _parse(self, payload: ParseResult, ctx: ParseContext) -> ParseResult:
        if not any(same_value(payload.value, value) for value in self.values):
            payload.add_issue(InvalidValueIssue(values=self.values, input=payload.value, source=self))
        return payload


class EnumSchema(Schema, kind="enum"):
    """Accepts one of an enumerated set of values.

    ``entries`` may be a list of values, a mapping of names to values, or a
    Python ``enum.Enum`` subclass. With an Enum class, both members and
    their values are accepted and the output is always the member.
    """

    def __init__(self, entries: Any, *, checks: tuple = (), error: Any = None):
        enum_class = None
        if isinstance(entries, type) and issubclass(entries, enum.Enum):
            enum_class = entries
            entries = {member.name: member.value for member in entries}
        elif not isinstance(entries, Mapping):
            entries = {str(value): value for value in entries}
        if not entries:
            raise DefinitionError("Enum schema requires at least one entry", context={"type": "enum"})
        self._enum_class = enum_class
        super().__init__(entries=dict(entries), checks=checks, error=error)

    @property
    def enum_class(self) -> type[enum.Enum] | None:
        return self._enum_class

    @property
    def values(self) -> tuple[Any, ...]:
        return tuple(self._def["entries"].values())

    def _parse(self, payload: ParseResult, ctx: ParseContext) -> ParseResult:
        value = payload.value
        if self._enum_class is not None:
            if isinstance(value, self._enum_class):
                return payload
            for member in self._enum_class:
                if same_value(member.value, value):
                    payload.value = member
                    return payload
        elif any(same_value(value, allowed) for allowed in self.values):
            return payload
        return payload.add_issue(InvalidValueIssue(values=self.values, input=value, source=self))

    def extract(self, *names: str) -> EnumSchema:
        """Return an enum restricted to the named entries."""
        entries = self._def["entries"]
        missing = [name for name in names if name not in entries]
        if missing:
            raise DefinitionError(f"Unknown enum entries: {missing}", context={"entries": list(entries)})
        return EnumSchema({name: entries[name] for name in names}, error=self.error)

    def exclude(self, *names: str) -> EnumSchema:
        """Return an enum without the named entries."""
        entries = self._def["entries"]
        return EnumSchema({name: value for name, value in entries.items() if name not in names}, error=self.error)
