"""Constructor functions for schema and check nodes.

These are the everyday entry points; the classes behind them stay available
for subclassing. Names that clash with Python builtins or keywords carry a
trailing underscore (``object_``, ``tuple_``, ``set_``...).

Example:
    ```python
    from dataknobs_schema import builders as s

    point = s.tuple_([s.number(), s.number()])
    shape = s.discriminated_union("kind", [
        s.object_({"kind": s.literal("circle"), "radius": s.number().positive()}),
        s.object_({"kind": s.literal("square"), "side": s.number().positive()}),
    ])
    ```
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from .checks import (
    EndsWith,
    GreaterThan,
    Includes,
    LengthEquals,
    LessThan,
    LowerCase,
    MaxLength,
    MaxSize,
    MinLength,
    MinSize,
    MultipleOf,
    Overwrite,
    Refinement,
    Regex,
    SizeEquals,
    StartsWith,
    SuperRefinement,
    UpperCase,
)
from .combinators import DiscriminatedUnionSchema, IntersectionSchema, UnionSchema
from .formats import (
    Base64Format,
    Cidrv4Format,
    Cidrv6Format,
    EmailFormat,
    HexFormat,
    HostnameFormat,
    IntegerFormat,
    Ipv4Format,
    Ipv6Format,
    IsoDateFormat,
    IsoDateTimeFormat,
    IsoTimeFormat,
    UrlFormat,
    UuidFormat,
)
from .primitives import (
    AnySchema,
    BooleanSchema,
    DateSchema,
    EnumSchema,
    LiteralSchema,
    NeverSchema,
    NoneSchema,
    NumberSchema,
    StringSchema,
    UnknownSchema,
)
from .schema import Schema
from .structures import ArraySchema, MapSchema, ObjectSchema, RecordSchema, SetSchema, TupleSchema
from .wrappers import (
    CustomSchema,
    LazySchema,
    NullableSchema,
    OptionalSchema,
    PipeSchema,
    PromiseSchema,
    TransformSchema,
)

# Scalars


def string(*, coerce: bool = False, error: Any = None) -> StringSchema:
    return StringSchema(coerce=coerce, error=error)


def number(*, coerce: bool = False, error: Any = None) -> NumberSchema:
    return NumberSchema(coerce=coerce, error=error)


def integer(*, coerce: bool = False, error: Any = None) -> IntegerFormat:
    return IntegerFormat(coerce=coerce, error=error)


def boolean(*, coerce: bool = False, error: Any = None) -> BooleanSchema:
    return BooleanSchema(coerce=coerce, error=error)


def date(*, coerce: bool = False, error: Any = None) -> DateSchema:
    return DateSchema(coerce=coerce, error=error)


def none(*, error: Any = None) -> NoneSchema:
    return NoneSchema(error=error)


def any_() -> AnySchema:
    return AnySchema()


def unknown() -> UnknownSchema:
    return UnknownSchema()


def never(*, error: Any = None) -> NeverSchema:
    return NeverSchema(error=error)


def literal(*values: Any, error: Any = None) -> LiteralSchema:
    return LiteralSchema(values, error=error)


def enum_(entries: Any, *, error: Any = None) -> EnumSchema:
    return EnumSchema(entries, error=error)


# Structures


def object_(shape: Mapping[str, Schema], *, catchall: Schema | None = None, error: Any = None) -> ObjectSchema:
    return ObjectSchema(shape, catchall=catchall, error=error)


def strict_object(shape: Mapping[str, Schema], *, error: Any = None) -> ObjectSchema:
    return ObjectSchema(shape, unknown_keys="strict", error=error)


def loose_object(shape: Mapping[str, Schema], *, error: Any = None) -> ObjectSchema:
    return ObjectSchema(shape, unknown_keys="passthrough", error=error)


def array(element: Schema, *, error: Any = None) -> ArraySchema:
    return ArraySchema(element, error=error)


def tuple_(items: list[Schema] | tuple[Schema, ...], rest: Schema | None = None, *, error: Any = None) -> TupleSchema:
    return TupleSchema(items, rest, error=error)


def record(key_type: Schema, value_type: Schema, *, error: Any = None) -> RecordSchema:
    return RecordSchema(key_type, value_type, error=error)


def mapping(key_type: Schema, value_type: Schema, *, error: Any = None) -> MapSchema:
    return MapSchema(key_type, value_type, error=error)


def set_(element: Schema, *, error: Any = None) -> SetSchema:
    return SetSchema(element, error=error)


# Combinators


def union(options: list[Schema] | tuple[Schema, ...], *, error: Any = None) -> UnionSchema:
    return UnionSchema(options, error=error)


def discriminated_union(
    discriminator: str,
    options: list[Schema] | tuple[Schema, ...],
    *,
    error: Any = None,
) -> DiscriminatedUnionSchema:
    return DiscriminatedUnionSchema(discriminator, options, error=error)


def intersection(left: Schema, right: Schema, *, error: Any = None) -> IntersectionSchema:
    return IntersectionSchema(left, right, error=error)


# Modifiers and pipelines


def optional(inner: Schema) -> OptionalSchema:
    return OptionalSchema(inner)


def nullable(inner: Schema) -> NullableSchema:
    return NullableSchema(inner)


def lazy(getter: Callable[[], Schema], *, name: str | None = None) -> LazySchema:
    return LazySchema(getter, name=name)


def promise(inner: Schema) -> PromiseSchema:
    return PromiseSchema(inner)


def transform(fn: Callable[..., Any]) -> TransformSchema:
    return TransformSchema(fn)


def pipe(source: Schema, target: Schema) -> PipeSchema:
    return PipeSchema(source, target)


def custom(
    fn: Callable[[Any], Any] | None = None,
    *,
    error: Any = None,
    params: dict[str, Any] | None = None,
) -> CustomSchema:
    return CustomSchema(fn, params=params, error=error)


def instance_of(cls: type, *, error: Any = None) -> CustomSchema:
    """Accept instances of ``cls``; the issue params carry the class name."""
    return CustomSchema(
        lambda value: isinstance(value, cls),
        params={"class": cls.__name__},
        error=error,
    )


# Format nodes


def email(*, error: Any = None) -> EmailFormat:
    return EmailFormat(error=error)


def url(*, error: Any = None) -> UrlFormat:
    return UrlFormat(error=error)


def uuid(*, error: Any = None) -> UuidFormat:
    return UuidFormat(error=error)


def ipv4(*, error: Any = None) -> Ipv4Format:
    return Ipv4Format(error=error)


def ipv6(*, error: Any = None) -> Ipv6Format:
    return Ipv6Format(error=error)


def cidrv4(*, error: Any = None) -> Cidrv4Format:
    return Cidrv4Format(error=error)


def cidrv6(*, error: Any = None) -> Cidrv6Format:
    return Cidrv6Format(error=error)


def iso_datetime(*, error: Any = None) -> IsoDateTimeFormat:
    return IsoDateTimeFormat(error=error)


def iso_date(*, error: Any = None) -> IsoDateFormat:
    return IsoDateFormat(error=error)


def iso_time(*, error: Any = None) -> IsoTimeFormat:
    return IsoTimeFormat(error=error)


def base64(*, error: Any = None) -> Base64Format:
    return Base64Format(error=error)


def hex_(*, error: Any = None) -> HexFormat:
    return HexFormat(error=error)


def hostname(*, error: Any = None) -> HostnameFormat:
    return HostnameFormat(error=error)


# Checks, for ``add_check``


def min_length(value: int, *, error: Any = None, abort: bool = False) -> MinLength:
    return MinLength(value, error=error, abort=abort)


def max_length(value: int, *, error: Any = None, abort: bool = False) -> MaxLength:
    return MaxLength(value, error=error, abort=abort)


def length(value: int, *, error: Any = None, abort: bool = False) -> LengthEquals:
    return LengthEquals(value, error=error, abort=abort)


def min_size(value: int, *, error: Any = None, abort: bool = False) -> MinSize:
    return MinSize(value, error=error, abort=abort)


def max_size(value: int, *, error: Any = None, abort: bool = False) -> MaxSize:
    return MaxSize(value, error=error, abort=abort)


def size(value: int, *, error: Any = None, abort: bool = False) -> SizeEquals:
    return SizeEquals(value, error=error, abort=abort)


def gt(value: Any, *, error: Any = None, abort: bool = False) -> GreaterThan:
    return GreaterThan(value, inclusive=False, error=error, abort=abort)


def gte(value: Any, *, error: Any = None, abort: bool = False) -> GreaterThan:
    return GreaterThan(value, inclusive=True, error=error, abort=abort)


def lt(value: Any, *, error: Any = None, abort: bool = False) -> LessThan:
    return LessThan(value, inclusive=False, error=error, abort=abort)


def lte(value: Any, *, error: Any = None, abort: bool = False) -> LessThan:
    return LessThan(value, inclusive=True, error=error, abort=abort)


def multiple_of(value: int | float, *, error: Any = None, abort: bool = False) -> MultipleOf:
    return MultipleOf(value, error=error, abort=abort)


def regex(pattern: Any, *, error: Any = None, abort: bool = False) -> Regex:
    return Regex(pattern, error=error, abort=abort)


def lowercase(*, error: Any = None, abort: bool = False) -> LowerCase:
    return LowerCase(error=error, abort=abort)


def uppercase(*, error: Any = None, abort: bool = False) -> UpperCase:
    return UpperCase(error=error, abort=abort)


def starts_with(prefix: str, *, error: Any = None, abort: bool = False) -> StartsWith:
    return StartsWith(prefix, error=error, abort=abort)


def ends_with(suffix: str, *, error: Any = None, abort: bool = False) -> EndsWith:
    return EndsWith(suffix, error=error, abort=abort)


def includes(text: str, *, error: Any = None, abort: bool = False) -> Includes:
    return Includes(text, error=error, abort=abort)


def refine(
    fn: Callable[[Any], Any],
    *,
    error: Any = None,
    abort: bool = False,
    path: tuple = (),
    params: dict[str, Any] | None = None,
) -> Refinement:
    return Refinement(fn, error=error, abort=abort, path=path, params=params)


def super_refine(fn: Callable[..., Any], *, error: Any = None, abort: bool = False) -> SuperRefinement:
    return SuperRefinement(fn, error=error, abort=abort)


def overwrite(fn: Callable[[Any], Any] | str) -> Overwrite:
    return Overwrite(fn)


def trim() -> Overwrite:
    return Overwrite("trim")


def to_lower() -> Overwrite:
    return Overwrite("to_lower")


def to_upper() -> Overwrite:
    return Overwrite("to_upper")
