"""Build schema nodes from plain definitions.

A definition is the JSON-compatible shape produced by ``Schema.to_dict()``:
a ``type`` tag, kind-specific fields, and a ``checks`` list of ``check``
definitions. Nested schemas are nested definitions.

Example Configuration:
    ```yaml
    definitions:
      node:
        type: object
        shape:
          label: {type: string, checks: [{check: min_length, minimum: 1}]}
          children: {type: array, element: {type: ref, name: node}}
    type: ref
    name: node
    ```

References (``type: ref``) become lazy nodes, so a definition may refer to
itself.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

import yaml

from .checks import (
    Check,
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
    Regex,
    SizeEquals,
    StartsWith,
    UpperCase,
)
from .combinators import DiscriminatedUnionSchema, IntersectionSchema, UnionSchema
from .exceptions import DefinitionError
from .formats import IntegerFormat, string_format
from .kinds import kind_registry
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
    CatchSchema,
    DefaultSchema,
    LazySchema,
    NullableSchema,
    OptionalSchema,
    PipeSchema,
    PrefaultSchema,
    PromiseSchema,
    ReadonlySchema,
)

logger = logging.getLogger(__name__)

# Keys every definition may carry.
_COMMON_KEYS = frozenset({"type", "checks", "error", "check", "abort"})

_LENGTH_CHECKS: dict[str, tuple[type[Check], str]] = {
    "min_length": (MinLength, "minimum"),
    "max_length": (MaxLength, "maximum"),
    "length_equals": (LengthEquals, "length"),
    "min_size": (MinSize, "minimum"),
    "max_size": (MaxSize, "maximum"),
    "size_equals": (SizeEquals, "size"),
}


def _string_check(definition: Mapping[str, Any], error: Any, abort: bool) -> Check:
    name = definition.get("format")
    if name == "regex":
        return Regex(definition["pattern"], error=error, abort=abort)
    if name == "lowercase":
        return LowerCase(error=error, abort=abort)
    if name == "uppercase":
        return UpperCase(error=error, abort=abort)
    if name == "starts_with":
        return StartsWith(definition["prefix"], error=error, abort=abort)
    if name == "ends_with":
        return EndsWith(definition["suffix"], error=error, abort=abort)
    if name == "includes":
        return Includes(definition["includes"], error=error, abort=abort)
    return string_format(name, error=error, abort=abort)


def build_check(definition: Mapping[str, Any]) -> Check:
    """Build one check node from its definition.

    Raises:
        DefinitionError: If the check kind is unknown or cannot be described
            as data (custom refinements and function overwrites)
    """
    tag = definition.get("check")
    error = definition.get("error")
    abort = bool(definition.get("abort", False))
    try:
        if tag in _LENGTH_CHECKS:
            cls, field = _LENGTH_CHECKS[tag]
            return cls(definition[field], error=error, abort=abort)
        if tag == "greater_than":
            return GreaterThan(definition["value"], definition.get("inclusive", False), error=error, abort=abort)
        if tag == "less_than":
            return LessThan(definition["value"], definition.get("inclusive", False), error=error, abort=abort)
        if tag == "multiple_of":
            return MultipleOf(definition["value"], error=error, abort=abort)
        if tag == "string_format":
            return _string_check(definition, error, abort)
        if tag == "number_format":
            return IntegerFormat(error=error, abort=abort)
        if tag == "overwrite" and definition.get("name"):
            return Overwrite(definition["name"])
    except KeyError as e:
        raise DefinitionError(
            f"Check '{tag}' is missing field {e.args[0]!r}",
            context={"check": tag, "field": e.args[0]},
        ) from e
    raise DefinitionError(f"Cannot build check: {tag}", context={"check": tag})


class DefinitionBuilder:
    """Builds the nodes of one schema definition and its named definitions.

    Each ``ref`` to the same name resolves to the same node, built on first
    use. With ``strict=False`` checks that cannot be built are skipped with
    a warning instead of raising.
    """

    def __init__(self, definitions: Mapping[str, Mapping[str, Any]] | None = None, *, strict: bool = True):
        self.strict = strict
        self._definitions: dict[str, Mapping[str, Any]] = dict(definitions or {})
        self._built: dict[str, Schema] = {}
        self._builders: dict[str, tuple[Callable[[Mapping[str, Any]], Schema], frozenset[str]]] = {
            "string": (self._string, frozenset({"coerce", "format"})),
            "number": (self._number, frozenset({"coerce", "format"})),
            "boolean": (lambda d: BooleanSchema(coerce=bool(d.get("coerce"))), frozenset({"coerce"})),
            "date": (lambda d: DateSchema(coerce=bool(d.get("coerce"))), frozenset({"coerce"})),
            "null": (lambda d: NoneSchema(), frozenset()),
            "any": (lambda d: AnySchema(), frozenset()),
            "unknown": (lambda d: UnknownSchema(), frozenset()),
            "never": (lambda d: NeverSchema(), frozenset()),
            "literal": (self._literal, frozenset({"values", "value"})),
            "enum": (self._enum, frozenset({"entries", "values"})),
            "object": (self._object, frozenset({"shape", "unknown_keys", "catchall"})),
            "array": (lambda d: ArraySchema(self._child(d, "element")), frozenset({"element"})),
            "tuple": (self._tuple, frozenset({"items", "rest"})),
            "record": (
                lambda d: RecordSchema(self._child(d, "key_type"), self._child(d, "value_type")),
                frozenset({"key_type", "value_type"}),
            ),
            "map": (
                lambda d: MapSchema(self._child(d, "key_type"), self._child(d, "value_type")),
                frozenset({"key_type", "value_type"}),
            ),
            "set": (lambda d: SetSchema(self._child(d, "element")), frozenset({"element"})),
            "union": (self._union, frozenset({"options", "discriminator"})),
            "intersection": (
                lambda d: IntersectionSchema(self._child(d, "left"), self._child(d, "right")),
                frozenset({"left", "right"}),
            ),
            "optional": (lambda d: OptionalSchema(self._child(d, "inner")), frozenset({"inner"})),
            "nullable": (lambda d: NullableSchema(self._child(d, "inner")), frozenset({"inner"})),
            "readonly": (lambda d: ReadonlySchema(self._child(d, "inner")), frozenset({"inner"})),
            "promise": (lambda d: PromiseSchema(self._child(d, "inner")), frozenset({"inner"})),
            "default": (
                lambda d: DefaultSchema(self._child(d, "inner"), d.get("default_value")),
                frozenset({"inner", "default_value"}),
            ),
            "prefault": (
                lambda d: PrefaultSchema(self._child(d, "inner"), d.get("default_value")),
                frozenset({"inner", "default_value"}),
            ),
            "catch": (
                lambda d: CatchSchema(self._child(d, "inner"), d.get("catch_value")),
                frozenset({"inner", "catch_value"}),
            ),
            "pipe": (
                lambda d: PipeSchema(self._child(d, "source"), self._child(d, "target")),
                frozenset({"source", "target"}),
            ),
            "ref": (self._ref, frozenset({"name"})),
            "lazy": (self._ref, frozenset({"name"})),
            "transform": (self._callable_only, frozenset()),
            "custom": (self._callable_only, frozenset({"params"})),
        }

    def build(self, definition: Mapping[str, Any]) -> Schema:
        """Build a node (and its children) from one definition.

        Raises:
            DefinitionError: If the definition is malformed or names an
                unknown kind
        """
        if not isinstance(definition, Mapping):
            raise DefinitionError(
                f"Schema definition must be a mapping, got {type(definition).__name__}",
                context={"definition": repr(definition)},
            )
        kind = definition.get("type")
        if kind not in self._builders:
            return self._generic(definition)

        builder, fields = self._builders[kind]
        ignored = sorted(set(definition) - fields - _COMMON_KEYS)
        if ignored:
            logger.warning(f"Ignoring unknown keys for '{kind}' schema: {ignored}")

        node = builder(definition)
        checks = self._checks(definition.get("checks") or ())
        if checks:
            node = node.add_check(*checks)
        if isinstance(definition.get("error"), str):
            node = node.with_error(definition["error"])
        return node

    def _checks(self, definitions: Any) -> list[Check]:
        checks = []
        for definition in definitions:
            try:
                checks.append(build_check(definition))
            except DefinitionError:
                if self.strict:
                    raise
                logger.warning(f"Skipping check that cannot be built: {definition!r}")
        return checks

    def _child(self, definition: Mapping[str, Any], key: str) -> Schema:
        if key not in definition:
            raise DefinitionError(
                f"'{definition.get('type')}' schema requires '{key}'",
                context={"type": definition.get("type"), "field": key},
            )
        return self.build(definition[key])

    def _generic(self, definition: Mapping[str, Any]) -> Schema:
        # Kinds registered with register_kind but without a builder.
        kind = definition.get("type")
        if not isinstance(kind, str) or not kind_registry.has(kind):
            raise DefinitionError(
                f"Unknown schema type: {kind}",
                context={"type": kind, "available": sorted(self._builders)},
            )
        fields = {k: v for k, v in definition.items() if k not in _COMMON_KEYS}
        return Schema(kind, checks=self._checks(definition.get("checks") or ()), error=definition.get("error"), **fields)

    def _callable_only(self, definition: Mapping[str, Any]) -> Schema:
        kind = definition.get("type")
        raise DefinitionError(
            f"'{kind}' schemas wrap a function and cannot be built from a definition",
            context={"type": kind},
        )

    def _string(self, definition: Mapping[str, Any]) -> Schema:
        if definition.get("format"):
            return string_format(definition["format"], abort=bool(definition.get("abort", False)))
        return StringSchema(coerce=bool(definition.get("coerce")))

    def _number(self, definition: Mapping[str, Any]) -> Schema:
        fmt = definition.get("format")
        if fmt == "int":
            return IntegerFormat(coerce=bool(definition.get("coerce")), abort=bool(definition.get("abort", False)))
        if fmt:
            raise DefinitionError(f"Unknown number format: {fmt}", context={"format": fmt})
        return NumberSchema(coerce=bool(definition.get("coerce")))

    def _literal(self, definition: Mapping[str, Any]) -> Schema:
        if "values" in definition:
            return LiteralSchema(tuple(definition["values"]))
        if "value" in definition:
            return LiteralSchema((definition["value"],))
        raise DefinitionError("'literal' schema requires 'values'", context={"type": "literal"})

    def _enum(self, definition: Mapping[str, Any]) -> Schema:
        entries = definition.get("entries", definition.get("values"))
        if entries is None:
            raise DefinitionError("'enum' schema requires 'entries'", context={"type": "enum"})
        return EnumSchema(entries)

    def _object(self, definition: Mapping[str, Any]) -> Schema:
        shape = definition.get("shape") or {}
        if not isinstance(shape, Mapping):
            raise DefinitionError("'shape' must be a mapping", context={"type": "object"})
        catchall = definition.get("catchall")
        return ObjectSchema(
            {key: self.build(child) for key, child in shape.items()},
            unknown_keys=definition.get("unknown_keys", "strip"),
            catchall=self.build(catchall) if catchall is not None else None,
        )

    def _tuple(self, definition: Mapping[str, Any]) -> Schema:
        rest = definition.get("rest")
        return TupleSchema(
            [self.build(item) for item in definition.get("items") or ()],
            self.build(rest) if rest is not None else None,
        )

    def _union(self, definition: Mapping[str, Any]) -> Schema:
        options = [self.build(option) for option in definition.get("options") or ()]
        if definition.get("discriminator"):
            return DiscriminatedUnionSchema(definition["discriminator"], options)
        return UnionSchema(options)

    def _ref(self, definition: Mapping[str, Any]) -> Schema:
        name = definition.get("name")
        if name not in self._definitions:
            raise DefinitionError(
                f"Unknown schema reference: {name}",
                context={"name": name, "available": sorted(self._definitions)},
            )
        return LazySchema(lambda: self._resolve(name), name=name)

    def _resolve(self, name: str) -> Schema:
        if name not in self._built:
            self._built[name] = self.build(self._definitions[name])
        return self._built[name]


class SchemaFactory:
    """Factory for creating schema nodes from configuration.

    Configuration Options:
        definitions (dict): Named definitions that ``ref`` nodes resolve
        type (str): Kind tag of the root node
        name (str): Label used in logs; with ``type: ref`` the referenced
            definition. A root without ``type`` refers to ``definitions[name]``.
        ...: Kind-specific fields of the root node
    """

    def __init__(self, *, strict: bool = True):
        self.strict = strict

    def create(self, **config: Any) -> Schema:
        """Create a schema node from configuration.

        Args:
            **config: Root definition, plus optional ``name`` and ``definitions``

        Returns:
            Schema node
        """
        definitions = config.pop("definitions", None) or {}
        if not isinstance(definitions, Mapping):
            raise DefinitionError(
                "'definitions' must be a mapping",
                context={"definitions": type(definitions).__name__},
            )
        if config.get("type") in ("ref", "lazy"):
            name = config.get("name")
        else:
            name = config.pop("name", None)
            if "type" not in config and name is not None:
                config = {"type": "ref", "name": name}

        logger.info(f"Creating schema: {name or config.get('type', 'unnamed_schema')}")

        return DefinitionBuilder(definitions, strict=self.strict).build(config)


def build_schema(definition: Mapping[str, Any], *, strict: bool = True) -> Schema:
    """Build a schema node from a definition mapping."""
    return SchemaFactory(strict=strict).create(**dict(definition))


def load_schema(path: str | Path, *, strict: bool = True) -> Schema:
    """Load a schema definition from a YAML or JSON file.

    Raises:
        DefinitionError: If the file is missing, unreadable, or not a mapping
    """
    path = Path(path)
    suffix = path.suffix.lower()
    try:
        with open(path, encoding="utf-8") as f:
            if suffix in [".yaml", ".yml"]:
                data = yaml.safe_load(f)
            elif suffix == ".json":
                data = json.load(f)
            else:
                raise DefinitionError(f"Unsupported file format: {suffix}", context={"path": str(path)})
    except yaml.YAMLError as e:
        raise DefinitionError(f"Failed to parse YAML file {path}: {e}", context={"path": str(path)}) from e
    except json.JSONDecodeError as e:
        raise DefinitionError(f"Failed to parse JSON file {path}: {e}", context={"path": str(path)}) from e
    except OSError as e:
        raise DefinitionError(f"Failed to read schema file {path}: {e}", context={"path": str(path)}) from e

    if not isinstance(data, dict):
        raise DefinitionError(f"Schema file must contain a mapping: {path}", context={"path": str(path)})
    return build_schema(data, strict=strict)
