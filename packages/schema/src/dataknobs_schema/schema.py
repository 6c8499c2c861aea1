"""Base class of every schema node.

A node is an immutable description of an expected shape: a read-only
definition (kind tag plus kind-specific fields, including the ordered checks)
and nothing else. Composition methods never touch the receiver; they return
a new node that references it.

Example:
    ```python
    from dataknobs_schema import number, object_, string

    user = object_({
        "name": string().min(1),
        "age": number().gte(0).optional(),
    })
    result = user.safe_parse({"name": "", "age": -5})
    [issue.path for issue in result.issues]
    # [('name',), ('age',)]
    ```
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from . import engine
from .checks import Check, Overwrite, Refinement, SuperRefinement, definition_to_dict
from .exceptions import DefinitionError
from .kinds import register_kind

if TYPE_CHECKING:
    from collections.abc import Callable

    from .issues import PathKey
    from .result import ParseContext, ParseResult, SafeParseResult


def _evaluate_node(node: Schema, payload: ParseResult, ctx: ParseContext) -> Any:
    return node._parse(payload, ctx)


class Schema:
    """Type node base class.

    Subclasses declare their kind tag in the class statement
    (``class StringSchema(Schema, kind="string")``), which registers them in
    the kind table, and implement ``_parse``. A bare ``Schema("my_kind",
    **fields)`` is a generic node evaluated by whatever function was
    registered for ``my_kind`` with ``register_kind``.
    """

    kind_tag: str | None = None
    # Nodes that accept an absent value (used by objects and tuples).
    optional_in = False

    def __init_subclass__(cls, kind: str | None = None, **kwargs: Any):
        super().__init_subclass__(**kwargs)
        if kind is not None:
            cls.kind_tag = kind
            register_kind(kind, _evaluate_node)

    def __init__(
        self,
        kind: str | None = None,
        *,
        checks: tuple[Check, ...] | list[Check] = (),
        error: Any = None,
        **fields: Any,
    ):
        """Initialize the node.

        Args:
            kind: Kind tag; defaults to the class's declared kind
            checks: Checks run after structural validation, in order
            error: Message provider for issues raised by this node
            **fields: Kind-specific definition fields
        """
        kind = kind or self.kind_tag
        if kind is None:
            raise DefinitionError("Schema nodes need a kind tag", context={"class": type(self).__name__})
        definition = {"type": kind, **fields, "checks": tuple(checks), "error": error}
        if isinstance(self, Check):
            definition.setdefault("check", self.check_tag)
            definition.setdefault("abort", False)
        self._def = MappingProxyType(definition)

    @property
    def definition(self) -> Mapping[str, Any]:
        return self._def

    @property
    def kind(self) -> str:
        return self._def["type"]

    @property
    def checks(self) -> tuple[Check, ...]:
        return self._def["checks"]

    @property
    def error(self) -> Any:
        return self._def.get("error")

    @property
    def all_checks(self) -> tuple[Check, ...]:
        """Checks to run, including the node itself when it is also a check."""
        if isinstance(self, Check):
            return (self, *self.checks)
        return self.checks

    def _parse(self, payload: ParseResult, ctx: ParseContext) -> Any:
        raise DefinitionError(
            f"Kind '{self.kind}' has no evaluator",
            context={"kind": self.kind, "class": type(self).__name__},
        )

    def to_dict(self) -> dict[str, Any]:
        """Render the definition as JSON-compatible data."""
        return definition_to_dict(self._def)

    def __repr__(self) -> str:
        fields = ", ".join(f"{k}={v!r}" for k, v in self._def.items() if k not in ("type", "checks", "error") and v is not None)
        return f"{type(self).__name__}({fields})"

    def _clone(self, **changes: Any) -> Schema:
        clone = copy.copy(self)
        clone._def = MappingProxyType({**self._def, **changes})
        return clone

    # Parsing

    def parse(self, value: Any, **options: Any) -> Any:
        return engine.parse(self, value, **options)

    def safe_parse(self, value: Any, **options: Any) -> SafeParseResult:
        return engine.safe_parse(self, value, **options)

    async def parse_async(self, value: Any, **options: Any) -> Any:
        return await engine.parse_async(self, value, **options)

    async def safe_parse_async(self, value: Any, **options: Any) -> SafeParseResult:
        return await engine.safe_parse_async(self, value, **options)

    # Composition

    def add_check(self, *checks: Check) -> Schema:
        """Return a copy with ``checks`` appended."""
        return self._clone(checks=(*self.checks, *checks))

    def with_error(self, error: Any) -> Schema:
        """Return a copy whose own issues use ``error`` as message provider."""
        return self._clone(error=error)

    def refine(
        self,
        fn: Callable[[Any], Any],
        *,
        error: Any = None,
        abort: bool = False,
        path: tuple[PathKey, ...] | list[PathKey] = (),
        params: dict[str, Any] | None = None,
    ) -> Schema:
        """Attach a custom predicate (may be a coroutine function)."""
        return self.add_check(Refinement(fn, error=error, abort=abort, path=path, params=params))

    def super_refine(self, fn: Callable[..., Any], *, error: Any = None, abort: bool = False) -> Schema:
        """Attach a callback reporting issues through ``ctx.add_issue``."""
        return self.add_check(SuperRefinement(fn, error=error, abort=abort))

    def overwrite(self, fn: Callable[[Any], Any]) -> Schema:
        """Attach a same-type value mutation."""
        return self.add_check(Overwrite(fn))

    def optional(self) -> Schema:
        from .wrappers import OptionalSchema

        return OptionalSchema(self)

    def nullable(self) -> Schema:
        from .wrappers import NullableSchema

        return NullableSchema(self)

    def nullish(self) -> Schema:
        return self.nullable().optional()

    def default(self, value: Any) -> Schema:
        from .wrappers import DefaultSchema

        return DefaultSchema(self, value)

    def prefault(self, value: Any) -> Schema:
        from .wrappers import PrefaultSchema

        return PrefaultSchema(self, value)

    def catch(self, value: Any) -> Schema:
        from .wrappers import CatchSchema

        return CatchSchema(self, value)

    def readonly(self) -> Schema:
        from .wrappers import ReadonlySchema

        return ReadonlySchema(self)

    def transform(self, fn: Callable[..., Any]) -> Schema:
        from .wrappers import PipeSchema, TransformSchema

        return PipeSchema(self, TransformSchema(fn))

    def pipe(self, target: Schema) -> Schema:
        from .wrappers import PipeSchema

        return PipeSchema(self, target)

    def array(self) -> Schema:
        from .structures import ArraySchema

        return ArraySchema(self)

    def or_(self, other: Schema) -> Schema:
        from .combinators import UnionSchema

        return UnionSchema([self, other])

    def and_(self, other: Schema) -> Schema:
        from .combinators import IntersectionSchema

        return IntersectionSchema(self, other)

    def __or__(self, other: Schema) -> Schema:
        return self.or_(other)

    def __and__(self, other: Schema) -> Schema:
        return self.and_(other)
