"""Union, discriminated union and intersection kinds."""

from __future__ import annotations

import inspect
from collections.abc import Mapping
from typing import Any

from .engine import evaluate, evaluate_items, gather_outcomes, then
from .exceptions import DefinitionError
from .issues import InvalidTypeIssue, InvalidUnionIssue
from .result import ParseContext, ParseResult
from .schema import Schema
from .utils import MISSING, parsed_type, same_value


class UnionSchema(Schema, kind="union"):
    """Accepts a value matching any of ``options``.

    Every option is evaluated on its own payload, so one option's value
    mutations never leak into another. The first option (in declared order)
    that succeeds provides the output. When none does, a single
    ``invalid_union`` issue carries the issues of every option.
    """

    def __init__(self, options: list[Schema] | tuple[Schema, ...], *, checks: tuple = (), error: Any = None, **fields: Any):
        options = tuple(options)
        if not options:
            raise DefinitionError("Union schema requires at least one option", context={"type": "union"})
        for index, option in enumerate(options):
            if not isinstance(option, Schema):
                raise DefinitionError(
                    f"Union option {index} must be a schema, got {type(option).__name__}",
                    context={"index": index},
                )
        super().__init__(options=options, checks=checks, error=error, **fields)

    @property
    def options(self) -> tuple[Schema, ...]:
        return self._def["options"]

    @property
    def optional_in(self) -> bool:  # type: ignore[override]
        return any(option.optional_in for option in self.options)

    def _parse(self, payload: ParseResult, ctx: ParseContext) -> Any:
        results: list[Any] = []
        pending = False
        for option in self.options:
            outcome = evaluate(option, ParseResult(payload.value), ctx)
            if inspect.isawaitable(outcome):
                pending = True
            elif not pending and not outcome.issues:
                payload.value = outcome.value
                return payload
            results.append(outcome)
        if pending:
            return then(gather_outcomes(results), lambda settled: self._conclude(payload, settled))
        return self._conclude(payload, results)

    def _conclude(self, payload: ParseResult, results: list[ParseResult]) -> ParseResult:
        for result in results:
            if not result.issues:
                payload.value = result.value
                return payload
        return payload.add_issue(InvalidUnionIssue(
            errors=tuple(tuple(result.issues) for result in results),
            input=payload.value,
            source=self,
        ))


def _discriminator_values(option: Schema, discriminator: str) -> tuple[Any, ...]:
    if isinstance(option, DiscriminatedUnionSchema) and option.discriminator == discriminator:
        return tuple(value for value, _ in option.lookup)
    shape = getattr(option, "shape", None)
    if not isinstance(shape, Mapping) or discriminator not in shape:
        raise DefinitionError(
            f"Discriminated union option lacks discriminator '{discriminator}'",
            context={"discriminator": discriminator, "option": repr(option)},
        )
    values = getattr(shape[discriminator], "values", None)
    if not isinstance(values, tuple):
        raise DefinitionError(
            f"Discriminator '{discriminator}' must be a literal or enum schema",
            context={"discriminator": discriminator, "option": repr(option)},
        )
    return values


class DiscriminatedUnionSchema(UnionSchema):
    """Union that picks its option from one discriminator field.

    Each option must be an object schema whose ``discriminator`` field is a
    literal or enum schema (or a discriminated union on the same field).
    Only the selected option is evaluated. The definition keeps the
    ``union`` tag and adds a ``discriminator`` field.
    """

    def __init__(
        self,
        discriminator: str,
        options: list[Schema] | tuple[Schema, ...],
        *,
        checks: tuple = (),
        error: Any = None,
    ):
        super().__init__(options, checks=checks, error=error, discriminator=discriminator)
        lookup: list[tuple[Any, Schema]] = []
        for option in self.options:
            for value in _discriminator_values(option, discriminator):
                if any(same_value(value, known) for known, _ in lookup):
                    raise DefinitionError(
                        f"Duplicate discriminator value {value!r}",
                        context={"discriminator": discriminator, "value": value},
                    )
                lookup.append((value, option))
        self._lookup = tuple(lookup)

    @property
    def discriminator(self) -> str:
        return self._def["discriminator"]

    @property
    def lookup(self) -> tuple[tuple[Any, Schema], ...]:
        return self._lookup

    def _parse(self, payload: ParseResult, ctx: ParseContext) -> Any:
        data = payload.value
        if not isinstance(data, Mapping):
            return payload.add_issue(InvalidTypeIssue(
                expected="object", received=parsed_type(data), input=data, source=self,
            ))
        tag = data.get(self.discriminator, MISSING)
        for value, option in self._lookup:
            if same_value(tag, value):
                return evaluate(option, payload, ctx)
        return payload.add_issue(InvalidUnionIssue(
            note="No matching discriminator",
            discriminator=self.discriminator,
            path=(self.discriminator,),
            input=tag,
            source=self,
        ))


def merge_values(left: Any, right: Any, path: tuple[Any, ...] = ()) -> Any:
    """Merge the outputs of both sides of an intersection.

    Raises:
        DefinitionError: If the outputs cannot be reconciled
    """
    if left is right or same_value(left, right):
        return left
    if isinstance(left, Mapping) and isinstance(right, Mapping):
        merged = dict(left)
        for key, value in right.items():
            merged[key] = merge_values(left[key], value, (*path, key)) if key in left else value
        return merged
    if isinstance(left, (list, tuple)) and isinstance(right, (list, tuple)) and len(left) == len(right):
        merged_items = [merge_values(a, b, (*path, index)) for index, (a, b) in enumerate(zip(left, right))]
        return tuple(merged_items) if isinstance(left, tuple) else merged_items
    raise DefinitionError(
        f"Unmergeable intersection at path {list(path)}",
        context={"path": list(path)},
    )


class IntersectionSchema(Schema, kind="intersection"):
    """Value must match both ``left`` and ``right``; outputs are merged."""

    def __init__(self, left: Schema, right: Schema, *, checks: tuple = (), error: Any = None):
        for side, schema in (("left", left), ("right", right)):
            if not isinstance(schema, Schema):
                raise DefinitionError(f"Intersection {side} must be a schema", context={"side": side})
        super().__init__(left=left, right=right, checks=checks, error=error)

    @property
    def left(self) -> Schema:
        return self._def["left"]

    @property
    def right(self) -> Schema:
        return self._def["right"]

    def _parse(self, payload: ParseResult, ctx: ParseContext) -> Any:
        def assemble(results: list[ParseResult]) -> ParseResult:
            for result in results:
                payload.absorb(result)
            if len(results) == 2 and not payload.issues:
                payload.value = merge_values(results[0].value, results[1].value)
            return payload

        jobs = [(self.left, payload.value), (self.right, payload.value)]
        return then(evaluate_items(jobs, ctx), assemble)
