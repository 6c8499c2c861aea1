"""Modifier and pipeline kinds.

Modifiers wrap an inner schema and short-circuit on the values they own
(absent for optional/default, ``None`` for nullable) without evaluating the
inner schema. Pipelines only feed the right side once the left side
succeeded.
"""

from __future__ import annotations

import copy
import inspect
import logging
from collections.abc import Callable
from typing import Any

from .checks import RefinementContext
from .engine import evaluate, require_async, settle, then
from .exceptions import DefinitionError, SchemaValidationError
from .issues import CustomIssue
from .resolution import finalize_issues
from .result import ParseContext, ParseResult
from .schema import Schema
from .utils import MISSING, freeze

logger = logging.getLogger(__name__)


def _require_schema(value: Any, where: str) -> Schema:
    if not isinstance(value, Schema):
        raise DefinitionError(
            f"{where} must be a schema, got {type(value).__name__}",
            context={"where": where},
        )
    return value


def _accepts_context(fn: Callable[..., Any]) -> bool:
    """Whether ``fn`` requires a second positional argument."""
    try:
        parameters = inspect.signature(fn).parameters.values()
    except (TypeError, ValueError):
        return False
    required = [
        p for p in parameters
        if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
        and p.default is inspect.Parameter.empty
    ]
    return len(required) >= 2


class _Wrapper(Schema):
    """Schema around a single inner schema."""

    def __init__(self, inner: Schema, *, checks: tuple = (), error: Any = None, **fields: Any):
        super().__init__(inner=_require_schema(inner, "inner"), checks=checks, error=error, **fields)

    @property
    def inner(self) -> Schema:
        return self._def["inner"]

    def unwrap(self) -> Schema:
        return self.inner


class OptionalSchema(_Wrapper, kind="optional"):
    """Accepts an absent value (``MISSING``); objects omit such keys."""

    optional_in = True

    def _parse(self, payload: ParseResult, ctx: ParseContext) -> Any:
        if payload.value is MISSING:
            return payload
        return evaluate(self.inner, payload, ctx)


class NullableSchema(_Wrapper, kind="nullable"):
    """Accepts ``None``."""

    @property
    def optional_in(self) -> bool:  # type: ignore[override]
        return self.inner.optional_in

    def _parse(self, payload: ParseResult, ctx: ParseContext) -> Any:
        if payload.value is None:
            return payload
        return evaluate(self.inner, payload, ctx)


def _default_value(value: Any) -> Any:
    if callable(value):
        return value()
    return copy.copy(value)


class DefaultSchema(_Wrapper, kind="default"):
    """Substitutes ``default_value`` for an absent value.

    The default is returned as-is, without evaluating the inner schema. A
    callable default is called for each substitution; other defaults are
    shallow-copied.
    """

    optional_in = True

    def __init__(self, inner: Schema, default_value: Any, *, checks: tuple = (), error: Any = None):
        super().__init__(inner, default_value=default_value, checks=checks, error=error)

    def _parse(self, payload: ParseResult, ctx: ParseContext) -> Any:
        if payload.value is MISSING:
            payload.value = _default_value(self._def["default_value"])
            return payload
        return evaluate(self.inner, payload, ctx)


class PrefaultSchema(_Wrapper, kind="prefault"):
    """Substitutes ``default_value`` for an absent value, then parses it."""

    optional_in = True

    def __init__(self, inner: Schema, default_value: Any, *, checks: tuple = (), error: Any = None):
        super().__init__(inner, default_value=default_value, checks=checks, error=error)

    def _parse(self, payload: ParseResult, ctx: ParseContext) -> Any:
        if payload.value is MISSING:
            payload.value = _default_value(self._def["default_value"])
        return evaluate(self.inner, payload, ctx)


class CatchSchema(_Wrapper, kind="catch"):
    """Replaces a failed inner result with ``catch_value``.

    A callable ``catch_value`` receives the input and the finalized
    ``SchemaValidationError`` of the inner schema.
    """

    def __init__(self, inner: Schema, catch_value: Any, *, checks: tuple = (), error: Any = None):
        super().__init__(inner, catch_value=catch_value, checks=checks, error=error)

    @property
    def optional_in(self) -> bool:  # type: ignore[override]
        return self.inner.optional_in

    def _parse(self, payload: ParseResult, ctx: ParseContext) -> Any:
        original = payload.value

        def recover(result: ParseResult) -> ParseResult:
            if not result.issues:
                payload.value = result.value
                return payload
            fallback = self._def["catch_value"]
            if callable(fallback):
                fallback = fallback(original, SchemaValidationError(finalize_issues(result.issues, ctx)))
            payload.value = fallback
            return payload

        return then(evaluate(self.inner, ParseResult(original), ctx), recover)


class ReadonlySchema(_Wrapper, kind="readonly"):
    """Freezes the inner output: dict -> MappingProxyType, list -> tuple, set -> frozenset."""

    @property
    def optional_in(self) -> bool:  # type: ignore[override]
        return self.inner.optional_in

    def _parse(self, payload: ParseResult, ctx: ParseContext) -> Any:
        def finish(result: ParseResult) -> ParseResult:
            if not result.issues:
                result.value = freeze(result.value)
            return result

        return then(evaluate(self.inner, payload, ctx), finish)


class TransformSchema(Schema, kind="transform"):
    """Maps any input through ``fn``.

    ``fn(value)`` returns the new value. A function declaring a second
    parameter receives a ``RefinementContext`` and may report issues with
    ``ctx.add_issue``. Coroutine functions need the asynchronous parse.
    """

    def __init__(self, fn: Callable[..., Any], *, checks: tuple = (), error: Any = None):
        if not callable(fn):
            raise DefinitionError("Transform requires a callable", context={"type": "transform"})
        self._wants_context = _accepts_context(fn)
        super().__init__(fn=fn, checks=checks, error=error)

    def _parse(self, payload: ParseResult, ctx: ParseContext) -> Any:
        fn = self._def["fn"]
        sink = RefinementContext(payload.value, self)
        output = fn(payload.value, sink) if self._wants_context else fn(payload.value)

        def finish(value: Any) -> ParseResult:
            payload.issues.extend(sink.issues)
            payload.value = value
            return payload

        if inspect.isawaitable(output):
            require_async(output, ctx, self.kind)
            return then(settle(output), finish)
        return finish(output)


class PipeSchema(Schema, kind="pipe"):
    """Feeds the output of ``source`` into ``target``."""

    def __init__(self, source: Schema, target: Schema, *, checks: tuple = (), error: Any = None):
        super().__init__(
            source=_require_schema(source, "source"),
            target=_require_schema(target, "target"),
            checks=checks,
            error=error,
        )

    @property
    def source(self) -> Schema:
        return self._def["source"]

    @property
    def target(self) -> Schema:
        return self._def["target"]

    @property
    def optional_in(self) -> bool:  # type: ignore[override]
        return self.source.optional_in

    def _parse(self, payload: ParseResult, ctx: ParseContext) -> Any:
        def forward(result: ParseResult) -> Any:
            if result.issues:
                return result
            return evaluate(self.target, result, ctx)

        return then(evaluate(self.source, payload, ctx), forward)


class LazySchema(Schema, kind="lazy"):
    """Defers building the inner schema until first evaluation.

    The getter runs once; its schema is cached on the node. This is how
    recursive schemas reference themselves.
    """

    def __init__(self, getter: Callable[[], Schema], *, name: str | None = None, checks: tuple = (), error: Any = None):
        if not callable(getter):
            raise DefinitionError("Lazy schema requires a callable", context={"type": "lazy"})
        self._resolved: Schema | None = None
        super().__init__(getter=getter, name=name, checks=checks, error=error)

    @property
    def inner(self) -> Schema:
        if self._resolved is None:
            resolved = self._def["getter"]()
            self._resolved = _require_schema(resolved, "lazy getter result")
            logger.debug(f"Resolved lazy schema {self._def.get('name') or hex(id(self))}")
        return self._resolved

    @property
    def optional_in(self) -> bool:  # type: ignore[override]
        return self.inner.optional_in

    def _parse(self, payload: ParseResult, ctx: ParseContext) -> Any:
        return evaluate(self.inner, payload, ctx)


class PromiseSchema(_Wrapper, kind="promise"):
    """Awaits an awaitable input, then validates the result with ``inner``.

    Non-awaitable inputs are validated directly.
    """

    def _parse(self, payload: ParseResult, ctx: ParseContext) -> Any:
        if not inspect.isawaitable(payload.value):
            return evaluate(self.inner, payload, ctx)
        require_async(payload.value, ctx, self.kind)
        return self._resolve(payload, ctx)

    async def _resolve(self, payload: ParseResult, ctx: ParseContext) -> ParseResult:
        payload.value = await payload.value
        return await settle(evaluate(self.inner, payload, ctx))


class CustomSchema(Schema, kind="custom"):
    """Accepts values for which ``fn`` returns a truthy result.

    Without ``fn`` every value is accepted. ``fn`` may be a coroutine
    function.
    """

    def __init__(
        self,
        fn: Callable[[Any], Any] | None = None,
        *,
        params: dict[str, Any] | None = None,
        checks: tuple = (),
        error: Any = None,
    ):
        super().__init__(fn=fn, params=params, checks=checks, error=error)

    def _parse(self, payload: ParseResult, ctx: ParseContext) -> Any:
        fn = self._def["fn"]
        if fn is None:
            return payload

        def conclude(verdict: Any) -> ParseResult:
            if not verdict:
                payload.add_issue(CustomIssue(
                    params=dict(self._def.get("params") or {}), input=payload.value, source=self,
                ))
            return payload

        verdict = fn(payload.value)
        if inspect.isawaitable(verdict):
            require_async(verdict, ctx, self.kind)
            return then(settle(verdict), conclude)
        return conclude(verdict)
