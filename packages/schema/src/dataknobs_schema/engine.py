"""Evaluation engine and top-level parse operations.

``evaluate(node, payload, ctx)`` dispatches on the node's kind tag through
the kind table, then runs the node's checks in attachment order. Evaluators
and checks may hand back awaitables: a synchronous parse rejects them with
``AsyncRequiredError``, an asynchronous parse awaits them. Siblings inside
one structural node are awaited together and joined in positional order,
so issue order never depends on completion order.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Sequence
from typing import TYPE_CHECKING, Any

from .exceptions import AsyncRequiredError, SchemaValidationError
from .kinds import get_evaluator
from .resolution import finalize_issues
from .result import ParseContext, ParseResult, SafeParseResult

if TYPE_CHECKING:
    from .schema import Schema

Outcome = ParseResult | Awaitable[ParseResult]


def require_async(pending: Any, ctx: ParseContext, kind: str) -> None:
    """Reject an awaitable reached from a synchronous parse."""
    if ctx.is_async:
        return
    close = getattr(pending, "close", None)
    if callable(close):
        close()
    raise AsyncRequiredError(kind)


async def settle(outcome: Any) -> Any:
    """Await ``outcome`` if needed."""
    if inspect.isawaitable(outcome):
        return await outcome
    return outcome


def then(outcome: Any, callback: Callable[[Any], Any]) -> Any:
    """Apply ``callback`` to an outcome, now or once it is awaited."""
    if inspect.isawaitable(outcome):
        return _then_async(outcome, callback)
    return callback(outcome)


async def _then_async(pending: Awaitable[Any], callback: Callable[[Any], Any]) -> Any:
    return await settle(callback(await pending))


def evaluate(node: Schema, payload: ParseResult, ctx: ParseContext) -> Outcome:
    """Evaluate a node against the value held by ``payload``.

    Args:
        node: Schema node
        payload: Payload holding the input value
        ctx: Context of the parse call

    Returns:
        The payload holding the output value and raw issues, or an
        awaitable of it (asynchronous parses only)
    """
    outcome = get_evaluator(node.kind)(node, payload, ctx)
    if inspect.isawaitable(outcome):
        require_async(outcome, ctx, node.kind)
        return _then_async(outcome, lambda done: run_checks(node, done, ctx))
    return run_checks(node, outcome, ctx)


def run_checks(node: Schema, payload: ParseResult, ctx: ParseContext) -> Outcome:
    """Run the checks of ``node`` once its structural evaluation succeeded.

    Every check runs even when an earlier one failed, unless the failing
    check has ``abort`` set or the call asked for ``abort_early``.
    """
    if payload.issues:
        return payload
    checks = node.all_checks
    if not checks:
        return payload
    return _run_checks_from(checks, 0, payload, ctx)


def _run_checks_from(checks: Sequence[Any], start: int, payload: ParseResult, ctx: ParseContext) -> Outcome:
    for index in range(start, len(checks)):
        check = checks[index]
        before = len(payload.issues)
        outcome = check.run(payload, ctx)
        if inspect.isawaitable(outcome):
            require_async(outcome, ctx, check.check_kind)
            return _resume_checks(checks, index, outcome, before, payload, ctx)
        if _halts(check, payload, before, ctx):
            break
    return payload


async def _resume_checks(
    checks: Sequence[Any],
    index: int,
    pending: Awaitable[Any],
    before: int,
    payload: ParseResult,
    ctx: ParseContext,
) -> ParseResult:
    await pending
    if _halts(checks[index], payload, before, ctx):
        return payload
    return await settle(_run_checks_from(checks, index + 1, payload, ctx))


def _halts(check: Any, payload: ParseResult, before: int, ctx: ParseContext) -> bool:
    return len(payload.issues) > before and (check.abort or ctx.abort_early)


def evaluate_items(
    items: Sequence[tuple[Schema, Any]],
    ctx: ParseContext,
) -> list[ParseResult] | Awaitable[list[ParseResult]]:
    """Evaluate child positions of a structural node.

    Every position is evaluated, even after a failure, unless the call asked
    for ``abort_early``; then evaluation stops after the first failing
    position and the returned list is shorter than ``items``.

    Args:
        items: (child node, child input) pairs in declared order

    Returns:
        One payload per evaluated position, in declared order, or an
        awaitable of that list
    """
    results: list[Any] = []
    for position, (node, value) in enumerate(items):
        outcome = evaluate(node, ParseResult(value), ctx)
        if inspect.isawaitable(outcome):
            if ctx.abort_early:
                return _evaluate_in_order(items, position, outcome, results, ctx)
            results.append(outcome)
            continue
        results.append(outcome)
        if ctx.abort_early and outcome.issues:
            break
    if any(inspect.isawaitable(result) for result in results):
        return gather_outcomes(results)
    return results


async def gather_outcomes(results: list[Any]) -> list[ParseResult]:
    """Await the pending entries of ``results`` together, in place."""
    pending = [(index, result) for index, result in enumerate(results) if inspect.isawaitable(result)]
    settled = await asyncio.gather(*(result for _, result in pending))
    for (index, _), result in zip(pending, settled):
        results[index] = result
    return results


async def _evaluate_in_order(
    items: Sequence[tuple[Schema, Any]],
    position: int,
    pending: Awaitable[ParseResult],
    results: list[Any],
    ctx: ParseContext,
) -> list[ParseResult]:
    result = await pending
    results.append(result)
    if result.issues:
        return results
    for node, value in items[position + 1:]:
        result = await settle(evaluate(node, ParseResult(value), ctx))
        results.append(result)
        if result.issues:
            break
    return results


def _conclude(payload: ParseResult, ctx: ParseContext) -> SafeParseResult:
    if not payload.issues:
        return SafeParseResult(success=True, value=payload.value)
    return SafeParseResult(
        success=False,
        error=SchemaValidationError(finalize_issues(payload.issues, ctx)),
    )


def safe_parse(
    schema: Schema,
    value: Any,
    *,
    error: Any = None,
    report_input: bool = False,
    abort_early: bool = False,
) -> SafeParseResult:
    """Validate ``value`` without raising for validation failures.

    Args:
        schema: Schema to validate against
        value: Input value
        error: Per-call message provider (string or callable)
        report_input: Keep offending inputs on the reported issues
        abort_early: Stop each node at its first issue

    Returns:
        SafeParseResult with either the output value or the aggregate error

    Raises:
        AsyncRequiredError: If the schema needs an asynchronous parse
    """
    ctx = ParseContext(error=error, report_input=report_input, abort_early=abort_early)
    return _conclude(evaluate(schema, ParseResult(value), ctx), ctx)


def parse(
    schema: Schema,
    value: Any,
    *,
    error: Any = None,
    report_input: bool = False,
    abort_early: bool = False,
) -> Any:
    """Validate ``value`` and return the output value.

    Raises:
        SchemaValidationError: With every issue found, if validation fails
        AsyncRequiredError: If the schema needs an asynchronous parse
    """
    result = safe_parse(schema, value, error=error, report_input=report_input, abort_early=abort_early)
    if not result.success:
        raise result.error
    return result.value


async def safe_parse_async(
    schema: Schema,
    value: Any,
    *,
    error: Any = None,
    report_input: bool = False,
    abort_early: bool = False,
) -> SafeParseResult:
    """Asynchronous ``safe_parse``; awaits asynchronous nodes."""
    ctx = ParseContext(
        error=error,
        report_input=report_input,
        abort_early=abort_early,
        is_async=True,
    )
    payload = await settle(evaluate(schema, ParseResult(value), ctx))
    return _conclude(payload, ctx)


async def parse_async(
    schema: Schema,
    value: Any,
    *,
    error: Any = None,
    report_input: bool = False,
    abort_early: bool = False,
) -> Any:
    """Asynchronous ``parse``; awaits asynchronous nodes."""
    result = await safe_parse_async(
        schema, value, error=error, report_input=report_input, abort_early=abort_early
    )
    if not result.success:
        raise result.error
    return result.value
