"""Check nodes: refinements and mutations run after structural validation.

A check inspects a value whose shape is already known to be right and
returns a ``ParseResult`` carrying the (possibly replaced) value and any
issues. Checks never change the statically inferred type of a value, only
the runtime constraints on it. Their definitions are introspectable so that
tools can enumerate constraints without running them.
"""

from __future__ import annotations

import inspect
import math
import re
from abc import ABC, abstractmethod
from collections.abc import Mapping, Set
from dataclasses import replace
from datetime import date, datetime, time
from decimal import Decimal
from re import Pattern as RegexPattern
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from .engine import require_async
from .exceptions import DefinitionError
from .issues import (
    CustomIssue,
    InvalidFormatIssue,
    Issue,
    NotMultipleOfIssue,
    TooBigIssue,
    TooSmallIssue,
)
from .result import ParseContext, ParseResult
from .utils import is_number, plain

if TYPE_CHECKING:
    from collections.abc import Callable

    from .issues import PathKey


def definition_to_dict(definition: Mapping[str, Any]) -> dict[str, Any]:
    """Render a node definition as JSON-compatible data.

    Callables and unset optional fields are omitted.
    """
    data: dict[str, Any] = {}
    for key, value in definition.items():
        if value is None or callable(value) and not hasattr(value, "to_dict"):
            continue
        if key == "checks" and not value:
            continue
        if key == "abort" and value is False:
            continue
        data[key] = plain(value)
    return data


class Check(ABC):
    """Base class for all checks.

    Subclasses implement ``check``. The engine calls ``run``, which merges
    the outcome into the node's payload; format nodes that are schemas and
    checks at once go through the same adapter.
    """

    check_tag = "check"

    def __init__(self, *, error: Any = None, abort: bool = False, **fields: Any):
        """Initialize the check.

        Args:
            error: Message provider for issues raised by this check
            abort: Skip the node's remaining checks when this one fails
            **fields: Kind-specific definition fields
        """
        self._def = MappingProxyType({"check": self.check_tag, **fields, "error": error, "abort": abort})

    @property
    def definition(self) -> Mapping[str, Any]:
        return self._def

    @property
    def check_kind(self) -> str:
        return self._def["check"]

    @property
    def error(self) -> Any:
        return self._def.get("error")

    @property
    def abort(self) -> bool:
        return bool(self._def.get("abort", False))

    @abstractmethod
    def check(self, value: Any, ctx: ParseContext) -> ParseResult | Any:
        """Validate an already parsed value.

        Args:
            value: Value produced by the node's structural evaluation
            ctx: Context of the parse call

        Returns:
            ParseResult with the possibly replaced value and any issues, or
            an awaitable of it
        """

    def run(self, payload: ParseResult, ctx: ParseContext) -> ParseResult | Any:
        """Run the check against a node payload and merge its outcome."""
        outcome = self.check(payload.value, ctx)
        if inspect.isawaitable(outcome):
            return self._merge_later(payload, outcome)
        return payload.merge(outcome)

    async def _merge_later(self, payload: ParseResult, pending: Any) -> ParseResult:
        return payload.merge(await pending)

    def to_dict(self) -> dict[str, Any]:
        return definition_to_dict(self._def)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_dict()!r})"


def _size_origin(value: Any) -> str:
    if isinstance(value, str):
        return "string"
    if isinstance(value, (bytes, bytearray)):
        return "bytes"
    if isinstance(value, Mapping):
        return "map"
    if isinstance(value, Set):
        return "set"
    return "array"


def _bound_origin(value: Any) -> str:
    if isinstance(value, (datetime, date)):
        return "date"
    return "number"


def _comparable(value: Any, bound: Any) -> tuple[Any, Any]:
    # A plain date on either side is read as midnight of that day.
    if isinstance(value, datetime) and type(bound) is date:
        return value, datetime.combine(bound, time.min, tzinfo=value.tzinfo)
    if isinstance(bound, datetime) and type(value) is date:
        return datetime.combine(value, time.min, tzinfo=bound.tzinfo), bound
    return value, bound


def _check_length_bound(name: str, bound: Any) -> int:
    if isinstance(bound, bool) or not isinstance(bound, int) or bound < 0:
        raise DefinitionError(
            f"{name} must be a non-negative integer: {bound!r}",
            context={"check": name, "value": bound},
        )
    return bound


class _LengthCheck(Check):
    """Shared logic of the length and size checks."""

    def __init__(self, bound: int, *, error: Any = None, abort: bool = False):
        field = "maximum" if self.check_tag.startswith("max") else "minimum"
        if self.check_tag.endswith("_equals"):
            field = "length" if self.check_tag.startswith("length") else "size"
        self._field = field
        super().__init__(error=error, abort=abort, **{field: _check_length_bound(self.check_tag, bound)})

    @property
    def bound(self) -> int:
        return self._def[self._field]

    def _has_size(self, value: Any) -> bool:
        return hasattr(value, "__len__")


class MinLength(_LengthCheck):
    """String or sequence length must be at least ``minimum``."""

    check_tag = "min_length"

    def check(self, value: Any, ctx: ParseContext) -> ParseResult:
        result = ParseResult.success(value)
        if self._has_size(value) and len(value) < self.bound:
            result.add_issue(TooSmallIssue(
                origin=_size_origin(value), minimum=self.bound, inclusive=True, input=value, source=self,
            ))
        return result


class MaxLength(_LengthCheck):
    """String or sequence length must be at most ``maximum``."""

    check_tag = "max_length"

    def check(self, value: Any, ctx: ParseContext) -> ParseResult:
        result = ParseResult.success(value)
        if self._has_size(value) and len(value) > self.bound:
            result.add_issue(TooBigIssue(
                origin=_size_origin(value), maximum=self.bound, inclusive=True, input=value, source=self,
            ))
        return result


class LengthEquals(_LengthCheck):
    """String or sequence length must equal ``length``."""

    check_tag = "length_equals"

    def check(self, value: Any, ctx: ParseContext) -> ParseResult:
        result = ParseResult.success(value)
        if not self._has_size(value) or len(value) == self.bound:
            return result
        origin = _size_origin(value)
        if len(value) > self.bound:
            issue: Issue = TooBigIssue(
                origin=origin, maximum=self.bound, inclusive=True, exact=True, input=value, source=self,
            )
        else:
            issue = TooSmallIssue(
                origin=origin, minimum=self.bound, inclusive=True, exact=True, input=value, source=self,
            )
        return result.add_issue(issue)


class MinSize(MinLength):
    """Set or mapping size must be at least ``minimum``."""

    check_tag = "min_size"


class MaxSize(MaxLength):
    """Set or mapping size must be at most ``maximum``."""

    check_tag = "max_size"


class SizeEquals(LengthEquals):
    """Set or mapping size must equal ``size``."""

    check_tag = "size_equals"


class GreaterThan(Check):
    """Value must be greater than (or equal to, when inclusive) ``value``."""

    check_tag = "greater_than"

    def __init__(self, value: Any, inclusive: bool = False, *, error: Any = None, abort: bool = False):
        if value is None or isinstance(value, float) and math.isnan(value):
            raise DefinitionError(f"Invalid lower bound: {value!r}", context={"check": self.check_tag})
        super().__init__(error=error, abort=abort, value=value, inclusive=inclusive)

    def check(self, value: Any, ctx: ParseContext) -> ParseResult:
        bound = self._def["value"]
        inclusive = self._def["inclusive"]
        result = ParseResult.success(value)
        left, right = _comparable(value, bound)
        if left >= right if inclusive else left > right:
            return result
        return result.add_issue(TooSmallIssue(
            origin=_bound_origin(value), minimum=bound, inclusive=inclusive, input=value, source=self,
        ))


class LessThan(Check):
    """Value must be less than (or equal to, when inclusive) ``value``."""

    check_tag = "less_than"

    def __init__(self, value: Any, inclusive: bool = False, *, error: Any = None, abort: bool = False):
        if value is None or isinstance(value, float) and math.isnan(value):
            raise DefinitionError(f"Invalid upper bound: {value!r}", context={"check": self.check_tag})
        super().__init__(error=error, abort=abort, value=value, inclusive=inclusive)

    def check(self, value: Any, ctx: ParseContext) -> ParseResult:
        bound = self._def["value"]
        inclusive = self._def["inclusive"]
        result = ParseResult.success(value)
        left, right = _comparable(value, bound)
        if left <= right if inclusive else left < right:
            return result
        return result.add_issue(TooBigIssue(
            origin=_bound_origin(value), maximum=bound, inclusive=inclusive, input=value, source=self,
        ))


class MultipleOf(Check):
    """Number must be an integer multiple of ``value``."""

    check_tag = "multiple_of"

    def __init__(self, value: int | float, *, error: Any = None, abort: bool = False):
        if not is_number(value) or value <= 0:
            raise DefinitionError(
                f"multiple_of requires a positive number: {value!r}",
                context={"check": self.check_tag, "value": value},
            )
        super().__init__(error=error, abort=abort, value=value)

    def check(self, value: Any, ctx: ParseContext) -> ParseResult:
        divisor = self._def["value"]
        result = ParseResult.success(value)
        if isinstance(value, int) and isinstance(divisor, int):
            ok = value % divisor == 0
        else:
            # Decimal arithmetic keeps 0.3 a multiple of 0.1.
            ok = Decimal(str(value)) % Decimal(str(divisor)) == 0
        if not ok:
            result.add_issue(NotMultipleOfIssue(divisor=divisor, input=value, source=self))
        return result


class StringFormat(Check):
    """Base for checks reporting ``invalid_format`` on strings."""

    check_tag = "string_format"

    def __init__(self, format: str, *, error: Any = None, abort: bool = False, **fields: Any):
        super().__init__(error=error, abort=abort, format=format, **fields)

    @property
    def format(self) -> str:
        return self._def["format"]

    @abstractmethod
    def matches(self, value: str) -> bool:
        """Whether ``value`` has this format."""

    def format_issue(self, value: Any) -> Issue:
        return InvalidFormatIssue(format=self.format, input=value, source=self)

    def check(self, value: Any, ctx: ParseContext) -> ParseResult:
        result = ParseResult.success(value)
        if isinstance(value, str) and not self.matches(value):
            result.add_issue(self.format_issue(value))
        return result


class Regex(StringFormat):
    """String must match a regular expression (searched anywhere)."""

    def __init__(
        self,
        pattern: str | RegexPattern,
        *,
        format: str = "regex",
        error: Any = None,
        abort: bool = False,
    ):
        self.regex = re.compile(pattern) if isinstance(pattern, str) else pattern
        super().__init__(format, error=error, abort=abort, pattern=self.regex.pattern)

    def matches(self, value: str) -> bool:
        return self.regex.search(value) is not None

    def format_issue(self, value: Any) -> Issue:
        return InvalidFormatIssue(format=self.format, pattern=self.regex.pattern, input=value, source=self)


class LowerCase(Regex):
    def __init__(self, *, error: Any = None, abort: bool = False):
        super().__init__(r"^[^A-Z]*$", format="lowercase", error=error, abort=abort)


class UpperCase(Regex):
    def __init__(self, *, error: Any = None, abort: bool = False):
        super().__init__(r"^[^a-z]*$", format="uppercase", error=error, abort=abort)


class StartsWith(StringFormat):
    def __init__(self, prefix: str, *, error: Any = None, abort: bool = False):
        super().__init__("starts_with", error=error, abort=abort, prefix=prefix)

    def matches(self, value: str) -> bool:
        return value.startswith(self._def["prefix"])

    def format_issue(self, value: Any) -> Issue:
        return InvalidFormatIssue(format=self.format, prefix=self._def["prefix"], input=value, source=self)


class EndsWith(StringFormat):
    def __init__(self, suffix: str, *, error: Any = None, abort: bool = False):
        super().__init__("ends_with", error=error, abort=abort, suffix=suffix)

    def matches(self, value: str) -> bool:
        return value.endswith(self._def["suffix"])

    def format_issue(self, value: Any) -> Issue:
        return InvalidFormatIssue(format=self.format, suffix=self._def["suffix"], input=value, source=self)


class Includes(StringFormat):
    def __init__(self, includes: str, *, error: Any = None, abort: bool = False):
        super().__init__("includes", error=error, abort=abort, includes=includes)

    def matches(self, value: str) -> bool:
        return self._def["includes"] in value

    def format_issue(self, value: Any) -> Issue:
        return InvalidFormatIssue(format=self.format, includes=self._def["includes"], input=value, source=self)


_OVERWRITES: dict[str, Callable[[Any], Any]] = {
    "trim": lambda value: value.strip() if isinstance(value, str) else value,
    "to_lower": lambda value: value.lower() if isinstance(value, str) else value,
    "to_upper": lambda value: value.upper() if isinstance(value, str) else value,
}


class Overwrite(Check):
    """Replace the value without changing its type (e.g. trimming)."""

    check_tag = "overwrite"

    def __init__(self, fn: Callable[[Any], Any] | str, *, name: str | None = None):
        if isinstance(fn, str):
            if fn not in _OVERWRITES:
                raise DefinitionError(
                    f"Unknown overwrite: {fn}",
                    context={"check": self.check_tag, "available": sorted(_OVERWRITES)},
                )
            name, fn = fn, _OVERWRITES[fn]
        self.fn = fn
        super().__init__(name=name)

    def check(self, value: Any, ctx: ParseContext) -> ParseResult:
        return ParseResult.success(self.fn(value))


class RefinementContext:
    """Issue sink handed to ``super_refine`` callbacks and transforms."""

    def __init__(self, value: Any, source: Any):
        self.value = value
        self.issues: list[Issue] = []
        self._source = source

    def add_issue(
        self,
        issue: Issue | None = None,
        *,
        message: str | None = None,
        path: tuple[PathKey, ...] | list[PathKey] = (),
        **params: Any,
    ) -> None:
        """Report an issue.

        Args:
            issue: Issue to add as-is; a custom issue is built when omitted
            message: Explicit message (skips message resolution)
            path: Path relative to the node being refined
            **params: Extra data stored on the custom issue
        """
        if issue is None:
            issue = CustomIssue(
                path=tuple(path), message=message, params=params, input=self.value, source=self._source,
            )
        elif issue.source is None:
            issue = replace(issue, source=self._source)
        self.issues.append(issue)


class Refinement(Check):
    """Custom predicate; a falsy result reports a ``custom`` issue.

    The predicate may be a coroutine function, in which case only the
    asynchronous parse operations can evaluate it.
    """

    check_tag = "custom"

    def __init__(
        self,
        fn: Callable[[Any], Any],
        *,
        error: Any = None,
        abort: bool = False,
        path: tuple[PathKey, ...] | list[PathKey] = (),
        params: dict[str, Any] | None = None,
    ):
        self.fn = fn
        super().__init__(error=error, abort=abort, path=list(path) or None, params=params)

    def _issue(self, value: Any) -> Issue:
        return CustomIssue(
            path=tuple(self._def.get("path") or ()),
            params=dict(self._def.get("params") or {}),
            input=value,
            source=self,
        )

    def _conclude(self, value: Any, verdict: Any) -> ParseResult:
        result = ParseResult.success(value)
        if not verdict:
            result.add_issue(self._issue(value))
        return result

    def check(self, value: Any, ctx: ParseContext) -> ParseResult | Any:
        verdict = self.fn(value)
        if inspect.isawaitable(verdict):
            require_async(verdict, ctx, self.check_kind)
            return self._conclude_later(value, verdict)
        return self._conclude(value, verdict)

    async def _conclude_later(self, value: Any, pending: Any) -> ParseResult:
        return self._conclude(value, await pending)


class SuperRefinement(Check):
    """Callback reporting any number of issues through a RefinementContext."""

    check_tag = "custom"

    def __init__(self, fn: Callable[[Any, RefinementContext], Any], *, error: Any = None, abort: bool = False):
        self.fn = fn
        super().__init__(error=error, abort=abort)

    def check(self, value: Any, ctx: ParseContext) -> ParseResult | Any:
        sink = RefinementContext(value, self)
        done = self.fn(value, sink)
        if inspect.isawaitable(done):
            require_async(done, ctx, self.check_kind)
            return self._collect_later(value, sink, done)
        return ParseResult.failure(value, sink.issues)

    async def _collect_later(self, value: Any, sink: RefinementContext, pending: Any) -> ParseResult:
        await pending
        return ParseResult.failure(value, sink.issues)
