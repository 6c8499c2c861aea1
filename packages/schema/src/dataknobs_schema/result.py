"""Result types shared by the engine, the nodes and the checks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .exceptions import SchemaValidationError
    from .issues import Issue, PathKey


@dataclass
class ParseResult:
    """Mutable payload carried through one evaluation.

    Every node evaluator receives a payload holding the input value and
    returns it holding the output value plus any raw issues found. Checks
    return a payload as well, so their outcome can be merged into the
    node's.
    """

    value: Any
    issues: list[Issue] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.issues

    def __bool__(self) -> bool:
        """Allow 'if result:' usage to check validity."""
        return self.valid

    def add_issue(self, issue: Issue) -> ParseResult:
        """Add an issue (fluent API).

        Args:
            issue: Raw issue to append

        Returns:
            Self for chaining
        """
        self.issues.append(issue)
        return self

    def absorb(self, other: ParseResult, *keys: PathKey) -> ParseResult:
        """Append the issues of a child evaluation, prefixed with ``keys``.

        Args:
            other: Child payload
            *keys: Path segments locating the child inside this value

        Returns:
            Self for chaining
        """
        if keys:
            self.issues.extend(issue.with_prefix(*keys) for issue in other.issues)
        else:
            self.issues.extend(other.issues)
        return self

    def merge(self, other: ParseResult) -> ParseResult:
        """Take over the value and issues of a check outcome.

        Args:
            other: Payload produced by a check

        Returns:
            Self for chaining
        """
        if other is not self:
            self.value = other.value
            self.issues.extend(other.issues)
        return self

    @classmethod
    def success(cls, value: Any) -> ParseResult:
        return cls(value=value)

    @classmethod
    def failure(cls, value: Any, issues: list[Issue]) -> ParseResult:
        return cls(value=value, issues=list(issues))


@dataclass(frozen=True)
class ParseContext:
    """Call-scoped configuration of one parse invocation.

    Attributes:
        error: Per-call message provider (string or callable)
        report_input: Keep offending input values on finalized issues
        abort_early: Stop each node at its first issue
        is_async: Whether awaitable nodes may be awaited
    """

    error: Any = None
    report_input: bool = False
    abort_early: bool = False
    is_async: bool = False


@dataclass(frozen=True)
class SafeParseResult:
    """Tagged outcome of ``safe_parse`` / ``safe_parse_async``.

    Exactly one of ``value`` (on success) and ``error`` (on failure) is
    meaningful.
    """

    success: bool
    value: Any = None
    error: SchemaValidationError | None = None

    def __bool__(self) -> bool:
        return self.success

    @property
    def issues(self) -> tuple[Issue, ...]:
        return self.error.issues if self.error is not None else ()
