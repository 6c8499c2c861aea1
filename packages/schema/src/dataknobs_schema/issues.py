"""Issue records describing individual validation failures.

Issues are immutable. Evaluators create *raw* issues (no message, the
offending input attached, and a reference to the node or check that
produced them). ``resolution.finalize_issues`` turns them into final issues
once evaluation is over.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, ClassVar

from .utils import MISSING, plain

PathKey = str | int


class IssueCode(str, Enum):
    """Known issue codes. New codes may be added at any time."""

    INVALID_TYPE = "invalid_type"
    TOO_BIG = "too_big"
    TOO_SMALL = "too_small"
    INVALID_FORMAT = "invalid_format"
    NOT_MULTIPLE_OF = "not_multiple_of"
    UNRECOGNIZED_KEYS = "unrecognized_keys"
    INVALID_UNION = "invalid_union"
    INVALID_KEY = "invalid_key"
    INVALID_ELEMENT = "invalid_element"
    INVALID_VALUE = "invalid_value"
    CUSTOM = "custom"


_BASE_FIELDS = frozenset({"path", "message", "input", "source"})


@dataclass(frozen=True)
class Issue:
    """Base issue shared by every kind.

    Attributes:
        path: Keys and indices from the schema root to the failure site
        message: Resolved message; None on a raw issue
        input: Offending input, MISSING unless the caller asked for it
        source: Node or check that produced the issue (raw issues only)
    """

    code: ClassVar[str] = "unknown"
    # Fields holding nested issues: "flat" is a tuple of issues, "grouped"
    # a tuple of issue tuples.
    nested: ClassVar[dict[str, str]] = {}

    path: tuple[PathKey, ...] = ()
    message: str | None = None
    input: Any = field(default=MISSING, compare=False)
    source: Any = field(default=None, compare=False, repr=False)

    def with_prefix(self, *keys: PathKey) -> Issue:
        """Return a copy whose path is prefixed with ``keys``."""
        if not keys:
            return self
        return replace(self, path=(*keys, *self.path))

    def extra(self) -> dict[str, Any]:
        """Kind-specific fields, by name."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name not in _BASE_FIELDS
        }

    def to_dict(self) -> dict[str, Any]:
        """Render the issue in its wire shape.

        Returns:
            ``{code, path, message, input?, ...kind-specific fields}``
        """
        data: dict[str, Any] = {
            "code": self.code,
            "path": list(self.path),
            "message": self.message,
        }
        if self.input is not MISSING:
            data["input"] = self.input
        for name, value in self.extra().items():
            shape = self.nested.get(name)
            if shape == "flat":
                data[name] = [issue.to_dict() for issue in value]
            elif shape == "grouped":
                data[name] = [[issue.to_dict() for issue in group] for group in value]
            else:
                data[name] = plain(value)
        return data


@dataclass(frozen=True)
class InvalidTypeIssue(Issue):
    code: ClassVar[str] = IssueCode.INVALID_TYPE.value

    expected: str = "unknown"
    received: str = "unknown"


@dataclass(frozen=True)
class TooBigIssue(Issue):
    code: ClassVar[str] = IssueCode.TOO_BIG.value

    origin: str = "value"
    maximum: Any = None
    inclusive: bool = True
    exact: bool = False


@dataclass(frozen=True)
class TooSmallIssue(Issue):
    code: ClassVar[str] = IssueCode.TOO_SMALL.value

    origin: str = "value"
    minimum: Any = None
    inclusive: bool = True
    exact: bool = False


@dataclass(frozen=True)
class InvalidFormatIssue(Issue):
    code: ClassVar[str] = IssueCode.INVALID_FORMAT.value

    format: str = "regex"
    pattern: str | None = None
    prefix: str | None = None
    suffix: str | None = None
    includes: str | None = None


@dataclass(frozen=True)
class NotMultipleOfIssue(Issue):
    code: ClassVar[str] = IssueCode.NOT_MULTIPLE_OF.value

    divisor: Any = None


@dataclass(frozen=True)
class UnrecognizedKeysIssue(Issue):
    code: ClassVar[str] = IssueCode.UNRECOGNIZED_KEYS.value

    keys: tuple[Any, ...] = ()


@dataclass(frozen=True)
class InvalidUnionIssue(Issue):
    """No union branch accepted the input.

    ``errors`` keeps one tuple of issues per branch, in branch order. Paths
    inside it are relative to the union's own position.
    """

    code: ClassVar[str] = IssueCode.INVALID_UNION.value
    nested: ClassVar[dict[str, str]] = {"errors": "grouped"}

    errors: tuple[tuple[Issue, ...], ...] = ()
    note: str | None = None
    discriminator: str | None = None


@dataclass(frozen=True)
class InvalidKeyIssue(Issue):
    code: ClassVar[str] = IssueCode.INVALID_KEY.value
    nested: ClassVar[dict[str, str]] = {"issues": "flat"}

    origin: str = "record"
    issues: tuple[Issue, ...] = ()


@dataclass(frozen=True)
class InvalidElementIssue(Issue):
    code: ClassVar[str] = IssueCode.INVALID_ELEMENT.value
    nested: ClassVar[dict[str, str]] = {"issues": "flat"}

    origin: str = "map"
    key: Any = None
    issues: tuple[Issue, ...] = ()


@dataclass(frozen=True)
class InvalidValueIssue(Issue):
    code: ClassVar[str] = IssueCode.INVALID_VALUE.value

    values: tuple[Any, ...] = ()


@dataclass(frozen=True)
class CustomIssue(Issue):
    code: ClassVar[str] = IssueCode.CUSTOM.value

    params: dict[str, Any] = field(default_factory=dict, compare=False)

