"""Format nodes: schemas that are also checks.

``email()`` is a string schema whose first check is itself; the same object
can be attached to another string schema with ``add_check``. The definition
carries both tags (``type: string`` and ``check: string_format``) plus the
``format`` name.

Example:
    ```python
    from dataknobs_schema import email, string

    email().parse("ada@example.com")
    string().min(5).add_check(email())
    string().with_format("uuid")
    ```
"""

from __future__ import annotations

import ipaddress
import re
from datetime import date
from typing import Any, ClassVar
from urllib.parse import urlsplit

from .checks import Check, StringFormat
from .exceptions import DefinitionError
from .issues import InvalidFormatIssue, InvalidTypeIssue, Issue
from .primitives import NumberSchema, StringSchema
from .result import ParseContext, ParseResult
from .utils import parsed_type


class FormatSchema(StringSchema, StringFormat):
    """String schema checking one named format."""

    format_name: ClassVar[str] = ""

    def __init__(self, *, checks: tuple = (), error: Any = None, abort: bool = False, **fields: Any):
        super().__init__(checks=checks, error=error, format=self.format_name, abort=abort, **fields)


class RegexFormat(FormatSchema):
    """Format defined by a regular expression matched against the whole string."""

    pattern: ClassVar[re.Pattern[str]]

    def matches(self, value: str) -> bool:
        return self.pattern.fullmatch(value) is not None

    def format_issue(self, value: Any) -> Issue:
        return InvalidFormatIssue(format=self.format, pattern=self.pattern.pattern, input=value, source=self)


class EmailFormat(RegexFormat):
    format_name = "email"
    pattern = re.compile(
        r"(?!\.)(?!.*\.\.)[A-Za-z0-9_'+\-.]*[A-Za-z0-9_+-]@(?:[A-Za-z0-9][A-Za-z0-9\-]*\.)+[A-Za-z]{2,}"
    )


class UuidFormat(RegexFormat):
    """RFC 9562 UUID (versions 1-8) plus the nil and max UUIDs."""

    format_name = "uuid"
    pattern = re.compile(
        r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[1-8][0-9a-fA-F]{3}-[89abAB][0-9a-fA-F]{3}-[0-9a-fA-F]{12}"
        r"|00000000-0000-0000-0000-000000000000"
        r"|[fF]{8}-[fF]{4}-[fF]{4}-[fF]{4}-[fF]{12}"
    )


class Base64Format(RegexFormat):
    format_name = "base64"
    pattern = re.compile(r"(?:[0-9a-zA-Z+/]{4})*(?:[0-9a-zA-Z+/]{2}==|[0-9a-zA-Z+/]{3}=)?")


class HexFormat(RegexFormat):
    format_name = "hex"
    pattern = re.compile(r"[0-9a-fA-F]*")


class HostnameFormat(RegexFormat):
    format_name = "hostname"
    pattern = re.compile(
        r"(?=.{1,253}\.?$)[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
        r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*\.?"
    )


class IsoTimeFormat(RegexFormat):
    """``HH:MM[:SS[.fff]]`` without offset."""

    format_name = "iso_time"
    pattern = re.compile(r"(?:[01]\d|2[0-3]):[0-5]\d(?::[0-5]\d(?:\.\d+)?)?")


def _valid_calendar_date(text: str) -> bool:
    try:
        date.fromisoformat(text)
    except ValueError:
        return False
    return True


class IsoDateFormat(RegexFormat):
    """``YYYY-MM-DD`` naming a real calendar day."""

    format_name = "iso_date"
    pattern = re.compile(r"\d{4}-\d{2}-\d{2}")

    def matches(self, value: str) -> bool:
        return super().matches(value) and _valid_calendar_date(value)


class IsoDateTimeFormat(RegexFormat):
    """``YYYY-MM-DDTHH:MM[:SS[.fff]]`` with an optional ``Z`` or numeric offset."""

    format_name = "iso_datetime"
    pattern = re.compile(
        r"\d{4}-\d{2}-\d{2}T(?:[01]\d|2[0-3]):[0-5]\d(?::[0-5]\d(?:\.\d+)?)?(?:Z|[+-](?:[01]\d|2[0-3]):?[0-5]\d)?"
    )

    def matches(self, value: str) -> bool:
        return super().matches(value) and _valid_calendar_date(value[:10])


class UrlFormat(FormatSchema):
    """Absolute URL with a scheme and a host."""

    format_name = "url"

    def matches(self, value: str) -> bool:
        try:
            parts = urlsplit(value)
        except ValueError:
            return False
        return bool(parts.scheme and parts.netloc) and not any(c.isspace() for c in value)


class _AddressFormat(FormatSchema):
    factory: ClassVar[Any]
    needs_prefix = False

    def matches(self, value: str) -> bool:
        if self.needs_prefix != ("/" in value):
            return False
        try:
            self.factory(value)
        except ValueError:
            return False
        return True


class Ipv4Format(_AddressFormat):
    format_name = "ipv4"
    factory = ipaddress.IPv4Address


class Ipv6Format(_AddressFormat):
    format_name = "ipv6"
    factory = ipaddress.IPv6Address


class Cidrv4Format(_AddressFormat):
    format_name = "cidrv4"
    needs_prefix = True

    @staticmethod
    def factory(value: str) -> Any:
        return ipaddress.IPv4Network(value, strict=False)


class Cidrv6Format(_AddressFormat):
    format_name = "cidrv6"
    needs_prefix = True

    @staticmethod
    def factory(value: str) -> Any:
        return ipaddress.IPv6Network(value, strict=False)


STRING_FORMATS: dict[str, type[FormatSchema]] = {
    cls.format_name: cls
    for cls in (
        EmailFormat,
        UrlFormat,
        UuidFormat,
        Ipv4Format,
        Ipv6Format,
        Cidrv4Format,
        Cidrv6Format,
        IsoDateTimeFormat,
        IsoDateFormat,
        IsoTimeFormat,
        Base64Format,
        HexFormat,
        HostnameFormat,
    )
}


def string_format(name: str, *, error: Any = None, abort: bool = False) -> FormatSchema:
    """Build the format node registered under ``name``.

    Raises:
        DefinitionError: If no format has that name
    """
    cls = STRING_FORMATS.get(name)
    if cls is None:
        raise DefinitionError(
            f"Unknown string format: {name}",
            context={"format": name, "available": sorted(STRING_FORMATS)},
        )
    return cls(error=error, abort=abort)


class IntegerFormat(NumberSchema, Check):
    """Number that must be an ``int`` (``bool`` and ``float`` are rejected).

    As a check on a number schema it reports ``invalid_type`` with
    ``expected="int"``.
    """

    check_tag = "number_format"

    def __init__(self, *, coerce: bool = False, checks: tuple = (), error: Any = None, abort: bool = False):
        super().__init__(coerce=coerce, checks=checks, error=error, format="int", abort=abort)

    @property
    def format(self) -> str:
        return self._def["format"]

    def check(self, value: Any, ctx: ParseContext) -> ParseResult:
        result = ParseResult.success(value)
        if not isinstance(value, int):
            result.add_issue(InvalidTypeIssue(
                expected="int", received=parsed_type(value), input=value, source=self,
            ))
        return result
