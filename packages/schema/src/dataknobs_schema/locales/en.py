"""English messages."""

from __future__ import annotations

from typing import Any

from ..utils import parsed_type, stringify

_NOUNS = {
    "regex": "input",
    "email": "email address",
    "url": "URL",
    "uuid": "UUID",
    "ipv4": "IPv4 address",
    "ipv6": "IPv6 address",
    "cidrv4": "IPv4 range",
    "cidrv6": "IPv6 range",
    "iso_datetime": "ISO datetime",
    "iso_date": "ISO date",
    "iso_time": "ISO time",
    "base64": "base64-encoded string",
    "hex": "hexadecimal string",
    "hostname": "hostname",
}

_UNITS = {
    "string": "characters",
    "bytes": "bytes",
    "array": "items",
    "set": "items",
    "map": "entries",
}


def _bound(issue: Any, limit: Any, inclusive: bool, above: bool) -> str:
    if issue.exact:
        relation = "exactly "
    elif above:
        relation = "<=" if inclusive else "<"
    else:
        relation = ">=" if inclusive else ">"
    kind = "big" if above else "small"
    subject = issue.origin or "value"
    unit = _UNITS.get(issue.origin)
    if unit:
        return f"Too {kind}: expected {subject} to have {relation}{limit} {unit}"
    return f"Too {kind}: expected {subject} to be {relation}{stringify(limit)}"


def _format(issue: Any) -> str:
    fmt = issue.format
    if fmt == "starts_with":
        return f'Invalid string: must start with "{issue.prefix}"'
    if fmt == "ends_with":
        return f'Invalid string: must end with "{issue.suffix}"'
    if fmt == "includes":
        return f'Invalid string: must include "{issue.includes}"'
    if fmt == "regex":
        return f"Invalid string: must match pattern {issue.pattern}"
    if fmt in ("lowercase", "uppercase"):
        return f"Invalid string: must be {fmt}"
    return f"Invalid {_NOUNS.get(fmt, fmt)}"


def error(issue: Any) -> str | None:
    """Message for ``issue``; None for codes this locale does not know."""
    code = issue.code
    if code == "invalid_type":
        received = issue.received or parsed_type(issue.input)
        return f"Invalid input: expected {issue.expected}, received {received}"
    if code == "invalid_value":
        if len(issue.values) == 1:
            return f"Invalid input: expected {stringify(issue.values[0])}"
        options = "|".join(stringify(value) for value in issue.values)
        return f"Invalid option: expected one of {options}"
    if code == "too_big":
        return _bound(issue, issue.maximum, issue.inclusive, above=True)
    if code == "too_small":
        return _bound(issue, issue.minimum, issue.inclusive, above=False)
    if code == "invalid_format":
        return _format(issue)
    if code == "not_multiple_of":
        return f"Invalid number: must be a multiple of {issue.divisor}"
    if code == "unrecognized_keys":
        plural = "s" if len(issue.keys) > 1 else ""
        keys = ", ".join(f'"{key}"' for key in issue.keys)
        return f"Unrecognized key{plural}: {keys}"
    if code == "invalid_key":
        return f"Invalid key in {issue.origin}"
    if code == "invalid_union":
        return "Invalid input"
    if code == "invalid_element":
        return f"Invalid value in {issue.origin}"
    if code == "custom":
        return "Invalid input"
    return None
