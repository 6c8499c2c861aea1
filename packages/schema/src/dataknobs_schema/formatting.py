"""Renderings of a ``SchemaValidationError`` for display.

Only an issue's ``path`` and ``message`` are used, so issues of unknown
codes render like any other.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Sequence
from typing import Any

from .exceptions import SchemaValidationError
from .issues import Issue, PathKey

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def _issues_of(error: SchemaValidationError | Iterable[Issue]) -> tuple[Issue, ...]:
    if isinstance(error, SchemaValidationError):
        return error.issues
    return tuple(error)


def flatten_error(error: SchemaValidationError | Iterable[Issue]) -> dict[str, Any]:
    """Group messages by the first path key.

    Returns:
        ``{"form_errors": [...], "field_errors": {key: [...]}}`` where form
        errors are the issues reported at the root
    """
    form_errors: list[str] = []
    field_errors: dict[PathKey, list[str]] = {}
    for issue in _issues_of(error):
        if issue.path:
            field_errors.setdefault(issue.path[0], []).append(issue.message or "")
        else:
            form_errors.append(issue.message or "")
    return {"form_errors": form_errors, "field_errors": field_errors}


def _empty_node() -> dict[str, Any]:
    return {"errors": []}


def _place(tree: dict[str, Any], path: Sequence[PathKey], message: str) -> None:
    node = tree
    for key in path:
        if isinstance(key, int):
            items = node.setdefault("items", [])
            while len(items) <= key:
                items.append(None)
            if items[key] is None:
                items[key] = _empty_node()
            node = items[key]
        else:
            node = node.setdefault("properties", {}).setdefault(key, _empty_node())
    node["errors"].append(message)


def _collect(tree: dict[str, Any], issues: Iterable[Issue], prefix: tuple[PathKey, ...]) -> None:
    for issue in issues:
        path = (*prefix, *issue.path)
        errors = getattr(issue, "errors", None)
        nested = getattr(issue, "issues", None)
        if errors:
            for branch in errors:
                _collect(tree, branch, path)
        elif nested:
            _collect(tree, nested, path)
        else:
            _place(tree, path, issue.message or "")


def tree_error(error: SchemaValidationError | Iterable[Issue]) -> dict[str, Any]:
    """Nest messages following the issue paths.

    Object keys go under ``properties``, sequence positions under ``items``
    (a list, ``None`` where a position has no errors). Union, key and
    element issues contribute the messages of the issues they wrap.
    """
    tree = _empty_node()
    _collect(tree, _issues_of(error), ())
    return tree


def format_path(path: Sequence[PathKey]) -> str:
    """Render a path as ``user.tags[0]["first name"]``."""
    parts: list[str] = []
    for key in path:
        if isinstance(key, int):
            parts.append(f"[{key}]")
        elif _IDENTIFIER.fullmatch(key):
            parts.append(f".{key}" if parts else key)
        else:
            parts.append(f"[{json.dumps(key)}]")
    return "".join(parts)


def prettify_error(error: SchemaValidationError | Iterable[Issue]) -> str:
    """Human-readable listing, shallowest paths first."""
    lines: list[str] = []
    for issue in sorted(_issues_of(error), key=lambda issue: len(issue.path)):
        lines.append(f"✖ {issue.message or ''}")
        if issue.path:
            lines.append(f"  → at {format_path(issue.path)}")
    return "\n".join(lines)
