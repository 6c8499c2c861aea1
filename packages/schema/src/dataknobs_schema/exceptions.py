"""Exception hierarchy for dataknobs-schema.

Validation failures are data: evaluators report them as issues and never
raise. Exceptions are reserved for two situations:

- Programmer errors: malformed definitions, schema misuse, asynchronous
  nodes reached from a synchronous parse, registry conflicts.
- The throwing entry points (``parse`` / ``parse_async``), which translate an
  aggregate of issues into a raised ``SchemaValidationError``.

Example:
    ```python
    from dataknobs_schema import SchemaError, SchemaValidationError, string

    try:
        string().parse(42)
    except SchemaValidationError as e:
        for issue in e.issues:
            print(issue.path, issue.message)
    except SchemaError as e:
        logger.error(f"Schema misuse: {e} ({e.context})")
    ```
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from .utils import plain

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .issues import Issue


class SchemaError(Exception):
    """Base exception for all dataknobs-schema errors.

    Attributes:
        context: Dictionary containing contextual information about the error

    Args:
        message: Human-readable error message
        context: Optional dictionary with error context
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}


class DefinitionError(SchemaError):
    """Raised when a node definition is malformed or a schema is misused.

    Example:
        ```python
        raise DefinitionError(
            "min length cannot be negative",
            context={"check": "min_length", "minimum": -1}
        )
        ```
    """

    pass


class AsyncRequiredError(SchemaError):
    """Raised when a synchronous parse reaches a node that must be awaited.

    Use ``parse_async`` / ``safe_parse_async`` for schemas containing
    asynchronous refinements, transforms or promise nodes.
    """

    def __init__(self, kind: str):
        super().__init__(
            f"Encountered an asynchronous '{kind}' node during synchronous parse. "
            "Use parse_async() or safe_parse_async() instead.",
            context={"kind": kind},
        )


class RegistryError(SchemaError):
    """Raised when a schema registry operation is invalid."""

    pass


class DuplicateIdError(RegistryError):
    """Raised when a metadata ``id`` is already held by another schema."""

    def __init__(self, schema_id: str):
        super().__init__(
            f"ID '{schema_id}' already exists in the registry",
            context={"id": schema_id},
        )


class SchemaValidationError(SchemaError):
    """Aggregate of every issue found by one parse call.

    The issues are finalized (messages resolved) and immutable. The error is
    raised only by the throwing entry points; the ``safe_parse`` variants
    return it inside a result instead.

    Attributes:
        issues: Tuple of finalized issues in evaluation order
    """

    def __init__(self, issues: Iterable[Issue]):
        self.issues: tuple[Issue, ...] = tuple(issues)
        super().__init__(
            f"{len(self.issues)} validation issue(s)",
            context={"issue_count": len(self.issues)},
        )

    def __str__(self) -> str:
        # Rendered on demand; inputs may hold values JSON cannot encode.
        return json.dumps(plain(self.to_list()), indent=2)

    def __len__(self) -> int:
        return len(self.issues)

    def __iter__(self):
        return iter(self.issues)

    def to_list(self) -> list[dict[str, Any]]:
        """Render the issues in their wire shape."""
        return [issue.to_dict() for issue in self.issues]

    def flatten(self) -> dict[str, Any]:
        """Group messages by top-level key. See ``formatting.flatten_error``."""
        from .formatting import flatten_error

        return flatten_error(self)

    def tree(self) -> dict[str, Any]:
        """Nest messages following the issue paths. See ``formatting.tree_error``."""
        from .formatting import tree_error

        return tree_error(self)

    def prettify(self) -> str:
        """Human-readable multi-line rendering. See ``formatting.prettify_error``."""
        from .formatting import prettify_error

        return prettify_error(self)


__all__ = [
    "SchemaError",
    "DefinitionError",
    "AsyncRequiredError",
    "RegistryError",
    "DuplicateIdError",
    "SchemaValidationError",
]
