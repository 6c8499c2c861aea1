"""Kind table: maps node kind tags to evaluation functions.

Built-in node classes register their evaluator when the class is defined
(see ``Schema.__init_subclass__``). Third parties add new kinds the same
way, or by registering a plain function and constructing a generic
``Schema(kind, ...)`` node:

    ```python
    from dataknobs_schema import Schema, register_kind
    from dataknobs_schema.issues import CustomIssue

    def evaluate_even(node, payload, ctx):
        if not isinstance(payload.value, int) or payload.value % 2:
            payload.add_issue(CustomIssue(input=payload.value, source=node))
        return payload

    register_kind("even", evaluate_even)
    Schema("even").parse(4)
    ```

An evaluator receives ``(node, payload, ctx)`` and returns the payload, or
an awaitable resolving to it. The engine never special-cases a kind.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

from .exceptions import DefinitionError

logger = logging.getLogger(__name__)

Evaluator = Callable[[Any, Any, Any], Any]


class KindRegistry:
    """Thread-safe table of kind tag -> evaluator."""

    def __init__(self, name: str):
        self._name = name
        self._evaluators: dict[str, Evaluator] = {}
        self._lock = threading.RLock()

    @property
    def name(self) -> str:
        return self._name

    def register(self, kind: str, evaluator: Evaluator, replace: bool = False) -> None:
        """Register an evaluator for a kind tag.

        Args:
            kind: Kind tag (the definition's "type" value)
            evaluator: Callable ``(node, payload, ctx) -> payload | awaitable``
            replace: Allow replacing an existing registration

        Raises:
            DefinitionError: If the kind is already registered and replace is False
        """
        with self._lock:
            current = self._evaluators.get(kind)
            if current is not None and current is not evaluator and not replace:
                raise DefinitionError(
                    f"Kind '{kind}' already registered in {self._name}",
                    context={"kind": kind, "registry": self._name},
                )
            self._evaluators[kind] = evaluator
        logger.debug(f"Registered evaluator for kind '{kind}'")

    def unregister(self, kind: str) -> Evaluator:
        with self._lock:
            if kind not in self._evaluators:
                raise DefinitionError(
                    f"Kind not registered: {kind}",
                    context={"kind": kind, "registry": self._name},
                )
            return self._evaluators.pop(kind)

    def get(self, kind: str) -> Evaluator:
        """Look up the evaluator of a kind.

        Raises:
            DefinitionError: If no evaluator is registered for the kind
        """
        evaluator = self._evaluators.get(kind)
        if evaluator is None:
            raise DefinitionError(
                f"No evaluator registered for kind '{kind}'",
                context={"kind": kind, "available_kinds": sorted(self._evaluators)},
            )
        return evaluator

    def has(self, kind: str) -> bool:
        return kind in self._evaluators

    def list_kinds(self) -> list[str]:
        with self._lock:
            return sorted(self._evaluators)


kind_registry = KindRegistry("kinds")


def register_kind(kind: str, evaluator: Evaluator, replace: bool = False) -> None:
    """Register an evaluator in the default kind table."""
    kind_registry.register(kind, evaluator, replace=replace)


def get_evaluator(kind: str) -> Evaluator:
    """Look up an evaluator in the default kind table."""
    return kind_registry.get(kind)
