"""Identity-keyed registry attaching metadata to schema nodes.

Entries are keyed by node identity, never by structural equality, and hold
the node weakly: registering a schema does not keep it alive. A metadata
``id`` may belong to only one live node at a time.

Example:
    ```python
    from dataknobs_schema import SchemaRegistry, string

    registry = SchemaRegistry("docs")
    email = string().with_format("email")
    registry.add(email, {"id": "email", "title": "Email address"})
    registry.get(email)
    # {'id': 'email', 'title': 'Email address'}
    registry.get_by_id("email") is email
    # True
    ```
"""

from __future__ import annotations

import logging
import threading
import weakref
from collections.abc import Mapping
from typing import Any

from .exceptions import DuplicateIdError, RegistryError
from .schema import Schema

logger = logging.getLogger(__name__)


class SchemaRegistry:
    """Thread-safe store of metadata per schema node.

    Attributes:
        name: Name of the registry (for logging/debugging)
    """

    def __init__(self, name: str = "schemas"):
        self._name = name
        self._entries: weakref.WeakKeyDictionary[Schema, dict[str, Any]] = weakref.WeakKeyDictionary()
        self._ids: dict[str, weakref.ref[Schema]] = {}
        self._lock = threading.RLock()

    @property
    def name(self) -> str:
        return self._name

    def add(self, node: Schema, metadata: Mapping[str, Any] | None = None) -> Schema:
        """Attach ``metadata`` to ``node``, replacing any earlier entry for it.

        Args:
            node: Schema node
            metadata: Caller-defined metadata; an ``id`` key must be unique

        Returns:
            The node, for chaining

        Raises:
            RegistryError: If ``node`` is not a schema node
            DuplicateIdError: If another live node already holds the ``id``
        """
        if not isinstance(node, Schema):
            raise RegistryError(
                f"Only schema nodes can be registered, got {type(node).__name__}",
                context={"registry": self._name},
            )
        data = dict(metadata or {})
        schema_id = data.get("id")
        with self._lock:
            if schema_id is not None:
                holder = self._ids.get(schema_id)
                owner = holder() if holder is not None else None
                if owner is not None and owner is not node:
                    raise DuplicateIdError(schema_id)
            self._forget_id(node)
            self._entries[node] = data
            if schema_id is not None:
                self._ids[schema_id] = weakref.ref(node)
        logger.debug(f"Registered {node!r} in {self._name}")
        return node

    def get(self, node: Schema) -> dict[str, Any] | None:
        """Return the metadata of ``node``, or None when it is not registered."""
        with self._lock:
            return self._entries.get(node)

    def has(self, node: Schema) -> bool:
        with self._lock:
            return node in self._entries

    def remove(self, node: Schema) -> bool:
        """Remove the entry of ``node``.

        Returns:
            True if an entry was removed
        """
        with self._lock:
            if node not in self._entries:
                return False
            self._forget_id(node)
            del self._entries[node]
        logger.debug(f"Removed {node!r} from {self._name}")
        return True

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._ids.clear()
        logger.debug(f"Cleared registry {self._name}")

    def get_by_id(self, schema_id: str) -> Schema | None:
        """Return the live node holding ``schema_id``, if any."""
        with self._lock:
            holder = self._ids.get(schema_id)
            return holder() if holder is not None else None

    def count(self) -> int:
        with self._lock:
            return len(self._entries)

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, node: object) -> bool:
        return isinstance(node, Schema) and self.has(node)

    def _forget_id(self, node: Schema) -> None:
        previous = self._entries.get(node)
        if previous is not None and previous.get("id") is not None:
            self._ids.pop(previous["id"], None)


global_registry = SchemaRegistry("global")
