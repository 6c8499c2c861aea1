"""Process-wide configuration for message resolution.

The configuration is a single immutable ``SchemaConfig`` held in a module
slot. ``configure()`` replaces the slot (last writer wins); every parse call
reads it once. Nothing is loaded implicitly: with no configuration, finalized
issues carry the fallback message ``"Invalid input"``.

Example:
    ```python
    from dataknobs_schema import configure

    configure(locale="en")
    configure(custom_error=lambda issue: "Required" if issue.code == "invalid_type" else None)
    ```
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any

from .exceptions import DefinitionError

logger = logging.getLogger(__name__)

_UNSET: Any = object()


@dataclass(frozen=True)
class SchemaConfig:
    """Global message providers.

    Attributes:
        custom_error: Default provider consulted after per-call overrides
        locale_error: Locale provider consulted last
    """

    custom_error: Any = None
    locale_error: Any = None


_config = SchemaConfig()


def get_config() -> SchemaConfig:
    """Return the active configuration."""
    return _config


def configure(
    *,
    custom_error: Any = _UNSET,
    locale: Any = _UNSET,
) -> SchemaConfig:
    """Update the process-wide configuration.

    Args:
        custom_error: Provider (string or callable) used when neither the
            schema nor the parse call supplies a message; None clears it
        locale: Locale provider callable, or the name of a bundled locale
            (e.g. "en"); None clears it

    Returns:
        The new active configuration

    Raises:
        DefinitionError: If a locale name is unknown
    """
    global _config

    changes: dict[str, Any] = {}
    if custom_error is not _UNSET:
        changes["custom_error"] = custom_error
    if locale is not _UNSET:
        if isinstance(locale, str):
            from .locales import get_locale

            locale = get_locale(locale)
        elif locale is not None and not callable(locale):
            raise DefinitionError(
                "Locale must be a callable or a locale name",
                context={"locale": repr(locale)},
            )
        changes["locale_error"] = locale

    _config = replace(_config, **changes)
    logger.info(f"Schema configuration updated: {sorted(changes)}")
    return _config


def reset_config() -> SchemaConfig:
    """Drop every configured provider."""
    global _config
    _config = SchemaConfig()
    logger.debug("Schema configuration reset")
    return _config
