"""Locale providers.

A locale is a message provider: a callable taking a raw issue and returning
its message, or None to decline. Locales are never loaded implicitly; select
one with ``configure(locale="en")`` or pass any callable.
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Callable
from typing import Any

from ..exceptions import DefinitionError

logger = logging.getLogger(__name__)

LocaleProvider = Callable[[Any], Any]

# Locale name -> module exposing ``error(issue)``.
_LOCALES: dict[str, str] = {
    "en": f"{__name__}.en",
}


def register_locale(name: str, module: str) -> None:
    """Make the module ``module`` (exposing ``error``) available as ``name``."""
    _LOCALES[name] = module
    logger.debug(f"Registered locale: {name}")


def available_locales() -> list[str]:
    return sorted(_LOCALES)


def get_locale(name: str) -> LocaleProvider:
    """Return the message provider of the locale ``name``.

    Raises:
        DefinitionError: If no locale has that name
    """
    if name not in _LOCALES:
        raise DefinitionError(
            f"Unknown locale: {name}",
            context={"locale": name, "available": available_locales()},
        )
    return importlib.import_module(_LOCALES[name]).error
