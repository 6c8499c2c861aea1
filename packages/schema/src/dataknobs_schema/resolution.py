"""Error-resolution chain.

Each raw issue receives its final message from the first provider that
offers one, in this order:

1. the ``error`` attached to the node or check that produced the issue
2. the ``error`` given to the parse call
3. the configured ``custom_error``
4. the configured locale

If every provider declines, ``DEFAULT_MESSAGE`` is used. Providers only
word issues; they run after evaluation and cannot add or drop any.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from .config import SchemaConfig, get_config
from .utils import MISSING

if TYPE_CHECKING:
    from .issues import Issue
    from .result import ParseContext

DEFAULT_MESSAGE = "Invalid input"


def consult(provider: Any, issue: Issue) -> str | None:
    """Ask one provider for a message.

    Args:
        provider: None, a string, or a callable taking the raw issue and
            returning a string, a mapping with a "message" key, or None
        issue: Raw issue

    Returns:
        The message, or None when the provider declines
    """
    if provider is None:
        return None
    if isinstance(provider, str):
        return provider
    answer = provider(issue)
    if answer is None or isinstance(answer, str):
        return answer
    if isinstance(answer, Mapping):
        message = answer.get("message")
        return str(message) if message is not None else None
    return str(answer)


def resolve_message(
    issue: Issue,
    ctx: ParseContext,
    config: SchemaConfig | None = None,
) -> str:
    """Compute the final message of a raw issue.

    Args:
        issue: Raw issue (message not yet set)
        ctx: Context of the parse call
        config: Configuration to use; defaults to the active one

    Returns:
        The resolved message
    """
    if config is None:
        config = get_config()
    source_error = getattr(issue.source, "error", None)
    for provider in (source_error, ctx.error, config.custom_error, config.locale_error):
        message = consult(provider, issue)
        if message is not None:
            return message
    return DEFAULT_MESSAGE


def finalize_issue(issue: Issue, ctx: ParseContext, config: SchemaConfig) -> Issue:
    """Resolve the message of one issue and strip evaluation-only data."""
    changes: dict[str, Any] = {"source": None}
    if issue.message is None:
        changes["message"] = resolve_message(issue, ctx, config)
    if not ctx.report_input:
        changes["input"] = MISSING
    for name, shape in issue.nested.items():
        value = getattr(issue, name)
        if shape == "flat":
            changes[name] = finalize_issues(value, ctx, config)
        elif shape == "grouped":
            changes[name] = tuple(finalize_issues(group, ctx, config) for group in value)
    return replace(issue, **changes)


def finalize_issues(
    issues: Any,
    ctx: ParseContext,
    config: SchemaConfig | None = None,
) -> tuple[Issue, ...]:
    """Finalize a sequence of raw issues.

    Args:
        issues: Raw issues in evaluation order
        ctx: Context of the parse call
        config: Configuration snapshot; read once when omitted

    Returns:
        Tuple of finalized issues, same order
    """
    if config is None:
        config = get_config()
    return tuple(finalize_issue(issue, ctx, config) for issue in issues)
