"""
Ordered provider fallback.

first_success() tries each provider in order and returns the first result.
When every provider fails, the *first* provider's exception is re-raised:
callers asked the primary source, so fallback-path errors must not leak out.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Sequence

from stellar_explorer.explorer_logging import get_logger

logger = get_logger(__name__)


async def first_success(
    providers: Sequence[tuple[str, Callable[[], Awaitable[Any]]]],
    *,
    label: str = "lookup",
) -> tuple[str, Any]:
    """
    Run providers in order; return (provider_name, result) for the first success.

    Args:
        providers: (name, zero-arg coroutine factory) pairs, primary first.
        label: Short operation name used in log events.

    Raises:
        ValueError: providers is empty.
        Exception: the first provider's exception when all providers fail.
    """
    if not providers:
        raise ValueError("providers must be non-empty")
    errors: list[Exception] = []
    for name, factory in providers:
        try:
            result = await factory()
        except Exception as e:
            logger.info("fallback_provider_failed", label=label, provider=name, error=str(e))
            errors.append(e)
            continue
        if errors:
            logger.info("fallback_provider_used", label=label, provider=name)
        return name, result
    raise errors[0]
