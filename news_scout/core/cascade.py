"""
Ordered "first match wins" evaluation shared by both cascades.

The redirect resolver and the selector-based extractor are both an
ordered list of independent strategies, each returning an optional
result. first_match runs them in order and stops at the first one that
produces a non-empty value.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, TypeVar

T = TypeVar("T")

Strategy = Callable[..., "T | None"]


def strategy_name(strategy: Callable[..., Any]) -> str:
    """Return a short display name for a strategy callable."""
    name = getattr(strategy, "__name__", None) or type(strategy).__name__
    return name.lstrip("_")


def first_match(
    strategies: Iterable[Callable[..., T | None]],
    *args: Any,
    accept: Callable[[T], bool] | None = None,
) -> tuple[str, T] | None:
    """Run strategies in order and return the first accepted result.

    Args:
        strategies: Callables invoked with *args
        *args: Arguments passed to every strategy
        accept: Optional predicate; defaults to truthiness

    Returns:
        (strategy name, value) of the winner, or None if nothing matched
    """
    for strategy in strategies:
        value = strategy(*args)
        if value is None:
            continue
        ok = accept(value) if accept is not None else bool(value)
        if ok:
            return strategy_name(strategy), value
    return None
