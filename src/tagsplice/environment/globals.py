"""Default global functions available in every template.

Globals are looked up after the render scope, so a context variable named
``range`` shadows the built-in one.

Usage:
    {% for i in range(1, 4) %}{{ i }}{% endfor %}       -> 123
    {% set opts = dict(a=1, b=2) %}{{ opts.b }}         -> 2
    {{ len(items) }} {{ max(1, 5, 3) }} {{ min(items) }}

"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from tagsplice.template.helpers import coerce_numeric, is_undefined

# Ranges longer than this raise instead of materializing in a for loop.
MAX_RANGE = 100_000


def _range(*args: Any) -> range:
    """``range(stop)``, ``range(start, stop)``, ``range(start, stop, step)``."""
    bounds = [int(coerce_numeric(a)) for a in args]
    rng = range(*bounds)
    if len(rng) > MAX_RANGE:
        raise OverflowError(f"range() of {len(rng)} items exceeds the limit of {MAX_RANGE}")
    return rng


def _dict(**kwargs: Any) -> dict[str, Any]:
    return dict(kwargs)


def _len(value: Any) -> int:
    if is_undefined(value):
        return 0
    try:
        return len(value)
    except TypeError:
        return 0


def _extreme(pick: Callable[..., Any], args: tuple[Any, ...]) -> Any:
    if len(args) == 1 and not isinstance(args[0], str):
        try:
            items = list(args[0])
        except TypeError:
            return args[0]
    else:
        items = list(args)
    if not items:
        return None
    return pick(items)


def _max(*args: Any) -> Any:
    return _extreme(max, args)


def _min(*args: Any) -> Any:
    return _extreme(min, args)


DEFAULT_GLOBALS: dict[str, Callable[..., Any]] = {
    "dict": _dict,
    "len": _len,
    "max": _max,
    "min": _min,
    "range": _range,
}


__all__ = ["DEFAULT_GLOBALS", "MAX_RANGE"]
