"""Condition evaluation for ``{% if %}`` and ``{% elif %}``.

Conditions are split before the expression evaluator sees them:

1. ``not EXPR`` negates the rest of the condition.
2. Otherwise the text is split on top-level ``and``; all parts must hold.
3. Otherwise it is split on top-level ``or``; any part may hold.
4. Otherwise it is a single expression, tested with `is_truthy`.

Each part is evaluated recursively with the same rules, and evaluation
short-circuits. Mixed ``and``/``or`` is therefore a flat split on ``and``
first: ``a or b and c`` means ``(a or b) and c``. Splitting ignores
keywords inside quotes and brackets.

"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from tagsplice.template.helpers import is_truthy

if TYPE_CHECKING:
    from tagsplice.render_context import RenderContext

_NOT_RE = re.compile(r"^not\s+([\s\S]+)$")
_OPENING = "([{"
_CLOSING = ")]}"


def split_top_level(condition: str, keyword: str) -> list[str]:
    """Split ``condition`` on whitespace-delimited ``keyword``.

    Occurrences inside string literals or brackets do not split.
    """
    parts: list[str] = []
    depth = 0
    quote: str | None = None
    start = 0
    i = 0
    n = len(condition)
    width = len(keyword)
    while i < n:
        ch = condition[i]
        if quote:
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch in "\"'":
            quote = ch
        elif ch in _OPENING:
            depth += 1
        elif ch in _CLOSING:
            depth = max(depth - 1, 0)
        elif (
            depth == 0
            and ch.isspace()
            and condition.startswith(keyword, i + 1)
            and i + 1 + width < n
            and condition[i + 1 + width].isspace()
        ):
            parts.append(condition[start:i])
            i += 1 + width
            start = i
            continue
        i += 1
    parts.append(condition[start:])
    return [p.strip() for p in parts]


def evaluate_condition(ctx: RenderContext, condition: str, *, lineno: int | None = None) -> bool:
    """Evaluate an ``if``/``elif`` condition to a bool."""
    text = condition.strip()

    m = _NOT_RE.match(text)
    if m:
        return not evaluate_condition(ctx, m.group(1), lineno=lineno)

    parts = split_top_level(text, "and")
    if len(parts) > 1:
        return all(evaluate_condition(ctx, part, lineno=lineno) for part in parts)

    parts = split_top_level(text, "or")
    if len(parts) > 1:
        return any(evaluate_condition(ctx, part, lineno=lineno) for part in parts)

    return is_truthy(ctx.evaluate(text, lineno=lineno))
