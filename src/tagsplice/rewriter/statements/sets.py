"""``{% set %}`` pass.

Provides a mixin that evaluates ``set`` statements into the render scope.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from tagsplice.scanner import iter_statements, split_keyword

if TYPE_CHECKING:
    from tagsplice.render_context import RenderContext

_ASSIGN_RE = re.compile(r"^([A-Za-z_][A-Za-z0-9_]*)\s*=(?!=)\s*([\s\S]+)$")


def split_assignments(rest: str) -> list[tuple[str, str]]:
    """Parse ``a = 1, b = f(x, y)`` into ``[("a", "1"), ("b", "f(x, y)")]``.

    Commas inside brackets or strings do not separate assignments, and a
    segment that does not start with ``NAME =`` continues the previous
    value (``x = 1, 2`` assigns ``"1, 2"``). Returns ``[]`` when the text
    does not start with an assignment.
    """
    segments: list[str] = []
    depth = 0
    quote: str | None = None
    start = 0
    i = 0
    while i < len(rest):
        ch = rest[i]
        if quote:
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch in "\"'":
            quote = ch
        elif ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth = max(depth - 1, 0)
        elif ch == "," and depth == 0:
            segments.append(rest[start:i])
            start = i + 1
        i += 1
    segments.append(rest[start:])

    assignments: list[tuple[str, str]] = []
    for segment in segments:
        m = _ASSIGN_RE.match(segment.strip())
        if m:
            assignments.append((m.group(1), m.group(2).strip()))
        elif assignments:
            name, expr = assignments[-1]
            assignments[-1] = (name, f"{expr},{segment}")
        else:
            return []
    return [(name, expr.strip()) for name, expr in assignments]


class SetPassMixin:
    """Evaluate top-level ``set`` statements into the scope.

    The pass contributes no edits. The tags themselves are removed by the
    final substitution pass. ``set`` tags inside a ``for`` body are skipped
    here and evaluated per iteration when the body is rendered.
    """

    __slots__ = ()

    # ─────────────────────────────────────────────────────────────────────────
    # Host attributes (type-check only)
    # ─────────────────────────────────────────────────────────────────────────
    if TYPE_CHECKING:
        _ctx: RenderContext

    def apply_sets(self, source: str) -> str:
        ctx = self._ctx
        loop_depth = 0
        for span in iter_statements(source, name=ctx.template_name):
            kw, rest = split_keyword(span.inner(source))
            if kw == "for":
                loop_depth += 1
            elif kw == "endfor":
                loop_depth = max(loop_depth - 1, 0)
            elif kw == "set" and loop_depth == 0:
                for name, expr in split_assignments(rest):
                    ctx.scope[name] = ctx.evaluate(expr, lineno=span.lineno)
        return source
