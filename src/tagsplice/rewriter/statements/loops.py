"""``{% for %}`` pass.

Provides a mixin that expands ``for … endfor`` regions.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from contextlib import ExitStack
from typing import TYPE_CHECKING, Any

from tagsplice._types import Edit, LoopFrame, TagKind
from tagsplice.scanner import scan, split_keyword
from tagsplice.template.helpers import UNDEFINED, is_undefined
from tagsplice.template.loop_context import LoopContext
from tagsplice.utils.edits import apply_edits

if TYPE_CHECKING:
    from tagsplice.render_context import RenderContext

# "item in items", "key, value in mapping"
_FOR_IN_RE = re.compile(
    r"^([A-Za-z_][A-Za-z0-9_]*(?:\s*,\s*[A-Za-z_][A-Za-z0-9_]*)*)\s+in\s+([\s\S]+)$"
)


def iteration_items(value: Any, *, pairs: bool = False) -> list[Any]:
    """Materialize the elements a ``for`` loop visits.

    Sequences and other iterables yield their elements; mappings yield their
    values (or ``(key, value)`` pairs when ``pairs`` is true); None and
    undefined yield nothing; strings and other scalars yield themselves once.
    """
    if is_undefined(value):
        return []
    if isinstance(value, Mapping):
        return list(value.items()) if pairs else list(value.values())
    if isinstance(value, (str, bytes)):
        return [value]
    try:
        return list(value)
    except TypeError:
        return [value]


def _unpack(item: Any, count: int) -> list[Any]:
    if isinstance(item, (list, tuple)):
        values = list(item[:count])
    else:
        values = [item]
    return values + [UNDEFINED] * (count - len(values))


class ForPassMixin:
    """Expand outermost ``for`` loops; nested loops expand while rendering bodies.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.
    """

    __slots__ = ()

    # ─────────────────────────────────────────────────────────────────────────
    # Host attributes and cross-mixin dependencies (type-check only)
    # ─────────────────────────────────────────────────────────────────────────
    if TYPE_CHECKING:
        _ctx: RenderContext

        def render_string(self, source: str) -> str: ...

    def apply_for_loops(self, source: str) -> str:
        ctx = self._ctx
        stack: list[LoopFrame] = []
        edits: list[Edit] = []

        for span in scan(source, name=ctx.template_name):
            if span.kind is not TagKind.STATEMENT:
                continue
            kw, rest = split_keyword(span.inner(source))
            if kw == "for":
                m = _FOR_IN_RE.match(rest)
                if m:
                    stack.append(LoopFrame(span, m.group(1), m.group(2).strip(), span.end.offset))
                else:
                    # Malformed header: pairs with its endfor, never expands.
                    stack.append(LoopFrame(span, None, rest, span.end.offset))
            elif kw == "endfor" and stack:
                frame = stack.pop()
                frame.body_end = span.start.offset
                if frame.var_name is None or any(f.var_name is not None for f in stack):
                    continue
                edits.append(
                    Edit(frame.opener.start.offset, span.end.offset, self._expand_loop(source, frame))
                )

        return apply_edits(source, edits)

    def _expand_loop(self, source: str, frame: LoopFrame) -> str:
        ctx = self._ctx
        assert frame.var_name is not None
        names = [n.strip() for n in frame.var_name.split(",")]
        iterable = ctx.evaluate(frame.iterable_expr, lineno=frame.opener.lineno)
        items = iteration_items(iterable, pairs=len(names) > 1)
        body = source[frame.body_start : frame.body_end]

        loop = LoopContext(items)
        chunks: list[str] = []
        with ExitStack() as bindings:
            binders = [bindings.enter_context(ctx.scope.loop_binding(n)) for n in names]
            bind_loop = bindings.enter_context(ctx.scope.loop_binding("loop"))
            bind_loop(loop)
            for _ in range(len(items)):
                item = loop.advance()
                if len(binders) == 1:
                    binders[0](item)
                else:
                    for bind, value in zip(binders, _unpack(item, len(binders)), strict=True):
                        bind(value)
                chunk = self.render_string(body)
                if "{%" in chunk:
                    chunk = self.apply_for_loops(chunk)
                chunks.append(chunk)
        return "".join(chunks)
