"""``{% if %}`` pass.

Provides a mixin that resolves ``if … elif … else … endif`` groups.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from tagsplice._types import Branch, Edit, IfFrame, TagKind
from tagsplice.rewriter.conditions import evaluate_condition
from tagsplice.scanner import scan, split_keyword
from tagsplice.utils.edits import apply_edits

if TYPE_CHECKING:
    from tagsplice.render_context import RenderContext


def _is_valid(frame: IfFrame) -> bool:
    return all(b.kind == "else" or b.condition for b in frame.branches)


class IfPassMixin:
    """Replace each outermost ``if`` group with its winning branch.

    ``elif`` and ``else`` attach to the innermost open ``if``. Unmatched
    ``elif``/``else``/``endif`` tags are ignored. A group with an empty
    condition is left in place.
    """

    __slots__ = ()

    # ─────────────────────────────────────────────────────────────────────────
    # Host attributes (type-check only)
    # ─────────────────────────────────────────────────────────────────────────
    if TYPE_CHECKING:
        _ctx: RenderContext

    def apply_conditionals(self, source: str) -> str:
        ctx = self._ctx
        stack: list[IfFrame] = []
        edits: list[Edit] = []

        for span in scan(source, name=ctx.template_name):
            if span.kind is not TagKind.STATEMENT:
                continue
            kw, rest = split_keyword(span.inner(source))
            if kw == "if":
                stack.append(IfFrame(span, [Branch("if", rest, span.end.offset, -1)]))
            elif kw in ("elif", "else") and stack:
                frame = stack[-1]
                frame.branches[-1].body_end = span.start.offset
                condition = rest if kw == "elif" else None
                frame.branches.append(Branch(kw, condition, span.end.offset, -1))
            elif kw == "endif" and stack:
                frame = stack.pop()
                frame.branches[-1].body_end = span.start.offset
                if not _is_valid(frame) or any(_is_valid(f) for f in stack):
                    continue
                chosen = self._choose_branch(source, frame)
                edits.append(
                    Edit(frame.opener.start.offset, span.end.offset, self.apply_conditionals(chosen))
                )

        return apply_edits(source, edits)

    def _choose_branch(self, source: str, frame: IfFrame) -> str:
        for branch in frame.branches:
            body = source[branch.body_start : branch.body_end]
            if branch.kind == "else":
                return body
            assert branch.condition is not None
            if evaluate_condition(self._ctx, branch.condition, lineno=frame.opener.lineno):
                return body
        return ""
