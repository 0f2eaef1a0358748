"""Control-flow rewriter.

`Rewriter.render_string` turns structurally resolved template text into
output with four passes over the text, each re-scanning its input and
applying its edits in one batch:

1. set pass: evaluate ``{% set %}`` into the scope
2. for pass: expand ``{% for %}`` regions
3. if pass: keep the winning branch of each ``{% if %}`` group
4. substitution: replace every remaining tag with its value

Loop bodies are rendered by a recursive `render_string` call per
iteration, and the expanded text is scanned again by the if and
substitution passes. Values produced inside a loop are therefore re-read as
template text: a value containing ``{{ name }}`` is evaluated, and one with
an unbalanced delimiter raises `TemplateSyntaxError`. Escape such data
before rendering. Expressions outside loops are substituted once.

"""

from __future__ import annotations

from typing import TYPE_CHECKING

from tagsplice._types import Edit, TagKind
from tagsplice.rewriter.conditions import evaluate_condition
from tagsplice.rewriter.statements import StatementPassMixin
from tagsplice.scanner import scan, split_keyword
from tagsplice.structure import STRUCTURAL_KEYWORDS
from tagsplice.template.helpers import to_output
from tagsplice.utils.edits import apply_edits

if TYPE_CHECKING:
    from tagsplice.render_context import RenderContext

CONTROL_KEYWORDS = frozenset(
    {"set", "for", "endfor", "if", "elif", "else", "endif", *STRUCTURAL_KEYWORDS}
)


class Rewriter(StatementPassMixin):
    """Render template text against one `RenderContext`.

    Example:
        >>> from tagsplice import Environment
        >>> from tagsplice.render_context import RenderContext
        >>> ctx = RenderContext(Environment())
        >>> Rewriter(ctx).render_string("{% set x = 2 %}{{ x * 3 }}")
        '6'
    """

    __slots__ = ("_ctx",)

    def __init__(self, ctx: RenderContext):
        self._ctx = ctx

    def render_string(self, source: str) -> str:
        source = self.apply_sets(source)
        source = self.apply_for_loops(source)
        source = self.apply_conditionals(source)
        return self.substitute(source)

    def substitute(self, source: str) -> str:
        """Replace every remaining tag with its stringified value.

        Control and structural statements render as ``""``. A statement whose
        keyword is a registered directive renders the directive's result.
        Any other statement is evaluated as an expression.
        """
        ctx = self._ctx
        env = ctx.env
        directives = env.directives
        passthrough = env.structural_keywords
        edits: list[Edit] = []

        for span in scan(source, name=ctx.template_name):
            inner = span.inner(source)
            replacement = ""
            if span.kind is TagKind.EXPRESSION:
                if inner:
                    replacement = to_output(ctx.evaluate(inner, lineno=span.lineno))
            else:
                kw, rest = split_keyword(inner)
                if kw in CONTROL_KEYWORDS or kw in passthrough:
                    replacement = ""
                elif kw in directives:
                    replacement = to_output(directives[kw](rest, ctx.scope))
                elif inner:
                    replacement = to_output(ctx.evaluate(inner, lineno=span.lineno))
            edits.append(Edit(span.start.offset, span.end.offset, replacement))

        return apply_edits(source, edits)


__all__ = ["CONTROL_KEYWORDS", "Rewriter", "evaluate_condition"]
