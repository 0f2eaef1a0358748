"""Structural resolution: ``{% include %}``, ``{% extends %}`` and blocks.

Runs before any control flow. The output is a single flat template string
with every include spliced in and every inheritance chain merged into its
root layout.

Includes:
    ``{% include "NAME" %}`` is replaced by the fully resolved text of NAME.
    A name that cannot be loaded renders as ``""`` (logged at WARNING). A
    name already being included further up the chain also renders as
    ``""`` (logged at DEBUG), so include cycles terminate.

Extends:
    ``{% extends "PARENT" %}`` merges the child's blocks into PARENT. Only
    the parent's text survives; child content outside blocks is dropped.
    Inside an overriding block, ``{{ super() }}`` is replaced by the parent's
    original block body. A chain that revisits a template raises
    `ExtendsCycleError`; a missing parent raises `TemplateNotFoundError`.

Example:
    parent ``<a>{% block x %}P{% endblock %}</a>`` and child
    ``{% extends "parent" %}{% block x %}C-{{ super() }}{% endblock %}``
    merge to ``<a>{% block x %}C-P{% endblock %}</a>``.

"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from functools import lru_cache
from typing import TYPE_CHECKING

from tagsplice._types import BlockRecord, Edit, Span
from tagsplice.environment.exceptions import ExtendsCycleError
from tagsplice.scanner import iter_statements, split_keyword
from tagsplice.utils.edits import apply_edits

if TYPE_CHECKING:
    from tagsplice.render_context import RenderContext

logger = logging.getLogger(__name__)

EXTENDS_RE = re.compile(r"\{%\s*extends\s+[\"']([^\"']+)[\"']\s*%\}")
INCLUDE_RE = re.compile(r"\{%\s*include\s+[\"']([^\"']+)[\"']\s*%\}")
SUPER_RE = re.compile(r"\{\{\s*super\(\)\s*\}\}")

STRUCTURAL_KEYWORDS: tuple[str, ...] = ("block", "endblock", "extends", "include")
DEFAULT_PASSTHROUGH_KEYWORDS: tuple[str, ...] = ("client", "endclient", "only", "endonly")


def resolve_includes(source: str, ctx: RenderContext, seen: frozenset[str]) -> str:
    """Splice every ``{% include %}`` in ``source``, leftmost first.

    Args:
        source: Template text.
        ctx: Render context supplying the loader.
        seen: Names already on the include chain (cycle guard).
    """
    edits: list[Edit] = []
    for match in INCLUDE_RE.finditer(source):
        name = match.group(1)
        if name in seen:
            logger.debug(f"Include cycle on '{name}' (chain: {sorted(seen)}), rendering empty")
            replacement = ""
        else:
            result = ctx.read(name)
            if not result.ok:
                logger.warning(f"Include '{name}' could not be loaded, rendering empty: {result.error}")
                replacement = ""
            else:
                replacement = resolve_includes(result.unwrap(), ctx, seen | {name})
        edits.append(Edit(match.start(), match.end(), replacement))
    return apply_edits(source, edits)


def extract_blocks(source: str) -> dict[str, BlockRecord]:
    """Map block names to their regions.

    ``endblock`` closes the innermost open block. A duplicate name keeps the
    region closed last; an ``endblock`` with nothing open is ignored.
    """
    blocks: dict[str, BlockRecord] = {}
    stack: list[tuple[str, Span]] = []
    for span in iter_statements(source):
        kw, rest = split_keyword(span.inner(source))
        if kw == "block":
            name = rest.split()[0] if rest else ""
            if name:
                stack.append((name, span))
        elif kw == "endblock" and stack:
            name, open_span = stack.pop()
            blocks[name] = BlockRecord(name, open_span, span)
    return blocks


def _encloses(outer: BlockRecord, inner: BlockRecord) -> bool:
    return (
        outer.body_start <= inner.open_span.start.offset
        and inner.close_span.end.offset <= outer.body_end
    )


def merge_blocks(parent: str, child: str) -> str:
    """Replace each parent block body that ``child`` also defines."""
    parent_blocks = extract_blocks(parent)
    child_blocks = extract_blocks(child)

    overridden = [b for name, b in parent_blocks.items() if name in child_blocks]
    edits: list[Edit] = []
    for block in overridden:
        if any(other is not block and _encloses(other, block) for other in overridden):
            continue
        parent_body = parent[block.body_start : block.body_end]
        child_block = child_blocks[block.name]
        child_body = child[child_block.body_start : child_block.body_end]
        replacement = SUPER_RE.sub(lambda _m: parent_body, child_body)
        edits.append(Edit(block.body_start, block.body_end, replacement))
    return apply_edits(parent, edits)


def resolve_extends_and_includes(source: str, name: str, ctx: RenderContext) -> str:
    """Resolve includes, then walk the extends chain up to the root layout.

    Raises:
        ExtendsCycleError: The chain revisits a template.
        TemplateNotFoundError: A parent template cannot be loaded.
    """
    current = resolve_includes(source, ctx, frozenset({name}))
    chain = [name]
    while True:
        match = EXTENDS_RE.search(current)
        if match is None:
            return current
        parent_name = match.group(1)
        if parent_name in chain:
            raise ExtendsCycleError([*chain, parent_name])
        chain.append(parent_name)
        logger.debug(f"'{chain[-2]}' extends '{parent_name}'")

        parent_source = ctx.read(parent_name).unwrap()
        parent = resolve_includes(parent_source, ctx, frozenset({parent_name}))
        current = merge_blocks(parent, current)


@lru_cache(maxsize=32)
def _strip_pattern(keywords: tuple[str, ...]) -> re.Pattern[str]:
    alternatives = "|".join(re.escape(kw) for kw in keywords)
    return re.compile(
        rf"^[ \t]*\{{%\s*(?:{alternatives})\b(?:(?!%\}})[\s\S])*%\}}[ \t]*(?:\r?\n|$)",
        re.M,
    )


def strip_structural_lines(
    source: str,
    extra_keywords: Iterable[str] = DEFAULT_PASSTHROUGH_KEYWORDS,
) -> str:
    """Delete lines holding nothing but one structural tag.

    A line qualifies when it contains a single ``block``, ``endblock``,
    ``extends``, ``include`` or pass-through tag surrounded only by spaces or
    tabs; the line's newline goes with it. Tags sharing a line with other
    text are left alone.
    """
    keywords = tuple(dict.fromkeys((*STRUCTURAL_KEYWORDS, *extra_keywords)))
    return _strip_pattern(keywords).sub("", source)
