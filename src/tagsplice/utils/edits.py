"""Batch application of textual edits.

Every rewrite pass collects `Edit` objects against one source string and
applies them together. Edits are applied in descending ``start`` order, so
offsets computed during the scan stay valid for every edit that has not been
applied yet.
"""

from __future__ import annotations

from collections.abc import Iterable

from tagsplice._types import Edit


def apply_edits(source: str, edits: Iterable[Edit]) -> str:
    """Apply non-overlapping edits to ``source`` from the end backwards.

    Raises:
        ValueError: If two edits overlap or an edit falls outside ``source``.
    """
    ordered = sorted(edits, key=lambda e: e.start, reverse=True)
    if not ordered:
        return source

    # Pieces are gathered right to left and joined once.
    pieces: list[str] = []
    cursor = len(source)
    for edit in ordered:
        if edit.start < 0 or edit.start > edit.end or edit.end > cursor:
            raise ValueError(
                f"Edit [{edit.start}, {edit.end}) overlaps a later edit or "
                f"falls outside the source (length {len(source)})"
            )
        pieces.append(source[edit.end : cursor])
        pieces.append(edit.replacement)
        cursor = edit.start
    pieces.append(source[:cursor])
    pieces.reverse()
    return "".join(pieces)
