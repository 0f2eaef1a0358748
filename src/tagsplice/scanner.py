"""Tag scanner for tagsplice.

Finds ``{{ … }}`` and ``{% … %}`` tag spans in one left-to-right pass.

Only one tag may be open at a time. Tags do not nest at the character level:
``{% for %}`` inside ``{% if %}`` is nesting at the keyword level and is
handled by the rewrite passes with explicit stacks, never by the scanner.

Delimiters never share characters. ``{%}`` is an opener followed by a lone
``}``, and in ``}}}`` only the first two braces form a closer.

Complexity:
Single pass over the brace characters of the source (``re.finditer``);
row/col come from a precomputed line-start table via ``bisect``.

Example:
    >>> spans = scan("Hi {{ name }}!{% if x %}")
    >>> [(s.kind.value, s.start.offset, s.end.offset) for s in spans]
    [('expression', 3, 13), ('statement', 14, 24)]

"""

from __future__ import annotations

import re
from bisect import bisect_right
from collections.abc import Iterator

from tagsplice._types import CLOSERS, OPENERS, Marker, Span, Symbol, TagKind
from tagsplice.environment.exceptions import ErrorCode, TemplateSyntaxError

_BRACE_RE = re.compile(r"[{}]")

# "if user and x" -> ("if", "user and x")
_KEYWORD_RE = re.compile(r"^([A-Za-z_][A-Za-z0-9_]*)\b([\s\S]*)$")


class _LineIndex:
    """Maps character offsets to 0-based (row, col)."""

    __slots__ = ("_starts",)

    def __init__(self, source: str):
        starts = [0]
        find = source.find
        pos = find("\n")
        while pos != -1:
            starts.append(pos + 1)
            pos = find("\n", pos + 1)
        self._starts = starts

    def locate(self, offset: int) -> tuple[int, int]:
        row = bisect_right(self._starts, offset) - 1
        return row, offset - self._starts[row]


def _probe(source: str, start: int, candidates: tuple[Symbol, ...]) -> Symbol | None:
    for symbol in candidates:
        if source.startswith(symbol.text, start):
            return symbol
    return None


def scan(source: str, *, name: str | None = None) -> list[Span]:
    """Scan ``source`` into ordered, non-overlapping tag spans.

    Args:
        source: Template text.
        name: Template name used in error messages.

    Returns:
        Spans ordered by start offset. Plain text produces no spans.

    Raises:
        TemplateSyntaxError: On a closer without an opener, a closer of the
            wrong kind, a second opener while one is pending, or an opener
            left unclosed at the end of input.
    """
    spans: list[Span] = []
    if not source:
        return spans

    lines = _LineIndex(source)
    pending: tuple[Symbol, Marker] | None = None
    last_end = 0

    def fail(message: str, offset: int, code: ErrorCode) -> TemplateSyntaxError:
        row, col = lines.locate(offset)
        return TemplateSyntaxError(
            message, lineno=row + 1, name=name, source=source, col_offset=col, code=code
        )

    for match in _BRACE_RE.finditer(source):
        i = match.start()

        if source[i] == "{":
            if i < last_end or (pending is not None and i < pending[1].offset + 2):
                continue
            opener = _probe(source, i, OPENERS)
            if opener is None:
                continue
            if pending is not None:
                symbol, marker = pending
                raise fail(
                    f"Unterminated tag: '{symbol.text}' opened at "
                    f"{marker.row + 1}:{marker.col} is still open when '{opener.text}' appears",
                    i,
                    ErrorCode.UNTERMINATED_TAG,
                )
            row, col = lines.locate(i)
            pending = (opener, Marker(opener.marker, i, row, col))
            continue

        close_start = i - 1
        if close_start < last_end:
            continue
        closer = _probe(source, close_start, CLOSERS)
        if closer is None:
            continue
        if pending is None:
            raise fail(
                f"Unexpected closing delimiter '{closer.text}' without an open tag",
                close_start,
                ErrorCode.UNEXPECTED_CLOSE,
            )
        symbol, start_marker = pending
        if close_start < start_marker.offset + 2:
            continue
        if symbol.until is not closer.marker:
            raise fail(
                f"Mismatched tag delimiters: '{symbol.text}' closed by '{closer.text}'",
                close_start,
                ErrorCode.MISMATCHED_DELIMITER,
            )
        row, col = lines.locate(close_start)
        spans.append(Span(start_marker, Marker(closer.marker, i + 1, row, col)))
        last_end = i + 1
        pending = None

    if pending is not None:
        symbol, marker = pending
        raise fail(
            f"Unclosed tag: '{symbol.text}' is never closed",
            marker.offset,
            ErrorCode.UNCLOSED_TAG,
        )

    return spans


def iter_statements(source: str, *, name: str | None = None) -> Iterator[Span]:
    """Yield only the ``{% … %}`` spans of ``source``."""
    for span in scan(source, name=name):
        if span.kind is TagKind.STATEMENT:
            yield span


def split_keyword(inner: str) -> tuple[str, str]:
    """Split statement content into its keyword and the stripped remainder.

    Returns ``("", "")`` when the content does not start with an identifier.
    """
    m = _KEYWORD_RE.match(inner.strip())
    if not m:
        return "", ""
    return m.group(1), m.group(2).strip()
