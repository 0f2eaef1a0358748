"""Core value types for the tagsplice rewrite pipeline.

The scanner produces `Span` objects, the rewrite passes produce `Edit`
objects, and the structural resolver records `BlockRecord` objects. All of
them are plain frozen dataclasses so they can be compared, hashed and shared
between passes without copying.

Symbol Table:
The delimiter set is fixed. Each opener declares the marker type of the
closer that must terminate it (``until``):

    ==========  ===========  ==================  ==================
    text        kind         marker              until
    ==========  ===========  ==================  ==================
    ``{{``      expression   EXPRESSION_START    EXPRESSION_END
    ``{%``      statement    STATEMENT_START     STATEMENT_END
    ``}}``      expression   EXPRESSION_END      -
    ``%}``      statement    STATEMENT_END       -
    ==========  ===========  ==================  ==================

"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class TagKind(Enum):
    """Classification of a scanned tag."""

    EXPRESSION = "expression"
    STATEMENT = "statement"


class MarkerType(Enum):
    """Start/end marker types recorded on every `Marker`."""

    EXPRESSION_START = "expression_start"
    EXPRESSION_END = "expression_end"
    STATEMENT_START = "statement_start"
    STATEMENT_END = "statement_end"


@dataclass(frozen=True, slots=True)
class Symbol:
    """One entry of the symbol table."""

    text: str
    kind: TagKind
    marker: MarkerType
    until: MarkerType | None = None

    @property
    def is_opener(self) -> bool:
        return self.until is not None


EXPRESSION_OPEN = Symbol("{{", TagKind.EXPRESSION, MarkerType.EXPRESSION_START, MarkerType.EXPRESSION_END)
STATEMENT_OPEN = Symbol("{%", TagKind.STATEMENT, MarkerType.STATEMENT_START, MarkerType.STATEMENT_END)
EXPRESSION_CLOSE = Symbol("}}", TagKind.EXPRESSION, MarkerType.EXPRESSION_END)
STATEMENT_CLOSE = Symbol("%}", TagKind.STATEMENT, MarkerType.STATEMENT_END)

SYMBOL_TABLE: tuple[Symbol, ...] = (
    EXPRESSION_OPEN,
    STATEMENT_OPEN,
    EXPRESSION_CLOSE,
    STATEMENT_CLOSE,
)

OPENERS: tuple[Symbol, ...] = tuple(s for s in SYMBOL_TABLE if s.is_opener)
CLOSERS: tuple[Symbol, ...] = tuple(s for s in SYMBOL_TABLE if not s.is_opener)


@dataclass(frozen=True, slots=True)
class Marker:
    """Position of a tag delimiter.

    ``offset`` is a character index into the scanned source. ``row`` and
    ``col`` are 0-based.
    """

    type: MarkerType
    offset: int
    row: int
    col: int


@dataclass(frozen=True, slots=True)
class Span:
    """One scanned tag, from the first opener character to one past the closer.

    Attributes:
        start: Marker of the opener (offset of its first character)
        end: Marker of the closer (offset one past its last character)
    """

    start: Marker
    end: Marker

    @property
    def kind(self) -> TagKind:
        if self.start.type is MarkerType.EXPRESSION_START:
            return TagKind.EXPRESSION
        return TagKind.STATEMENT

    @property
    def lineno(self) -> int:
        """1-based line number of the opener."""
        return self.start.row + 1

    def text(self, source: str) -> str:
        """Full tag text including delimiters."""
        return source[self.start.offset : self.end.offset]

    def inner(self, source: str) -> str:
        """Tag content between the delimiters, stripped of whitespace."""
        return source[self.start.offset + 2 : self.end.offset - 2].strip()


@dataclass(frozen=True, slots=True)
class Edit:
    """A pending substitution of ``source[start:end]`` by ``replacement``."""

    start: int
    end: int
    replacement: str


@dataclass(frozen=True, slots=True)
class BlockRecord:
    """A ``{% block NAME %} … {% endblock %}`` region."""

    name: str
    open_span: Span
    close_span: Span

    @property
    def body_start(self) -> int:
        return self.open_span.end.offset

    @property
    def body_end(self) -> int:
        return self.close_span.start.offset


@dataclass(slots=True)
class Branch:
    """One ``if``/``elif``/``else`` arm of an `IfFrame`."""

    kind: str
    condition: str | None
    body_start: int
    body_end: int


@dataclass(slots=True)
class IfFrame:
    """An open ``{% if %}`` group collecting its branches."""

    opener: Span
    branches: list[Branch] = field(default_factory=list)


@dataclass(slots=True)
class LoopFrame:
    """An open ``{% for %}`` loop.

    ``var_name`` is None for a header that did not parse as ``VAR in EXPR``;
    such a frame still pairs with its ``endfor`` but is never expanded.
    """

    opener: Span
    var_name: str | None
    iterable_expr: str
    body_start: int
    body_end: int = -1
