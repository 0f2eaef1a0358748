"""Loop iteration metadata for ``{% for %}`` blocks."""

from __future__ import annotations

from typing import Any


class LoopContext:
    """Per-iteration state exposed to a for body as ``loop``.

    The for pass builds one over the materialized items and calls `advance`
    before each body render, so ``loop.index`` counts from 1 and
    ``loop.revindex`` counts down to 1. ``previtem``/``nextitem`` are None at
    the edges.

        {% for row in rows %}<tr class="{{ loop.cycle('a', 'b') }}">{% endfor %}
    """

    __slots__ = ("_index", "_items", "_length")

    def __init__(self, items: list[Any]) -> None:
        self._items = items
        self._length = len(items)
        self._index = -1

    def advance(self) -> Any:
        """Move to the next item and return it."""
        self._index += 1
        return self._items[self._index]

    @property
    def index(self) -> int:
        return self._index + 1

    @property
    def index0(self) -> int:
        return self._index

    @property
    def first(self) -> bool:
        return self._index == 0

    @property
    def last(self) -> bool:
        return self._index == self._length - 1

    @property
    def length(self) -> int:
        return self._length

    @property
    def revindex(self) -> int:
        return self._length - self._index

    @property
    def revindex0(self) -> int:
        return self._length - self._index - 1

    @property
    def previtem(self) -> Any:
        if self._index <= 0:
            return None
        return self._items[self._index - 1]

    @property
    def nextitem(self) -> Any:
        if self._index >= self._length - 1:
            return None
        return self._items[self._index + 1]

    def cycle(self, *values: Any) -> Any:
        """Cycle through the given values: ``{{ loop.cycle('odd', 'even') }}``."""
        if not values:
            return None
        return values[self._index % len(values)]

    def __repr__(self) -> str:
        return f"<LoopContext {self.index}/{self.length}>"
