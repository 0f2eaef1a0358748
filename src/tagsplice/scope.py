"""Variable scope for one render call.

A `Scope` is the single mutable name→value mapping threaded through every
rewrite pass. ``{% set %}`` writes into it directly; ``{% for %}`` binds its
induction variable through `Scope.loop_binding`, which restores the previous
value (or removes the name when it was unbound) once the loop finishes, so
the variable never leaks past ``{% endfor %}``. Bindings made by ``set``
inside a loop body are ordinary writes and persist after the loop.

Thread-Safety:
A Scope has one writer. Concurrent renders each create their own.

"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

_MISSING = object()


class Scope:
    """Mutable variable bindings for one render call.

    Example:
        >>> scope = Scope({"i": "outer"})
        >>> with scope.loop_binding("i") as bind:
        ...     bind(1)
        ...     scope["i"]
        1
        >>> scope["i"]
        'outer'
    """

    __slots__ = ("_vars",)

    def __init__(self, initial: Mapping[str, Any] | None = None):
        self._vars: dict[str, Any] = dict(initial) if initial else {}

    def __getitem__(self, name: str) -> Any:
        return self._vars[name]

    def __setitem__(self, name: str, value: Any) -> None:
        self._vars[name] = value

    def __delitem__(self, name: str) -> None:
        del self._vars[name]

    def __contains__(self, name: object) -> bool:
        return name in self._vars

    def __len__(self) -> int:
        return len(self._vars)

    def __iter__(self) -> Iterator[str]:
        return iter(self._vars)

    def get(self, name: str, default: Any = None) -> Any:
        return self._vars.get(name, default)

    def names(self) -> frozenset[str]:
        return frozenset(self._vars)

    def snapshot(self) -> dict[str, Any]:
        """Shallow copy of the current bindings."""
        return dict(self._vars)

    @contextmanager
    def loop_binding(self, name: str) -> Iterator[Any]:
        """Save ``name``, yield a binder, and restore ``name`` on exit.

        The binder is called once per iteration with the current element.
        On exit the prior value is restored, or the name removed entirely if
        it was unbound before the loop.
        """
        prior = self._vars.get(name, _MISSING)

        def bind(value: Any) -> None:
            self._vars[name] = value

        try:
            yield bind
        finally:
            if prior is _MISSING:
                self._vars.pop(name, None)
            else:
                self._vars[name] = prior

    def __repr__(self) -> str:
        return f"<Scope {sorted(self._vars)}>"
