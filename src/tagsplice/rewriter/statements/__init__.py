"""Statement passes for the rewriter.

The statements package is organized into one module per pass:
- sets: ``{% set %}`` assignments into the scope
- loops: ``{% for %}`` expansion
- conditionals: ``{% if %}`` / ``elif`` / ``else`` resolution

Uses inline TYPE_CHECKING declarations for host attributes.

"""

from __future__ import annotations

from tagsplice.rewriter.statements.conditionals import IfPassMixin
from tagsplice.rewriter.statements.loops import ForPassMixin, iteration_items
from tagsplice.rewriter.statements.sets import SetPassMixin, split_assignments


class StatementPassMixin(SetPassMixin, ForPassMixin, IfPassMixin):
    """Combined mixin providing the set, for and if passes.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks in each individual mixin.
    """

    __slots__ = ()


__all__ = [
    "ForPassMixin",
    "IfPassMixin",
    "SetPassMixin",
    "StatementPassMixin",
    "iteration_items",
    "split_assignments",
]
