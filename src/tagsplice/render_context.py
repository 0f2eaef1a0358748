"""Per-render state for the rewrite pipeline.

One `RenderContext` is created for every render call and handed explicitly
to each pass. It owns the render's `Scope` and points at the Environment
(loader, filters, tests, globals, directives) and the entry template name.
Nothing is stored in module globals or ContextVars, so concurrent renders
never share mutable state.

"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from tagsplice.environment.exceptions import TemplateRuntimeError, UndefinedError
from tagsplice.scope import Scope

if TYPE_CHECKING:
    from tagsplice.environment.core import Environment
    from tagsplice.environment.loaders import LoadResult


@dataclass
class RenderContext:
    """State for one render call.

    Attributes:
        env: Owning Environment
        scope: Variable bindings, mutated by ``set`` and ``for``
        template_name: Entry template name for error messages
        source: Text currently being rewritten, for error snippets
    """

    env: Environment
    scope: Scope = field(default_factory=Scope)
    template_name: str | None = None
    source: str | None = None

    def read(self, name: str) -> LoadResult:
        """Load ``name`` through the Environment's loader without raising."""
        return self.env.read(name)

    def evaluate(self, expression: str, *, lineno: int | None = None) -> Any:
        """Evaluate ``expression`` in this render's scope.

        Runtime and undefined-variable errors are re-raised carrying the
        template name and ``lineno``.
        """
        try:
            return self.env.evaluator.evaluate(expression, self.scope)
        except TemplateRuntimeError as e:
            located = e.with_location(
                template_name=self.template_name,
                lineno=lineno,
                expression=expression,
                source=self.source,
            )
            if located is e:
                raise
            raise located from e
        except UndefinedError as e:
            located_undefined = e.with_location(template_name=self.template_name, lineno=lineno)
            if located_undefined is e:
                raise
            raise located_undefined from e
