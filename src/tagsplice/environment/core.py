"""Core Environment class for tagsplice.

The Environment is the central configuration object. It holds the loader,
the filter/test/global/directive registries and the strictness switch, and
it is the entry point for rendering.

Example:
    >>> from tagsplice import DictLoader, Environment
    >>> env = Environment(loader=DictLoader({"hello.txt": "Hello, {{ name }}!"}))
    >>> env.render("hello.txt", name="World")
    'Hello, World!'

Thread-Safety:
Registries are copy-on-write, and every render builds its own
`RenderContext` and `Scope`, so one Environment can serve concurrent
renders. Templates are re-read from the loader on every call.

"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Any

from tagsplice.environment.exceptions import TemplateNotFoundError
from tagsplice.environment.filters import DEFAULT_FILTERS
from tagsplice.environment.globals import DEFAULT_GLOBALS
from tagsplice.environment.loaders import BaseLoader, LoadResult
from tagsplice.environment.registry import Registry
from tagsplice.environment.tests import DEFAULT_TESTS
from tagsplice.evaluator import Evaluator
from tagsplice.render_context import RenderContext
from tagsplice.scope import Scope
from tagsplice.structure import (
    DEFAULT_PASSTHROUGH_KEYWORDS,
    resolve_extends_and_includes,
    strip_structural_lines,
)
from tagsplice.template import Template

logger = logging.getLogger(__name__)

Directive = Callable[[str, Scope], Any]


class Environment:
    """Configuration and entry point for rendering templates.

    Args:
        loader: Source of named templates. Without one, only
            `from_string` / `render_string` work and every include renders
            empty.
        strict: Raise `UndefinedError` for unknown names instead of
            rendering them as ``""``.
        globals: Extra names visible to every template, after the render
            context.
        filters: Extra filters, merged over the built-ins.
        tests: Extra ``is`` tests, merged over the built-ins.
        structural_keywords: Pass-through statement keywords whose tags
            render as ``""`` and whose own lines are stripped.

    Registries:
        ``env.filters``, ``env.tests``, ``env.globals`` and
        ``env.directives`` are dict-like and copy-on-write:

            >>> env.filters["shout"] = lambda s: str(s).upper() + "!"
            >>> "shout" in env.filters
            True
    """

    def __init__(
        self,
        loader: BaseLoader | None = None,
        *,
        strict: bool = False,
        globals: Mapping[str, Any] | None = None,
        filters: Mapping[str, Callable[..., Any]] | None = None,
        tests: Mapping[str, Callable[..., bool]] | None = None,
        structural_keywords: Iterable[str] = DEFAULT_PASSTHROUGH_KEYWORDS,
    ):
        self.loader = loader
        self.strict = strict
        self.structural_keywords: tuple[str, ...] = tuple(structural_keywords)

        self._filters: dict[str, Callable[..., Any]] = {**DEFAULT_FILTERS, **(filters or {})}
        self._tests: dict[str, Callable[..., bool]] = {**DEFAULT_TESTS, **(tests or {})}
        self._globals: dict[str, Any] = {**DEFAULT_GLOBALS, **(globals or {})}
        self._directives: dict[str, Directive] = {}

        self.evaluator = Evaluator(self)

    # ─────────────────────────────────────────────────────────────────────────
    # Registries
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def filters(self) -> Registry:
        return Registry(self, "_filters")

    @property
    def tests(self) -> Registry:
        return Registry(self, "_tests")

    @property
    def globals(self) -> Registry:
        return Registry(self, "_globals")

    @property
    def directives(self) -> Registry:
        return Registry(self, "_directives")

    def add_filter(self, name: str, func: Callable[..., Any]) -> None:
        """Register ``func`` as ``{{ value | name }}``."""
        self.filters[name] = func

    def add_test(self, name: str, func: Callable[..., bool]) -> None:
        """Register ``func`` as ``{% if value is name %}``."""
        self.tests[name] = func

    def add_global(self, name: str, value: Any) -> None:
        self.globals[name] = value

    def add_directive(self, name: str, func: Directive) -> None:
        """Register a statement keyword rendered by ``func(rest, scope)``.

        Example:
            >>> env.add_directive("shout", lambda rest, scope: rest.upper())
            >>> env.render_string("{% shout hi there %}")
            'HI THERE'
        """
        self.directives[name] = func

    # ─────────────────────────────────────────────────────────────────────────
    # Loading and structural compilation
    # ─────────────────────────────────────────────────────────────────────────

    def read(self, name: str) -> LoadResult:
        """Fetch a template's raw source without raising."""
        if self.loader is None:
            return LoadResult(error=TemplateNotFoundError(f"Template '{name}' not found: no loader configured"))
        return self.loader.read(name)

    def _resolve(self, source: str, name: str) -> str:
        ctx = RenderContext(self, template_name=name, source=source)
        resolved = resolve_extends_and_includes(source, name, ctx)
        return strip_structural_lines(resolved, self.structural_keywords)

    def compile(self, name: str) -> str:
        """Return ``name`` with includes spliced, inheritance merged and
        structural lines stripped. No control flow is executed.

        Raises:
            TemplateNotFoundError: ``name`` or a parent cannot be loaded.
            ExtendsCycleError: The extends chain revisits a template.
        """
        logger.debug(f"Compiling template '{name}'")
        return self._resolve(self.read(name).unwrap(), name)

    def get_template(self, name: str) -> Template:
        """Load and structurally resolve ``name``.

        Templates are not cached; each call reads from the loader again.
        """
        return Template(self, self.compile(name), name)

    def from_string(self, source: str, name: str | None = None) -> Template:
        """Build a Template from source text.

        Includes and extends inside ``source`` are resolved through the
        loader. ``name`` appears in error messages and seeds cycle detection.
        """
        return Template(self, self._resolve(source, name or "<string>"), name)

    # ─────────────────────────────────────────────────────────────────────────
    # Rendering
    # ─────────────────────────────────────────────────────────────────────────

    def render(self, name: str, /, *args: Any, **kwargs: Any) -> str:
        """Load, resolve and render ``name`` in one call."""
        logger.debug(f"Rendering template '{name}'")
        return self.get_template(name).render(*args, **kwargs)

    def render_string(self, source: str, /, *args: Any, **kwargs: Any) -> str:
        """Run control flow and substitution over ``source``.

        Unlike `from_string`, includes and extends are not resolved.
        """
        return Template(self, source, None).render(*args, **kwargs)

    def precompile_dir(self, out_dir: str | Path, /, *args: Any, **kwargs: Any) -> list[Path]:
        """Render every template under the loader's first root into ``out_dir``.

        See `tagsplice.environment.precompile.precompile_dir`.
        """
        from tagsplice.environment.precompile import precompile_dir

        return precompile_dir(self, out_dir, *args, **kwargs)

    def __repr__(self) -> str:
        return f"<Environment loader={type(self.loader).__name__} strict={self.strict}>"
