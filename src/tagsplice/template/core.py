"""Template: structurally resolved text bound to an Environment.

A Template holds text whose includes and inheritance are already resolved.
``render()`` creates a fresh `Scope` and `RenderContext` and runs the
rewriter over the text, so one Template can be rendered many times and from
several threads at once.

Memory Safety:
Uses ``weakref.ref(env)`` so a Template does not keep its Environment alive.

"""

from __future__ import annotations

import weakref
from typing import TYPE_CHECKING, Any

from tagsplice.environment.exceptions import (
    TemplateError,
    TemplateRuntimeError,
)
from tagsplice.render_context import RenderContext
from tagsplice.rewriter import Rewriter
from tagsplice.scope import Scope

if TYPE_CHECKING:
    from tagsplice.environment.core import Environment


class Template:
    """Renderable template text.

    Example:
        >>> t = env.from_string("Hello, {{ name }}!")
        >>> t.render(name="World")
        'Hello, World!'
        >>> t.render({"name": "World"})
        'Hello, World!'
    """

    __slots__ = ("_env_ref", "_name", "_source")

    def __init__(self, env: Environment, source: str, name: str | None = None):
        self._env_ref: weakref.ref[Environment] = weakref.ref(env)
        self._source = source
        self._name = name

    @property
    def _env(self) -> Environment:
        env = self._env_ref()
        if env is None:
            raise RuntimeError(
                f"Environment has been garbage collected (template: {self._name or 'unknown'})"
            )
        return env

    @property
    def name(self) -> str | None:
        return self._name

    @property
    def source(self) -> str:
        """The resolved text this template renders."""
        return self._source

    def render(self, *args: Any, **kwargs: Any) -> str:
        """Render with a context given as one dict and/or keyword arguments.

        Raises:
            TypeError: More than one positional argument, or a non-dict one.
            TemplateError: Any scanning, evaluation or lookup failure.
        """
        data: dict[str, Any] = {}
        if args:
            if len(args) == 1 and isinstance(args[0], dict):
                data.update(args[0])
            else:
                raise TypeError(
                    f"render() takes at most 1 positional argument (a dict), got {len(args)}"
                )
        data.update(kwargs)

        ctx = RenderContext(
            self._env,
            Scope(data),
            template_name=self._name,
            source=self._source,
        )
        try:
            return Rewriter(ctx).render_string(self._source)
        except TemplateError:
            raise
        except Exception as e:
            raise self._enhance_error(e) from e

    def _enhance_error(self, error: Exception) -> TemplateRuntimeError:
        """Wrap a non-template exception (e.g. from a directive) with context."""
        message = str(error).strip() or f"{type(error).__name__} (no details available)"
        return TemplateRuntimeError(
            f"{type(error).__name__}: {message}",
            template_name=self._name,
        )

    def __repr__(self) -> str:
        return f"<Template {self._name or '(inline)'}>"
