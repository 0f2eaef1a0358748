"""tagsplice: a text-rewriting template engine.

Templates are rendered by successive, position-tracked rewrites of the
template text rather than by compiling an AST.

Quickstart:
    >>> from tagsplice import Environment
    >>> env = Environment()
    >>> env.from_string("Hello, {{ name }}!").render(name="World")
    'Hello, World!'

Named templates:
    >>> from tagsplice import DictLoader, Environment
    >>> env = Environment(loader=DictLoader({
    ...     "base.html": "<body>{% block content %}{% endblock %}</body>",
    ...     "page.html": '{% extends "base.html" %}'
    ...                  '{% block content %}{% for x in xs %}[{{ x }}]{% endfor %}{% endblock %}',
    ... }))
    >>> env.render("page.html", xs=["a", "b"])
    '<body>[a][b]</body>'

Pipeline:
Loader → Structural Resolver (include / extends / block) → line stripping →
set pass → for pass → if pass → final substitution

Each pass scans the current text into tag spans, collects edits, and applies
them in one batch from the end of the text backwards.

Undefined names render as ``""`` by default; ``Environment(strict=True)``
raises `UndefinedError` instead.

"""

from tagsplice.environment import (
    BaseLoader,
    ChoiceLoader,
    DictLoader,
    Environment,
    ErrorCode,
    ExtendsCycleError,
    FileSystemLoader,
    FunctionLoader,
    LoadResult,
    SourceSnippet,
    TemplateError,
    TemplateNotFoundError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    UndefinedError,
    build_source_snippet,
)
from tagsplice.render_context import RenderContext
from tagsplice.scanner import scan
from tagsplice.scope import Scope
from tagsplice.template import UNDEFINED, LoopContext, Template

__version__ = "0.1.0"

__all__ = [
    "UNDEFINED",
    "BaseLoader",
    "ChoiceLoader",
    "DictLoader",
    "Environment",
    "ErrorCode",
    "ExtendsCycleError",
    "FileSystemLoader",
    "FunctionLoader",
    "LoadResult",
    "LoopContext",
    "RenderContext",
    "Scope",
    "SourceSnippet",
    "Template",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "UndefinedError",
    "__version__",
    "build_source_snippet",
    "scan",
]
