"""tagsplice environment package: configuration, loaders, errors and registries.

Re-exports the public symbols so ``from tagsplice.environment import
Environment`` works.

"""

from tagsplice.environment.core import Environment
from tagsplice.environment.exceptions import (
    ErrorCode,
    ExtendsCycleError,
    SourceSnippet,
    TemplateError,
    TemplateNotFoundError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    UndefinedError,
    build_source_snippet,
)
from tagsplice.environment.filters import DEFAULT_FILTERS
from tagsplice.environment.globals import DEFAULT_GLOBALS
from tagsplice.environment.loaders import (
    BaseLoader,
    ChoiceLoader,
    DictLoader,
    FileSystemLoader,
    FunctionLoader,
    LoadResult,
)
from tagsplice.environment.registry import Registry
from tagsplice.environment.tests import DEFAULT_TESTS

__all__ = [
    "DEFAULT_FILTERS",
    "DEFAULT_GLOBALS",
    "DEFAULT_TESTS",
    "BaseLoader",
    "ChoiceLoader",
    "DictLoader",
    "Environment",
    "ErrorCode",
    "ExtendsCycleError",
    "FileSystemLoader",
    "FunctionLoader",
    "LoadResult",
    "Registry",
    "SourceSnippet",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "UndefinedError",
    "build_source_snippet",
]
