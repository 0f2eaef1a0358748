"""tagsplice template package: renderable templates and runtime helpers.

Re-exports the public symbols so ``from tagsplice.template import Template``
works.

"""

from tagsplice.template.helpers import UNDEFINED, is_truthy, is_undefined, to_output
from tagsplice.template.loop_context import LoopContext
from tagsplice.template.core import Template

__all__ = [
    "UNDEFINED",
    "LoopContext",
    "Template",
    "is_truthy",
    "is_undefined",
    "to_output",
]
