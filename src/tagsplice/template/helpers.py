"""Pure runtime helpers shared by the evaluator and the rewrite passes.

None of them close over Environment state.

Thread-Safety:
All functions are stateless and safe for concurrent use.

"""

from __future__ import annotations

import math
from typing import Any


class _Undefined:
    """Sentinel for values that could not be resolved.

    Stringifies as ``""`` so template output is unchanged, is falsy, iterates
    as empty, and resolves any further attribute or item access to itself.
    ``is defined`` tests recognise it as not defined.
    """

    __slots__ = ()

    def __str__(self) -> str:
        return ""

    def __repr__(self) -> str:
        return "Undefined"

    def __bool__(self) -> bool:
        return False

    def __iter__(self):
        return iter(())

    def __len__(self) -> int:
        return 0

    def __eq__(self, other: object) -> bool:
        return isinstance(other, _Undefined)

    def __hash__(self) -> int:
        return hash(_Undefined)

    def __getattr__(self, name: str) -> _Undefined:
        if name.startswith("__"):
            raise AttributeError(name)
        return self

    def __getitem__(self, key: object) -> _Undefined:
        return self


UNDEFINED = _Undefined()


def is_undefined(value: Any) -> bool:
    return value is None or isinstance(value, _Undefined)


def is_truthy(value: Any) -> bool:
    """Truthiness used by conditions and ``and``/``or``/``not``.

    False for ``False``, numeric zero, NaN, ``""``, ``None`` and undefined.
    Everything else is true, including empty lists and dicts.
    """
    if value is None or value is False or isinstance(value, _Undefined):
        return False
    if isinstance(value, str):
        return value != ""
    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            return False
        return value != 0
    return True


def to_output(value: Any) -> str:
    """Convert an evaluated value to output text.

    ``None`` and undefined become ``""``; booleans render as ``true``/
    ``false``; integral floats drop their ``.0``; lists and tuples render
    their items comma-joined.
    """
    if value is None or isinstance(value, _Undefined):
        return ""
    if isinstance(value, str):
        return value
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, (list, tuple)):
        return ",".join(to_output(item) for item in value)
    return str(value)


def safe_getattr(obj: Any, name: str) -> Any:
    """Resolve ``obj.name`` with dict fallback.

    Resolution order:
    - Dicts: subscript first (user data), getattr fallback (methods), so keys
      like ``items`` resolve to user data, not ``dict.items``.
    - Objects: getattr first, subscript fallback.
    - Names starting with an underscore are never resolved.

    Returns ``UNDEFINED`` when nothing matches or ``obj`` is None.
    """
    if obj is None or isinstance(obj, _Undefined) or name.startswith("_"):
        return UNDEFINED
    if isinstance(obj, dict):
        try:
            return obj[name]
        except KeyError:
            return getattr(obj, name, UNDEFINED)
    try:
        return getattr(obj, name)
    except AttributeError:
        try:
            return obj[name]
        except (KeyError, TypeError, IndexError):
            return UNDEFINED


def safe_getitem(obj: Any, key: Any) -> Any:
    """Resolve ``obj[key]``, returning ``UNDEFINED`` when missing."""
    if obj is None or isinstance(obj, _Undefined):
        return UNDEFINED
    try:
        return obj[key]
    except (KeyError, IndexError, TypeError):
        if isinstance(key, str):
            return safe_getattr(obj, key)
        return UNDEFINED


def coerce_numeric(value: Any) -> int | float:
    """Coerce a value to a number for arithmetic.

    Numbers pass through (bools are not numbers here); strings that parse as
    int or float are converted; anything else is 0.
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    if value is None or isinstance(value, _Undefined):
        return 0
    s = str(value).strip()
    try:
        return int(s)
    except ValueError:
        try:
            return float(s)
        except ValueError:
            return 0
