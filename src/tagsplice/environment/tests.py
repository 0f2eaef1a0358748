"""Predicates available after `is` in conditions and expressions.

    {% if user is defined %}  {% if n is divisibleby(3) %}  {% if x is not none %}

`is not TEST` negates the result. Register more with `Environment.add_test`.
Integer predicates (`odd`, `even`, `divisibleby`) reject bools and floats
rather than raising.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from tagsplice.template.helpers import _Undefined


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _test_callable(value: Any) -> bool:
    return callable(value)


def _test_defined(value: Any) -> bool:
    """Test if value is defined (not None and not the Undefined sentinel)."""
    return value is not None and not isinstance(value, _Undefined)


def _test_undefined(value: Any) -> bool:
    return not _test_defined(value)


def _test_divisible_by(value: Any, num: Any) -> bool:
    if not _is_int(value) or not _is_int(num) or num == 0:
        return False
    return value % num == 0


def _test_eq(value: Any, other: Any) -> bool:
    return bool(value == other)


def _test_sameas(value: Any, other: Any) -> bool:
    return value is other


def _test_even(value: Any) -> bool:
    return _is_int(value) and value % 2 == 0


def _test_odd(value: Any) -> bool:
    return _is_int(value) and value % 2 == 1


def _test_in(value: Any, seq: Any) -> bool:
    try:
        return value in seq
    except TypeError:
        return False


def _test_iterable(value: Any) -> bool:
    if isinstance(value, _Undefined):
        return False
    try:
        iter(value)
        return True
    except TypeError:
        return False


def _test_lower(value: Any) -> bool:
    return isinstance(value, str) and value.islower()


def _test_upper(value: Any) -> bool:
    return isinstance(value, str) and value.isupper()


def _test_mapping(value: Any) -> bool:
    return isinstance(value, Mapping)


def _test_none(value: Any) -> bool:
    return value is None


def _test_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _test_boolean(value: Any) -> bool:
    return isinstance(value, bool)


def _test_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple, str))


def _test_string(value: Any) -> bool:
    return isinstance(value, str)


DEFAULT_TESTS: dict[str, Callable[..., bool]] = {
    "boolean": _test_boolean,
    "callable": _test_callable,
    "defined": _test_defined,
    "divisibleby": _test_divisible_by,
    "eq": _test_eq,
    "equalto": _test_eq,
    "even": _test_even,
    "false": lambda v: v is False,
    "in": _test_in,
    "iterable": _test_iterable,
    "lower": _test_lower,
    "mapping": _test_mapping,
    "none": _test_none,
    "null": _test_none,
    "number": _test_number,
    "odd": _test_odd,
    "sameas": _test_sameas,
    "sequence": _test_sequence,
    "string": _test_string,
    "true": lambda v: v is True,
    "undefined": _test_undefined,
    "upper": _test_upper,
}
