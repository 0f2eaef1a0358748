"""Built-in filters for tagsplice templates.

Filters transform a value with the pipe syntax: ``{{ name | upper }}``,
``{{ items | join(", ") }}``. They are applied left to right and receive
the piped value as their first argument.

Categories:
**String**: `lower`, `upper`, `string`, `trim`, `title`, `capitalize`,
    `replace`, `truncate`, `striptags`, `wordcount`, `nl2br`, `center`,
    `indent`, `urlencode`, `escape`/`e`
**Number**: `abs`, `int`, `float`, `round`, `sum`
**Sequence**: `length`/`count`, `first`, `last`, `join`, `list`, `reverse`,
    `sort`, `unique`, `batch`, `dictsort`, `map`, `selectattr`, `rejectattr`
**Other**: `default`/`d`, `dump`

Undefined and ``None`` inputs behave like empty values: ``{{ missing |
upper }}`` renders ``""`` and ``{{ missing | length }}`` renders ``0``.

Custom Filters:
    >>> env.add_filter("shout", lambda s: str(s).upper() + "!")
    >>> # {{ name | shout }}

"""

from __future__ import annotations

import html
import json
import math
import re
from collections.abc import Callable, Mapping
from typing import Any
from urllib.parse import quote_plus, urlencode

from tagsplice.environment.tests import DEFAULT_TESTS
from tagsplice.template.helpers import (
    _Undefined,
    coerce_numeric,
    is_truthy,
    is_undefined,
    safe_getattr,
    to_output,
)

_STRIPTAGS_RE = re.compile(r"(<!--.*?-->|<[^>]*>)", re.S)


def _text(value: Any) -> str:
    return to_output(value)


def _items(value: Any) -> list[Any]:
    """Materialize a filter input as a list (mapping keys, string chars)."""
    if is_undefined(value):
        return []
    if isinstance(value, str):
        return list(value)
    if isinstance(value, Mapping):
        return list(value.keys())
    try:
        return list(value)
    except TypeError:
        return [value]


def _attr_path(item: Any, attribute: str | int | None) -> Any:
    if attribute is None:
        return item
    if isinstance(attribute, int):
        try:
            return item[attribute]
        except (IndexError, KeyError, TypeError):
            return None
    for part in str(attribute).split("."):
        item = safe_getattr(item, part)
    return item


def _sort_key(value: Any, case_sensitive: bool) -> tuple[int, Any]:
    # None/undefined sort last; numbers before strings.
    if is_undefined(value):
        return (2, 0)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return (0, value)
    text = _text(value)
    return (1, text if case_sensitive else text.lower())


# ─────────────────────────────────────────────────────────────────────────────
# String filters
# ─────────────────────────────────────────────────────────────────────────────


def _filter_lower(value: Any) -> str:
    return _text(value).lower()


def _filter_upper(value: Any) -> str:
    return _text(value).upper()


def _filter_string(value: Any) -> str:
    return _text(value)


def _filter_trim(value: Any, chars: str | None = None) -> str:
    return _text(value).strip(chars)


def _filter_title(value: Any) -> str:
    return _text(value).strip().title()


def _filter_capitalize(value: Any) -> str:
    return _text(value).strip().capitalize()


def _filter_replace(value: Any, old: Any, new: Any = "", count: int | None = None) -> str:
    text = _text(value)
    if count is None:
        return text.replace(_text(old), _text(new))
    return text.replace(_text(old), _text(new), int(count))


def _filter_truncate(
    value: Any,
    length: int = 255,
    killwords: bool = False,
    end: str = "...",
    leeway: int = 0,
) -> str:
    """Shorten text to ``length`` characters, including ``end``.

    Cuts at the last word boundary unless ``killwords`` is true.
    """
    text = _text(value)
    length = int(length)
    if len(text) <= length + int(leeway):
        return text
    if length <= len(end):
        return end
    chunk = text[: length - len(end)]
    if not killwords:
        idx = chunk.rfind(" ")
        if idx > 0:
            chunk = chunk[:idx]
    return chunk + end


def _filter_striptags(value: Any, preserve_whitespace: bool = False) -> str:
    text = _STRIPTAGS_RE.sub("", _text(value))
    if preserve_whitespace:
        return text
    return " ".join(text.split())


def _filter_wordcount(value: Any) -> int:
    return len(_text(value).split())


def _filter_nl2br(value: Any) -> str:
    return _text(value).replace("\n", "<br />\n")


def _filter_center(value: Any, width: int = 80) -> str:
    return _text(value).center(int(width))


def _filter_indent(value: Any, width: int = 4, first: bool = True, blank: bool = False) -> str:
    prefix = " " * int(width)
    lines = _text(value).split("\n")
    out = []
    for i, line in enumerate(lines):
        if (i == 0 and not first) or (not line.strip() and not blank):
            out.append(line)
        else:
            out.append(prefix + line)
    return "\n".join(out)


def _filter_urlencode(value: Any) -> str:
    if isinstance(value, Mapping):
        return urlencode({k: _text(v) for k, v in value.items()})
    return quote_plus(_text(value))


def _filter_escape(value: Any) -> str:
    return html.escape(_text(value))


# ─────────────────────────────────────────────────────────────────────────────
# Number filters
# ─────────────────────────────────────────────────────────────────────────────


def _filter_abs(value: Any) -> int | float:
    return abs(coerce_numeric(value))


def _filter_int(value: Any, default: int = 0) -> int:
    if isinstance(value, bool):
        return int(value)
    try:
        return int(value)
    except (TypeError, ValueError):
        try:
            return int(float(value))
        except (TypeError, ValueError, OverflowError):
            return default


def _filter_float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _filter_round(value: Any, precision: int = 0, method: str = "common") -> float:
    number = float(coerce_numeric(value))
    factor = 10 ** int(precision)
    if method == "ceil":
        return math.ceil(number * factor) / factor
    if method == "floor":
        return math.floor(number * factor) / factor
    # Half away from zero, not Python's banker's rounding.
    scaled = abs(number) * factor
    rounded = math.floor(scaled + 0.5) / factor
    return math.copysign(rounded, number)


def _filter_sum(value: Any, attribute: str | None = None, start: int | float = 0) -> int | float:
    total = start
    for item in _items(value):
        total += coerce_numeric(_attr_path(item, attribute))
    return total


# ─────────────────────────────────────────────────────────────────────────────
# Sequence filters
# ─────────────────────────────────────────────────────────────────────────────


def _filter_length(value: Any) -> int:
    if is_undefined(value):
        return 0
    try:
        return len(value)
    except TypeError:
        return len(_items(value))


def _filter_first(value: Any) -> Any:
    items = _items(value)
    return items[0] if items else ""


def _filter_last(value: Any) -> Any:
    items = _items(value)
    return items[-1] if items else ""


def _filter_join(value: Any, separator: str = "", attribute: str | None = None) -> str:
    return _text(separator).join(_text(_attr_path(item, attribute)) for item in _items(value))


def _filter_list(value: Any) -> list[Any]:
    return _items(value)


def _filter_reverse(value: Any) -> Any:
    if isinstance(value, str):
        return value[::-1]
    return list(reversed(_items(value)))


def _filter_sort(
    value: Any,
    reverse: bool = False,
    case_sensitive: bool = False,
    attribute: str | None = None,
) -> list[Any]:
    return sorted(
        _items(value),
        key=lambda item: _sort_key(_attr_path(item, attribute), case_sensitive),
        reverse=bool(reverse),
    )


def _filter_unique(value: Any, case_sensitive: bool = False, attribute: str | None = None) -> list[Any]:
    seen: set[Any] = set()
    out = []
    for item in _items(value):
        key = _attr_path(item, attribute)
        if isinstance(key, str) and not case_sensitive:
            key = key.lower()
        try:
            if key in seen:
                continue
            seen.add(key)
        except TypeError:
            key = repr(key)
            if key in seen:
                continue
            seen.add(key)
        out.append(item)
    return out


def _filter_batch(value: Any, linecount: int, fill_with: Any = None) -> list[list[Any]]:
    size = max(int(linecount), 1)
    items = _items(value)
    batches = [items[i : i + size] for i in range(0, len(items), size)]
    if fill_with is not None and batches and len(batches[-1]) < size:
        batches[-1].extend([fill_with] * (size - len(batches[-1])))
    return batches


def _filter_dictsort(
    value: Any,
    case_sensitive: bool = False,
    by: str = "key",
    reverse: bool = False,
) -> list[tuple[Any, Any]]:
    if not isinstance(value, Mapping):
        return []
    pos = 1 if by == "value" else 0
    return sorted(
        value.items(),
        key=lambda pair: _sort_key(pair[pos], case_sensitive),
        reverse=bool(reverse),
    )


def _filter_map(value: Any, attribute: str | int | None = None, default: Any = None) -> list[Any]:
    out = []
    for item in _items(value):
        resolved = _attr_path(item, attribute)
        if default is not None and is_undefined(resolved):
            resolved = default
        out.append(resolved)
    return out


def _select_by_attr(value: Any, attribute: str, test: str | None, args: tuple[Any, ...], keep: bool) -> list[Any]:
    if test is None:
        check: Callable[..., bool] = is_truthy
    else:
        check = DEFAULT_TESTS[test]
    return [item for item in _items(value) if bool(check(_attr_path(item, attribute), *args)) is keep]


def _filter_selectattr(value: Any, attribute: str, test: str | None = None, *args: Any) -> list[Any]:
    """Keep items whose ``attribute`` passes ``test`` (truthiness by default)."""
    return _select_by_attr(value, attribute, test, args, True)


def _filter_rejectattr(value: Any, attribute: str, test: str | None = None, *args: Any) -> list[Any]:
    """Drop items whose ``attribute`` passes ``test`` (truthiness by default)."""
    return _select_by_attr(value, attribute, test, args, False)


# ─────────────────────────────────────────────────────────────────────────────
# Other filters
# ─────────────────────────────────────────────────────────────────────────────


def _filter_default(value: Any, default_value: Any = "", boolean: bool = False) -> Any:
    """Substitute ``default_value`` for undefined/None/empty-string input.

    With ``boolean=True`` any falsy value is replaced.
    """
    if is_undefined(value) or value == "":
        return default_value
    if boolean and not is_truthy(value):
        return default_value
    return value


def _filter_dump(value: Any, indent: int | None = None) -> str:
    if isinstance(value, _Undefined):
        value = None
    return json.dumps(value, indent=indent, default=str, ensure_ascii=False)


DEFAULT_FILTERS: dict[str, Callable[..., Any]] = {
    "abs": _filter_abs,
    "batch": _filter_batch,
    "capitalize": _filter_capitalize,
    "center": _filter_center,
    "count": _filter_length,
    "d": _filter_default,
    "default": _filter_default,
    "dictsort": _filter_dictsort,
    "dump": _filter_dump,
    "e": _filter_escape,
    "escape": _filter_escape,
    "first": _filter_first,
    "float": _filter_float,
    "indent": _filter_indent,
    "int": _filter_int,
    "join": _filter_join,
    "last": _filter_last,
    "length": _filter_length,
    "list": _filter_list,
    "lower": _filter_lower,
    "map": _filter_map,
    "nl2br": _filter_nl2br,
    "rejectattr": _filter_rejectattr,
    "replace": _filter_replace,
    "reverse": _filter_reverse,
    "round": _filter_round,
    "selectattr": _filter_selectattr,
    "sort": _filter_sort,
    "string": _filter_string,
    "striptags": _filter_striptags,
    "sum": _filter_sum,
    "title": _filter_title,
    "trim": _filter_trim,
    "truncate": _filter_truncate,
    "unique": _filter_unique,
    "upper": _filter_upper,
    "urlencode": _filter_urlencode,
    "wordcount": _filter_wordcount,
}
